"""
Role Resolver — maps the backend's raw role string to a canonical role
and to that role's landing dashboard.

Normalisation: trim → uppercase → strip a leading "ROLE_" marker.
Anything outside the synonym table resolves to the login route; an
unknown role never lands on a dashboard.
"""

from enum import Enum

LOGIN_ROUTE = "/login"
ROLE_PREFIX = "ROLE_"


class Role(str, Enum):
    ADMIN = "admin"
    GOVERNMENT = "government"
    DISTRICT = "district"
    SCHOOL = "school"
    SUPPLIER = "supplier"
    STOCK = "stock"


ROLE_SYNONYMS: dict[str, Role] = {
    "ADMIN": Role.ADMIN,
    "ADMINISTRATOR": Role.ADMIN,
    "GOV": Role.GOVERNMENT,
    "GOVERNMENT": Role.GOVERNMENT,
    "DISTRICT": Role.DISTRICT,
    "SCHOOL": Role.SCHOOL,
    "SUPPLIER": Role.SUPPLIER,
    "STOCK_KEEPER": Role.STOCK,
    "STOCKKEEPER": Role.STOCK,
}

DASHBOARD_ROUTES: dict[Role, str] = {
    Role.ADMIN: "/admin-dashboard",
    Role.GOVERNMENT: "/gov-dashboard",
    Role.DISTRICT: "/district-dashboard",
    Role.SCHOOL: "/school-dashboard",
    Role.SUPPLIER: "/supplier-dashboard",
    Role.STOCK: "/stock-dashboard",
}


def normalize_role(raw) -> str:
    """Return the upper-cased, prefix-free form of a raw role ("" if unusable)."""
    if not isinstance(raw, str):
        return ""
    value = raw.strip().upper()
    if value.startswith(ROLE_PREFIX):
        value = value[len(ROLE_PREFIX):]
    return value


def canonical_role(raw) -> Role | None:
    """Raw backend role → Role, or None when it is not recognised."""
    return ROLE_SYNONYMS.get(normalize_role(raw))


def resolve_dashboard(raw) -> str:
    """Raw backend role → dashboard route, falling back to the login route."""
    role = canonical_role(raw)
    if role is None:
        return LOGIN_ROUTE
    return DASHBOARD_ROUTES[role]
