"""
Static per-role navigation menus.

Pure lookups keyed by canonical Role; icons are plain identifiers the
UI layer maps to whatever it renders.
"""

from typing import NamedTuple

from sf_dashboard.roles import Role

DEFAULT_PROFILE_ROUTE = "/profile"


class MenuItem(NamedTuple):
    title: str
    route: str
    icon: str


ROLE_HEADERS: dict[Role, str] = {
    Role.ADMIN: "System Administration",
    Role.DISTRICT: "District Administration",
    Role.GOVERNMENT: "Government Portal",
    Role.SCHOOL: "School Portal",
    Role.STOCK: "Stock Management",
    Role.SUPPLIER: "Supplier Portal",
}

ROLE_ICONS: dict[Role, str] = {
    Role.ADMIN: "shield",
    Role.DISTRICT: "building",
    Role.GOVERNMENT: "shield",
    Role.SCHOOL: "home",
    Role.STOCK: "warehouse",
    Role.SUPPLIER: "truck",
}

ROLE_MENUS: dict[Role, tuple[MenuItem, ...]] = {
    Role.ADMIN: (
        MenuItem("Dashboard", "/admin-dashboard", "home"),
        MenuItem("User Management", "/admin-users", "users"),
        MenuItem("Audit Logs", "/admin-logs", "file-text"),
        MenuItem("System Settings", "/admin-settings", "settings"),
        MenuItem("Profile", "/admin-profile", "settings"),
    ),
    Role.DISTRICT: (
        MenuItem("Dashboard", "/district-dashboard", "home"),
        MenuItem("School Approvals", "/district-approvals", "clipboard-list"),
        MenuItem("Manage Suppliers", "/manage-suppliers", "truck"),
        MenuItem("Budget", "/district-budget", "file-text"),
        MenuItem("Reports", "/district-reports", "file-text"),
        MenuItem("Profile", "/district-profile", "settings"),
    ),
    Role.GOVERNMENT: (
        MenuItem("Dashboard", "/gov-dashboard", "home"),
        MenuItem("Analytics", "/gov-analytics", "bar-chart"),
        MenuItem("Budget", "/gov-budget", "file-text"),
        MenuItem("Reports", "/gov-reports", "file-text"),
        MenuItem("Profile", "/gov-profile", "settings"),
    ),
    Role.SCHOOL: (
        MenuItem("Dashboard", "/school-dashboard", "home"),
        MenuItem("Request Food", "/request-food", "package"),
        MenuItem("Track Delivery", "/track-delivery", "truck"),
        MenuItem("Stock Managers", "/manage-stock-managers", "users"),
        MenuItem("Reports", "/school-reports", "file-text"),
        MenuItem("Profile", "/school-profile", "settings"),
    ),
    Role.STOCK: (
        MenuItem("Dashboard", "/stock-dashboard", "home"),
        MenuItem("Inventory", "/stock-inventory", "package"),
        MenuItem("Receiving", "/stock-receiving", "warehouse"),
        MenuItem("Distribution", "/stock-distribution", "truck"),
        MenuItem("Reports", "/stock-reports", "file-text"),
        MenuItem("Profile", "/stock-profile", "settings"),
    ),
    Role.SUPPLIER: (
        MenuItem("Dashboard", "/supplier-dashboard", "home"),
        MenuItem("Orders", "/supplier-orders", "clipboard-list"),
        MenuItem("Deliveries", "/supplier-deliveries", "truck"),
        MenuItem("Reports", "/supplier-reports", "file-text"),
        MenuItem("Profile", "/supplier-profile", "settings"),
    ),
}


def menu_for(role: Role | None) -> tuple[MenuItem, ...]:
    """Ordered menu entries for a role (empty for no / unknown role)."""
    if role is None:
        return ()
    return ROLE_MENUS.get(role, ())


def profile_route(role: Role | None) -> str:
    """Route of the role's "Profile" entry, or the generic /profile."""
    for item in menu_for(role):
        if item.title == "Profile":
            return item.route
    return DEFAULT_PROFILE_ROUTE


def role_for_route(route: str) -> Role | None:
    """Which role's menu owns a route (None for shared / unknown routes)."""
    for role, items in ROLE_MENUS.items():
        if any(item.route == route for item in items):
            return role
    return None
