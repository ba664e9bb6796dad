"""
Auth Session Lifecycle — login and logout against /auth/*.

Login states:
    IDLE → SUBMITTING → AUTHENTICATED   session saved, landing route navigated
                      → FAILED          AuthError raised, nothing saved

Only login failures reach the caller (as AuthError). Logout never raises:
the server call is best-effort and local state is always cleared.
"""

import logging
from collections.abc import Callable
from enum import Enum

import requests

from sf_dashboard.models import Session, UserProfile
from sf_dashboard.roles import LOGIN_ROUTE, Role, canonical_role, resolve_dashboard

logger = logging.getLogger("auth")
logger.setLevel(logging.INFO)

GENERIC_LOGIN_ERROR = "Invalid credentials"

Navigate = Callable[..., None]


class AuthState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class AuthError(Exception):
    """Login failed. `str(err)` is the message to show the user."""

    def __init__(self, message: str, status: int | None = None, transport: bool = False):
        super().__init__(message)
        self.message = message
        self.status = status
        self.transport = transport


# ────────────────────────────────────────────
# Response helpers
# ────────────────────────────────────────────

def _parse_body(resp: requests.Response) -> dict | None:
    """JSON body as a dict, or None when the response is not structured."""
    content_type = resp.headers.get("Content-Type", "").lower()
    if "application/json" not in content_type and "+json" not in content_type:
        return None
    try:
        data = resp.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _has_error(data: dict | None) -> bool:
    if not data:
        return False
    return bool(data.get("error")) or data.get("status") == "error"


def _error_message(resp: requests.Response, data: dict | None) -> str:
    data = data or {}
    for field in ("message", "error"):
        value = data.get(field)
        if isinstance(value, str) and value.strip():
            return value
    if not resp.ok and resp.reason:
        return resp.reason
    return GENERIC_LOGIN_ERROR


def _id_of(ref) -> str:
    """`id` of a nested {district|school} object, "" when absent."""
    if isinstance(ref, dict) and ref.get("id") is not None:
        return str(ref["id"])
    return ""


def session_from_login(data: dict, email: str) -> Session:
    """Build the Session to persist from a successful login payload."""
    role = data["role"]
    user = UserProfile(
        id=data.get("id"),
        names=data.get("names"),
        email=data.get("email") or email,
        phone=data.get("phone"),
        role=role,
        district=data.get("district") if isinstance(data.get("district"), dict) else None,
        school=data.get("school") if isinstance(data.get("school"), dict) else None,
    )
    return Session(
        token=str(data["token"]),
        role=str(role),
        user=user,
        district_id=_id_of(data.get("district")),
        school_id=_id_of(data.get("school")),
        user_id=str(data["id"]) if data.get("id") is not None else "",
    )


# ════════════════════════════════════════════
# Lifecycle
# ════════════════════════════════════════════

class AuthSession:
    """Orchestrates login / logout for one client.

    After login the caller's `navigate`, else the constructor's, is called as
    `navigate(path, replace=True)`. Logout without a caller `navigate` prefers
    `redirect(path)`, which resets navigation entirely.
    """

    def __init__(self, api, store, navigate: Navigate | None = None, redirect: Callable[[str], None] | None = None):
        self._api = api
        self._store = store
        self._navigate = navigate
        self._redirect = redirect
        self.state = AuthState.IDLE
        self.last_error: str | None = None

    # ── login ──

    def login(self, email: str, password: str, navigate: Navigate | None = None) -> Session:
        self.state = AuthState.SUBMITTING
        self.last_error = None
        try:
            resp = self._api.post(
                "/auth/login",
                {"email": email, "password": password},
                authenticated=False,
            )
        except requests.exceptions.RequestException as exc:
            logger.error("Login request failed: %s", exc)
            raise self._fail(GENERIC_LOGIN_ERROR, transport=True) from exc

        data = _parse_body(resp)
        if not resp.ok or _has_error(data) or not data or not data.get("token") or not data.get("role"):
            logger.info("Login rejected for %s (HTTP %s)", email, resp.status_code)
            raise self._fail(_error_message(resp, data), status=resp.status_code)

        session = session_from_login(data, email)
        self._store.save(session)
        self.state = AuthState.AUTHENTICATED

        route = resolve_dashboard(session.role)
        logger.info("Login ok for %s → %s", email, route)
        self._go(route, navigate)
        return session

    def _fail(self, message: str, status: int | None = None, transport: bool = False) -> AuthError:
        self.state = AuthState.FAILED
        self.last_error = message
        return AuthError(message, status=status, transport=transport)

    # ── logout ──

    def logout(self, navigate: Navigate | None = None) -> None:
        if self._store.token():
            try:
                resp = self._api.post("/auth/logout", intercept_401=False)
                if not resp.ok:
                    logger.warning("Logout API call returned HTTP %s", resp.status_code)
            except requests.exceptions.RequestException as exc:
                logger.error("Logout API call failed: %s", exc)

        self._store.clear()
        self.state = AuthState.IDLE
        self.last_error = None
        if navigate is not None:
            navigate(LOGIN_ROUTE, replace=True)
        elif self._redirect is not None:
            self._redirect(LOGIN_ROUTE)
        else:
            self._go(LOGIN_ROUTE, None)

    # ── reads ──

    def current_session(self) -> Session | None:
        return self._store.load()

    def current_role(self) -> Role | None:
        return canonical_role(self._store.role())

    def _go(self, path: str, navigate: Navigate | None) -> None:
        target = navigate or self._navigate
        if target is not None:
            target(path, replace=True)
        elif self._redirect is not None:
            self._redirect(path)
        else:
            logger.warning("No navigation handler configured for %s", path)
