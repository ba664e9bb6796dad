"""
HTTP client for the school-feeding REST backend.
All dashboard ↔ backend communication goes through this module.

Authenticated requests carry `Authorization: Bearer <token>` read from the
Session Store. A 401 on an authenticated request means the backend no
longer accepts the token: the stored session is cleared and the
`on_unauthorized` hook (if any) is told to go to the login route.
"""

import logging
from collections.abc import Callable

import requests

from sf_dashboard import config
from sf_dashboard.roles import LOGIN_ROUTE

logger = logging.getLogger("api_client")
logger.setLevel(logging.INFO)


class ApiClient:
    def __init__(
        self,
        store,
        base_url: str = config.API_BASE_URL,
        timeout: float = config.TIMEOUT,
        http: requests.Session | None = None,
        on_unauthorized: Callable[[str], None] | None = None,
    ):
        self.store = store
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http if http is not None else requests.Session()
        self.on_unauthorized = on_unauthorized

    def _headers(self, authenticated: bool) -> dict:
        headers = {"Content-Type": "application/json"}
        if authenticated:
            token = self.store.token()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(self, method: str, path: str, authenticated: bool = True, intercept_401: bool = True, **kwargs) -> requests.Response:
        """Send a request and return the raw response (no status check)."""
        resp = self.http.request(
            method,
            f"{self.base_url}{path}",
            headers=self._headers(authenticated),
            timeout=self.timeout,
            **kwargs,
        )
        if authenticated and intercept_401 and resp.status_code == 401:
            logger.warning("401 from %s %s, clearing session", method, path)
            self.store.clear()
            if self.on_unauthorized is not None:
                self.on_unauthorized(LOGIN_ROUTE)
        return resp

    def post(self, path: str, payload: dict | None = None, authenticated: bool = True, intercept_401: bool = True) -> requests.Response:
        """POST a JSON payload, return the raw response."""
        return self.request("POST", path, authenticated=authenticated, intercept_401=intercept_401, json=payload or {})

    def get_json(self, path: str):
        """GET an authenticated resource and return its JSON body."""
        resp = self.request("GET", path)
        resp.raise_for_status()
        return resp.json()
