"""
Shared fixtures: in-memory session storage, a scripted HTTP session that
returns real requests.Response objects, and a hand-driven poll scheduler.
"""

import json

import pytest
import requests

from sf_dashboard.api_client import ApiClient
from sf_dashboard.models import Session
from sf_dashboard.poller import PollHandle
from sf_dashboard.session_store import SessionStore
from sf_dashboard.storage import MappingStorage

BASE_URL = "http://backend.test/api"


def make_response(status: int = 200, body=None, reason: str | None = None, content_type: str = "application/json"):
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason if reason is not None else ("OK" if status < 400 else "Error")
    if body is None:
        resp._content = b""
    else:
        resp._content = body.encode() if isinstance(body, str) else json.dumps(body).encode()
        resp.headers["Content-Type"] = content_type
    resp.encoding = "utf-8"
    return resp


class FakeHttp:
    """Stand-in for requests.Session: routes "METHOD /path" to canned responses."""

    def __init__(self):
        self.routes: dict[str, object] = {}
        self.calls: list[dict] = []

    def on(self, method: str, path: str, response):
        self.routes[f"{method} {path}"] = response

    def request(self, method, url, headers=None, timeout=None, **kwargs):
        path = url[len(BASE_URL):]
        self.calls.append({"method": method, "path": path, "headers": headers or {}, "timeout": timeout, **kwargs})
        result = self.routes.get(f"{method} {path}")
        if result is None:
            resp = make_response(404, {"message": "not found"}, reason="Not Found")
            resp.url = url
            return resp
        if isinstance(result, Exception):
            raise result
        result.url = url
        return result


class ManualScheduler:
    """Scheduler whose ticks are driven by the test."""

    def __init__(self):
        self.jobs: list[tuple[PollHandle, object, float]] = []

    def start(self, callback, interval):
        handle = PollHandle()
        self.jobs.append((handle, callback, interval))
        return handle

    @property
    def live(self):
        return [h for h, _, _ in self.jobs if h.active]

    def tick(self):
        for handle, callback, _ in list(self.jobs):
            if handle.active:
                callback()


@pytest.fixture
def storage():
    return MappingStorage()


@pytest.fixture
def store(storage):
    return SessionStore(storage)


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def api(store, http):
    return ApiClient(store, base_url=BASE_URL, timeout=1, http=http)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def school_session():
    return Session(token="t1", role="SCHOOL", school_id="sch-1", district_id="d-1", user_id="u-1")
