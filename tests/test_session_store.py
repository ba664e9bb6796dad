"""Session Store persistence: round trip, clear, degraded reads."""

import json

import pytest

from sf_dashboard.models import Session, UserProfile
from sf_dashboard.session_store import SESSION_KEYS, SessionStore
from sf_dashboard.storage import JsonFileStorage, MappingStorage


def test_save_then_load_round_trip(store):
    profile = UserProfile(id="u-1", names="Jane Doe", email="jane@sf.rw", role="ROLE_SCHOOL", school={"id": "sch-1"})
    store.save(Session(token="abc", role="ROLE_SCHOOL", user=profile, school_id="sch-1", user_id="u-1"))

    loaded = store.load()
    assert loaded.token == "abc"
    assert loaded.role == "ROLE_SCHOOL"
    assert loaded.user == profile
    assert loaded.school_id == "sch-1"
    assert loaded.district_id == ""


def test_save_writes_all_six_keys(storage, store, school_session):
    store.save(school_session)
    assert all(storage.get(k) is not None for k in SESSION_KEYS)


@pytest.mark.parametrize("token,role", [("", "SCHOOL"), ("t", "")])
def test_partial_session_is_rejected(storage, store, token, role):
    with pytest.raises(ValueError):
        store.save(Session(token=token, role=role))
    assert all(storage.get(k) is None for k in SESSION_KEYS)


def test_clear_is_idempotent(storage, store, school_session):
    store.save(school_session)
    store.clear()
    assert store.load() is None
    store.clear()
    assert store.load() is None
    assert all(storage.get(k) is None for k in SESSION_KEYS)


def test_load_without_token_is_absent(storage, store):
    storage.set_many({"role": "SCHOOL", "schoolId": "sch-1"})
    assert store.load() is None


def test_corrupt_profile_degrades_per_field(storage, store):
    storage.set_many({
        "token": "abc",
        "user": "{not json",
        "role": "DISTRICT",
        "districtId": "d-9",
    })
    loaded = store.load()
    assert loaded.user is None
    assert loaded.token == "abc"
    assert loaded.role == "DISTRICT"
    assert loaded.district_id == "d-9"
    assert loaded.school_id == ""


def test_non_object_profile_is_ignored(storage, store):
    storage.set_many({"token": "abc", "role": "ADMIN", "user": json.dumps(["x"])})
    assert store.load().user is None


class _BrokenStorage(MappingStorage):
    def set_many(self, values):
        raise OSError("quota exceeded")

    def remove_many(self, keys):
        raise OSError("read-only")

    def get(self, key):
        raise OSError("unavailable")


def test_storage_errors_never_escape(school_session):
    store = SessionStore(_BrokenStorage())
    store.save(school_session)
    store.clear()
    assert store.load() is None
    assert store.token() is None


def test_json_file_storage_is_durable(tmp_path, school_session):
    path = tmp_path / "session.json"
    SessionStore(JsonFileStorage(path)).save(school_session)

    reopened = SessionStore(JsonFileStorage(path))
    assert reopened.load().token == "t1"
    reopened.clear()
    assert SessionStore(JsonFileStorage(path)).load() is None


def test_json_file_storage_tolerates_corrupt_file(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("garbage", encoding="utf-8")
    storage = JsonFileStorage(path)
    assert storage.get("token") is None
    storage.set_many({"token": "x"})
    assert storage.get("token") == "x"
