"""
Session Store — persists the authenticated identity in key-value storage.

Keys written on login and removed on logout (always all six together):
    token       bearer token
    user        JSON-serialised UserProfile
    role        raw role string
    districtId  scoping ids, "" when the user has none
    schoolId
    userId

Reads never raise: storage failures and a corrupt profile degrade to
"absent" field by field.
"""

import json
import logging

from pydantic import ValidationError

from sf_dashboard.models import Session, UserProfile

logger = logging.getLogger("session_store")
logger.setLevel(logging.INFO)

TOKEN_KEY = "token"
USER_KEY = "user"
ROLE_KEY = "role"
DISTRICT_ID_KEY = "districtId"
SCHOOL_ID_KEY = "schoolId"
USER_ID_KEY = "userId"

SESSION_KEYS = (TOKEN_KEY, USER_KEY, ROLE_KEY, DISTRICT_ID_KEY, SCHOOL_ID_KEY, USER_ID_KEY)


class SessionStore:
    """save / load / clear over an injected storage backend."""

    def __init__(self, storage):
        self._storage = storage

    def save(self, session: Session) -> None:
        if not session.token or not session.role:
            raise ValueError("A session needs both a token and a role.")
        profile = session.user.model_dump_json() if session.user is not None else ""
        try:
            self._storage.set_many({
                TOKEN_KEY: session.token,
                USER_KEY: profile,
                ROLE_KEY: session.role,
                DISTRICT_ID_KEY: session.district_id or "",
                SCHOOL_ID_KEY: session.school_id or "",
                USER_ID_KEY: session.user_id or "",
            })
        except OSError as exc:
            logger.error("Session write failed: %s", exc)

    def load(self) -> Session | None:
        token = self._read(TOKEN_KEY)
        if not token:
            return None
        role = self._read(ROLE_KEY)
        if not role:
            logger.warning("Stored session has a token but no role; treating as absent")
            return None
        return Session(
            token=token,
            role=role,
            user=self._load_profile(),
            district_id=self._read(DISTRICT_ID_KEY) or "",
            school_id=self._read(SCHOOL_ID_KEY) or "",
            user_id=self._read(USER_ID_KEY) or "",
        )

    def clear(self) -> None:
        try:
            self._storage.remove_many(SESSION_KEYS)
        except OSError as exc:
            logger.error("Session clear failed: %s", exc)

    def token(self) -> str | None:
        return self._read(TOKEN_KEY) or None

    def role(self) -> str | None:
        return self._read(ROLE_KEY) or None

    def scope_id(self, key: str) -> str | None:
        """Return one of the scoping ids (districtId / schoolId / userId)."""
        return self._read(key) or None

    # ── internals ──

    def _read(self, key: str) -> str | None:
        try:
            return self._storage.get(key)
        except OSError as exc:
            logger.error("Session read failed (%s): %s", key, exc)
            return None

    def _load_profile(self) -> UserProfile | None:
        raw = self._read(USER_KEY)
        if not raw:
            return None
        try:
            return UserProfile.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as exc:
            logger.warning("Stored profile is unreadable, ignoring it: %s", exc)
            return None
