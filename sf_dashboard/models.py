"""
Pydantic models shared by the session, auth and notification modules.
No behaviour here — only shapes.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ── Session ───────────────────────────
class UserProfile(BaseModel):
    """Profile returned by the login endpoint, stored under the `user` key."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str | None = None
    names: str | None = None
    email: str | None = None
    phone: str | None = None
    role: str | None = None
    district: dict[str, Any] | None = None
    school: dict[str, Any] | None = None


class Session(BaseModel):
    """Authenticated identity for the current client."""
    token: str
    role: str = Field(..., description="Raw role string as sent by the backend")
    user: UserProfile | None = None
    district_id: str = ""
    school_id: str = ""
    user_id: str = ""


# ── Notifications ─────────────────────
class Notification(BaseModel):
    """One entry of a role-scoped notification feed."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    message: str
    type: str = "info"
    link: str | None = None
    timestamp: datetime | None = None
    read: bool = False
