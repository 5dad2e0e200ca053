"""
Pydantic schemas for per-session consent preferences.
"""
from typing import Optional

from pydantic import BaseModel


class ConsentUpdate(BaseModel):
    """Only the flags present in the payload are changed."""

    cookie_consent: Optional[bool] = None
    notification_consent: Optional[bool] = None


class ConsentResponse(BaseModel):
    session_id: str
    cookie_consent: Optional[bool]
    notification_consent: Optional[bool]
    announcements_allowed: bool
