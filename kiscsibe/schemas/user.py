"""
Pydantic schemas for staff account responses.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from kiscsibe.models.user import UserRole


class UserResponse(BaseModel):
    id: int
    email: str
    username: str
    full_name: Optional[str]
    role: UserRole
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
