"""
Pydantic schemas for staff authentication tokens.
"""
from pydantic import BaseModel


class Token(BaseModel):
    """Access + refresh pair returned after a successful staff login."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AccessToken(BaseModel):
    access_token: str
    token_type: str = "bearer"


class RefreshTokenRequest(BaseModel):
    refresh_token: str
