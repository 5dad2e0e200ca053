"""
Security utilities for staff accounts: password hashing and JWT handling.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
import logging
import secrets

from jose import jwt
from passlib.context import CryptContext

from kiscsibe.core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def hash_password(plain_password: str) -> str:
    """Return the bcrypt hash of *plain_password*."""
    logger.trace("Hashing staff password")
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if *plain_password* matches *hashed_password*."""
    logger.trace("Verifying staff password hash")
    return pwd_context.verify(plain_password, hashed_password)


def _encode(
    user_id: int,
    role: str,
    token_type: str,
    lifetime: timedelta,
    extra_claims: Optional[dict] = None,
) -> str:
    now = datetime.now(tz=timezone.utc)
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "role": role,
        "type": token_type,
        "iat": now,
        "exp": now + lifetime,
    }
    if extra_claims:
        claims.update(extra_claims)
    logger.info("Issuing %s token for user id=%s", token_type, user_id)
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(user_id: int, role: str) -> str:
    """Create a short-lived access token for the staff dashboard."""
    return _encode(
        user_id,
        role,
        ACCESS_TOKEN_TYPE,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(user_id: int, role: str) -> str:
    """Create a long-lived refresh token; a random jti keeps tokens unique."""
    return _encode(
        user_id,
        role,
        REFRESH_TOKEN_TYPE,
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        extra_claims={"jti": secrets.token_hex(8)},
    )


def decode_token(token: str) -> dict:
    """
    Decode and verify a JWT.

    Raises:
        jose.JWTError: if the token is invalid or expired.
    """
    logger.trace("Decoding JWT")
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
