"""
FastAPI dependency injection helpers for the database and staff authorisation.
"""
from typing import Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
import logging

from kiscsibe.core.security import ACCESS_TOKEN_TYPE, decode_token
from kiscsibe.db.database import get_db
from kiscsibe.models.user import User, UserRole
from kiscsibe.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


# ---------------------------------------------------------------------------
# DB dependency
# ---------------------------------------------------------------------------

def db_dependency() -> Generator:
    """Yield a database connection for the duration of a request."""
    logger.trace("Creating database dependency connection")
    with get_db() as conn:
        yield conn


# ---------------------------------------------------------------------------
# Auth dependencies
# ---------------------------------------------------------------------------

def get_current_user(
    token: str = Depends(oauth2_scheme),
    conn=Depends(db_dependency),
) -> User:
    """
    Decode the Bearer access token and return the corresponding staff User.
    Raises HTTP 401 if the token is invalid, expired, or the user is unknown.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(token)
        if payload.get("type") != ACCESS_TOKEN_TYPE:
            logger.warning("Access token type mismatch")
            raise credentials_exception
        user_id = payload.get("sub")
        if user_id is None:
            logger.warning("Access token missing subject")
            raise credentials_exception
    except JWTError:
        logger.warning("Failed to decode access token")
        raise credentials_exception

    user = UserRepository(conn).get_by_id(int(user_id))
    if user is None:
        logger.warning("User not found for token subject=%s", user_id)
        raise credentials_exception
    logger.info("Authenticated user id=%s", user.id)
    return user


def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Raise HTTP 400 if the staff account is disabled."""
    if not current_user.is_active:
        logger.warning("Inactive user account id=%s", current_user.id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user account",
        )
    return current_user


# ---------------------------------------------------------------------------
# Role-based access control
# ---------------------------------------------------------------------------

def require_roles(*roles: UserRole):
    """
    Factory that returns a dependency which enforces that the current user
    has one of the specified roles.

    Usage::
        @router.get("/admin-only")
        def admin_only(user: User = Depends(require_roles(UserRole.ADMIN))):
            ...
    """
    def _check(current_user: User = Depends(get_current_active_user)) -> User:
        if current_user.role not in roles:
            logger.warning(
                "User id=%s lacks required roles: %s",
                current_user.id,
                ", ".join(role.value for role in roles),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action",
            )
        logger.info(
            "User id=%s authorized with role %s",
            current_user.id,
            current_user.role.value,
        )
        return current_user
    return _check


# Convenience shortcuts
require_admin = require_roles(UserRole.ADMIN)
require_staff = require_roles(UserRole.ADMIN, UserRole.STAFF)


# ---------------------------------------------------------------------------
# Anonymous customer sessions
# ---------------------------------------------------------------------------

# Browser-generated session ids (uuid4 or similar) scope carts and favorites.
SESSION_ID_PATTERN = r"^[A-Za-z0-9_-]{8,64}$"
