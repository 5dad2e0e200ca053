"""
Authentication service: staff login, token refresh and logout.
"""
import sqlite3
from datetime import datetime, timedelta, timezone
import logging

from fastapi import HTTPException, status
from jose import JWTError

from kiscsibe.core.config import settings
from kiscsibe.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    verify_password,
)
from kiscsibe.models.user import User
from kiscsibe.repositories.token_repository import TokenRepository
from kiscsibe.repositories.user_repository import UserRepository
from kiscsibe.schemas.token import AccessToken, Token

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing AuthService")
        self._user_repo = UserRepository(conn)
        self._token_repo = TokenRepository(conn)

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def login(self, username: str, password: str) -> Token:
        """
        Validate credentials and issue a new access + refresh token pair.
        Accepts either username or email in the *username* field.
        """
        logger.info("Authenticating user '%s'", username)
        user = self._user_repo.get_by_login(username)

        if not user or not verify_password(password, user.hashed_password):
            logger.warning("Invalid login attempt for '%s'", username)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect username or password",
                headers={"WWW-Authenticate": "Bearer"},
            )

        if not user.is_active:
            logger.warning("Inactive user attempted login id=%s", user.id)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Inactive user account",
            )

        logger.info("Login successful for user id=%s", user.id)
        return self._issue_token_pair(user)

    # ------------------------------------------------------------------
    # Token refresh
    # ------------------------------------------------------------------

    def refresh(self, refresh_token_str: str) -> AccessToken:
        """Validate a stored, unrevoked refresh token and issue a new access token."""
        invalid_exc = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )

        try:
            payload = decode_token(refresh_token_str)
        except JWTError:
            logger.warning("Refresh token decode failed")
            raise invalid_exc

        if payload.get("type") != REFRESH_TOKEN_TYPE:
            logger.warning("Refresh token type mismatch")
            raise invalid_exc

        stored = self._token_repo.get_by_token(refresh_token_str)
        if stored is None or stored.revoked or stored.is_expired:
            logger.warning("Refresh token revoked, expired or missing")
            raise invalid_exc

        user = self._user_repo.get_by_id(int(payload["sub"]))
        if user is None or not user.is_active:
            logger.warning("Refresh token user not found or inactive")
            raise invalid_exc

        logger.info("Refresh token validated for user id=%s", user.id)
        return AccessToken(access_token=create_access_token(user.id, user.role.value))

    # ------------------------------------------------------------------
    # Logout
    # ------------------------------------------------------------------

    def logout(self, refresh_token_str: str) -> None:
        revoked = self._token_repo.revoke(refresh_token_str)
        logger.info("Refresh token revoked=%s", revoked)

    def _issue_token_pair(self, user: User) -> Token:
        access_token = create_access_token(user.id, user.role.value)
        refresh_token_str = create_refresh_token(user.id, user.role.value)

        expires_at = datetime.now(tz=timezone.utc) + timedelta(
            days=settings.REFRESH_TOKEN_EXPIRE_DAYS
        )
        self._token_repo.create(user.id, refresh_token_str, expires_at)
        logger.info("Issued token pair for user id=%s", user.id)

        return Token(access_token=access_token, refresh_token=refresh_token_str)
