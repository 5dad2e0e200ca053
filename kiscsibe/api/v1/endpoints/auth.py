"""
Staff authentication endpoints:
  POST /auth/login          – OAuth2 password flow, returns access + refresh tokens
  POST /auth/refresh        – Exchange a valid refresh token for a new access token
  POST /auth/logout         – Revoke the provided refresh token
  GET  /auth/me             – Return the currently authenticated staff profile
"""
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
import logging

from kiscsibe.core.dependencies import db_dependency, require_staff
from kiscsibe.models.user import User
from kiscsibe.schemas.token import AccessToken, RefreshTokenRequest, Token
from kiscsibe.schemas.user import UserResponse
from kiscsibe.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/login",
    response_model=Token,
    summary="Login with username/email and password (OAuth2 Password Flow)",
)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    conn=Depends(db_dependency),
):
    """
    - **username**: username *or* email address
    - **password**: password
    """
    logger.info("Login requested for username=%s", form_data.username)
    service = AuthService(conn)
    return service.login(form_data.username, form_data.password)


@router.post(
    "/refresh",
    response_model=AccessToken,
    summary="Obtain a new access token using a valid refresh token",
)
def refresh_token(
    body: RefreshTokenRequest,
    conn=Depends(db_dependency),
):
    logger.info("Refreshing access token")
    service = AuthService(conn)
    return service.refresh(body.refresh_token)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke the provided refresh token",
)
def logout(
    body: RefreshTokenRequest,
    conn=Depends(db_dependency),
    _: User = Depends(require_staff),
):
    logger.info("Logout requested")
    AuthService(conn).logout(body.refresh_token)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get the current staff profile",
)
def get_me(current_user: User = Depends(require_staff)):
    logger.info("Returning profile for user id=%s", current_user.id)
    return current_user
