from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from ...core.config import get_settings
from ...core.security import (
    failed_login_delay,
    generate_session_token,
    session_expiry,
    verify_password,
)
from ...domain.auth import AdminSession, LoginRequest, SessionInfo
from ...domain.common import SuccessResponse
from ...repositories.admin import AdminRepository
from ...services.recaptcha import recaptcha_enabled, verify_recaptcha_token
from ..dependencies import assert_admin, get_admin_repository

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/admin", tags=["auth"])

INVALID_CREDENTIALS = "Invalid credentials"


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


def _set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age_seconds,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


@router.post("/login", response_model=SuccessResponse)
async def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    admin_repo: AdminRepository = Depends(get_admin_repository),
) -> SuccessResponse:
    login_name = payload.login.strip()
    if not login_name or not payload.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Login and password are required")

    if recaptcha_enabled() and not await verify_recaptcha_token(payload.recaptcha_token, _client_ip(request)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="reCAPTCHA verification failed")

    await admin_repo.delete_expired_sessions()
    user = await admin_repo.find_user_by_login(login_name)
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.info("auth.login_failed", login=login_name)
        await failed_login_delay()
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    token = generate_session_token()
    await admin_repo.create_session(user.id, token, session_expiry())
    _set_session_cookie(response, token)
    logger.info("auth.login_succeeded", login=user.login)
    return SuccessResponse()


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    request: Request,
    response: Response,
    admin_repo: AdminRepository = Depends(get_admin_repository),
) -> SuccessResponse:
    settings = get_settings()
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        await admin_repo.delete_session(token)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return SuccessResponse()


@router.get("/session", response_model=SessionInfo)
async def current_session(session: AdminSession = Depends(assert_admin)) -> SessionInfo:
    return SessionInfo(login=session.user.login, expires_at=session.expires_at)
