"""
Auth API routes — register, login, logout.

Route prefix: {base_path}/auth
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response, status

from auth.dependencies import get_account_service, get_settings
from auth.service import AccountService
from config.settings import Settings
from utils.schemas import (
    LoginRequest,
    LoginResponse,
    Problem,
    RegisterRequest,
    UserOut,
    profile_payload,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

_PROBLEMS = {
    code: {"model": Problem}
    for code in (400, 401, 409, 500)
}


def _set_session_cookie(response: Response, settings: Settings, value: str, max_age: int) -> None:
    response.set_cookie(
        settings.cookie_name,
        value,
        max_age=max_age,
        path="/",
        secure=settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=UserOut,
    response_model_exclude_none=True,
    responses={k: v for k, v in _PROBLEMS.items() if k != 401},
)
async def register(
    req: RegisterRequest,
    response: Response,
    accounts: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Register a new user."""
    user = await accounts.register(
        req.username,
        req.email,
        req.password,
        profile=profile_payload(req.profile),
    )
    response.headers["Location"] = f"{settings.base_path.rstrip('/')}/users/{user['id']}"
    return user


@router.post(
    "/login",
    response_model=LoginResponse,
    response_model_exclude_none=True,
    responses={k: v for k, v in _PROBLEMS.items() if k != 409},
)
async def login(
    req: LoginRequest,
    response: Response,
    accounts: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Login with username or email + password."""
    token, expires_in, user = await accounts.login(req.username_or_email, req.password)

    if settings.session_cookie_enabled:
        _set_session_cookie(response, settings, token, expires_in)
        logger.debug("Session cookie issued for %s", user["id"])

    return {
        "token": token,
        "tokenType": "Bearer",
        "expiresIn": expires_in,
        "user": user,
    }


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(settings: Settings = Depends(get_settings)) -> Response:
    """
    Clear the session cookie.  Issued tokens are not revoked: a bearer token
    sent in the Authorization header keeps working until it expires.
    """
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    if settings.session_cookie_enabled:
        _set_session_cookie(response, settings, "", 0)
        logger.debug("Logout: session cookie %s cleared", settings.cookie_name)
    return response
