"""
FastAPI dependencies for authentication.

Provides ``db_session``, the shared service objects kept on ``app.state``,
and ``get_current_user_id`` used across all protected routes.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import InvalidTokenError, TokenService
from auth.models import Authenticated, AuthResult, Unauthenticated
from auth.password import PasswordHasher
from auth.service import AccountService
from config.settings import Settings
from database.session import get_db_session
from database.users import UserRepository
from utils.errors import UnauthorizedError

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_account_service(
    session: AsyncSession = Depends(db_session),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> AccountService:
    return AccountService(UserRepository(session), session, hasher, tokens)


def extract_token(request: Request, cookie_name: str) -> Optional[str]:
    """Bearer header first, then the session cookie."""
    header = request.headers.get("Authorization")
    if header and header.startswith(_BEARER_PREFIX):
        token = header[len(_BEARER_PREFIX):].strip()
        if token:
            return token
    return request.cookies.get(cookie_name) or None


def authenticate_request(request: Request, tokens: TokenService, cookie_name: str) -> AuthResult:
    token = extract_token(request, cookie_name)
    if token is None:
        return Unauthenticated()
    try:
        return Authenticated(tokens.verify(token))
    except InvalidTokenError as exc:
        logger.debug("Rejected token on %s: %s", request.url.path, exc)
        return Unauthenticated()


async def get_current_user_id(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
) -> str:
    """
    Resolve the authenticated ``user_id`` for the request.

    Every failure (no token, bad signature, expiry, missing subject) ends in
    the same ``UnauthorizedError``.
    """
    result = authenticate_request(request, tokens, settings.cookie_name)
    if isinstance(result, Authenticated):
        request.state.user_id = result.user_id
        return result.user_id
    raise UnauthorizedError()
