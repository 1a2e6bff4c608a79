"""
Account orchestration — registration, login and profile updates.

Validation and conflict checks run before anything is written.  Errors
outside the ``AccountError`` taxonomy (storage, hashing, signing) are
logged here and replaced by a generic ``ServerError`` so no internal detail
reaches the client.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import TokenService
from auth.password import PasswordHasher
from database.users import UserRepository, profile_to_columns
from utils.errors import (
    AccountError,
    ConflictError,
    NotFoundError,
    ServerError,
    UnauthorizedError,
    ValidationError,
)
from utils.schemas import map_user_to_api

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _present(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _guarded(operation: str) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(self: "AccountService", *args: Any, **kwargs: Any) -> T:
            try:
                return await func(self, *args, **kwargs)
            except AccountError:
                await self._session.rollback()
                raise
            except Exception as exc:
                logger.exception("%s failed", operation)
                await self._session.rollback()
                raise ServerError() from exc

        return wrapper

    return decorator


class AccountService:
    """One instance per request; shares the request's DB session."""

    def __init__(
        self,
        users: UserRepository,
        session: AsyncSession,
        hasher: PasswordHasher,
        tokens: TokenService,
    ) -> None:
        self._users = users
        self._session = session
        self._hasher = hasher
        self._tokens = tokens

    @_guarded("register")
    async def register(
        self,
        username: Optional[str],
        email: Optional[str],
        password: Optional[str],
        profile: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        if not (_present(username) and _present(email) and _present(password)):
            raise ValidationError("username, email, and password are required.")

        if await self._users.find_conflict(username=username, email=email) is not None:
            raise ConflictError("Username or email already exists.")

        user = await self._users.create(
            username,
            email,
            self._hasher.hash(password),
            profile=profile,
        )
        await self._session.commit()

        logger.info("Registered user %s (%s)", user.username, user.id)
        return map_user_to_api(user)

    @_guarded("login")
    async def login(
        self,
        username_or_email: Optional[str],
        password: Optional[str],
    ) -> Tuple[str, int, Dict[str, Any]]:
        """Returns ``(token, expires_in, public_user)``."""
        if not (_present(username_or_email) and _present(password)):
            raise ValidationError("usernameOrEmail and password are required.")

        user = await self._users.find_by_identifier(username_or_email)
        if user is None:
            matched = self._hasher.verify_placeholder(password)
        else:
            matched = self._hasher.verify(user.password_hash, password)
        if not matched:
            logger.info("Failed login for %s", username_or_email)
            raise UnauthorizedError()

        token, expires_in = self._tokens.issue(user.id)
        logger.info("Login: %s (%s)", user.username, user.id)
        return token, expires_in, map_user_to_api(user)

    @_guarded("get_profile")
    async def get_profile(self, user_id: str) -> Dict[str, Any]:
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError()
        return map_user_to_api(user)

    @_guarded("update_profile")
    async def update_profile(
        self,
        user_id: str,
        *,
        username: Optional[str] = None,
        email: Optional[str] = None,
        profile: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        for field, value in (("username", username), ("email", email)):
            if value is not None and not _present(value):
                raise ValidationError(f"{field} must be a non-empty string.")

        if username is not None or email is not None:
            conflict = await self._users.find_conflict(
                username=username, email=email, exclude_id=user_id,
            )
            if conflict is not None:
                raise ConflictError("Email or username conflicts with an existing account")

        fields: Dict[str, Any] = {}
        if username is not None:
            fields["username"] = username
        if email is not None:
            fields["email"] = email
        fields.update(profile_to_columns(profile))

        user = await self._users.update(user_id, fields)
        if user is None:
            raise NotFoundError()
        await self._session.commit()

        logger.info("Updated user %s (%s)", user.username, user.id)
        return map_user_to_api(user)
