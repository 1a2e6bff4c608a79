"""
User persistence — the credential store behind the account service.

The UNIQUE constraints on ``username`` and ``email`` are the authority for
uniqueness; callers may pre-check with :meth:`UserRepository.find_conflict`
but an insert or update that loses a race still surfaces as
:class:`ConflictError`.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import ADDRESS_COLUMNS, PROFILE_COLUMNS, User, utcnow
from utils.errors import ConflictError

logger = logging.getLogger(__name__)

USER_ID_PREFIX = "usr_"

UPDATABLE_COLUMNS = frozenset(
    ["username", "email", *PROFILE_COLUMNS.values(), *ADDRESS_COLUMNS.values()]
)


def new_user_id() -> str:
    return f"{USER_ID_PREFIX}{uuid.uuid4()}"


def profile_to_columns(profile: Optional[Mapping[str, Any]]) -> Dict[str, Optional[str]]:
    """
    Flatten an API-shaped profile (``givenName``, ``address.city`` …) into
    column values.  Only keys present in ``profile`` are returned; empty
    values become ``None``.
    """
    columns: Dict[str, Optional[str]] = {}
    if not profile:
        return columns

    for key, column in PROFILE_COLUMNS.items():
        if key in profile:
            columns[column] = profile[key] or None

    address = profile.get("address")
    if address:
        for key, column in ADDRESS_COLUMNS.items():
            if key in address:
                columns[column] = address[key] or None
    return columns


class UserRepository:
    """Row-level CRUD for :class:`User`, bound to a single session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        username: str,
        email: str,
        password_hash: str,
        profile: Optional[Mapping[str, Any]] = None,
    ) -> User:
        now = utcnow()
        user = User(
            id=new_user_id(),
            username=username,
            email=email,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
            **profile_to_columns(profile),
        )
        self._session.add(user)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ConflictError("Username or email already exists.") from exc
        return user

    async def find_by_identifier(self, username_or_email: str) -> Optional[User]:
        """Match on username or email; the oldest record wins if both match different rows."""
        result = await self._session.execute(
            select(User)
            .where(or_(User.username == username_or_email, User.email == username_or_email))
            .order_by(User.created_at, User.id)
            .limit(1)
        )
        return result.scalars().first()

    async def find_by_id(self, user_id: str) -> Optional[User]:
        return await self._session.get(User, user_id)

    async def find_conflict(
        self,
        *,
        username: Optional[str] = None,
        email: Optional[str] = None,
        exclude_id: Optional[str] = None,
    ) -> Optional[User]:
        """Return any record (other than ``exclude_id``) owning ``username`` or ``email``."""
        clauses = []
        if username:
            clauses.append(User.username == username)
        if email:
            clauses.append(User.email == email)
        if not clauses:
            return None

        stmt = select(User).where(or_(*clauses))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        result = await self._session.execute(stmt.limit(1))
        return result.scalars().first()

    async def update(self, user_id: str, fields: Mapping[str, Any]) -> Optional[User]:
        """
        Apply ``fields`` (column name → value) to the user and refresh
        ``updated_at``.  Returns ``None`` when the user does not exist.
        """
        unknown = set(fields) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update columns: {', '.join(sorted(unknown))}")

        user = await self.find_by_id(user_id)
        if user is None:
            return None

        for column, value in fields.items():
            setattr(user, column, value)
        user.updated_at = utcnow()

        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ConflictError("Email or username conflicts with an existing account") from exc
        return user
