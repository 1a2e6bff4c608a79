"""Authentication result types, plus a re-export of the User model for auth code."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from database.models import User  # noqa: F401


@dataclass(frozen=True)
class Authenticated:
    user_id: str


@dataclass(frozen=True)
class Unauthenticated:
    pass


AuthResult = Union[Authenticated, Unauthenticated]

__all__ = ["Authenticated", "AuthResult", "Unauthenticated", "User"]
