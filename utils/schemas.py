"""
Pydantic schemas for the accounts API, plus the public projection of a
stored user.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from database.models import ADDRESS_COLUMNS, PROFILE_COLUMNS, User


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Profile
# ═══════════════════════════════════════════════════════════════════════════════


class Address(_CamelModel):
    line1: Optional[str] = None
    line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class Profile(_CamelModel):
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    avatar_url: Optional[str] = None
    address: Optional[Address] = None


# ═══════════════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════════════
#
# Required fields are declared optional here; the account service reports
# missing values as a 400 problem rather than a schema error.


class RegisterRequest(_CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    profile: Optional[Profile] = None


class LoginRequest(_CamelModel):
    username_or_email: Optional[str] = None
    password: Optional[str] = None


class UpdateUserRequest(_CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None
    profile: Optional[Profile] = None


def profile_payload(profile: Optional[Profile]) -> Optional[Dict[str, Any]]:
    """API-shaped dict holding only the profile keys the client actually sent."""
    if profile is None:
        return None
    return profile.model_dump(by_alias=True, exclude_unset=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════════


class UserOut(_CamelModel):
    id: str
    username: str
    email: str
    profile: Optional[Profile] = None
    created_at: str
    updated_at: str


class LoginResponse(_CamelModel):
    token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserOut


class Problem(BaseModel):
    type: str
    title: str
    status: int
    detail: Optional[str] = None


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. ``2024-05-01T12:00:00.000Z``."""
    if value.tzinfo is None:
        # SQLite hands back naive datetimes; they were written as UTC
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def map_user_to_api(user: User) -> Dict[str, Any]:
    """
    Build the public projection of ``user``.

    The password hash is never included.  ``profile`` is present only when
    at least one profile field is set, and ``profile.address`` only when at
    least one address field is set.
    """
    profile: Dict[str, Any] = {}
    for key, column in PROFILE_COLUMNS.items():
        value = getattr(user, column)
        if value:
            profile[key] = value

    address = {
        key: getattr(user, column)
        for key, column in ADDRESS_COLUMNS.items()
        if getattr(user, column)
    }
    if address:
        profile["address"] = address

    out: Dict[str, Any] = {
        "id": user.id,
        "username": user.username,
        "email": user.email,
    }
    if profile:
        out["profile"] = profile
    out["createdAt"] = format_timestamp(user.created_at)
    out["updatedAt"] = format_timestamp(user.updated_at)
    return out
