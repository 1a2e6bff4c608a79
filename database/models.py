"""
SQLAlchemy ORM models for the accounts database.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    username = Column(String(255), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    given_name = Column(String(255), nullable=True)
    family_name = Column(String(255), nullable=True)
    avatar_url = Column(String(1024), nullable=True)

    address_line1 = Column(String(255), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    address_city = Column(String(255), nullable=True)
    address_state = Column(String(255), nullable=True)
    address_postal_code = Column(String(64), nullable=True)
    address_country = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


# Profile columns in API order; the address block maps to the nested
# ``profile.address`` object of the public projection.
PROFILE_COLUMNS = {
    "givenName": "given_name",
    "familyName": "family_name",
    "avatarUrl": "avatar_url",
}

ADDRESS_COLUMNS = {
    "line1": "address_line1",
    "line2": "address_line2",
    "city": "address_city",
    "state": "address_state",
    "postalCode": "address_postal_code",
    "country": "address_country",
}
