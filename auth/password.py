"""
Password hashing and verification.

Uses argon2id (memory-hard) with a random salt embedded in every hash and
configurable work factors.
"""

from __future__ import annotations

import secrets

from argon2 import PasswordHasher as _Argon2Hasher
from argon2.exceptions import InvalidHashError, VerificationError


class PasswordHasher:
    def __init__(
        self,
        *,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ) -> None:
        self._hasher = _Argon2Hasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )
        # stands in for the stored hash when no account matches
        self._placeholder_hash = self._hasher.hash(secrets.token_urlsafe(16))

    @classmethod
    def from_settings(cls, settings) -> "PasswordHasher":
        return cls(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
            parallelism=settings.argon2_parallelism,
        )

    def hash(self, password: str) -> str:
        return self._hasher.hash(password)

    def verify(self, password_hash: str, password: str) -> bool:
        """
        ``True`` only when ``password`` matches.  A wrong password, a
        malformed hash and a hash from another algorithm all give ``False``.
        """
        try:
            return self._hasher.verify(password_hash, password)
        except (VerificationError, InvalidHashError, ValueError, TypeError):
            return False

    def verify_placeholder(self, password: str) -> bool:
        """Spend the same work as :meth:`verify` for an account that does not exist.  Always ``False``."""
        self.verify(self._placeholder_hash, password)
        return False
