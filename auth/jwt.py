"""
JWT bearer token creation and verification.

Tokens carry ``sub`` (user id), ``iat`` and ``exp`` and are signed with the
configured secret (``JWT_SECRET``).  Only the configured algorithm is
accepted on verification.

Tokens are stateless: there is no revocation list, so a token stays valid
until it expires even after the client logs out.
"""

from __future__ import annotations

import time
from typing import Tuple

from jose import JWTError, jwt


class InvalidTokenError(Exception):
    """Raised when a token fails signature, expiry or claim checks."""


class TokenService:
    def __init__(self, secret: str, *, expiry_seconds: int, algorithm: str = "HS256") -> None:
        if expiry_seconds <= 0:
            raise ValueError("expiry_seconds must be positive")
        self._secret = secret
        self._algorithm = algorithm
        self._expiry_seconds = expiry_seconds

    @classmethod
    def from_settings(cls, settings) -> "TokenService":
        return cls(
            settings.jwt_secret,
            expiry_seconds=settings.jwt_expiry_seconds,
            algorithm=settings.jwt_algorithm,
        )

    @property
    def expiry_seconds(self) -> int:
        return self._expiry_seconds

    def issue(self, subject_id: str) -> Tuple[str, int]:
        """Create a signed token for ``subject_id``; returns ``(token, expires_in)``."""
        now = int(time.time())
        payload = {
            "sub": subject_id,
            "iat": now,
            "exp": now + self._expiry_seconds,
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return token, self._expiry_seconds

    def verify(self, token: str) -> str:
        """
        Verify ``token`` and return its subject.

        Raises ``InvalidTokenError`` on bad signature, unexpected algorithm,
        expiry, malformed input or a missing subject.
        """
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as exc:
            raise InvalidTokenError(str(exc)) from exc

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidTokenError("token has no subject")
        return subject
