"""
Error taxonomy shared by the account service and the HTTP layer.

Each error knows its HTTP status, the slug used to build the problem
``type`` URI, and a fixed title.  ``detail`` is the only client-visible
free text and must never carry internal exception messages.
"""

from __future__ import annotations

from typing import Optional


class AccountError(Exception):
    status_code: int = 500
    slug: str = "server-error"
    title: str = "Server Error"

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(detail or self.title)
        self.detail = detail


class ValidationError(AccountError):
    status_code = 400
    slug = "validation"
    title = "Bad Request"


class UnauthorizedError(AccountError):
    status_code = 401
    slug = "unauthorized"
    title = "Unauthorized"

    def __init__(self, detail: Optional[str] = "Missing or invalid credentials.") -> None:
        super().__init__(detail)


class NotFoundError(AccountError):
    status_code = 404
    slug = "not-found"
    title = "Not Found"


class ConflictError(AccountError):
    status_code = 409
    slug = "conflict"
    title = "Conflict"


class ServerError(AccountError):
    def __init__(self, detail: Optional[str] = "Unexpected server error") -> None:
        super().__init__(detail)
