"""
Problem-details error responses.

Every error leaving the service has the body ``{type, title, status,
detail?}`` where ``status`` matches the HTTP status code.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from utils.errors import AccountError, ServerError, ValidationError

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"

_HTTP_SLUGS = {
    400: ("validation", "Bad Request"),
    401: ("unauthorized", "Unauthorized"),
    404: ("not-found", "Not Found"),
    405: ("method-not-allowed", "Method Not Allowed"),
    409: ("conflict", "Conflict"),
}


def problem_response(
    request: Request,
    *,
    status: int,
    slug: str,
    title: str,
    detail: Optional[str] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    base = request.app.state.settings.problem_base_uri.rstrip("/")
    body = {"type": f"{base}/{slug}", "title": title, "status": status}
    if detail is not None:
        body["detail"] = detail
    return JSONResponse(body, status_code=status, media_type=PROBLEM_MEDIA_TYPE, headers=headers)


async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
    return problem_response(
        request,
        status=exc.status_code,
        slug=exc.slug,
        title=exc.title,
        detail=exc.detail,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Invalid request body on %s: %s", request.url.path, exc.errors())
    error = ValidationError("Request body is malformed.")
    return await account_error_handler(request, error)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        slug, title, detail = "not-found", "Not Found", "Resource not found"
    elif exc.status_code in _HTTP_SLUGS:
        slug, title = _HTTP_SLUGS[exc.status_code]
        detail = exc.detail if isinstance(exc.detail, str) else None
    elif exc.status_code >= 500:
        slug, title, detail = ServerError.slug, ServerError.title, "Unexpected server error"
    else:
        slug, title = "http-error", "HTTP Error"
        detail = exc.detail if isinstance(exc.detail, str) else None
    return problem_response(
        request,
        status=exc.status_code,
        slug=slug,
        title=title,
        detail=detail,
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return await account_error_handler(request, ServerError())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AccountError, account_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
