"""
Liveness and readiness probes.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from utils.schemas import format_timestamp

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _now() -> str:
    return format_timestamp(datetime.now(timezone.utc))


def liveness(request: Request) -> Dict[str, Any]:
    return {
        "status": "ok",
        "service": request.app.state.settings.service_name,
        "time": _now(),
    }


@router.get("/healthz")
async def healthz(request: Request) -> Dict[str, Any]:
    return liveness(request)


@router.get("/readyz")
async def readyz(request: Request) -> JSONResponse:
    """Ready once the database answers a trivial query."""
    service = request.app.state.settings.service_name
    try:
        async with request.app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception:
        logger.warning("Readiness check failed", exc_info=True)
        return JSONResponse(
            {
                "status": "not_ready",
                "service": service,
                "time": _now(),
                "details": {"db": "unavailable"},
            },
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return JSONResponse({"status": "ready", "service": service, "time": _now()})
