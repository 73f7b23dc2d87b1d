"""
Liveness banner and database health probe.

``GET /`` answers as long as the process is running.  ``GET /health``
also runs ``SELECT 1`` against the database and reports 503 if that
fails.
"""

import logging
import time

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ...core import db
from ...core.config import settings
from ..responses import timestamp


logger = logging.getLogger(__name__)

router = APIRouter()

_started = time.monotonic()


@router.get("/", summary="API status")
async def root() -> dict:
    return {
        "success": True,
        "message": f"{settings.project_name} is running",
        "version": settings.api_version,
        "docs": "/docs",
        "meta": {"timestamp": timestamp(), "environment": settings.environment},
    }


@router.get("/health", summary="Health check")
async def health() -> JSONResponse:
    try:
        await db.ping()
    except Exception as exc:
        logger.error("Health check failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "success": False,
                "status": "unhealthy",
                "services": {"database": "disconnected", "server": "running"},
                "error": str(exc),
                "meta": {"timestamp": timestamp()},
            },
        )
    return JSONResponse(
        content={
            "success": True,
            "status": "healthy",
            "services": {"database": "connected", "server": "running"},
            "meta": {"timestamp": timestamp(), "uptime": round(time.monotonic() - _started, 3)},
        }
    )
