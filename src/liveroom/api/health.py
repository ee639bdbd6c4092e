"""
Health check endpoint for monitoring and orchestration.

Reports uptime plus the two dependencies a join needs: the database and
the room-credential signing configuration.
"""

import time
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from liveroom.core.credentials import CredentialIssuer
from liveroom.core.db import get_db
from liveroom.core.errors import ConfigurationError

router = APIRouter(tags=["health"])

# Set in lifespan
_app_start_time: datetime | None = None


def set_app_start_time(start_time: datetime) -> None:
    """Called by lifespan to track when app started."""
    global _app_start_time
    _app_start_time = start_time


def get_uptime_seconds() -> int:
    """Calculate seconds since app start."""
    if _app_start_time is None:
        return 0
    return int((datetime.now() - _app_start_time).total_seconds())


async def check_database(db: AsyncSession) -> dict[str, Any]:
    """Returns: {"status": "ok"|"down", "response_time_ms": N, "error": str (if down)}"""
    start = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
        return {
            "status": "ok",
            "response_time_ms": int((time.perf_counter() - start) * 1000),
        }
    except Exception as e:
        return {
            "status": "down",
            "response_time_ms": int((time.perf_counter() - start) * 1000),
            "error": type(e).__name__,
        }


def check_video_credentials() -> dict[str, Any]:
    """Returns: {"status": "ok"|"unconfigured"} without exposing the reason."""
    try:
        CredentialIssuer.from_env()
    except ConfigurationError:
        return {"status": "unconfigured"}
    return {"status": "ok"}


@router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Always 200; degraded dependencies are reported in the body.",
)
async def health_check(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """
    Example response (degraded):
        {
            "status": "degraded",
            "uptime_seconds": 3600,
            "checks": {
                "database": {"status": "ok", "response_time_ms": 3},
                "video": {"status": "unconfigured"}
            }
        }
    """
    checks = {
        "database": await check_database(db),
        "video": check_video_credentials(),
    }
    overall = "ok" if all(c["status"] == "ok" for c in checks.values()) else "degraded"

    return JSONResponse(
        content={
            "status": overall,
            "uptime_seconds": get_uptime_seconds(),
            "checks": checks,
        },
        status_code=status.HTTP_200_OK,
    )
