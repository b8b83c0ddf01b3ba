"""Liveness and readiness probes.

/health answers "is the process up" and reports each backing service
without failing; /ready answers "can this instance take traffic" and
returns 503 when the database it depends on is unreachable.  Redis is
never critical: rate limiting falls back to in-process buckets.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from academy.db import engine as db_engine
from academy.db.redis import redis_pool

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _redis_status() -> str:
    if redis_pool is None:
        return "not_configured"
    try:
        await redis_pool.ping()  # type: ignore[misc]
    except Exception:
        logger.warning("Redis ping failed", exc_info=True)
        return "degraded"
    return "ok"


async def _database_status() -> str:
    if db_engine.engine is None:
        return "not_configured"
    return "ok" if await db_engine.ping_database() else "degraded"


@router.get("/health")
async def health() -> dict:
    """Always 200; ``status`` says whether anything is impaired."""
    checks = {
        "database": await _database_status(),
        "redis": await _redis_status(),
    }
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    database = await _database_status()
    if database == "degraded":
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": {"database": database}},
        )
    return Response(status_code=status.HTTP_200_OK)
