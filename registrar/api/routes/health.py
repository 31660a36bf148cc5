# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health, readiness and liveness probes.

Only the entity store is probed; the service has no other backing system.
"""

import logging
import time
from datetime import datetime

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from registrar import __version__
from registrar.core.config import get_settings
from registrar.infrastructure.database.connection import check_database_connection
from registrar.utils.datetime import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

_started_at = time.monotonic()


class StoreHealth(BaseModel):
    """Entity store probe result."""

    status: str = Field(description="healthy or unhealthy")
    latency_ms: float | None = Field(None, description="Round trip of SELECT 1")


class HealthResponse(BaseModel):
    """Service health report."""

    status: str = Field(description="healthy or degraded")
    version: str
    environment: str
    uptime_seconds: int
    checked_at: datetime
    database: StoreHealth


async def probe_store() -> StoreHealth:
    """Run a trivial query against the entity store and time it."""
    began = time.perf_counter()
    if not await check_database_connection():
        logger.error("Entity store probe failed")
        return StoreHealth(status="unhealthy")
    elapsed_ms = (time.perf_counter() - began) * 1000
    return StoreHealth(status="healthy", latency_ms=round(elapsed_ms, 2))


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Report version, uptime and entity store status.

    Always answers 200; a failed store probe shows up as ``degraded``.
    """
    store = await probe_store()
    return HealthResponse(
        status="healthy" if store.status == "healthy" else "degraded",
        version=__version__,
        environment=get_settings().environment,
        uptime_seconds=int(time.monotonic() - _started_at),
        checked_at=utc_now(),
        database=store,
    )


@router.get("/health/ready")
async def readiness(response: Response) -> dict[str, str]:
    """Readiness probe; 503 while the entity store is unreachable."""
    store = await probe_store()
    if store.status != "healthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not_ready"}
    return {"status": "ready"}


@router.get("/health/live")
async def liveness() -> dict[str, str]:
    """Liveness probe; succeeds while the process is serving."""
    return {"status": "alive"}
