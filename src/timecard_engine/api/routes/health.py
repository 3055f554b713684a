"""Service and database health probes."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from timecard_engine import __version__
from timecard_engine.api.dependencies import DbSession
from timecard_engine.models import GenerationJob
from timecard_engine.services.state_machine import JobStatus

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Engine health, including generation runs currently in flight."""

    status: str
    timestamp: datetime
    database: str
    version: str
    running_jobs: int | None = None


async def _count_running_jobs(db: AsyncSession) -> int:
    return await db.scalar(
        select(func.count())
        .select_from(GenerationJob)
        .where(GenerationJob.status == JobStatus.RUNNING.value)
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(db: DbSession) -> HealthResponse:
    """Report database reachability and the number of running generation jobs.

    A database failure degrades the status instead of failing the request.
    """
    try:
        running = await _count_running_jobs(db)
    except SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)
        running = None

    reachable = running is not None
    return HealthResponse(
        status="healthy" if reachable else "degraded",
        timestamp=datetime.now(timezone.utc),
        database="healthy" if reachable else "unhealthy",
        version=__version__,
        running_jobs=running,
    )


@router.get("/ready")
async def readiness_check(db: DbSession) -> dict[str, str]:
    """Ready only when the job tables can be queried."""
    try:
        await _count_running_jobs(db)
    except SQLAlchemyError:
        logger.warning("Readiness check failed", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="database unavailable",
        )
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}
