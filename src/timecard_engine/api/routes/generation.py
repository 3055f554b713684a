"""Timecard generation API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Query, status

from timecard_engine.api.dependencies import Actor, AutomationService, DbSession
from timecard_engine.api.schemas import (
    BulkGenerateRequest,
    BulkGenerateResponse,
    ErrorResponse,
    GenerateRequest,
    GenerationJobListResponse,
    GenerationJobResponse,
    GenerationResultResponse,
    PreviewResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/districts/{district_id}/timecard-generation",
    tags=["timecard-generation"],
)


# ============================================================================
# Generation
# ============================================================================


@router.post(
    "/generate",
    response_model=GenerationResultResponse,
    responses={422: {"model": ErrorResponse}},
)
async def generate_timecards(
    db: DbSession,
    service: AutomationService,
    actor: Actor,
    district_id: Annotated[int, Path()],
    payload: GenerateRequest,
) -> GenerationResultResponse:
    """Generate monthly timecards for one period.

    Partial failures are reported in the body; the run itself still
    returns 200 with ``success`` describing whether it completed.
    """
    result = await service.generate_for_period(
        district_id,
        payload.month,
        payload.year,
        actor or payload.triggered_by,
        employee_types=payload.employee_types,
    )
    await db.commit()
    return GenerationResultResponse(**result.to_dict())


@router.post(
    "/bulk",
    response_model=BulkGenerateResponse,
    responses={422: {"model": ErrorResponse}},
)
async def bulk_generate_timecards(
    service: AutomationService,
    actor: Actor,
    district_id: Annotated[int, Path()],
    payload: BulkGenerateRequest,
) -> BulkGenerateResponse:
    """Generate monthly timecards for every month in an inclusive range."""
    try:
        results = await service.bulk_generate(
            district_id,
            payload.start_month,
            payload.start_year,
            payload.end_month,
            payload.end_year,
            actor or payload.triggered_by,
            employee_types=payload.employee_types,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    return BulkGenerateResponse(
        results=[GenerationResultResponse(**r.to_dict()) for r in results],
        total_generated=sum(r.timecards_generated for r in results),
        total_errors=sum(r.error_count for r in results),
    )


# ============================================================================
# Inspection
# ============================================================================


@router.get(
    "/preview",
    response_model=PreviewResponse,
)
async def preview_existing_timecards(
    service: AutomationService,
    district_id: Annotated[int, Path()],
    month: Annotated[int, Query(ge=1, le=12)],
    year: Annotated[int, Query(ge=1900, le=2999)],
    employee_type: str | None = None,
) -> PreviewResponse:
    """Report timecards that already exist for a period."""
    preview = await service.preview_existing(district_id, month, year, employee_type)
    return PreviewResponse(
        exists=preview.exists,
        count=preview.count,
        employee_types=preview.employee_types,
    )


@router.get(
    "/jobs",
    response_model=GenerationJobListResponse,
)
async def list_generation_jobs(
    service: AutomationService,
    district_id: Annotated[int, Path()],
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
) -> GenerationJobListResponse:
    """List generation jobs for a district, newest first."""
    jobs = await service.list_jobs(district_id, limit)
    return GenerationJobListResponse(
        items=[GenerationJobResponse.model_validate(job) for job in jobs],
        total=len(jobs),
    )
