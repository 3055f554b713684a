"""Pay calendar configuration API endpoints."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Query, status

from timecard_engine.api.dependencies import DbSession
from timecard_engine.api.schemas import (
    ErrorResponse,
    PayCalendarCreate,
    PayCalendarResponse,
    PayCalendarUpdate,
    PeriodDescriptorResponse,
    ScheduleResponse,
)
from timecard_engine.models import PayCalendarConfig
from timecard_engine.services.pay_calendar_service import (
    ConfigurationNotFoundError,
    PayCalendarService,
    PayCalendarValidationError,
)

router = APIRouter(prefix="/districts/{district_id}/pay-calendars", tags=["pay-calendars"])


async def _load(service: PayCalendarService, district_id: int, config_id: int) -> PayCalendarConfig:
    try:
        config = await service.get(config_id)
    except ConfigurationNotFoundError:
        config = None
    if config is None or config.district_id != district_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Pay calendar configuration not found",
        )
    return config


def _validation_error(e: PayCalendarValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail="; ".join(e.errors),
    )


@router.post(
    "",
    response_model=PayCalendarResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
async def create_pay_calendar(
    db: DbSession,
    district_id: Annotated[int, Path()],
    payload: PayCalendarCreate,
) -> PayCalendarResponse:
    """Create a pay calendar configuration.

    Activating it deactivates any other active configuration of the district.
    """
    service = PayCalendarService(db)
    try:
        config = await service.create(
            district_id,
            payload.name,
            [entry.to_payload() for entry in payload.pay_dates],
            school_year=payload.school_year,
            is_active=payload.is_active,
        )
    except PayCalendarValidationError as e:
        raise _validation_error(e)
    await db.commit()
    await db.refresh(config)
    return PayCalendarResponse.model_validate(config)


@router.get("", response_model=list[PayCalendarResponse])
async def list_pay_calendars(
    db: DbSession,
    district_id: Annotated[int, Path()],
) -> list[PayCalendarResponse]:
    """List a district's pay calendar configurations, newest first."""
    configs = await PayCalendarService(db).list_for_district(district_id)
    return [PayCalendarResponse.model_validate(c) for c in configs]


@router.get(
    "/{config_id}",
    response_model=PayCalendarResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_pay_calendar(
    db: DbSession,
    district_id: Annotated[int, Path()],
    config_id: Annotated[int, Path()],
) -> PayCalendarResponse:
    config = await _load(PayCalendarService(db), district_id, config_id)
    return PayCalendarResponse.model_validate(config)


@router.patch(
    "/{config_id}",
    response_model=PayCalendarResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def update_pay_calendar(
    db: DbSession,
    district_id: Annotated[int, Path()],
    config_id: Annotated[int, Path()],
    payload: PayCalendarUpdate,
) -> PayCalendarResponse:
    service = PayCalendarService(db)
    await _load(service, district_id, config_id)

    changes = payload.model_dump(exclude_unset=True, exclude={"pay_dates"})
    if payload.pay_dates is not None:
        changes["pay_dates"] = [entry.to_payload() for entry in payload.pay_dates]

    try:
        config = await service.update(config_id, **changes)
    except PayCalendarValidationError as e:
        raise _validation_error(e)
    await db.commit()
    await db.refresh(config)
    return PayCalendarResponse.model_validate(config)


@router.delete(
    "/{config_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_pay_calendar(
    db: DbSession,
    district_id: Annotated[int, Path()],
    config_id: Annotated[int, Path()],
) -> None:
    service = PayCalendarService(db)
    await _load(service, district_id, config_id)
    await service.delete(config_id)
    await db.commit()


@router.get(
    "/{config_id}/schedule",
    response_model=ScheduleResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_pay_schedule(
    db: DbSession,
    district_id: Annotated[int, Path()],
    config_id: Annotated[int, Path()],
    year: Annotated[int, Query(ge=1900, le=2999)],
) -> ScheduleResponse:
    """Pay periods of a configuration whose pay date falls in ``year``."""
    service = PayCalendarService(db)
    await _load(service, district_id, config_id)
    periods = await service.compute_schedule(config_id, year)
    return ScheduleResponse(
        config_id=config_id,
        year=year,
        periods=[PeriodDescriptorResponse.model_validate(p) for p in periods],
    )
