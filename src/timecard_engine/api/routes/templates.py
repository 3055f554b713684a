"""Timecard and generation template API endpoints."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from timecard_engine.api.dependencies import DbSession
from timecard_engine.api.schemas import (
    ErrorResponse,
    GenerationTemplateCreate,
    GenerationTemplateResponse,
    GenerationTemplateUpdate,
    TimecardTemplateCreate,
    TimecardTemplateResponse,
)
from timecard_engine.models import GenerationTemplate, TimecardTemplate
from timecard_engine.services.template_registry import (
    GenerationTemplateRegistry,
    TemplateNotFoundError,
)

router = APIRouter(prefix="/districts/{district_id}", tags=["templates"])


async def _load(
    registry: GenerationTemplateRegistry, district_id: int, template_id: int
) -> GenerationTemplate:
    try:
        template = await registry.get(template_id)
    except TemplateNotFoundError:
        template = None
    if template is None or template.district_id != district_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Generation template not found",
        )
    return template


async def _check_layout(db: AsyncSession, district_id: int, timecard_template_id: int) -> None:
    layout = await db.get(TimecardTemplate, timecard_template_id)
    if layout is None or layout.district_id != district_id:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Timecard template {timecard_template_id} not found in district {district_id}",
        )


# ============================================================================
# Timecard templates
# ============================================================================


@router.post(
    "/timecard-templates",
    response_model=TimecardTemplateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_timecard_template(
    db: DbSession,
    district_id: Annotated[int, Path()],
    payload: TimecardTemplateCreate,
) -> TimecardTemplateResponse:
    template = await GenerationTemplateRegistry(db).create_timecard_template(
        district_id, payload.name, payload.employee_type, payload.fields
    )
    await db.commit()
    return TimecardTemplateResponse.model_validate(template)


@router.get("/timecard-templates", response_model=list[TimecardTemplateResponse])
async def list_timecard_templates(
    db: DbSession,
    district_id: Annotated[int, Path()],
) -> list[TimecardTemplateResponse]:
    templates = await GenerationTemplateRegistry(db).list_timecard_templates(district_id)
    return [TimecardTemplateResponse.model_validate(t) for t in templates]


# ============================================================================
# Generation templates
# ============================================================================


@router.post(
    "/generation-templates",
    response_model=GenerationTemplateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
async def create_generation_template(
    db: DbSession,
    district_id: Annotated[int, Path()],
    payload: GenerationTemplateCreate,
) -> GenerationTemplateResponse:
    """Create a per-employee-type generation template."""
    await _check_layout(db, district_id, payload.timecard_template_id)
    template = await GenerationTemplateRegistry(db).create(
        district_id,
        payload.name,
        payload.employee_type,
        payload.timecard_template_id,
        default_field_values=payload.default_field_values,
        auto_generation_enabled=payload.auto_generation_enabled,
        is_active=payload.is_active,
    )
    await db.commit()
    await db.refresh(template)
    return GenerationTemplateResponse.model_validate(template)


@router.get("/generation-templates", response_model=list[GenerationTemplateResponse])
async def list_generation_templates(
    db: DbSession,
    district_id: Annotated[int, Path()],
) -> list[GenerationTemplateResponse]:
    templates = await GenerationTemplateRegistry(db).list_for_district(district_id)
    return [GenerationTemplateResponse.model_validate(t) for t in templates]


@router.get(
    "/generation-templates/{template_id}",
    response_model=GenerationTemplateResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_generation_template(
    db: DbSession,
    district_id: Annotated[int, Path()],
    template_id: Annotated[int, Path()],
) -> GenerationTemplateResponse:
    template = await _load(GenerationTemplateRegistry(db), district_id, template_id)
    return GenerationTemplateResponse.model_validate(template)


@router.patch(
    "/generation-templates/{template_id}",
    response_model=GenerationTemplateResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def update_generation_template(
    db: DbSession,
    district_id: Annotated[int, Path()],
    template_id: Annotated[int, Path()],
    payload: GenerationTemplateUpdate,
) -> GenerationTemplateResponse:
    registry = GenerationTemplateRegistry(db)
    await _load(registry, district_id, template_id)
    if payload.timecard_template_id is not None:
        await _check_layout(db, district_id, payload.timecard_template_id)

    template = await registry.update(template_id, **payload.model_dump(exclude_unset=True))
    await db.commit()
    await db.refresh(template)
    return GenerationTemplateResponse.model_validate(template)


@router.delete(
    "/generation-templates/{template_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_generation_template(
    db: DbSession,
    district_id: Annotated[int, Path()],
    template_id: Annotated[int, Path()],
) -> None:
    registry = GenerationTemplateRegistry(db)
    await _load(registry, district_id, template_id)
    await registry.delete(template_id)
    await db.commit()
