"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============================================================================
# Pay calendar schemas
# ============================================================================


class PayDateEntrySchema(BaseModel):
    """One pay date with its period boundaries."""

    model_config = ConfigDict(populate_by_name=True)

    pay_date: date = Field(alias="date")
    period_start: date | None = None
    period_end: date | None = None
    timecard_due_date: date | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class PayCalendarCreate(BaseModel):
    """Schema for creating a pay calendar configuration."""

    name: str
    school_year: str | None = None
    pay_dates: list[PayDateEntrySchema] = Field(default_factory=list)
    is_active: bool = False


class PayCalendarUpdate(BaseModel):
    """Schema for partially updating a pay calendar configuration."""

    name: str | None = None
    school_year: str | None = None
    pay_dates: list[PayDateEntrySchema] | None = None
    is_active: bool | None = None


class PayCalendarResponse(BaseModel):
    """Schema for pay calendar configuration response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    district_id: int
    name: str
    school_year: str | None = None
    pay_dates: list[dict[str, Any]]
    is_active: bool
    created_at: datetime
    updated_at: datetime


class PeriodDescriptorResponse(BaseModel):
    """A pay period derived from a configuration."""

    model_config = ConfigDict(from_attributes=True)

    month: int
    year: int
    pay_date: date
    period_start: date | None = None
    period_end: date | None = None
    timecard_due_date: date | None = None


class ScheduleResponse(BaseModel):
    """Schema for a configuration's yearly schedule."""

    config_id: int
    year: int
    periods: list[PeriodDescriptorResponse]


# ============================================================================
# Generation template schemas
# ============================================================================


class TimecardTemplateCreate(BaseModel):
    """Schema for creating a timecard layout."""

    name: str
    employee_type: str
    fields: list[dict[str, Any]] = Field(default_factory=list)


class TimecardTemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    district_id: int
    name: str
    employee_type: str
    fields: list[dict[str, Any]]


class GenerationTemplateCreate(BaseModel):
    """Schema for creating a generation template."""

    name: str
    employee_type: str
    timecard_template_id: int
    default_field_values: dict[str, Any] = Field(default_factory=dict)
    auto_generation_enabled: bool = True
    is_active: bool = True


class GenerationTemplateUpdate(BaseModel):
    """Schema for partially updating a generation template."""

    name: str | None = None
    employee_type: str | None = None
    timecard_template_id: int | None = None
    default_field_values: dict[str, Any] | None = None
    auto_generation_enabled: bool | None = None
    is_active: bool | None = None


class GenerationTemplateResponse(BaseModel):
    """Schema for generation template response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    district_id: int
    name: str
    employee_type: str
    timecard_template_id: int
    default_field_values: dict[str, Any]
    auto_generation_enabled: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Generation schemas
# ============================================================================


class GenerateRequest(BaseModel):
    """Schema for a single-period generation request."""

    month: int = Field(ge=1, le=12)
    year: int = Field(ge=1900, le=2999)
    triggered_by: str
    employee_types: list[str] | None = None


class BulkGenerateRequest(BaseModel):
    """Schema for a month-range generation request."""

    start_month: int = Field(ge=1, le=12)
    start_year: int = Field(ge=1900, le=2999)
    end_month: int = Field(ge=1, le=12)
    end_year: int = Field(ge=1900, le=2999)
    triggered_by: str
    employee_types: list[str] | None = None

    @model_validator(mode="after")
    def check_range_order(self) -> "BulkGenerateRequest":
        if (self.end_year, self.end_month) < (self.start_year, self.start_month):
            raise ValueError("end period precedes start period")
        return self


class GenerationResultResponse(BaseModel):
    """Schema for the outcome of one generation run."""

    month: int
    year: int
    success: bool
    employee_count: int
    timecards_generated: int
    skipped_count: int
    error_count: int
    errors: list[str]
    employee_errors: dict[int, str] = Field(default_factory=dict)
    processing_log: list[dict[str, Any]]
    job_id: int | None = None
    job_status: str | None = None


class BulkGenerateResponse(BaseModel):
    """Schema for a bulk generation outcome."""

    results: list[GenerationResultResponse]
    total_generated: int
    total_errors: int


class PreviewResponse(BaseModel):
    """Schema for existing-timecard preview."""

    exists: bool
    count: int
    employee_types: list[str]


class GenerationJobResponse(BaseModel):
    """Schema for generation job (audit record) response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    district_id: int
    pay_calendar_config_id: int | None = None
    job_type: str
    target_month: int
    target_year: int
    status: str
    triggered_by: str
    employee_count: int
    timecards_generated: int
    error_count: int
    processing_log: list[dict[str, Any]]
    error_details: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime


class GenerationJobListResponse(BaseModel):
    """Schema for listing generation jobs."""

    items: list[GenerationJobResponse]
    total: int


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    code: str | None = None
