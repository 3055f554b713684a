"""Timecard generation job (audit record) model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from timecard_engine.models.base import Base, JsonType, UpdatedAtMixin


class GenerationJob(Base, UpdatedAtMixin):
    """One audited execution of timecard generation for a district period."""

    __tablename__ = "timecard_generation_job"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    district_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("district.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Unknown until the active configuration is resolved
    pay_calendar_config_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("pay_calendar_config.id", ondelete="SET NULL"),
        nullable=True,
    )
    job_type: Mapped[str] = mapped_column(String, nullable=False, default="monthly_timecards")
    target_month: Mapped[int] = mapped_column(Integer, nullable=False)
    target_year: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    triggered_by: Mapped[str] = mapped_column(String, nullable=False)
    employee_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    timecards_generated: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    processing_log: Mapped[list[Any]] = mapped_column(JsonType, nullable=False, default=list)
    error_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'running', 'completed', 'failed')",
            name="timecard_generation_job_status_check",
        ),
        CheckConstraint(
            "job_type IN ('monthly_timecards', 'bulk_monthly_timecards')",
            name="timecard_generation_job_type_check",
        ),
        CheckConstraint(
            "target_month BETWEEN 1 AND 12",
            name="timecard_generation_job_month_check",
        ),
        CheckConstraint(
            "employee_count >= 0 AND timecards_generated >= 0 AND error_count >= 0",
            name="timecard_generation_job_counts_check",
        ),
    )
