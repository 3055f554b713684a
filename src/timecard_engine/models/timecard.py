"""Timecard template, generation template, and monthly timecard models."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timecard_engine.models.base import Base, JsonType, TimestampMixin, UpdatedAtMixin

if TYPE_CHECKING:
    from timecard_engine.models.district import Employee


class TimecardTemplate(Base, TimestampMixin):
    """Layout a timecard is rendered and filled against."""

    __tablename__ = "timecard_template"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    district_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("district.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    employee_type: Mapped[str] = mapped_column(String, nullable=False)
    fields: Mapped[list[Any]] = mapped_column(JsonType, nullable=False, default=list)


class GenerationTemplate(Base, UpdatedAtMixin):
    """Per-employee-type blueprint for automated timecard generation."""

    __tablename__ = "timecard_generation_template"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    district_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("district.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    employee_type: Mapped[str] = mapped_column(String, nullable=False)
    timecard_template_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("timecard_template.id", ondelete="RESTRICT"),
        nullable=False,
    )
    default_field_values: Mapped[dict[str, Any]] = mapped_column(
        JsonType, nullable=False, default=dict
    )
    auto_generation_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    timecard_template: Mapped[TimecardTemplate] = relationship()


class MonthlyTimecard(Base, TimestampMixin):
    """One employee's timecard for one calendar month."""

    __tablename__ = "monthly_timecard"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employee.id", ondelete="CASCADE"),
        nullable=False,
    )
    template_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("timecard_template.id", ondelete="SET NULL"),
        nullable=True,
    )
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="draft")
    entries: Mapped[list[Any]] = mapped_column(JsonType, nullable=False, default=list)
    custom_fields_data: Mapped[dict[str, Any]] = mapped_column(
        JsonType, nullable=False, default=dict
    )
    submitted_by: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        # Central idempotency invariant: one timecard per employee per month
        UniqueConstraint("employee_id", "month", "year", name="monthly_timecard_employee_period_unique"),
        CheckConstraint("month BETWEEN 1 AND 12", name="monthly_timecard_month_check"),
        CheckConstraint("period_end >= period_start", name="monthly_timecard_dates_check"),
    )

    # Relationships
    employee: Mapped[Employee] = relationship()
