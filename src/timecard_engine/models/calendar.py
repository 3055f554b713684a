"""Pay calendar configuration model."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from timecard_engine.models.base import Base, JsonType, UpdatedAtMixin


class PayCalendarConfig(Base, UpdatedAtMixin):
    """Versioned per-district schedule of pay dates.

    ``pay_dates`` is an ordered list of entries::

        {"date": "2025-01-31", "period_start": "2025-01-01",
         "period_end": "2025-01-31", "timecard_due_date": "2025-01-27"}
    """

    __tablename__ = "pay_calendar_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    district_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("district.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    school_year: Mapped[str | None] = mapped_column(String, nullable=True)
    pay_dates: Mapped[list[Any]] = mapped_column(JsonType, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        # At most one active configuration per district
        Index(
            "pay_calendar_one_active_per_district",
            "district_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )
