"""ORM models for the timecard generation engine."""

from timecard_engine.models.base import Base, JsonType, TimestampMixin, UpdatedAtMixin
from timecard_engine.models.calendar import PayCalendarConfig
from timecard_engine.models.district import District, Employee
from timecard_engine.models.job import GenerationJob
from timecard_engine.models.timecard import GenerationTemplate, MonthlyTimecard, TimecardTemplate

__all__ = [
    "Base",
    "JsonType",
    "TimestampMixin",
    "UpdatedAtMixin",
    "District",
    "Employee",
    "PayCalendarConfig",
    "TimecardTemplate",
    "GenerationTemplate",
    "MonthlyTimecard",
    "GenerationJob",
]
