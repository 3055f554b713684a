"""Pay calendar arithmetic."""

from timecard_engine.calculators.pay_schedule import PayScheduleCalculator
from timecard_engine.calculators.types import (
    MonthKey,
    PayDateEntry,
    PeriodBounds,
    PeriodDescriptor,
    iter_months,
)

__all__ = [
    "PayScheduleCalculator",
    "MonthKey",
    "PayDateEntry",
    "PeriodBounds",
    "PeriodDescriptor",
    "iter_months",
]
