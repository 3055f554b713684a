"""Type definitions for pay calendar arithmetic."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from functools import total_ordering
from typing import Any, Iterator


@total_ordering
@dataclass(frozen=True)
class MonthKey:
    """A calendar month as an explicit (month, year) pair."""

    month: int
    year: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be between 1 and 12, got {self.month}")
        if self.year < 1:
            raise ValueError(f"year must be positive, got {self.year}")

    def __lt__(self, other: MonthKey) -> bool:
        if not isinstance(other, MonthKey):
            return NotImplemented
        return self.ordinal < other.ordinal

    @property
    def ordinal(self) -> int:
        """Months since year 0, for ordering and distance."""
        return self.year * 12 + (self.month - 1)

    def next(self) -> MonthKey:
        """The following month (December rolls over to January)."""
        if self.month == 12:
            return MonthKey(1, self.year + 1)
        return MonthKey(self.month + 1, self.year)

    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    def last_day(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    def __str__(self) -> str:
        return f"{self.month}/{self.year}"


def iter_months(start: MonthKey, end: MonthKey) -> Iterator[MonthKey]:
    """Yield every month from start to end inclusive.

    Raises ValueError if end precedes start.
    """
    if end < start:
        raise ValueError(f"range end {end} precedes start {start}")

    current = start
    while current <= end:
        yield current
        current = current.next()


def parse_iso_date(value: Any) -> date | None:
    """Parse an ISO date string (or pass a date through); blanks become None."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass(frozen=True)
class PayDateEntry:
    """One pay date within a pay calendar configuration."""

    pay_date: date
    period_start: date | None = None
    period_end: date | None = None
    timecard_due_date: date | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> PayDateEntry:
        pay_date = parse_iso_date(raw.get("date"))
        if pay_date is None:
            raise ValueError("pay date entry is missing 'date'")
        return cls(
            pay_date=pay_date,
            period_start=parse_iso_date(raw.get("period_start")),
            period_end=parse_iso_date(raw.get("period_end")),
            timecard_due_date=parse_iso_date(raw.get("timecard_due_date")),
        )

    def to_dict(self) -> dict[str, str | None]:
        return {
            "date": self.pay_date.isoformat(),
            "period_start": self.period_start.isoformat() if self.period_start else None,
            "period_end": self.period_end.isoformat() if self.period_end else None,
            "timecard_due_date": (
                self.timecard_due_date.isoformat() if self.timecard_due_date else None
            ),
        }


@dataclass(frozen=True)
class PeriodDescriptor:
    """A pay period derived from a configuration for schedule listings."""

    month: int
    year: int
    pay_date: date
    period_start: date | None
    period_end: date | None
    timecard_due_date: date | None


@dataclass(frozen=True)
class PeriodBounds:
    """Concrete boundaries a monthly timecard covers."""

    month: int
    year: int
    period_start: date
    period_end: date
    timecard_due_date: date | None = None
    from_pay_calendar: bool = False
