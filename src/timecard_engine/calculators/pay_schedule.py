"""Pay schedule derivation from a pay calendar configuration.

Pure transformations only; loading a configuration is the pay calendar
service's job.
"""

from __future__ import annotations

from typing import Any, Iterable

from timecard_engine.calculators.types import (
    MonthKey,
    PayDateEntry,
    PeriodBounds,
    PeriodDescriptor,
)


class PayScheduleCalculator:
    """Derives period descriptors and timecard boundaries from pay dates."""

    @staticmethod
    def parse_entries(raw_entries: Iterable[dict[str, Any]]) -> list[PayDateEntry]:
        """Parse stored pay-date payloads, sorted by pay date."""
        entries = [PayDateEntry.from_dict(raw) for raw in raw_entries or []]
        return sorted(entries, key=lambda e: e.pay_date)

    @staticmethod
    def validate_entries(entries: list[PayDateEntry]) -> list[str]:
        """Check entries are chronologically non-overlapping.

        Returns list of error messages (empty if valid).
        """
        errors: list[str] = []
        ordered = sorted(entries, key=lambda e: e.pay_date)

        for entry in ordered:
            if entry.period_start and entry.period_end and entry.period_end < entry.period_start:
                errors.append(
                    f"Pay date {entry.pay_date.isoformat()}: period ends "
                    f"{entry.period_end.isoformat()} before it starts "
                    f"{entry.period_start.isoformat()}"
                )

        for previous, current in zip(ordered, ordered[1:]):
            if previous.pay_date == current.pay_date:
                errors.append(f"Duplicate pay date {current.pay_date.isoformat()}")
                continue
            if (
                previous.period_end
                and current.period_start
                and current.period_start <= previous.period_end
            ):
                errors.append(
                    f"Pay date {current.pay_date.isoformat()}: period starting "
                    f"{current.period_start.isoformat()} overlaps the period ending "
                    f"{previous.period_end.isoformat()}"
                )

        return errors

    @classmethod
    def schedule_for_year(
        cls, raw_entries: Iterable[dict[str, Any]], year: int
    ) -> list[PeriodDescriptor]:
        """Period descriptors whose pay date falls in ``year``, ascending."""
        return [
            PeriodDescriptor(
                month=entry.pay_date.month,
                year=entry.pay_date.year,
                pay_date=entry.pay_date,
                period_start=entry.period_start,
                period_end=entry.period_end,
                timecard_due_date=entry.timecard_due_date,
            )
            for entry in cls.parse_entries(raw_entries)
            if entry.pay_date.year == year
        ]

    @classmethod
    def period_bounds(
        cls, raw_entries: Iterable[dict[str, Any]], month: int, year: int
    ) -> PeriodBounds:
        """Boundaries for the monthly timecard of (month, year).

        Uses the pay dates falling in that month (earliest start, latest end);
        any boundary the calendar does not supply comes from the calendar month.
        """
        key = MonthKey(month, year)
        matching = [
            entry
            for entry in cls.parse_entries(raw_entries)
            if (entry.pay_date.month, entry.pay_date.year) == (month, year)
        ]

        starts = [e.period_start for e in matching if e.period_start]
        ends = [e.period_end for e in matching if e.period_end]
        dues = [e.timecard_due_date for e in matching if e.timecard_due_date]

        period_start = min(starts) if starts else key.first_day()
        period_end = max(ends) if ends else key.last_day()

        if period_end < period_start:
            return PeriodBounds(
                month=month,
                year=year,
                period_start=key.first_day(),
                period_end=key.last_day(),
            )

        return PeriodBounds(
            month=month,
            year=year,
            period_start=period_start,
            period_end=period_end,
            timecard_due_date=max(dues) if dues else None,
            from_pay_calendar=bool(starts or ends),
        )
