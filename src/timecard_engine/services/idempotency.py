"""Existence check for (employee, month, year) timecards."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timecard_engine.models import MonthlyTimecard


class IdempotencyGuard:
    """Pre-check that a timecard does not already exist.

    The unique constraint on (employee_id, month, year) is the authoritative
    guard; this check only avoids attempting inserts that would conflict.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def exists(self, employee_id: int, month: int, year: int) -> bool:
        result = await self.session.execute(
            select(MonthlyTimecard.id)
            .where(
                MonthlyTimecard.employee_id == employee_id,
                MonthlyTimecard.month == month,
                MonthlyTimecard.year == year,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None
