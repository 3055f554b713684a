"""Timecard materialization with storage-level duplicate protection."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any

from sqlalchemy import insert as generic_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timecard_engine.calculators.types import PeriodBounds
from timecard_engine.config import get_settings
from timecard_engine.models import Employee, GenerationTemplate, MonthlyTimecard
from timecard_engine.services.idempotency import IdempotencyGuard

_UNIQUE_COLUMNS = ["employee_id", "month", "year"]


@dataclass(frozen=True)
class MaterializationOutcome:
    """Result of one materialization attempt."""

    created: bool
    timecard_id: int | None = None


class TimecardMaterializer:
    """Builds and inserts draft timecards.

    Key invariants:
    1. One timecard per (employee_id, month, year), enforced by unique constraint
    2. A conflicting insert is skipped (ON CONFLICT DO NOTHING), never duplicated
    3. Each insert runs in its own savepoint; a constraint error is rechecked
       there before it is treated as a real failure
    """

    def __init__(self, session: AsyncSession, submitted_by: str | None = None):
        self.session = session
        self.submitted_by = submitted_by or get_settings().system_actor
        self.guard = IdempotencyGuard(session)

    def build_values(
        self,
        employee: Employee,
        template: GenerationTemplate,
        bounds: PeriodBounds,
    ) -> dict[str, Any]:
        """Column values for a new draft timecard."""
        return {
            "employee_id": employee.id,
            "template_id": template.timecard_template_id,
            "month": bounds.month,
            "year": bounds.year,
            "period_start": bounds.period_start,
            "period_end": bounds.period_end,
            "status": "draft",
            "entries": [],
            "custom_fields_data": copy.deepcopy(template.default_field_values or {}),
            "submitted_by": self.submitted_by,
        }

    async def materialize(
        self,
        employee: Employee,
        template: GenerationTemplate,
        bounds: PeriodBounds,
    ) -> MaterializationOutcome:
        """Insert a draft timecard unless one already exists.

        Returns created=False if another writer got there first.
        """
        values = self.build_values(employee, template, bounds)

        try:
            async with self.session.begin_nested():
                result = await self.session.execute(self._insert_statement(values))
                # ON CONFLICT DO NOTHING returns no row when the timecard exists
                timecard_id = result.scalar_one_or_none()
        except IntegrityError:
            # Backends without ON CONFLICT surface the race as a constraint error
            if await self.guard.exists(employee.id, bounds.month, bounds.year):
                return MaterializationOutcome(created=False)
            raise

        if timecard_id is None:
            return MaterializationOutcome(created=False)
        return MaterializationOutcome(created=True, timecard_id=timecard_id)

    def _insert_statement(self, values: dict[str, Any]):
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(MonthlyTimecard).values(**values).on_conflict_do_nothing(
                index_elements=_UNIQUE_COLUMNS
            )
        elif dialect == "sqlite":
            stmt = sqlite_insert(MonthlyTimecard).values(**values).on_conflict_do_nothing(
                index_elements=_UNIQUE_COLUMNS
            )
        else:
            stmt = generic_insert(MonthlyTimecard).values(**values)
        return stmt.returning(MonthlyTimecard.id)
