"""Eligible employee resolution and existing-timecard preview."""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from timecard_engine.models import Employee, MonthlyTimecard


@dataclass
class ExistingTimecardsPreview:
    """What a generation run for a period would find already in place."""

    exists: bool
    count: int
    employee_types: list[str] = field(default_factory=list)


class EligibleEmployeeResolver:
    """Read-only queries over a district's employee directory."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_active(
        self,
        district_id: int,
        employee_types: list[str] | None = None,
    ) -> list[Employee]:
        """Active employees of the district, optionally limited to some types."""
        query = select(Employee).where(
            Employee.district_id == district_id,
            Employee.status == "active",
        )
        if employee_types:
            query = query.where(Employee.employee_type.in_(employee_types))

        result = await self.session.execute(query.order_by(Employee.id))
        return list(result.scalars().all())

    async def preview_existing(
        self,
        district_id: int,
        month: int,
        year: int,
        employee_type: str | None = None,
    ) -> ExistingTimecardsPreview:
        """Report timecards already present for a period before a run."""
        count_query = (
            select(func.count(MonthlyTimecard.id))
            .join(Employee, Employee.id == MonthlyTimecard.employee_id)
            .where(
                MonthlyTimecard.month == month,
                MonthlyTimecard.year == year,
                Employee.district_id == district_id,
            )
        )
        if employee_type:
            count_query = count_query.where(Employee.employee_type == employee_type)
        count = await self.session.scalar(count_query) or 0

        types_result = await self.session.execute(
            select(Employee.employee_type)
            .where(Employee.district_id == district_id)
            .distinct()
            .order_by(Employee.employee_type)
        )
        employee_types = [row[0] for row in types_result.all()]

        return ExistingTimecardsPreview(
            exists=count > 0,
            count=count,
            employee_types=employee_types,
        )
