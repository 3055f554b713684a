"""Seed a demo district into the database.

Usage:
    python -m scripts.seed_demo [--database-url URL] [--year 2025]

Creates the schema if needed, then adds one district with a monthly pay
calendar, a handful of employees, and generation templates for the
classified and certificated employee types. Useful for trying the API or
the ``timecard-engine`` CLI against a development database.
"""

from __future__ import annotations

import argparse
import asyncio
import calendar
import sys
from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from timecard_engine.config import settings
from timecard_engine.database import create_engine_for_url
from timecard_engine.models import Base, District, Employee
from timecard_engine.services.pay_calendar_service import PayCalendarService
from timecard_engine.services.template_registry import GenerationTemplateRegistry

DEMO_EMPLOYEES = [
    ("C-1001", "Maria", "Lopez", "classified"),
    ("C-1002", "Dev", "Patel", "classified"),
    ("C-1003", "Sam", "Okafor", "classified"),
    ("T-2001", "Alex", "Kim", "certificated"),
    ("T-2002", "Jordan", "Reyes", "certificated"),
    ("S-3001", "Riley", "Chen", "substitute"),
]


def monthly_pay_dates(year: int) -> list[dict[str, str]]:
    """Last-business-day pay dates covering each calendar month."""
    entries = []
    for month in range(1, 13):
        last = date(year, month, calendar.monthrange(year, month)[1])
        pay_date = last
        while pay_date.weekday() >= 5:
            pay_date -= timedelta(days=1)
        entries.append(
            {
                "date": pay_date.isoformat(),
                "period_start": date(year, month, 1).isoformat(),
                "period_end": last.isoformat(),
                "timecard_due_date": (last + timedelta(days=5)).isoformat(),
            }
        )
    return entries


async def seed(database_url: str, year: int) -> int:
    """Create schema and demo rows; returns the new district id."""
    engine = create_engine_for_url(database_url, echo=False)

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with AsyncSession(engine, expire_on_commit=False) as session:
            district = District(name="Demo Unified School District")
            session.add(district)
            await session.flush()

            for number, first, last, employee_type in DEMO_EMPLOYEES:
                session.add(
                    Employee(
                        district_id=district.id,
                        employee_number=number,
                        first_name=first,
                        last_name=last,
                        employee_type=employee_type,
                    )
                )

            calendars = PayCalendarService(session)
            config = await calendars.create(
                district.id,
                f"{year} monthly",
                monthly_pay_dates(year),
                school_year=f"{year}-{year + 1}",
                is_active=True,
            )

            registry = GenerationTemplateRegistry(session)
            for employee_type, defaults in (
                ("classified", {"department": "Operations", "hours_per_day": 8}),
                ("certificated", {"department": "Instruction", "hours_per_day": 7}),
            ):
                layout = await registry.create_timecard_template(
                    district.id,
                    f"{employee_type.title()} timecard",
                    employee_type,
                    [{"name": "hours", "type": "number"}, {"name": "notes", "type": "text"}],
                )
                await registry.create(
                    district.id,
                    f"{employee_type.title()} monthly",
                    employee_type,
                    layout.id,
                    default_field_values=defaults,
                )

            await session.commit()

        print(f"Seeded district {district.id} with pay calendar {config.id}")
        print(f"  Employees: {len(DEMO_EMPLOYEES)} (substitutes have no template)")
        print(f"  Try: timecard-engine generate --district-id {district.id} --month 3 --year {year}")
        return district.id
    finally:
        await engine.dispose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed a demo district")
    parser.add_argument(
        "--database-url",
        default=settings.database_url,
        help="Database URL (default: from DATABASE_URL)",
    )
    parser.add_argument(
        "--year",
        type=int,
        default=date.today().year,
        help="Pay calendar year (default: current year)",
    )
    args = parser.parse_args()

    asyncio.run(seed(args.database_url, args.year))
    return 0


if __name__ == "__main__":
    sys.exit(main())
