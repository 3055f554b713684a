"""Pytest fixtures for timecard engine tests."""

from __future__ import annotations

import itertools
from datetime import date, timedelta
from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from timecard_engine.clock import DeterministicClock
from timecard_engine.config import Settings
from timecard_engine.database import create_engine_for_url
from timecard_engine.models import (
    Base,
    District,
    Employee,
    GenerationTemplate,
    PayCalendarConfig,
    TimecardTemplate,
)

# Use in-memory SQLite for tests (with async support)
# Advisory locks and JSONB are PostgreSQL-only and are skipped on SQLite
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

_employee_numbers = itertools.count(1)


def monthly_pay_dates(year: int, pay_day: int = 25) -> list[dict[str, Any]]:
    """Twelve pay-date entries, one per month of ``year``, covering whole months."""
    entries = []
    for month in range(1, 13):
        start = date(year, month, 1)
        next_month = date(year + (month == 12), month % 12 + 1, 1)
        end = next_month - timedelta(days=1)
        entries.append(
            {
                "date": date(year, month, pay_day).isoformat(),
                "period_start": start.isoformat(),
                "period_end": end.isoformat(),
                "timecard_due_date": (end + timedelta(days=3)).isoformat(),
            }
        )
    return entries


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url=TEST_DATABASE_URL,
        engine_version="test",
        host="127.0.0.1",
        port=8000,
        debug=False,
        log_level="DEBUG",
        system_actor="system_automated",
        job_history_limit=50,
        serialize_runs=True,
    )


@pytest_asyncio.fixture
async def engine():
    """Create a fresh test database per test."""
    engine = create_engine_for_url(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


# ============================================================================
# Seed helpers
# ============================================================================


async def add_employee(
    session: AsyncSession,
    district_id: int,
    employee_type: str,
    *,
    employee_id: int | None = None,
    status: str = "active",
    number: str | None = None,
) -> Employee:
    employee = Employee(
        id=employee_id,
        district_id=district_id,
        employee_number=number or f"E-{next(_employee_numbers)}",
        first_name="Test",
        last_name=employee_type.title(),
        employee_type=employee_type,
        status=status,
    )
    session.add(employee)
    await session.flush()
    return employee


async def add_generation_template(
    session: AsyncSession,
    district_id: int,
    employee_type: str,
    *,
    timecard_template_id: int | None = None,
    defaults: dict[str, Any] | None = None,
    auto_generation_enabled: bool = True,
    is_active: bool = True,
) -> GenerationTemplate:
    if timecard_template_id is None:
        layout = TimecardTemplate(
            district_id=district_id,
            name=f"{employee_type} layout",
            employee_type=employee_type,
            fields=[{"name": "hours", "type": "number"}],
        )
        session.add(layout)
        await session.flush()
        timecard_template_id = layout.id

    template = GenerationTemplate(
        district_id=district_id,
        name=f"{employee_type} monthly",
        employee_type=employee_type,
        timecard_template_id=timecard_template_id,
        default_field_values=defaults or {},
        auto_generation_enabled=auto_generation_enabled,
        is_active=is_active,
    )
    session.add(template)
    await session.flush()
    return template


async def add_pay_calendar(
    session: AsyncSession,
    district_id: int,
    *,
    year: int = 2025,
    is_active: bool = True,
    pay_dates: list[dict[str, Any]] | None = None,
) -> PayCalendarConfig:
    config = PayCalendarConfig(
        district_id=district_id,
        name=f"{year} monthly",
        school_year=f"{year}-{year + 1}",
        pay_dates=pay_dates if pay_dates is not None else monthly_pay_dates(year),
        is_active=is_active,
    )
    session.add(config)
    await session.flush()
    return config


@pytest_asyncio.fixture
async def district(session: AsyncSession) -> District:
    district = District(id=1, name="Lincoln Unified")
    session.add(district)
    await session.flush()
    return district


@pytest_asyncio.fixture
async def other_district(session: AsyncSession) -> District:
    district = District(id=2, name="Jefferson Elementary")
    session.add(district)
    await session.flush()
    return district


@pytest_asyncio.fixture
async def seeded_district(session: AsyncSession, district: District) -> District:
    """District with an active 2024/2025 calendar, three classified and one
    certificated employee, and a classified template only."""
    pay_dates = monthly_pay_dates(2024) + monthly_pay_dates(2025)
    await add_pay_calendar(session, district.id, pay_dates=pay_dates)
    for n in range(1, 4):
        await add_employee(session, district.id, "classified", employee_id=n, number=f"C-{n}")
    await add_employee(session, district.id, "certificated", employee_id=4, number="T-4")
    await add_generation_template(
        session, district.id, "classified", defaults={"department": "Facilities"}
    )
    await session.commit()
    return district
