"""Integration test fixtures: the HTTP API over an in-memory database."""

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from timecard_engine.api.app import create_app
from timecard_engine.api.dependencies import get_clock, get_db_session
from timecard_engine.models import District

from tests.conftest import (
    add_employee,
    add_generation_template,
    add_pay_calendar,
    monthly_pay_dates,
)

DISTRICT_ID = 1
OTHER_DISTRICT_ID = 2


@pytest_asyncio.fixture
async def client(session_factory, clock) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    app = create_app()

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_clock] = lambda: clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def districts(session_factory) -> None:
    """Two empty districts."""
    async with session_factory() as session:
        session.add_all(
            [
                District(id=DISTRICT_ID, name="Lincoln Unified"),
                District(id=OTHER_DISTRICT_ID, name="Jefferson Elementary"),
            ]
        )
        await session.commit()


@pytest_asyncio.fixture
async def seeded_api_district(session_factory, districts) -> int:
    """District 1 with an active 2024/2025 calendar, three classified and one
    certificated employee, and a classified template."""
    async with session_factory() as session:
        await add_pay_calendar(
            session,
            DISTRICT_ID,
            pay_dates=monthly_pay_dates(2024) + monthly_pay_dates(2025),
        )
        for n in range(1, 4):
            await add_employee(session, DISTRICT_ID, "classified", employee_id=n, number=f"C-{n}")
        await add_employee(session, DISTRICT_ID, "certificated", employee_id=4, number="T-4")
        await add_generation_template(session, DISTRICT_ID, "classified")
        await session.commit()
    return DISTRICT_ID
