"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from timecard_engine.clock import Clock, SystemClock
from timecard_engine.database import async_session_factory
from timecard_engine.services.automation_service import TimecardAutomationService


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_clock() -> Clock:
    """Time source for services (overridden in tests)."""
    return SystemClock()


async def get_actor(x_actor: Annotated[str | None, Header()] = None) -> str | None:
    """Optional acting user from the X-Actor header."""
    return x_actor


async def get_automation_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> TimecardAutomationService:
    return TimecardAutomationService(db, clock=clock)


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Actor = Annotated[str | None, Depends(get_actor)]
AutomationService = Annotated[TimecardAutomationService, Depends(get_automation_service)]
