"""Timecard automation service - the engine's external operations."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from timecard_engine.calculators.types import MonthKey, PeriodDescriptor
from timecard_engine.clock import Clock, SystemClock
from timecard_engine.config import Settings, get_settings
from timecard_engine.models import GenerationJob
from timecard_engine.services.bulk_scheduler import BulkScheduler, CancellationToken
from timecard_engine.services.employee_resolver import (
    EligibleEmployeeResolver,
    ExistingTimecardsPreview,
)
from timecard_engine.services.generation_service import GenerationOrchestrator, GenerationResult
from timecard_engine.services.job_tracker import GenerationJobTracker
from timecard_engine.services.pay_calendar_service import PayCalendarService

logger = logging.getLogger(__name__)


class TimecardAutomationService:
    """Entry point used by administrative tooling and scheduled triggers.

    Operations:
    - generate_for_period: one district period
    - bulk_generate: every month in a range, one result per month
    - preview_existing: what a run would find already in place
    - list_jobs: generation audit history, newest first
    - compute_schedule: pay periods of a configuration for a year
    """

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock | None = None,
        settings: Settings | None = None,
    ):
        self.session = session
        self.clock = clock or SystemClock()
        self.settings = settings or get_settings()
        self.orchestrator = GenerationOrchestrator(session, self.clock, self.settings)
        self.bulk_scheduler = BulkScheduler(session, self.orchestrator)
        self.tracker = GenerationJobTracker(session, self.clock)
        self.resolver = EligibleEmployeeResolver(session)
        self.calendars = PayCalendarService(session)

    async def generate_for_period(
        self,
        district_id: int,
        month: int,
        year: int,
        triggered_by: str,
        employee_types: list[str] | None = None,
    ) -> GenerationResult:
        """Run one period; a run that raises is rolled back and recorded as failed."""
        MonthKey(month, year)  # invalid months raise before any job exists
        try:
            return await self.orchestrator.generate(
                district_id, month, year, triggered_by, employee_types=employee_types
            )
        except Exception as e:
            logger.exception(
                "Timecard generation for district %s aborted at %s/%s", district_id, month, year
            )
            await self.session.rollback()
            result = await self.orchestrator.record_aborted_run(
                district_id, month, year, triggered_by, e
            )
            await self.session.commit()
            return result

    async def bulk_generate(
        self,
        district_id: int,
        start_month: int,
        start_year: int,
        end_month: int,
        end_year: int,
        triggered_by: str,
        employee_types: list[str] | None = None,
        cancellation: CancellationToken | None = None,
    ) -> list[GenerationResult]:
        return await self.bulk_scheduler.bulk_generate(
            district_id,
            start_month,
            start_year,
            end_month,
            end_year,
            triggered_by,
            employee_types=employee_types,
            cancellation=cancellation,
        )

    async def preview_existing(
        self,
        district_id: int,
        month: int,
        year: int,
        employee_type: str | None = None,
    ) -> ExistingTimecardsPreview:
        return await self.resolver.preview_existing(district_id, month, year, employee_type)

    async def list_jobs(self, district_id: int, limit: int | None = None) -> list[GenerationJob]:
        return await self.tracker.list_jobs(
            district_id, limit if limit is not None else self.settings.job_history_limit
        )

    async def compute_schedule(self, config_id: int, year: int) -> list[PeriodDescriptor]:
        return await self.calendars.compute_schedule(config_id, year)
