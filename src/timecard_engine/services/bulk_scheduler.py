"""Bulk generation across a month range."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from timecard_engine.calculators.types import MonthKey, iter_months
from timecard_engine.services.generation_service import GenerationOrchestrator, GenerationResult
from timecard_engine.services.state_machine import JobType

logger = logging.getLogger(__name__)


class CancellationToken:
    """Cooperative stop signal, checked between periods only."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class BulkScheduler:
    """Runs the single-period orchestrator once per month in a range.

    Each period is its own unit of work: it is committed as soon as its run
    finishes, so a later period's failure never undoes an earlier one. A
    period that raises is rolled back and recorded as a failed job.
    """

    def __init__(
        self,
        session: AsyncSession,
        orchestrator: GenerationOrchestrator,
    ):
        self.session = session
        self.orchestrator = orchestrator

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
        """One result per month from start to end inclusive, in order.

        Raises ValueError if the range is reversed or a month is invalid.
        """
        periods = list(iter_months(MonthKey(start_month, start_year), MonthKey(end_month, end_year)))
        results: list[GenerationResult] = []

        for period in periods:
            if cancellation is not None and cancellation.cancelled:
                logger.info(
                    "Bulk generation for district %s cancelled before %s; %s of %s periods run",
                    district_id,
                    period,
                    len(results),
                    len(periods),
                )
                break

            try:
                result = await self.orchestrator.generate(
                    district_id,
                    period.month,
                    period.year,
                    triggered_by,
                    employee_types=employee_types,
                    job_type=JobType.BULK.value,
                )
            except Exception as e:
                # The period's writes are discarded; a failed job records the attempt
                logger.exception(
                    "Bulk generation for district %s failed at %s", district_id, period
                )
                await self.session.rollback()
                result = await self.orchestrator.record_aborted_run(
                    district_id,
                    period.month,
                    period.year,
                    triggered_by,
                    e,
                    job_type=JobType.BULK.value,
                )

            results.append(result)
            await self.session.commit()

        return results
