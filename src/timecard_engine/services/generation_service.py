"""Generation orchestrator - drives one timecard generation run for one period."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from timecard_engine.calculators.types import MonthKey
from timecard_engine.clock import Clock, SystemClock
from timecard_engine.config import Settings, get_settings
from timecard_engine.database import acquire_generation_lock
from timecard_engine.services.employee_resolver import EligibleEmployeeResolver
from timecard_engine.services.idempotency import IdempotencyGuard
from timecard_engine.services.job_tracker import GenerationJobTracker
from timecard_engine.services.materializer import TimecardMaterializer
from timecard_engine.services.pay_calendar_service import PayCalendarService
from timecard_engine.services.state_machine import JobType
from timecard_engine.services.template_registry import GenerationTemplateRegistry

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of one generation run.

    Partial failure is reported here, never raised: callers inspect
    ``success``, ``error_count`` and ``errors``.
    """

    month: int
    year: int
    success: bool = False
    employee_count: int = 0
    timecards_generated: int = 0
    error_count: int = 0
    errors: list[str] = field(default_factory=list)
    employee_errors: dict[int, str] = field(default_factory=dict)
    processing_log: list[dict[str, Any]] = field(default_factory=list)
    job_id: int | None = None
    job_status: str | None = None

    @property
    def skipped_count(self) -> int:
        return sum(1 for entry in self.processing_log if entry.get("action") == "timecard_skipped")

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "year": self.year,
            "success": self.success,
            "employee_count": self.employee_count,
            "timecards_generated": self.timecards_generated,
            "skipped_count": self.skipped_count,
            "error_count": self.error_count,
            "errors": list(self.errors),
            "employee_errors": dict(self.employee_errors),
            "processing_log": list(self.processing_log),
            "job_id": self.job_id,
            "job_status": self.job_status,
        }


class GenerationOrchestrator:
    """Materializes one timecard per eligible employee for a period.

    Steps:
    1. Create and start the job record
    2. Resolve the active pay calendar (missing → job failed)
    3. Resolve eligible employees
    4. Resolve active auto-generation templates (none → job failed)
    5. Per employee: match template, skip existing, materialize
    6. Finalize the job as completed, even if some employees errored

    Re-running a period only fills gaps; it never duplicates a timecard.
    The caller owns the transaction.
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
        self.tracker = GenerationJobTracker(session, self.clock)
        self.calendars = PayCalendarService(session)
        self.resolver = EligibleEmployeeResolver(session)
        self.templates = GenerationTemplateRegistry(session)
        self.guard = IdempotencyGuard(session)
        self.materializer = TimecardMaterializer(session, self.settings.system_actor)

    async def generate(
        self,
        district_id: int,
        month: int,
        year: int,
        triggered_by: str,
        employee_types: list[str] | None = None,
        job_type: str = JobType.MONTHLY.value,
    ) -> GenerationResult:
        """Run generation for one district period.

        Raises ValueError for an invalid month; every other problem is
        reported on the result.
        """
        period = MonthKey(month, year)
        result = GenerationResult(month=period.month, year=period.year)

        logger.info(
            "Starting timecard generation for district %s, %s",
            district_id,
            period,
            extra={"district_id": district_id, "triggered_by": triggered_by},
        )

        job = await self.tracker.create_job(
            district_id, period.month, period.year, triggered_by, job_type=job_type
        )
        await self.tracker.start(job)
        result.job_id = job.id

        if self.settings.serialize_runs:
            await acquire_generation_lock(self.session, district_id, period.month, period.year)

        config = await self.calendars.get_active(district_id)
        if config is None:
            return await self._fail(
                job,
                result,
                f"No active pay calendar configuration for district {district_id}",
            )

        await self.tracker.attach_configuration(job, config.id)
        bounds = self.calendars.period_bounds(config, period.month, period.year)
        await self.tracker.append(
            job,
            "period_resolved",
            pay_calendar_config_id=config.id,
            period_start=bounds.period_start.isoformat(),
            period_end=bounds.period_end.isoformat(),
            from_pay_calendar=bounds.from_pay_calendar,
        )

        employees = await self.resolver.list_active(district_id, employee_types)
        result.employee_count = len(employees)
        await self.tracker.record_counts(job, employee_count=result.employee_count)
        await self.tracker.append(job, "employees_retrieved", count=len(employees))

        index = await self.templates.build_index(district_id, employee_types)
        if len(index) == 0:
            return await self._fail(
                job,
                result,
                f"No active generation templates for district {district_id}",
            )
        await self.tracker.append(job, "templates_resolved", employee_types=index.employee_types)

        for employee in employees:
            employee_id = employee.id
            template = index.match(employee.employee_type)
            if template is None:
                await self._record_employee_error(
                    job,
                    result,
                    employee_id,
                    f"no template for employee {employee_id} ({employee.employee_type})",
                )
                continue

            try:
                # Savepoint per employee: a failed statement must not poison the run
                async with self.session.begin_nested():
                    if await self.guard.exists(employee_id, period.month, period.year):
                        outcome = None
                    else:
                        outcome = await self.materializer.materialize(employee, template, bounds)
            except Exception as e:
                logger.warning(
                    "Timecard generation failed for employee %s",
                    employee_id,
                    exc_info=True,
                    extra={"job_id": job.id},
                )
                await self._record_employee_error(
                    job, result, employee_id, f"employee {employee_id}: {e}"
                )
                continue

            if outcome is None:
                await self.tracker.append(
                    job,
                    "timecard_skipped",
                    employee_id=employee_id,
                    reason="already_exists",
                )
                continue

            if not outcome.created:
                # Lost a race with a concurrent writer; the row exists
                await self.tracker.append(
                    job,
                    "timecard_skipped",
                    employee_id=employee_id,
                    reason="already_exists",
                    detected_at="insert",
                )
                continue

            result.timecards_generated += 1
            await self.tracker.append(
                job,
                "timecard_created",
                employee_id=employee_id,
                timecard_id=outcome.timecard_id,
                generation_template_id=template.id,
            )

        await self.tracker.complete(
            job,
            employee_count=result.employee_count,
            timecards_generated=result.timecards_generated,
            errors=result.errors,
        )

        result.success = True
        result.job_status = job.status
        result.processing_log = self.tracker.log_for(job).to_list()

        logger.info(
            "Completed timecard generation: %s timecards generated, %s errors",
            result.timecards_generated,
            result.error_count,
            extra={"job_id": job.id, "district_id": district_id},
        )
        return result

    async def _record_employee_error(
        self,
        job,
        result: GenerationResult,
        employee_id: int,
        message: str,
    ) -> None:
        result.errors.append(message)
        result.employee_errors[employee_id] = message
        result.error_count += 1
        await self.tracker.append(job, "employee_error", employee_id=employee_id, error=message)
        await self.tracker.record_counts(job, error_count=result.error_count)

    async def _fail(self, job, result: GenerationResult, reason: str) -> GenerationResult:
        await self.tracker.fail(job, reason, employee_count=result.employee_count)
        result.success = False
        result.errors.append(reason)
        result.error_count += 1
        result.job_status = job.status
        result.processing_log = self.tracker.log_for(job).to_list()
        return result

    async def record_aborted_run(
        self,
        district_id: int,
        month: int,
        year: int,
        triggered_by: str,
        error: Exception,
        job_type: str = JobType.MONTHLY.value,
    ) -> GenerationResult:
        """Record a run that raised as a failed job.

        The caller rolls back the aborted run first, which discards its job
        row; this writes a fresh failed job so the attempt stays in the
        history. The caller commits.
        """
        period = MonthKey(month, year)
        result = GenerationResult(month=period.month, year=period.year)
        job = await self.tracker.create_job(
            district_id, period.month, period.year, triggered_by, job_type=job_type
        )
        await self.tracker.start(job)
        result.job_id = job.id
        return await self._fail(job, result, f"{period}: {error}")
