"""Generation job tracking: lifecycle, processing log, and history."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timecard_engine.clock import Clock, SystemClock
from timecard_engine.models import GenerationJob
from timecard_engine.services.state_machine import JobStateMachine, JobStatus, JobType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogEntry:
    """A single timestamped processing-log event."""

    timestamp: datetime
    action: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp.isoformat(), "action": self.action, **self.details}


class ProcessingLog:
    """Append-only, chronologically ordered log of one generation run."""

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []

    def append(self, entry: LogEntry) -> None:
        self._entries.append(entry)

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._entries)

    def count(self, action: str) -> int:
        return sum(1 for entry in self._entries if entry.action == action)

    def to_list(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)


class GenerationJobTracker:
    """Owns the generation job row for a run.

    Operations:
    - create_job / start: pending → running
    - append: add to the in-memory processing log
    - record_counts: progress counters
    - complete / fail: the only calls that set the terminal status and completed_at
    - list_jobs / get_job: audit history queries

    The log is written to the row once, by complete or fail, together with
    the final counts. Status and counter changes are flushed as they happen.
    """

    def __init__(self, session: AsyncSession, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()
        self._logs: dict[int, ProcessingLog] = {}

    async def create_job(
        self,
        district_id: int,
        month: int,
        year: int,
        triggered_by: str,
        job_type: str = JobType.MONTHLY.value,
    ) -> GenerationJob:
        """Insert a pending job row."""
        now = self.clock.now()
        job = GenerationJob(
            district_id=district_id,
            job_type=job_type,
            target_month=month,
            target_year=year,
            status=JobStatus.PENDING.value,
            triggered_by=triggered_by,
            employee_count=0,
            timecards_generated=0,
            error_count=0,
            processing_log=[],
            created_at=now,
            updated_at=now,
        )
        self.session.add(job)
        await self.session.flush()
        self._logs[job.id] = ProcessingLog()
        return job

    async def start(self, job: GenerationJob) -> GenerationJob:
        """Move a pending job to running."""
        self._transition(job, JobStatus.RUNNING.value)
        job.started_at = self.clock.now()
        job.updated_at = job.started_at
        await self.session.flush()
        await self.append(job, "job_created", job_id=job.id)
        logger.info(
            "Generation job %s started for district %s, %s/%s",
            job.id,
            job.district_id,
            job.target_month,
            job.target_year,
            extra={"job_id": job.id, "triggered_by": job.triggered_by},
        )
        return job

    def log_for(self, job: GenerationJob) -> ProcessingLog:
        """The in-memory processing log for a job tracked by this instance."""
        return self._logs.setdefault(job.id, ProcessingLog())

    async def append(self, job: GenerationJob, action: str, **details: Any) -> LogEntry:
        """Append a processing-log entry; no database write."""
        entry = LogEntry(timestamp=self.clock.now(), action=action, details=details)
        self.log_for(job).append(entry)
        return entry

    async def attach_configuration(self, job: GenerationJob, config_id: int) -> None:
        job.pay_calendar_config_id = config_id
        job.updated_at = self.clock.now()
        await self.session.flush()

    async def record_counts(
        self,
        job: GenerationJob,
        *,
        employee_count: int | None = None,
        timecards_generated: int | None = None,
        error_count: int | None = None,
    ) -> None:
        """Update progress counters on a running job."""
        if employee_count is not None:
            job.employee_count = employee_count
        if timecards_generated is not None:
            job.timecards_generated = timecards_generated
        if error_count is not None:
            job.error_count = error_count
        job.updated_at = self.clock.now()
        await self.session.flush()

    async def complete(
        self,
        job: GenerationJob,
        *,
        employee_count: int,
        timecards_generated: int,
        errors: list[str],
    ) -> GenerationJob:
        """Finalize a job as completed, even when some employees errored."""
        JobStateMachine.validate_transition(job.status, JobStatus.COMPLETED.value)
        await self.append(
            job,
            "job_completed",
            timecards_generated=timecards_generated,
            error_count=len(errors),
        )
        return await self._finalize(
            job,
            JobStatus.COMPLETED.value,
            employee_count=employee_count,
            timecards_generated=timecards_generated,
            errors=errors,
        )

    async def fail(
        self,
        job: GenerationJob,
        reason: str,
        *,
        employee_count: int = 0,
    ) -> GenerationJob:
        """Finalize a job as failed because a run-level precondition was not met."""
        JobStateMachine.validate_transition(job.status, JobStatus.FAILED.value)
        await self.append(job, "job_failed", error=reason)
        logger.warning(
            "Generation job %s failed: %s",
            job.id,
            reason,
            extra={"job_id": job.id, "district_id": job.district_id},
        )
        return await self._finalize(
            job,
            JobStatus.FAILED.value,
            employee_count=employee_count,
            timecards_generated=0,
            errors=[reason],
        )

    async def _finalize(
        self,
        job: GenerationJob,
        status: str,
        *,
        employee_count: int,
        timecards_generated: int,
        errors: list[str],
    ) -> GenerationJob:
        self._transition(job, status)
        now = self.clock.now()
        job.employee_count = employee_count
        job.timecards_generated = timecards_generated
        job.error_count = len(errors)
        job.error_details = "\n".join(errors) if errors else None
        job.processing_log = self.log_for(job).to_list()
        job.completed_at = now
        job.updated_at = now
        await self.session.flush()
        return job

    def _transition(self, job: GenerationJob, to_status: str) -> None:
        JobStateMachine.validate_transition(job.status, to_status)
        job.status = to_status

    async def get_job(self, job_id: int) -> GenerationJob | None:
        return await self.session.get(GenerationJob, job_id)

    async def list_jobs(self, district_id: int, limit: int = 50) -> list[GenerationJob]:
        """Most recent jobs for a district, newest first."""
        result = await self.session.execute(
            select(GenerationJob)
            .where(GenerationJob.district_id == district_id)
            .order_by(GenerationJob.created_at.desc(), GenerationJob.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
