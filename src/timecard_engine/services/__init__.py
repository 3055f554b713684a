"""Timecard generation services."""

from timecard_engine.services.state_machine import (
    InvalidTransitionError,
    JobStateMachine,
    JobStatus,
    JobType,
)
from timecard_engine.services.job_tracker import GenerationJobTracker, LogEntry, ProcessingLog
from timecard_engine.services.pay_calendar_service import (
    ConfigurationNotFoundError,
    PayCalendarService,
    PayCalendarValidationError,
)
from timecard_engine.services.template_registry import (
    GenerationTemplateRegistry,
    TemplateIndex,
    TemplateNotFoundError,
)
from timecard_engine.services.employee_resolver import (
    EligibleEmployeeResolver,
    ExistingTimecardsPreview,
)
from timecard_engine.services.idempotency import IdempotencyGuard
from timecard_engine.services.materializer import MaterializationOutcome, TimecardMaterializer
from timecard_engine.services.generation_service import GenerationOrchestrator, GenerationResult
from timecard_engine.services.bulk_scheduler import BulkScheduler, CancellationToken
from timecard_engine.services.automation_service import TimecardAutomationService

__all__ = [
    "InvalidTransitionError",
    "JobStateMachine",
    "JobStatus",
    "JobType",
    "GenerationJobTracker",
    "LogEntry",
    "ProcessingLog",
    "ConfigurationNotFoundError",
    "PayCalendarService",
    "PayCalendarValidationError",
    "GenerationTemplateRegistry",
    "TemplateIndex",
    "TemplateNotFoundError",
    "EligibleEmployeeResolver",
    "ExistingTimecardsPreview",
    "IdempotencyGuard",
    "MaterializationOutcome",
    "TimecardMaterializer",
    "GenerationOrchestrator",
    "GenerationResult",
    "BulkScheduler",
    "CancellationToken",
    "TimecardAutomationService",
]
