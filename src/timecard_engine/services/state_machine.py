"""Generation job state machine with transition validation."""

from __future__ import annotations

from enum import Enum


class JobStatus(str, Enum):
    """Generation job status values."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class JobType(str, Enum):
    """Generation job types."""

    MONTHLY = "monthly_timecards"
    BULK = "bulk_monthly_timecards"


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class JobStateMachine:
    """State machine for generation job status transitions.

    Allowed transitions:
    - pending → running
    - running → completed
    - running → failed

    Status never moves backwards; completed and failed are terminal.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        JobStatus.PENDING: [JobStatus.RUNNING],
        JobStatus.RUNNING: [JobStatus.COMPLETED, JobStatus.FAILED],
        JobStatus.COMPLETED: [],
        JobStatus.FAILED: [],
    }

    TERMINAL = {
        JobStatus.COMPLETED,
        JobStatus.FAILED,
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            reason = "job is already finalized" if cls.is_terminal(from_status) else None
            raise InvalidTransitionError(from_status, to_status, reason)

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        """Check if no further transitions are possible."""
        return status in cls.TERMINAL

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])
