"""Tests for structured logging and the injectable clock."""

import json
import sys
import logging
from datetime import datetime, timezone

from timecard_engine.clock import DeterministicClock, SystemClock
from timecard_engine.logging_config import JsonFormatter


def _record(msg: str, extra: dict | None = None, exc_info=None) -> logging.LogRecord:
    record = logging.LogRecord(
        name="timecard_engine.services.generation_service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in (extra or {}).items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_basic_fields(self):
        payload = json.loads(JsonFormatter().format(_record("Starting generation")))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "timecard_engine.services.generation_service"
        assert payload["message"] == "Starting generation"
        assert "extra" not in payload

    def test_extra_fields_grouped(self):
        payload = json.loads(
            JsonFormatter().format(_record("Job started", {"job_id": 7, "district_id": 1}))
        )

        assert payload["extra"] == {"job_id": 7, "district_id": 1}

    def test_exception_rendered(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record("failed", exc_info=sys.exc_info())

        payload = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: boom" in payload["exc_info"]


class TestClock:
    def test_system_clock_is_utc(self):
        assert SystemClock().now().tzinfo == timezone.utc

    def test_deterministic_clock(self):
        clock = DeterministicClock(datetime(2025, 3, 1, tzinfo=timezone.utc))

        assert clock.now() == clock.now()
        clock.advance(30)
        assert clock.now() == datetime(2025, 3, 1, 0, 0, 30, tzinfo=timezone.utc)
        assert clock.tick() == datetime(2025, 3, 1, 0, 0, 31, tzinfo=timezone.utc)

        clock.set_time(datetime(2026, 1, 1, tzinfo=timezone.utc))
        assert clock.now() == datetime(2026, 1, 1, tzinfo=timezone.utc)
