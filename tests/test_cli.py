"""Tests for the command line interface."""

import argparse
import json
from contextlib import asynccontextmanager

import pytest

from timecard_engine.calculators.types import MonthKey
from timecard_engine.cli import TimecardCli, parse_month_key
from timecard_engine.services.pay_calendar_service import PayCalendarService


@pytest.fixture
def cli(session_factory) -> TimecardCli:
    @asynccontextmanager
    async def session_scope():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return TimecardCli(session_scope=session_scope)


class TestParser:
    """Argument parsing."""

    def test_parse_month_key(self):
        assert parse_month_key("11/2024") == MonthKey(11, 2024)
        assert parse_month_key("2025-02") == MonthKey(2, 2025)

    def test_parse_month_key_invalid(self):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_month_key("13/2025")
        with pytest.raises(argparse.ArgumentTypeError):
            parse_month_key("March")

    def test_generate_arguments(self, cli):
        parsed = cli.parser.parse_args(
            [
                "generate",
                "--district-id",
                "1",
                "--month",
                "3",
                "--year",
                "2025",
                "--employee-type",
                "classified",
                "--employee-type",
                "substitute",
            ]
        )

        assert parsed.command == "generate"
        assert parsed.district_id == 1
        assert parsed.employee_types == ["classified", "substitute"]
        assert parsed.triggered_by == "system_automated"

    def test_generate_rejects_bad_month(self, cli):
        with pytest.raises(SystemExit):
            cli.parser.parse_args(["generate", "--district-id", "1", "--month", "0", "--year", "2025"])

    def test_no_command_prints_help(self, cli, capsys):
        assert cli.run([]) == 1
        assert "usage:" in capsys.readouterr().out


class TestCommands:
    """Commands against a seeded database."""

    async def test_generate(self, cli, seeded_district, capsys):
        code = await cli.execute(
            ["generate", "--district-id", "1", "--month", "3", "--year", "2025"]
        )

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["success"] is True
        assert output["timecards_generated"] == 3

    async def test_generate_failed_run_exits_nonzero(self, cli, district, session, capsys):
        await session.commit()

        code = await cli.execute(
            ["generate", "--district-id", "1", "--month", "3", "--year", "2025"]
        )

        assert code == 1
        output = json.loads(capsys.readouterr().out)
        assert output["job_status"] == "failed"

    async def test_bulk_generate(self, cli, seeded_district, capsys):
        code = await cli.execute(
            [
                "bulk-generate",
                "--district-id",
                "1",
                "--start",
                "11/2024",
                "--end",
                "2/2025",
                "--employee-type",
                "classified",
            ]
        )

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["cancelled"] is False
        assert output["total_generated"] == 12
        assert [(r["month"], r["year"]) for r in output["results"]] == [
            (11, 2024),
            (12, 2024),
            (1, 2025),
            (2, 2025),
        ]

    async def test_bulk_generate_reversed_range(self, cli, seeded_district, capsys):
        code = await cli.execute(
            ["bulk-generate", "--district-id", "1", "--start", "3/2025", "--end", "1/2025"]
        )

        assert code == 1
        assert "precedes start" in capsys.readouterr().err

    async def test_preview_and_jobs(self, cli, seeded_district, capsys):
        await cli.execute(["generate", "--district-id", "1", "--month", "3", "--year", "2025"])
        capsys.readouterr()

        assert await cli.execute(
            ["preview", "--district-id", "1", "--month", "3", "--year", "2025"]
        ) == 0
        preview = json.loads(capsys.readouterr().out)
        assert preview == {
            "exists": True,
            "count": 3,
            "employee_types": ["certificated", "classified"],
        }

        assert await cli.execute(["jobs", "--district-id", "1"]) == 0
        jobs = json.loads(capsys.readouterr().out)
        assert len(jobs) == 1
        assert jobs[0]["period"] == "3/2025"
        assert jobs[0]["status"] == "completed"

    async def test_schedule(self, cli, seeded_district, session, capsys):
        config = await PayCalendarService(session).get_active(seeded_district.id)
        await session.commit()

        assert await cli.execute(["schedule", "--config-id", str(config.id), "--year", "2025"]) == 0
        periods = json.loads(capsys.readouterr().out)
        assert len(periods) == 12
        assert periods[0]["pay_date"] == "2025-01-25"

    async def test_schedule_unknown_configuration(self, cli, seeded_district, capsys):
        assert await cli.execute(["schedule", "--config-id", "999", "--year", "2025"]) == 1
        assert "999" in capsys.readouterr().err
