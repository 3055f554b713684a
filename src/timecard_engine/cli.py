"""Timecard engine command line interface.

Provides administrative tools for:
- Single-period and bulk timecard generation
- Previewing existing timecards for a period
- Generation job history
- Pay calendar schedules
- Schema creation

Usage:
    timecard-engine generate --district-id 1 --month 3 --year 2025
    timecard-engine bulk-generate --district-id 1 --start 11/2024 --end 2/2025
    timecard-engine preview --district-id 1 --month 3 --year 2025
    timecard-engine jobs --district-id 1 --limit 10
    timecard-engine schedule --config-id 4 --year 2025
    timecard-engine init-db

Every command writes JSON to stdout. Generation commands exit non-zero
when any run failed.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import signal
import sys
from contextlib import AbstractAsyncContextManager
from typing import Any, Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from timecard_engine.calculators.types import MonthKey
from timecard_engine.config import get_settings
from timecard_engine.database import get_session, init_db
from timecard_engine.logging_config import configure_logging
from timecard_engine.services.automation_service import TimecardAutomationService
from timecard_engine.services.bulk_scheduler import CancellationToken
from timecard_engine.services.pay_calendar_service import ConfigurationNotFoundError

SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def parse_month_key(s: str) -> MonthKey:
    """Parse ``M/YYYY`` (or ``YYYY-MM``) into a MonthKey."""
    try:
        if "/" in s:
            month, year = s.split("/", 1)
        else:
            year, month = s.split("-", 1)
        return MonthKey(int(month), int(year))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid month '{s}': {e}")


def _month(s: str) -> int:
    value = int(s)
    if not 1 <= value <= 12:
        raise argparse.ArgumentTypeError(f"month must be between 1 and 12, got {value}")
    return value


def _dump(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


class TimecardCli:
    """Timecard engine command line interface."""

    def __init__(self, session_scope: SessionScope | None = None) -> None:
        self.session_scope = session_scope or get_session
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        settings = get_settings()
        parser = argparse.ArgumentParser(
            prog="timecard-engine",
            description="Recurring timecard generation tools",
        )
        parser.add_argument(
            "--log-level",
            default=None,
            help=f"Log level (default: {settings.log_level})",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # generate command
        generate = subparsers.add_parser(
            "generate",
            help="Generate monthly timecards for one period",
        )
        generate.add_argument("--district-id", type=int, required=True)
        generate.add_argument("--month", type=_month, required=True)
        generate.add_argument("--year", type=int, required=True)
        generate.add_argument(
            "--triggered-by",
            default=settings.system_actor,
            help=f"Actor recorded on the job (default: {settings.system_actor})",
        )
        generate.add_argument(
            "--employee-type",
            dest="employee_types",
            action="append",
            help="Restrict to an employee type (repeatable)",
        )

        # bulk-generate command
        bulk = subparsers.add_parser(
            "bulk-generate",
            help="Generate monthly timecards for an inclusive month range",
        )
        bulk.add_argument("--district-id", type=int, required=True)
        bulk.add_argument(
            "--start",
            type=parse_month_key,
            required=True,
            help="First month (M/YYYY)",
        )
        bulk.add_argument(
            "--end",
            type=parse_month_key,
            required=True,
            help="Last month, inclusive (M/YYYY)",
        )
        bulk.add_argument("--triggered-by", default=settings.system_actor)
        bulk.add_argument(
            "--employee-type",
            dest="employee_types",
            action="append",
            help="Restrict to an employee type (repeatable)",
        )

        # preview command
        preview = subparsers.add_parser(
            "preview",
            help="Show timecards that already exist for a period",
        )
        preview.add_argument("--district-id", type=int, required=True)
        preview.add_argument("--month", type=_month, required=True)
        preview.add_argument("--year", type=int, required=True)
        preview.add_argument("--employee-type", default=None)

        # jobs command
        jobs = subparsers.add_parser(
            "jobs",
            help="List generation jobs, newest first",
        )
        jobs.add_argument("--district-id", type=int, required=True)
        jobs.add_argument(
            "--limit",
            type=int,
            default=None,
            help=f"Maximum jobs to list (default: {settings.job_history_limit})",
        )

        # schedule command
        schedule = subparsers.add_parser(
            "schedule",
            help="List pay periods of a pay calendar configuration",
        )
        schedule.add_argument("--config-id", type=int, required=True)
        schedule.add_argument("--year", type=int, required=True)

        # init-db command
        subparsers.add_parser(
            "init-db",
            help="Create database tables",
        )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        configure_logging(parsed.log_level)
        return asyncio.run(self.dispatch(parsed))

    async def execute(self, args: list[str]) -> int:
        """Parse and run a command inside an already running event loop."""
        parsed = self.parser.parse_args(args)
        if not parsed.command:
            self.parser.print_help()
            return 1
        return await self.dispatch(parsed)

    async def dispatch(self, parsed: argparse.Namespace) -> int:
        # Dispatch to command handler
        handlers: dict[str, Callable[[argparse.Namespace], Awaitable[int]]] = {
            "generate": self._cmd_generate,
            "bulk-generate": self._cmd_bulk_generate,
            "preview": self._cmd_preview,
            "jobs": self._cmd_jobs,
            "schedule": self._cmd_schedule,
            "init-db": self._cmd_init_db,
        }

        handler = handlers.get(parsed.command)
        if handler:
            return await handler(parsed)

        print(f"Unknown command: {parsed.command}", file=sys.stderr)
        return 1

    async def _cmd_generate(self, args: argparse.Namespace) -> int:
        async with self.session_scope() as session:
            service = TimecardAutomationService(session)
            result = await service.generate_for_period(
                args.district_id,
                args.month,
                args.year,
                args.triggered_by,
                employee_types=args.employee_types,
            )
        _dump(result.to_dict())
        return 0 if result.success else 1

    async def _cmd_bulk_generate(self, args: argparse.Namespace) -> int:
        if args.end < args.start:
            print(f"ERROR: range end {args.end} precedes start {args.start}", file=sys.stderr)
            return 1

        token = CancellationToken()
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, token.cancel)
        except (NotImplementedError, RuntimeError):
            pass  # no signal support on this platform

        try:
            async with self.session_scope() as session:
                service = TimecardAutomationService(session)
                results = await service.bulk_generate(
                    args.district_id,
                    args.start.month,
                    args.start.year,
                    args.end.month,
                    args.end.year,
                    args.triggered_by,
                    employee_types=args.employee_types,
                    cancellation=token,
                )
        finally:
            try:
                loop.remove_signal_handler(signal.SIGINT)
            except (NotImplementedError, RuntimeError):
                pass

        _dump(
            {
                "cancelled": token.cancelled,
                "total_generated": sum(r.timecards_generated for r in results),
                "total_errors": sum(r.error_count for r in results),
                "results": [r.to_dict() for r in results],
            }
        )
        return 0 if all(r.success for r in results) else 1

    async def _cmd_preview(self, args: argparse.Namespace) -> int:
        async with self.session_scope() as session:
            preview = await TimecardAutomationService(session).preview_existing(
                args.district_id, args.month, args.year, args.employee_type
            )
        _dump(dataclasses.asdict(preview))
        return 0

    async def _cmd_jobs(self, args: argparse.Namespace) -> int:
        async with self.session_scope() as session:
            jobs = await TimecardAutomationService(session).list_jobs(
                args.district_id, args.limit
            )
            payload = [
                {
                    "id": job.id,
                    "job_type": job.job_type,
                    "period": f"{job.target_month}/{job.target_year}",
                    "status": job.status,
                    "triggered_by": job.triggered_by,
                    "employee_count": job.employee_count,
                    "timecards_generated": job.timecards_generated,
                    "error_count": job.error_count,
                    "started_at": job.started_at,
                    "completed_at": job.completed_at,
                }
                for job in jobs
            ]
        _dump(payload)
        return 0

    async def _cmd_schedule(self, args: argparse.Namespace) -> int:
        try:
            async with self.session_scope() as session:
                periods = await TimecardAutomationService(session).compute_schedule(
                    args.config_id, args.year
                )
        except ConfigurationNotFoundError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1
        _dump([dataclasses.asdict(p) for p in periods])
        return 0

    async def _cmd_init_db(self, args: argparse.Namespace) -> int:
        await init_db()
        _dump({"status": "ok"})
        return 0


def main() -> int:
    """CLI entry point."""
    cli = TimecardCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
