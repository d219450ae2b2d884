"""Punch payroll command line interface.

Usage:
    python -m punch_payroll.cli init-db
    python -m punch_payroll.cli create-period --month 3 --year 2026 --user admin
    python -m punch_payroll.cli calculate --period-id X --user admin
    python -m punch_payroll.cli report --period-id X
    python -m punch_payroll.cli export --period-id X --output payroll.csv
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import UUID

from punch_payroll.config import get_settings
from punch_payroll.database import create_schema, dispose_db, init_db
from punch_payroll.logging_config import configure_logging
from punch_payroll.services.calculation_service import CalculationService
from punch_payroll.services.period_service import (
    PeriodAlreadyExistsError,
    PeriodNotFoundError,
    PeriodService,
)
from punch_payroll.services.report_service import ReportService
from punch_payroll.services.state_machine import PeriodClosedError


def parse_uuid(s: str) -> UUID:
    """Parse UUID string."""
    return UUID(s)


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, UUID):
        return str(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    raise TypeError(f"Cannot serialize {type(value).__name__}")


class PayrollCli:
    """Punch payroll command line interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m punch_payroll.cli",
            description="Payroll period operations",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        subparsers.add_parser("init-db", help="Create database tables")

        create = subparsers.add_parser("create-period", help="Create a payroll period")
        create.add_argument("--month", type=int, required=True)
        create.add_argument("--year", type=int, required=True)
        create.add_argument("--user", required=True, help="Initiating user id")

        calculate = subparsers.add_parser(
            "calculate", help="Calculate or recalculate a payroll period"
        )
        calculate.add_argument("--period-id", type=parse_uuid, required=True)
        calculate.add_argument("--user", required=True, help="Initiating user id")

        report = subparsers.add_parser("report", help="Print a period report as JSON")
        report.add_argument("--period-id", type=parse_uuid, required=True)

        export = subparsers.add_parser("export", help="Write a period export as CSV")
        export.add_argument("--period-id", type=parse_uuid, required=True)
        export.add_argument(
            "--output",
            type=Path,
            help="Output file (default: stdout)",
        )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run CLI with arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        configure_logging(get_settings().log_level)
        handler = getattr(self, f"_cmd_{parsed.command.replace('-', '_')}")
        try:
            return asyncio.run(self._run_handler(handler, parsed))
        except (PeriodNotFoundError, PeriodClosedError, PeriodAlreadyExistsError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    async def _run_handler(self, handler: Any, parsed: argparse.Namespace) -> int:
        try:
            return await handler(parsed)
        finally:
            await dispose_db()

    async def _cmd_init_db(self, args: argparse.Namespace) -> int:
        engine, _ = init_db()
        await create_schema(engine)
        print("Database schema created")
        return 0

    async def _cmd_create_period(self, args: argparse.Namespace) -> int:
        _, factory = init_db()
        async with factory() as session, session.begin():
            period = await PeriodService(session).create_period(
                args.month, args.year, args.user
            )
            period_id = period.payroll_period_id
        print(period_id)
        return 0

    async def _cmd_calculate(self, args: argparse.Namespace) -> int:
        _, factory = init_db()
        result = await CalculationService(factory).calculate(args.period_id, args.user)
        output = {
            "processed_count": result.processed_count,
            "anomaly_count": result.anomaly_count,
            "errors": result.errors,
            "completed_at": result.completed_at,
        }
        print(json.dumps(output, indent=2, default=_json_default))
        return 0 if not result.errors else 2

    async def _cmd_report(self, args: argparse.Namespace) -> int:
        _, factory = init_db()
        async with factory() as session:
            report = await ReportService(session).get_report(args.period_id)
        print(json.dumps(asdict(report), indent=2, default=_json_default))
        return 0

    async def _cmd_export(self, args: argparse.Namespace) -> int:
        _, factory = init_db()
        async with factory() as session:
            service = ReportService(session)
            csv_text = service.render_csv(await service.export_rows(args.period_id))

        if args.output:
            args.output.write_text(csv_text)
            print(f"Wrote {args.output}")
        else:
            sys.stdout.write(csv_text)
        return 0


def main() -> None:
    """CLI entry point."""
    cli = PayrollCli()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
