"""
Budget report command.

Usage:
    night-factory-budget                    # show current status
    night-factory-budget --json             # machine-readable summary
    night-factory-budget --reset --confirm  # reset the meter (careful!)

Exit status is 0 when usage is normal, 1 at 75% or more and 2 at 90% or more.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from pathlib import Path

from .budget import BudgetMeter, build_meter, render_report
from .config import Settings, load_env
from .errors import NightFactoryError
from .logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="night-factory-budget",
        description="View the Night Factory budget status, breakdown and history.",
    )
    parser.add_argument("--config", type=Path, help="Budget config file (default: config/router.json)")
    parser.add_argument("--meter", type=Path, help="Meter file (default: reports/budget_meter.json)")
    parser.add_argument("--json", action="store_true", help="Print the summary as JSON")
    parser.add_argument("--reset", action="store_true", help="Reset the meter to zero")
    parser.add_argument("--confirm", action="store_true", help="Confirm a destructive --reset")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level")
    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    if args.config:
        settings.config_path = args.config
    if args.meter:
        settings.meter_path = args.meter
    return settings


async def _reset(meter: BudgetMeter) -> int:
    await meter.reset()
    print("✅ Budget meter reset")
    return 0


async def _report(meter: BudgetMeter, as_json: bool) -> int:
    summary = await meter.get_summary()
    if as_json:
        print(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(render_report(summary))
    return summary.status.exit_code


def main(argv: Sequence[str] | None = None, *, meter: BudgetMeter | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.reset and not args.confirm:
        print("⚠️  Budget reset requires confirmation.", file=sys.stderr)
        print("   Run with: night-factory-budget --reset --confirm", file=sys.stderr)
        return 1

    load_env()
    settings = _settings_from_args(args)
    logger = configure_logging(
        level=args.log_level or settings.logging.level,
        json_output=settings.logging.json_output,
    )
    meter = meter or build_meter(settings, logger=logger)

    if args.reset:
        try:
            return asyncio.run(_reset(meter))
        except NightFactoryError as e:
            with logger.run_context(meter.run_id, operation="reset"):
                logger.log_error(e, "Budget reset failed")
            print(f"\n❌ Failed to reset budget meter:\n{e}", file=sys.stderr)
            return 1

    try:
        return asyncio.run(_report(meter, args.json))
    except NightFactoryError as e:
        with logger.run_context(meter.run_id, operation="report"):
            logger.log_error(e, "Budget report failed")
        print(f"\n❌ Failed to generate budget report:\n{e}", file=sys.stderr)
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
