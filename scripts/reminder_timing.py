"""Reminder timing helper.

Prints an activity schedule starting a few minutes from now, plus the
instants at which each reminder is due. Handy for manual testing of the
reminder flow: paste the datetime-local values into the leader UI and
watch the participant feed.

Usage:
    python scripts/reminder_timing.py [startInMinutes] [durationMinutes] [--tz NAME]

Example:
    python scripts/reminder_timing.py 2 30
    -> start in 2 minutes from now, end 30 minutes after start
"""

import argparse
import math
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytz

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from eventsync.domain.models import ReminderCheckpoint
from eventsync.services.reminder_calculator import (
    compute_schedule,
    format_for_input,
    format_human,
)

_LABEL_WIDTH = 21


def _finite_minutes(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {raw!r}") from None
    if not math.isfinite(value):
        raise argparse.ArgumentTypeError(f"not a finite number: {raw!r}")
    return value


def _timezone(raw: str) -> pytz.BaseTzInfo:
    try:
        return pytz.timezone(raw)
    except pytz.UnknownTimeZoneError:
        raise argparse.ArgumentTypeError(f"unknown timezone: {raw!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Calculate an activity schedule and its reminder times"
    )
    parser.add_argument(
        "start_in_minutes",
        nargs="?",
        type=_finite_minutes,
        default=2.0,
        metavar="startInMinutes",
        help="Minutes from now until the activity starts (default: 2)",
    )
    parser.add_argument(
        "duration_minutes",
        nargs="?",
        type=_finite_minutes,
        default=60.0,
        metavar="durationMinutes",
        help="Activity duration in minutes (default: 60)",
    )
    parser.add_argument(
        "--tz",
        type=_timezone,
        default=None,
        help="IANA timezone for printed times (default: system local time)",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _line(label: str, value: str) -> str:
    return f"{label:<{_LABEL_WIDTH}} {value}"


def main(argv: list[str] | None = None, now: datetime | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    def _local(moment: datetime) -> datetime:
        return moment.astimezone(args.tz) if args.tz else moment.astimezone()

    # Arithmetic on absolute UTC instants; converted to wall time only for display.
    now_utc = (now or datetime.now(UTC)).astimezone(UTC)
    try:
        start_at = now_utc + timedelta(minutes=args.start_in_minutes)
        end_at = start_at + timedelta(minutes=args.duration_minutes)
        schedule = compute_schedule(start_at, end_at)
        for moment in (start_at, end_at, *(at for _, at in schedule.checkpoints())):
            _local(moment)
    except OverflowError:
        parser.error("minutes out of range for a calendar date")

    print(_line("Now:", format_human(_local(now_utc))))
    print("--- Activity schedule ---")
    print(_line("Start at:", format_human(_local(start_at))))
    print(_line("End at:", format_human(_local(end_at))))
    print()
    print("Use these values in the leader UI datetime fields:")
    print(f"  Start (datetime-local): {format_for_input(_local(start_at))}")
    print(f"  End   (datetime-local): {format_for_input(_local(end_at))}")
    print()
    print("--- Expected reminders on participant Feeds ---")
    for checkpoint in ReminderCheckpoint:
        print(_line(f"{checkpoint.label}:", format_human(_local(schedule[checkpoint]))))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
