"""Reminder checkpoint calculation for scheduled activities.

Checkpoints:
- 30 minutes before start
- 10 minutes before start
- At start
- 10 minutes before end
- At end

The interval is not validated. An activity that ends before it starts, or
that is shorter than 10 minutes, yields checkpoints out of time order;
callers skip past checkpoints instead of treating that as an error.
"""

from datetime import datetime

from eventsync.domain.models import ReminderSchedule
from eventsync.domain.sync_constants import (
    HUMAN_TIMESTAMP_FORMAT,
    INPUT_TIMESTAMP_FORMAT,
    TEN_BEFORE_END_OFFSET,
    TEN_BEFORE_START_OFFSET,
    THIRTY_BEFORE_START_OFFSET,
)


def compute_schedule(start_at: datetime, end_at: datetime) -> ReminderSchedule:
    """Compute the absolute reminder checkpoints for an activity.

    Args:
        start_at: Activity start instant
        end_at: Activity end instant (expected after start_at, not checked)

    Returns:
        ReminderSchedule with all five checkpoints

    Example:
        >>> schedule = compute_schedule(
        ...     datetime(2024, 1, 1, 10, 0), datetime(2024, 1, 1, 11, 0)
        ... )
        >>> schedule.ten_before_end
        datetime.datetime(2024, 1, 1, 10, 50)
    """
    return ReminderSchedule(
        thirty_before_start=start_at - THIRTY_BEFORE_START_OFFSET,
        ten_before_start=start_at - TEN_BEFORE_START_OFFSET,
        at_start=start_at,
        ten_before_end=end_at - TEN_BEFORE_END_OFFSET,
        at_end=end_at,
    )


def format_human(moment: datetime) -> str:
    """Format as `YYYY-MM-DD HH:MM:SS` in the instant's own timezone."""
    return moment.strftime(HUMAN_TIMESTAMP_FORMAT)


def format_for_input(moment: datetime) -> str:
    """Format for a datetime-local input control (`YYYY-MM-DDTHH:MM`)."""
    return moment.strftime(INPUT_TIMESTAMP_FORMAT)


class ReminderOffsetCalculator:
    """Stateless wrapper exposing the schedule calculation as a component."""

    def compute_schedule(self, start_at: datetime, end_at: datetime) -> ReminderSchedule:
        return compute_schedule(start_at, end_at)
