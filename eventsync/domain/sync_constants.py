"""Business rules and constants for client-side state synchronization.

Freshness window, reminder offsets and placeholder trend parameters are
centralized here so every surface flags, schedules and plots the same way.
"""

from datetime import timedelta
from typing import Final

# Freshness window for the "new" notification flag
FRESHNESS_WINDOW: Final[timedelta] = timedelta(minutes=20)
"""How long an event id keeps its "new" flag after it was first observed.

Business rule: the newest notification is highlighted for 20 minutes from the
first fetch that returned it. Staleness is evaluated lazily on the next fetch;
nothing fires when the window closes.

Example:
    - evt-1 first seen at 10:00
    - Fetch at 10:19 → still new
    - Fetch at 10:21 → not new
"""

SEEN_MARKER_KEY_DEFAULT: Final[str] = "unihub-newest-notification-seen"
"""Storage key holding the seen marker on the device."""

# Reminder checkpoint offsets
THIRTY_BEFORE_START_OFFSET: Final[timedelta] = timedelta(minutes=30)
"""First reminder, 30 minutes before an activity starts."""

TEN_BEFORE_START_OFFSET: Final[timedelta] = timedelta(minutes=10)
"""Second reminder, 10 minutes before an activity starts."""

TEN_BEFORE_END_OFFSET: Final[timedelta] = timedelta(minutes=10)
"""Ending-soon reminder, 10 minutes before an activity ends.

Activities shorter than 10 minutes get this checkpoint before the start
checkpoint. That order is kept as-is.
"""

HUMAN_TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"
"""Human-readable timestamp format used by reminder output."""

INPUT_TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%dT%H:%M"
"""Minute-precision format for datetime-local input controls."""

# Placeholder trend series
DEFAULT_TREND_LENGTH: Final[int] = 18
"""Number of points in a placeholder sparkline series."""

MIN_TREND_LENGTH: Final[int] = 2
"""Shortest series a sparkline can draw."""

TREND_ANCHOR_FLOOR: Final[float] = 1.0
"""Lowest starting value, so a walk anchored at zero still moves."""

TREND_DRIFT_SPAN: Final[float] = 0.3
"""Total drift span relative to the current value (±15%)."""

FNV_OFFSET_BASIS: Final[int] = 2166136261
FNV_PRIME: Final[int] = 16777619
MIXER_INCREMENT: Final[int] = 0x6D2B79F5
UINT32_MASK: Final[int] = 0xFFFFFFFF

# Metrics
METRICS_DAYS_DEFAULT: Final[int] = 14
METRICS_DAYS_MIN: Final[int] = 1
METRICS_DAYS_MAX: Final[int] = 90
