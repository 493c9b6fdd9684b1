"""Seeded placeholder trend series.

Dashboards draw a sparkline for every metric card. When the server has no
history for a metric, the card gets a synthetic bounded random walk instead.
The walk is seeded from a string key so the same card always draws the same
line across reloads and processes.

Algorithm:
1. Fold the key into a 32-bit seed with FNV-1a
2. Draw values in [0, 1) from a 32-bit xor-shift-multiply scrambler
3. Start at max(anchor, 1) and drift each step by up to ±15% of the current value,
   never going below zero
"""

import math
from collections.abc import Iterator
from functools import lru_cache

from eventsync.domain.exceptions import ValidationError
from eventsync.domain.sync_constants import (
    DEFAULT_TREND_LENGTH,
    FNV_OFFSET_BASIS,
    FNV_PRIME,
    MIN_TREND_LENGTH,
    MIXER_INCREMENT,
    TREND_ANCHOR_FLOOR,
    TREND_DRIFT_SPAN,
    UINT32_MASK,
)

TrendSeries = tuple[float, ...]

_UINT32_RANGE = float(UINT32_MASK + 1)


def fnv1a_32(key: str) -> int:
    """Fold a string into a 32-bit FNV-1a hash.

    Example:
        >>> fnv1a_32("")
        2166136261
    """
    accumulator = FNV_OFFSET_BASIS
    for char in key:
        accumulator ^= ord(char)
        accumulator = (accumulator * FNV_PRIME) & UINT32_MASK
    return accumulator


def seeded_random(seed: int) -> Iterator[float]:
    """Yield an endless reproducible stream of floats in [0, 1)."""
    state = seed & UINT32_MASK
    while True:
        state = (state + MIXER_INCREMENT) & UINT32_MASK
        t = ((state ^ (state >> 15)) * (state | 1)) & UINT32_MASK
        t ^= (t + ((t ^ (t >> 7)) * (t | 61))) & UINT32_MASK
        yield ((t ^ (t >> 14)) & UINT32_MASK) / _UINT32_RANGE


@lru_cache(maxsize=256)
def generate_trend(
    key: str, anchor: float, length: int = DEFAULT_TREND_LENGTH
) -> TrendSeries:
    """Generate the placeholder series for a (key, anchor) pair.

    Args:
        key: Stable identifier of the metric card (e.g. "projects")
        anchor: Current metric value; values below 1 (and non-finite values)
            start the walk at 1
        length: Number of points, at least 2

    Returns:
        Tuple of non-negative floats, first element max(anchor, 1)

    Raises:
        ValidationError: If length is below 2

    Example:
        >>> series = generate_trend("projects", 12)
        >>> series[0], len(series)
        (12.0, 18)
    """
    if length < MIN_TREND_LENGTH:
        raise ValidationError(f"Trend length must be >= {MIN_TREND_LENGTH}, got {length}")

    start = float(anchor) if math.isfinite(anchor) else TREND_ANCHOR_FLOOR
    value = max(start, TREND_ANCHOR_FLOOR)

    rng = seeded_random(fnv1a_32(key))
    values = [value]
    for _ in range(length - 1):
        drift = (next(rng) - 0.5) * TREND_DRIFT_SPAN * value
        value = max(0.0, value + drift)
        values.append(value)
    return tuple(values)


class SeededTrendGenerator:
    """Produces placeholder series when authoritative metric history is absent."""

    def __init__(self, length: int = DEFAULT_TREND_LENGTH) -> None:
        if length < MIN_TREND_LENGTH:
            raise ValidationError(
                f"Trend length must be >= {MIN_TREND_LENGTH}, got {length}"
            )
        self._length = length

    def generate(self, key: str, anchor: float, length: int | None = None) -> TrendSeries:
        return generate_trend(key, anchor, self._length if length is None else length)

    def series_or_placeholder(
        self, key: str, anchor: float, observed: list[float] | None
    ) -> TrendSeries:
        """Return observed values when there are any, the seeded walk otherwise."""
        if observed:
            return tuple(float(v) for v in observed)
        return self.generate(key, anchor)
