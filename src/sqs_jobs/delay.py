"""Delay calculation for scheduled jobs."""

from __future__ import annotations

import time
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from .exceptions import InvalidDelayError

#: Longest delay the queue service can hold a message back for.
MAX_DELAY_SECONDS = 15 * 60


def to_epoch(timestamp: float | datetime) -> float:
    """Normalize an aware/naive datetime or epoch seconds to epoch seconds."""
    if isinstance(timestamp, datetime):
        return timestamp.timestamp()
    return float(timestamp)


def calculate_delay(timestamp: float | datetime, now: float | None = None) -> int:
    """Seconds from *now* until *timestamp*, rounded to the nearest second.

    Halves round away from zero, so 900.5 seconds out is 901 and rejected.
    Zero or negative results are returned as-is and mean "deliver as soon
    as possible". Raises :class:`InvalidDelayError` above 15 minutes.
    """
    current = time.time() if now is None else now
    difference = Decimal(to_epoch(timestamp) - current)
    delay = int(difference.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    if delay > MAX_DELAY_SECONDS:
        raise InvalidDelayError(delay, MAX_DELAY_SECONDS)
    return delay
