"""
Time utilities for generated names and stored records.
Timestamps are UTC and never go backwards within a process.
"""

import time
from datetime import datetime, timezone
from typing import Callable, Optional

from ..config import (
    TIMESTAMP_FORMAT,
    UNIQUE_ID_TIMESTAMP_FORMAT,
    UNIQUE_ID_FRACTION_DIGITS,
)


class MonotonicClock:
    """
    Wall clock that never reports an earlier time than it already has.
    Generated names sort in creation order even if the system clock steps back.
    """

    def __init__(self, source: Optional[Callable[[], datetime]] = None):
        self._source = source or (lambda: datetime.now(timezone.utc))
        self._last: Optional[datetime] = None

    def now(self) -> datetime:
        """
        Get the current UTC time, guaranteed to be >= the previous reading.

        Returns:
            Timezone-aware datetime
        """
        current = self._source()
        if self._last is not None and current < self._last:
            current = self._last
        self._last = current
        return current


# Global monotonic clock instance
_clock = MonotonicClock()


def now() -> str:
    """
    Get current timestamp for stored records.

    Returns:
        ISO 8601 formatted timestamp string
    """
    return _clock.now().strftime(TIMESTAMP_FORMAT)


def compact_timestamp(dt: Optional[datetime] = None) -> str:
    """
    Format a time as digits only, e.g. ``202610181745301234``.

    Seconds resolution plus UNIQUE_ID_FRACTION_DIGITS of fraction.

    Args:
        dt: Time to format; defaults to the monotonic clock

    Returns:
        Fixed-width digit string
    """
    if dt is None:
        dt = _clock.now()
    divisor = 10 ** (6 - UNIQUE_ID_FRACTION_DIGITS)
    fraction = dt.microsecond // divisor
    return f"{dt.strftime(UNIQUE_ID_TIMESTAMP_FORMAT)}{fraction:0{UNIQUE_ID_FRACTION_DIGITS}d}"


def remaining(deadline: float, clock: Callable[[], float] = time.monotonic) -> float:
    """
    Seconds left until a monotonic deadline (negative once passed).

    Args:
        deadline: Absolute value of ``clock``
        clock: Monotonic clock the deadline was taken from

    Returns:
        Seconds remaining
    """
    return deadline - clock()
