"""
Registry clocks.

The registry never reads wall-clock time directly. It asks a ``Clock`` for
the current time in whole seconds since the epoch, so tests and hosting
environments can supply their own notion of "now".
"""

import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone


class Clock(ABC):
    """Source of the current time, in integer seconds since the epoch."""

    @abstractmethod
    def now(self) -> int:
        """Return the current timestamp.

        Successive calls must never go backwards.
        """


class SystemClock(Clock):
    """Wall-clock time, clamped so it never decreases."""

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            current = int(time.time())
            if current > self._last:
                self._last = current
            return self._last


class ManualClock(Clock):
    """A clock that only moves when told to.

    Args:
        start: Initial timestamp. Defaults to the current wall-clock time.

    Example:
        >>> clock = ManualClock(start=1_700_000_000)
        >>> clock.advance(3600)
        1700003600
    """

    def __init__(self, start: int | None = None) -> None:
        if start is None:
            start = int(datetime.now(timezone.utc).timestamp())
        if start < 0:
            raise ValueError("start must be non-negative")
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        """Move the clock forward and return the new time."""
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        self._now += seconds
        return self._now

    def set(self, timestamp: int) -> None:
        """Jump to ``timestamp``, which must not be in the past."""
        if timestamp < self._now:
            raise ValueError(
                f"Cannot set clock back from {self._now} to {timestamp}"
            )
        self._now = timestamp
