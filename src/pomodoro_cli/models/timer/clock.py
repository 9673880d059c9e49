"""Time sources for the timer state machine."""

from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the current time as an aware UTC datetime."""

    def now(self) -> datetime: ...


class SystemClock:
    """Monotonic clock anchored to the wall clock.

    One wall-clock reading is taken at construction; every later reading is
    that anchor plus the ``time.monotonic()`` delta. Within a process the
    clock never runs backwards, and separate processes still agree through
    the wall-clock anchor.
    """

    def __init__(self) -> None:
        self._wall_anchor = datetime.now(UTC)
        self._mono_anchor = time.monotonic()

    def now(self) -> datetime:
        return self._wall_anchor + timedelta(
            seconds=time.monotonic() - self._mono_anchor
        )


class ManualClock:
    """Clock that only moves when told to. Used by tests and simulations."""

    def __init__(self, start: datetime | None = None) -> None:
        if start is None:
            start = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)
        if start.tzinfo is None:
            raise ValueError("ManualClock needs a timezone-aware start time")
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta | None = None, **kwargs: float) -> datetime:
        """Move the clock forward by ``delta`` or by timedelta keyword args."""
        step = delta if delta is not None else timedelta(**kwargs)
        if step < timedelta(0):
            raise ValueError("ManualClock cannot move backwards")
        self._now += step
        return self._now

    def set(self, when: datetime) -> None:
        if when < self._now:
            raise ValueError("ManualClock cannot move backwards")
        self._now = when
