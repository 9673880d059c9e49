"""Analytics engine for recorded Pomodoro sessions."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta, tzinfo
from typing import Any

from .clock import Clock, SystemClock
from .session import Session, SessionStatus
from .state import TimerPhase
from .store import SessionStore
from .window import TimeRange

ZERO = timedelta(0)


@dataclass
class DayTotals:
    """Work done on one calendar day (or one ISO week)."""

    label: str
    completed: int = 0
    abandoned: int = 0
    focused: timedelta = field(default=ZERO)

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.label,
            "completed": self.completed,
            "abandoned": self.abandoned,
            "focused_seconds": self.focused.total_seconds(),
        }


@dataclass(frozen=True)
class AnalyticsSummary:
    """Productivity over a window. Computed on demand, never stored."""

    time_range: TimeRange
    completed: int
    abandoned: int
    total_focused: timedelta
    current_streak: int
    longest_streak: int

    @property
    def completion_rate(self) -> float:
        """Completed over completed plus abandoned work sessions, 0.0 when none."""
        attempted = self.completed + self.abandoned
        if attempted == 0:
            return 0.0
        return self.completed / attempted

    def to_dict(self) -> dict[str, Any]:
        return {
            "range": self.time_range.to_dict(),
            "completed": self.completed,
            "abandoned": self.abandoned,
            "completion_rate": round(self.completion_rate, 4),
            "total_focused_seconds": self.total_focused.total_seconds(),
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
        }


class AnalyticsEngine:
    """Compute analytics from session history.

    Every method queries the store again; nothing is cached between calls.
    Calendar days are taken in ``tz``.
    """

    def __init__(self, store: SessionStore, tz: tzinfo, clock: Clock | None = None):
        self.store = store
        self.tz = tz
        self.clock = clock or SystemClock()

    def _work_sessions(self, time_range: TimeRange | None) -> Iterable[Session]:
        if time_range is not None and time_range.is_empty:
            return iter(())
        return self.store.query(time_range, phase=TimerPhase.WORKING)

    def _day_of(self, session: Session) -> date:
        return session.started_at.astimezone(self.tz).date()

    def today(self) -> date:
        return self.clock.now().astimezone(self.tz).date()

    def summary(self, time_range: TimeRange | None = None) -> AnalyticsSummary:
        """
        Summarise work sessions that started in ``time_range``.

        Streaks always look at the whole history, since they are anchored to
        today rather than to the window.
        """
        completed = 0
        abandoned = 0
        focused = ZERO
        for session in self._work_sessions(time_range):
            if session.status == SessionStatus.COMPLETED:
                completed += 1
                focused += session.actual
            else:
                abandoned += 1

        active_days = self.completed_days()
        return AnalyticsSummary(
            time_range=time_range or TimeRange.everything(),
            completed=completed,
            abandoned=abandoned,
            total_focused=focused,
            current_streak=current_streak(active_days, self.today()),
            longest_streak=longest_streak(active_days),
        )

    def completed_days(self) -> set[date]:
        """Calendar days holding at least one completed work session."""
        return {
            self._day_of(s)
            for s in self._work_sessions(None)
            if s.status == SessionStatus.COMPLETED
        }

    def daily_totals(self, time_range: TimeRange | None = None) -> list[DayTotals]:
        """Per-day totals, oldest day first. Days without work are omitted."""
        return self._totals(time_range, lambda d: d.isoformat())

    def weekly_totals(self, time_range: TimeRange | None = None) -> list[DayTotals]:
        """Per ISO week totals (``2024-W03``), oldest first."""

        def week_label(day: date) -> str:
            year, week, _ = day.isocalendar()
            return f"{year}-W{week:02d}"

        return self._totals(time_range, week_label)

    def most_productive_days(
        self, time_range: TimeRange | None = None, limit: int = 5
    ) -> list[DayTotals]:
        """Days with the most completed sessions, ties broken by focused time."""
        days = [d for d in self.daily_totals(time_range) if d.completed]
        days.sort(key=lambda d: (d.completed, d.focused, d.label), reverse=True)
        return days[:limit]

    def _totals(self, time_range: TimeRange | None, key) -> list[DayTotals]:
        buckets: dict[str, DayTotals] = defaultdict(lambda: DayTotals(label=""))
        for session in self._work_sessions(time_range):
            label = key(self._day_of(session))
            bucket = buckets[label]
            bucket.label = label
            if session.status == SessionStatus.COMPLETED:
                bucket.completed += 1
                bucket.focused += session.actual
            else:
                bucket.abandoned += 1
        return [buckets[label] for label in sorted(buckets)]


def current_streak(days: set[date], today: date) -> int:
    """Consecutive days with completed work, walking back from ``today``.

    A ``today`` without completed work gives 0.
    """
    streak = 0
    day = today
    while day in days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def longest_streak(days: set[date]) -> int:
    longest = 0
    for day in days:
        if day - timedelta(days=1) in days:
            continue
        run = 1
        while day + timedelta(days=run) in days:
            run += 1
        longest = max(longest, run)
    return longest
