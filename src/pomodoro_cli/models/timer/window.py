"""Time windows used by history queries, analytics and export."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_DAYS_PATTERN = re.compile(r"^(\d+)d$")
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

WINDOW_HELP = "today, yesterday, week, month, all, <N>d, YYYY-MM-DD or YYYY-MM-DD..YYYY-MM-DD"


@dataclass(frozen=True)
class TimeRange:
    """Half-open interval ``[start, end)``. A missing bound is unbounded."""

    start: datetime | None = None
    end: datetime | None = None
    label: str = "all"

    def __post_init__(self) -> None:
        for bound in (self.start, self.end):
            if bound is not None and bound.tzinfo is None:
                raise ValueError("TimeRange bounds must be timezone-aware")
        if self.start is not None and self.end is not None and self.end < self.start:
            raise ValueError("TimeRange end must not precede its start")

    @classmethod
    def everything(cls) -> TimeRange:
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.start is not None and self.end is not None and self.start == self.end

    def contains(self, moment: datetime) -> bool:
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment >= self.end:
            return False
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
        }


def resolve_timezone(name: str | None) -> tzinfo:
    """Return the named IANA zone, or the machine's local zone when unset."""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone '{name}'") from e
    return datetime.now().astimezone().tzinfo or UTC


def start_of_day(day: date, tz: tzinfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def days_range(first: date, last: date, tz: tzinfo, label: str) -> TimeRange:
    """Calendar days ``first`` through ``last``, both included."""
    if last < first:
        raise ValueError(f"Range '{label}' ends before it starts")
    return TimeRange(
        start=start_of_day(first, tz),
        end=start_of_day(last + timedelta(days=1), tz),
        label=label,
    )


def parse_range(text: str | None, now: datetime, tz: tzinfo) -> TimeRange:
    """Parse a window expression relative to ``now``.

    Accepts ``today``, ``yesterday``, ``week`` (last 7 days), ``month``
    (current calendar month), ``all``, ``<N>d`` (last N days including
    today), a single ``YYYY-MM-DD`` day, or ``YYYY-MM-DD..YYYY-MM-DD``.

    Raises:
        ValueError: The expression is not recognised.
    """
    expr = (text or "all").strip().lower()
    today = now.astimezone(tz).date()

    if expr == "all":
        return TimeRange.everything()
    if expr == "today":
        return days_range(today, today, tz, expr)
    if expr == "yesterday":
        day = today - timedelta(days=1)
        return days_range(day, day, tz, expr)
    if expr == "week":
        return days_range(today - timedelta(days=6), today, tz, expr)
    if expr == "month":
        first = today.replace(day=1)
        next_month = (first + timedelta(days=32)).replace(day=1)
        return days_range(first, next_month - timedelta(days=1), tz, expr)

    match = _DAYS_PATTERN.match(expr)
    if match:
        days = int(match.group(1))
        if days < 1:
            raise ValueError("A day window needs at least 1 day")
        return days_range(today - timedelta(days=days - 1), today, tz, expr)

    if ".." in expr:
        first_text, _, last_text = expr.partition("..")
        return days_range(_parse_date(first_text), _parse_date(last_text), tz, expr)

    if _DATE_PATTERN.match(expr):
        day = _parse_date(expr)
        return days_range(day, day, tz, expr)

    raise ValueError(f"Unrecognised range '{text}'. Use {WINDOW_HELP}")


def _parse_date(text: str) -> date:
    text = text.strip()
    if not _DATE_PATTERN.match(text):
        raise ValueError(f"Expected a YYYY-MM-DD date, got '{text}'")
    return date.fromisoformat(text)
