"""Pomodoro timer: state machine, session history, analytics and export."""

from .analytics import AnalyticsEngine, AnalyticsSummary, DayTotals
from .clock import Clock, ManualClock, SystemClock
from .controller import DispatchResult, TimerController
from .export import ImportResult, SessionExporter, import_into, load, load_file
from .machine import TimerSnapshot, Transition, snapshot, transition
from .session import Session, SessionStatus
from .state import (
    Finish,
    Pause,
    Reset,
    Resume,
    Start,
    Tick,
    TimerConfig,
    TimerPhase,
    TimerState,
    parse_command,
)
from .store import InProgress, SessionStore
from .window import TimeRange, parse_range, resolve_timezone

__all__ = [
    "AnalyticsEngine",
    "AnalyticsSummary",
    "DayTotals",
    "Clock",
    "ManualClock",
    "SystemClock",
    "DispatchResult",
    "TimerController",
    "ImportResult",
    "SessionExporter",
    "import_into",
    "load",
    "load_file",
    "TimerSnapshot",
    "Transition",
    "snapshot",
    "transition",
    "Session",
    "SessionStatus",
    "Start",
    "Pause",
    "Resume",
    "Reset",
    "Finish",
    "Tick",
    "TimerConfig",
    "TimerPhase",
    "TimerState",
    "parse_command",
    "InProgress",
    "SessionStore",
    "TimeRange",
    "parse_range",
    "resolve_timezone",
]
