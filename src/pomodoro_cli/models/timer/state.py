"""Timer phases, configuration, live state and the commands that drive it."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, ClassVar

from pomodoro_cli.models.exceptions import ConfigurationError


class TimerPhase(str, Enum):
    """One discrete period of the Pomodoro cycle, plus the idle/paused/finished states."""

    IDLE = "idle"
    WORKING = "working"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"
    PAUSED = "paused"
    FINISHED = "finished"

    @property
    def is_running(self) -> bool:
        """Whether a countdown is ticking in this phase."""
        return self in RUNNING_PHASES

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


RUNNING_PHASES = frozenset(
    {TimerPhase.WORKING, TimerPhase.SHORT_BREAK, TimerPhase.LONG_BREAK}
)
BREAK_PHASES = frozenset({TimerPhase.SHORT_BREAK, TimerPhase.LONG_BREAK})


@dataclass(frozen=True)
class TimerConfig:
    """Durations of the cycle. Validated on construction."""

    work: timedelta = timedelta(minutes=25)
    short_break: timedelta = timedelta(minutes=5)
    long_break: timedelta = timedelta(minutes=15)
    intervals_before_long_break: int = 4

    def __post_init__(self) -> None:
        for name in ("work", "short_break", "long_break"):
            value = getattr(self, name)
            if not isinstance(value, timedelta) or value <= timedelta(0):
                raise ConfigurationError(name, value, "duration must be positive")
        count = self.intervals_before_long_break
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise ConfigurationError(
                "intervals_before_long_break", count, "must be an integer >= 1"
            )

    @classmethod
    def from_minutes(
        cls,
        work: float = 25,
        short_break: float = 5,
        long_break: float = 15,
        intervals_before_long_break: int = 4,
    ) -> TimerConfig:
        return cls(
            work=timedelta(minutes=work),
            short_break=timedelta(minutes=short_break),
            long_break=timedelta(minutes=long_break),
            intervals_before_long_break=intervals_before_long_break,
        )

    def duration_for(self, phase: TimerPhase) -> timedelta:
        """Scheduled duration of a running phase."""
        if phase == TimerPhase.WORKING:
            return self.work
        if phase == TimerPhase.SHORT_BREAK:
            return self.short_break
        if phase == TimerPhase.LONG_BREAK:
            return self.long_break
        raise ValueError(f"Phase {phase.value} has no duration")

    def to_dict(self) -> dict[str, Any]:
        return {
            "work_seconds": self.work.total_seconds(),
            "short_break_seconds": self.short_break.total_seconds(),
            "long_break_seconds": self.long_break.total_seconds(),
            "intervals_before_long_break": self.intervals_before_long_break,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimerConfig:
        return cls(
            work=timedelta(seconds=data["work_seconds"]),
            short_break=timedelta(seconds=data["short_break_seconds"]),
            long_break=timedelta(seconds=data["long_break_seconds"]),
            intervals_before_long_break=data["intervals_before_long_break"],
        )


@dataclass(frozen=True)
class TimerState:
    """Live timer state. Only the transition function produces new values."""

    phase: TimerPhase = TimerPhase.IDLE
    suspended_phase: TimerPhase | None = None
    phase_started_at: datetime | None = None
    elapsed_at_pause: timedelta = field(default=timedelta(0))
    completed_intervals: int = 0
    work_started_at: datetime | None = None
    end_requested: bool = False

    @property
    def current_phase(self) -> TimerPhase:
        """The phase that is counting down, or would be if not paused."""
        if self.phase == TimerPhase.PAUSED and self.suspended_phase is not None:
            return self.suspended_phase
        return self.phase

    @property
    def is_active(self) -> bool:
        return self.phase.is_running or self.phase == TimerPhase.PAUSED

    def evolve(self, **changes: Any) -> TimerState:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Serialise for the in-progress record."""
        data = asdict(self)
        data["phase"] = self.phase.value
        data["suspended_phase"] = (
            self.suspended_phase.value if self.suspended_phase else None
        )
        data["phase_started_at"] = _iso(self.phase_started_at)
        data["work_started_at"] = _iso(self.work_started_at)
        data["elapsed_at_pause"] = self.elapsed_at_pause.total_seconds()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimerState:
        suspended = data.get("suspended_phase")
        return cls(
            phase=TimerPhase(data["phase"]),
            suspended_phase=TimerPhase(suspended) if suspended else None,
            phase_started_at=_parse_iso(data.get("phase_started_at")),
            elapsed_at_pause=timedelta(seconds=data.get("elapsed_at_pause", 0)),
            completed_intervals=data.get("completed_intervals", 0),
            work_started_at=_parse_iso(data.get("work_started_at")),
            end_requested=data.get("end_requested", False),
        )


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_iso(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


# Commands form a closed set. Anything outside it is rejected by parse_command.


@dataclass(frozen=True)
class Start:
    name: ClassVar[str] = "start"


@dataclass(frozen=True)
class Pause:
    name: ClassVar[str] = "pause"


@dataclass(frozen=True)
class Resume:
    name: ClassVar[str] = "resume"


@dataclass(frozen=True)
class Reset:
    name: ClassVar[str] = "reset"


@dataclass(frozen=True)
class Finish:
    """Signal that the session should end when the current phase elapses."""

    name: ClassVar[str] = "finish"


@dataclass(frozen=True)
class Tick:
    """Evaluate the countdown; fires at most one elapsed edge."""

    name: ClassVar[str] = "tick"


Command = Start | Pause | Resume | Reset | Finish | Tick

COMMANDS: dict[str, type[Command]] = {
    cls.name: cls for cls in (Start, Pause, Resume, Reset, Finish, Tick)
}


def parse_command(name: str) -> Command:
    """Map a command word to its variant, rejecting unknown words."""
    try:
        return COMMANDS[name.strip().lower()]()
    except KeyError:
        valid = ", ".join(sorted(COMMANDS))
        raise ValueError(f"Unknown command '{name}'. Expected one of: {valid}") from None
