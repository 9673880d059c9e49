"""Pure transition function of the Pomodoro timer.

``transition(state, config, command, now)`` returns the next state and at
most one session record. It never reads the clock, never touches storage and
never mutates its inputs, so the same inputs always give the same result.

Transition table::

    Idle|Finished --start-->  Working
    Working       --elapses-> ShortBreak | LongBreak | Finished   (logs Completed)
    ShortBreak    --elapses-> Working | Finished
    LongBreak     --elapses-> Working | Finished                 (new cycle)
    running       --pause-->  Paused(suspended=running)
    Paused        --resume--> suspended phase
    active|Paused --reset-->  Idle                               (logs Abandoned if work)
    Finished      --reset-->  Idle
    active|Paused --finish--> same phase, end requested
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from pomodoro_cli.models.exceptions import InvalidTransition

from .session import Session, SessionStatus, new_session_id
from .state import (
    BREAK_PHASES,
    Command,
    Finish,
    Pause,
    Reset,
    Resume,
    Start,
    Tick,
    TimerConfig,
    TimerPhase,
    TimerState,
)

ZERO = timedelta(0)


@dataclass(frozen=True)
class Transition:
    """Result of applying one command."""

    state: TimerState
    session: Session | None = None
    previous_phase: TimerPhase | None = None

    @property
    def phase_changed(self) -> bool:
        return self.previous_phase is not None and self.previous_phase != self.state.phase


@dataclass(frozen=True)
class TimerSnapshot:
    """Read-only view of the timer handed to renderers and notifiers."""

    phase: TimerPhase
    suspended_phase: TimerPhase | None
    duration: timedelta
    elapsed: timedelta
    remaining: timedelta
    completed_intervals: int
    intervals_before_long_break: int
    end_requested: bool
    taken_at: datetime

    @property
    def progress(self) -> float:
        if self.duration <= ZERO:
            return 0.0
        return max(0.0, min(1.0, self.elapsed / self.duration))

    def to_dict(self) -> dict:
        return {
            "phase": self.phase.value,
            "suspended_phase": self.suspended_phase.value if self.suspended_phase else None,
            "duration_seconds": self.duration.total_seconds(),
            "elapsed_seconds": self.elapsed.total_seconds(),
            "remaining_seconds": self.remaining.total_seconds(),
            "completed_intervals": self.completed_intervals,
            "intervals_before_long_break": self.intervals_before_long_break,
            "end_requested": self.end_requested,
            "taken_at": self.taken_at.isoformat(),
        }


def elapsed(state: TimerState, now: datetime) -> timedelta:
    """Time spent in the current phase, excluding paused time."""
    if state.phase == TimerPhase.PAUSED:
        return state.elapsed_at_pause
    if state.phase.is_running and state.phase_started_at is not None:
        return max(ZERO, now - state.phase_started_at)
    return ZERO


def remaining(state: TimerState, config: TimerConfig, now: datetime) -> timedelta:
    """Configured duration minus elapsed; negative once the phase has run out."""
    phase = state.current_phase
    if not phase.is_running:
        return ZERO
    return config.duration_for(phase) - elapsed(state, now)


def has_elapsed(state: TimerState, config: TimerConfig, now: datetime) -> bool:
    return state.phase.is_running and remaining(state, config, now) <= ZERO


def snapshot(state: TimerState, config: TimerConfig, now: datetime) -> TimerSnapshot:
    phase = state.current_phase
    duration = config.duration_for(phase) if phase.is_running else ZERO
    spent = min(elapsed(state, now), duration)
    return TimerSnapshot(
        phase=state.phase,
        suspended_phase=state.suspended_phase,
        duration=duration,
        elapsed=spent,
        remaining=max(ZERO, duration - spent),
        completed_intervals=state.completed_intervals,
        intervals_before_long_break=config.intervals_before_long_break,
        end_requested=state.end_requested,
        taken_at=now,
    )


def transition(
    state: TimerState,
    config: TimerConfig,
    command: Command,
    now: datetime,
    id_factory: Callable[[], str] = new_session_id,
) -> Transition:
    """Apply ``command`` to ``state`` at time ``now``.

    Raises:
        InvalidTransition: The command is not valid in the current phase. The
            input state is unchanged.
    """
    if isinstance(command, Tick):
        return _tick(state, config, now, id_factory)

    if has_elapsed(state, config, now):
        raise InvalidTransition(
            command.name, state.phase.label, "the phase has run out and must be ticked first"
        )

    if isinstance(command, Start):
        return _start(state, now)
    if isinstance(command, Pause):
        return _pause(state, now)
    if isinstance(command, Resume):
        return _resume(state, now)
    if isinstance(command, Reset):
        return _reset(state, config, now, id_factory)
    if isinstance(command, Finish):
        return _finish(state)
    raise TypeError(f"Unsupported command: {command!r}")


def _start(state: TimerState, now: datetime) -> Transition:
    if state.phase not in (TimerPhase.IDLE, TimerPhase.FINISHED):
        raise InvalidTransition("start", state.phase.label, "a session is already running")
    return Transition(
        state=TimerState(
            phase=TimerPhase.WORKING,
            phase_started_at=now,
            work_started_at=now,
        ),
        previous_phase=state.phase,
    )


def _pause(state: TimerState, now: datetime) -> Transition:
    if not state.phase.is_running:
        raise InvalidTransition("pause", state.phase.label)
    return Transition(
        state=state.evolve(
            phase=TimerPhase.PAUSED,
            suspended_phase=state.phase,
            elapsed_at_pause=elapsed(state, now),
            phase_started_at=None,
        ),
        previous_phase=state.phase,
    )


def _resume(state: TimerState, now: datetime) -> Transition:
    if state.phase != TimerPhase.PAUSED or state.suspended_phase is None:
        raise InvalidTransition("resume", state.phase.label, "the timer is not paused")
    return Transition(
        state=state.evolve(
            phase=state.suspended_phase,
            suspended_phase=None,
            phase_started_at=now - state.elapsed_at_pause,
            elapsed_at_pause=ZERO,
        ),
        previous_phase=state.phase,
    )


def _reset(
    state: TimerState,
    config: TimerConfig,
    now: datetime,
    id_factory: Callable[[], str],
) -> Transition:
    if state.phase == TimerPhase.IDLE:
        raise InvalidTransition("reset", state.phase.label, "nothing to reset")

    session = None
    if state.current_phase == TimerPhase.WORKING and state.is_active:
        session = Session(
            session_id=id_factory(),
            phase=TimerPhase.WORKING,
            scheduled=config.work,
            actual=elapsed(state, now),
            started_at=state.work_started_at or now,
            ended_at=now,
            status=SessionStatus.ABANDONED,
        )
    return Transition(state=TimerState(), session=session, previous_phase=state.phase)


def _finish(state: TimerState) -> Transition:
    if not state.is_active:
        raise InvalidTransition("finish", state.phase.label, "no session is running")
    if state.end_requested:
        raise InvalidTransition("finish", state.phase.label, "finish already requested")
    return Transition(state=state.evolve(end_requested=True), previous_phase=state.phase)


def _tick(
    state: TimerState,
    config: TimerConfig,
    now: datetime,
    id_factory: Callable[[], str],
) -> Transition:
    """Fire the elapsed edge of the running phase, if any.

    Only one edge fires per call. The next phase starts exactly where the
    previous one ended, so callers catching up after a gap tick repeatedly.
    """
    if state.phase_started_at is None or not has_elapsed(state, config, now):
        return Transition(state=state)

    phase = state.phase
    boundary = state.phase_started_at + config.duration_for(phase)

    if phase == TimerPhase.WORKING:
        completed = state.completed_intervals + 1
        session = Session(
            session_id=id_factory(),
            phase=TimerPhase.WORKING,
            scheduled=config.work,
            actual=config.work,
            started_at=state.work_started_at or state.phase_started_at,
            ended_at=boundary,
            status=SessionStatus.COMPLETED,
        )
        if state.end_requested:
            next_state = TimerState(
                phase=TimerPhase.FINISHED, completed_intervals=completed
            )
        else:
            next_phase = (
                TimerPhase.LONG_BREAK
                if completed % config.intervals_before_long_break == 0
                else TimerPhase.SHORT_BREAK
            )
            next_state = state.evolve(
                phase=next_phase,
                phase_started_at=boundary,
                completed_intervals=completed,
                work_started_at=None,
            )
        return Transition(state=next_state, session=session, previous_phase=phase)

    if phase in BREAK_PHASES:
        if state.end_requested:
            next_state = TimerState(
                phase=TimerPhase.FINISHED,
                completed_intervals=state.completed_intervals,
            )
        else:
            next_state = state.evolve(
                phase=TimerPhase.WORKING,
                phase_started_at=boundary,
                work_started_at=boundary,
                completed_intervals=(
                    0 if phase == TimerPhase.LONG_BREAK else state.completed_intervals
                ),
            )
        return Transition(state=next_state, previous_phase=phase)

    return Transition(state=state)
