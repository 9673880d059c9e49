"""The process-wide timer: serialised access around the pure state machine."""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from pomodoro_cli.models.exceptions import InvalidTransition, StaleTimerState, StorageFailure

from .clock import Clock, SystemClock
from .machine import TimerSnapshot, Transition, has_elapsed, snapshot, transition
from .session import Session
from .state import Command, Start, Tick, TimerConfig, TimerPhase, TimerState
from .store import SessionStore

logger = logging.getLogger(__name__)

Subscriber = Callable[[TimerSnapshot], None]

# Reload-and-retry rounds when another process keeps changing the timer.
_STALE_RETRIES = 3


@dataclass
class DispatchResult:
    """What one command did: the new snapshot and any sessions it produced."""

    snapshot: TimerSnapshot
    sessions: list[Session] = field(default_factory=list)
    phases: list[TimerPhase] = field(default_factory=list)


class TimerController:
    """Owns the single live timer of this process.

    Commands are serialised by a lock. Each dispatch first fires any phase
    edges that elapsed since the last call, then applies the command, then
    writes emitted sessions and the in-progress mirror to the store in one
    transaction, then publishes a snapshot to subscribers.

    The write only succeeds if the in-progress slot still holds the revision
    this controller last saw. When another process got there first the
    timer is reloaded from the store and the command applied again.

    If the store write fails the new state is kept anyway: the emitted
    sessions are spilled to a local journal and the log, and the
    ``StorageFailure`` is re-raised for the caller to report.
    """

    def __init__(
        self,
        store: SessionStore,
        config: TimerConfig | None = None,
        clock: Clock | None = None,
        journal_path: Path | None = None,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.journal_path = journal_path or store.db_path.with_name("unsaved_sessions.jsonl")
        self._lock = threading.Lock()
        self._subscribers: list[Subscriber] = []
        self._default_config = config or TimerConfig()

        self._state = TimerState()
        self._config = self._default_config
        self._revision: str | None = None
        self.reload()

    def reload(self) -> None:
        """Replace the in-memory timer with the store's in-progress record.

        Lets a long-running watcher pick up commands issued by other
        processes. An empty slot means the timer is idle.
        """
        with self._lock:
            self._load()

    def _load(self) -> None:
        restored = self.store.latest_in_progress()
        if restored is None:
            self._state = TimerState()
            self._config = self._default_config
            self._revision = None
            return
        self._state = restored.state
        self._config = restored.config
        self._revision = restored.revision
        logger.debug("loaded %s timer from in-progress record", restored.state.phase.value)

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def config(self) -> TimerConfig:
        """Durations of the running session (or of the next one when idle)."""
        return self._config

    def snapshot(self, catch_up: bool = False) -> TimerSnapshot:
        """Read-only view of the timer.

        With ``catch_up`` the view includes phase edges that have elapsed but
        not been ticked yet. Nothing is written either way.
        """
        with self._lock:
            now = self.clock.now()
            state = self._state
            if catch_up:
                state = self._catch_up(state, now, [])
            return snapshot(state, self._config, now)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a read-only observer. Returns a function that unsubscribes."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def start(self, config: TimerConfig | None = None) -> DispatchResult:
        """Start a session, optionally with durations for this run only."""
        return self.dispatch(Start(), config=config)

    def tick(self) -> DispatchResult:
        return self.dispatch(Tick())

    def dispatch(self, command: Command, config: TimerConfig | None = None) -> DispatchResult:
        """Apply one command to the live timer.

        Raises:
            InvalidTransition: The command does not apply in the current phase.
                Any elapsed edges fired before it are still recorded.
            StorageFailure: Sessions or the in-progress mirror could not be
                written. The in-memory timer has already moved on.
            StaleTimerState: Other processes kept changing the timer through
                every retry. The timer holds their latest state.
        """
        with self._lock:
            for attempt in range(1, _STALE_RETRIES + 1):
                try:
                    now, steps = self._apply(command, config)
                    break
                except StaleTimerState as e:
                    if attempt == _STALE_RETRIES:
                        raise
                    logger.info("%s; reloading timer", e.detail)
                    self._load()

            result = DispatchResult(
                snapshot=snapshot(self._state, self._config, now),
                sessions=[s.session for s in steps if s.session is not None],
                phases=[s.state.phase for s in steps if s.phase_changed],
            )
            subscribers = list(self._subscribers) if steps else []

        logger.info(
            "%s -> %s (%d session(s))",
            command.name,
            result.snapshot.phase.value,
            len(result.sessions),
        )
        for subscriber in subscribers:
            self._notify(subscriber, result.snapshot)
        return result

    def _apply(
        self, command: Command, config: TimerConfig | None
    ) -> tuple[datetime, list[Transition]]:
        now = self.clock.now()
        steps: list[Transition] = []
        state = self._catch_up(self._state, now, steps)
        active_config = self._config
        rejected: InvalidTransition | None = None

        if not isinstance(command, Tick):
            if isinstance(command, Start):
                active_config = config or self._default_config
            try:
                step = transition(state, active_config, command, now)
            except InvalidTransition as e:
                rejected = e
                active_config = self._config
            else:
                steps.append(step)
                state = step.state

        if rejected is None:
            self._commit(steps, state, active_config)
            return now, steps

        # Elapsed edges are kept even though the command itself is refused.
        try:
            if steps:
                self._commit(steps, state, active_config)
            else:
                self._check_revision()
        except StaleTimerState:
            raise
        except StorageFailure:
            raise rejected
        raise rejected

    def _check_revision(self) -> None:
        found = self.store.current_revision()
        if found != self._revision:
            raise StaleTimerState(self._revision, found)

    def _catch_up(self, state: TimerState, now: datetime, steps: list[Transition]) -> TimerState:
        # Every edge moves the phase start forward by a positive duration.
        while has_elapsed(state, self._config, now):
            step = transition(state, self._config, Tick(), now)
            steps.append(step)
            state = step.state
        return state

    def _commit(self, steps: list[Transition], state: TimerState, config: TimerConfig) -> None:
        if not steps:
            return
        sessions = [step.session for step in steps if step.session is not None]
        try:
            self._revision = self.store.record(
                sessions, state, config, expected_revision=self._revision
            )
        except StaleTimerState:
            raise
        except StorageFailure:
            self._state = state
            self._config = config
            self._spill(sessions)
            raise
        self._state = state
        self._config = config

    def _spill(self, sessions: list[Session]) -> None:
        """Keep sessions the store refused in a JSON-lines journal next to it."""
        for session in sessions:
            logger.error("unsaved session: %s", json.dumps(session.to_dict()))
        if not sessions:
            return
        try:
            self.journal_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.journal_path, "a", encoding="utf-8") as f:
                for session in sessions:
                    record = {"spilled_at": datetime.now(UTC).isoformat(), **session.to_dict()}
                    f.write(json.dumps(record) + "\n")
        except OSError as e:
            logger.error("cannot write fallback journal %s: %s", self.journal_path, e)

    @staticmethod
    def _notify(subscriber: Subscriber, current: TimerSnapshot) -> None:
        try:
            subscriber(current)
        except Exception:
            logger.exception("timer subscriber %r failed", subscriber)
