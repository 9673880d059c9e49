"""Wires the timer components to the user's configuration.

Each CLI invocation builds fresh objects here; the live timer is shared
between invocations through the session store's in-progress record.
"""

from __future__ import annotations

from pomodoro_cli.models.timer.analytics import AnalyticsEngine
from pomodoro_cli.models.timer.clock import Clock, SystemClock
from pomodoro_cli.models.timer.controller import TimerController
from pomodoro_cli.models.timer.export import SessionExporter
from pomodoro_cli.models.timer.store import SessionStore
from pomodoro_cli.models.timer.window import TimeRange, parse_range
from pomodoro_cli.services.config_service import ConfigService, get_config_service


class TimerService:
    """Factory for the store, controller, analytics engine and exporter."""

    def __init__(self, config_service: ConfigService | None = None, clock: Clock | None = None):
        self.config_service = config_service or get_config_service()
        self.clock = clock or SystemClock()
        self._store: SessionStore | None = None

    @property
    def store(self) -> SessionStore:
        if self._store is None:
            self._store = SessionStore(
                self.config_service.db_path,
                timeout=self.config_service.config.storage.timeout_seconds,
            )
        return self._store

    def controller(self) -> TimerController:
        return TimerController(
            self.store,
            config=self.config_service.timer_config(),
            clock=self.clock,
            journal_path=self.config_service.journal_path,
        )

    def analytics(self) -> AnalyticsEngine:
        return AnalyticsEngine(self.store, tz=self.config_service.timezone, clock=self.clock)

    def exporter(self) -> SessionExporter:
        return SessionExporter(self.store, clock=self.clock)

    def time_range(self, expression: str | None) -> TimeRange:
        """Parse a ``--range`` value in the configured timezone.

        Raises:
            ValueError: The expression is not a known window
        """
        return parse_range(expression, self.clock.now(), self.config_service.timezone)
