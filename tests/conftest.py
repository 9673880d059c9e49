"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from the real config, data and log
directories, and to control time.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from pomodoro_cli.models.timer.clock import ManualClock
from pomodoro_cli.models.timer.state import TimerConfig
from pomodoro_cli.models.timer.store import SessionStore

START = datetime(2024, 3, 4, 9, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolate_logger(tmp_path):
    """Send the rotating log file to tmp_path and reset the singleton."""
    import pomodoro_cli.utils.logger as logger_mod

    logger_mod._logger = None
    logging.getLogger("pomodoro_cli").handlers.clear()
    logging.getLogger("pomodoro_cli").propagate = True
    with patch("pomodoro_cli.utils.logger.user_log_dir", return_value=str(tmp_path / "logs")):
        yield
    for handler in logging.getLogger("pomodoro_cli").handlers:
        handler.close()
    logging.getLogger("pomodoro_cli").handlers.clear()
    logging.getLogger("pomodoro_cli").propagate = True
    logger_mod._logger = None


# ---------------------------------------------------------------------------
# Timer building blocks
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock():
    return ManualClock(START)


@pytest.fixture()
def config():
    """Default 25/5/15 cycle with a long break every 4 intervals."""
    return TimerConfig()


@pytest.fixture()
def store(tmp_path):
    return SessionStore(tmp_path / "data" / "sessions.db")


# ---------------------------------------------------------------------------
# Config isolation helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Every module that looks the service up gets this instance, and the UI
    timezone is pinned to UTC so day boundaries are predictable.
    """
    from pomodoro_cli.services.config_service import ConfigService, get_config_service

    get_config_service.cache_clear()
    svc = ConfigService(config_dir=tmp_path / "config", data_dir=tmp_path / "data")
    svc.config.ui.timezone = "UTC"
    with patch(
        "pomodoro_cli.services.config_service.get_config_service", return_value=svc
    ), patch(
        "pomodoro_cli.services.timer_service.get_config_service", return_value=svc
    ), patch("pomodoro_cli.commands.config.get_config_service", return_value=svc):
        yield svc
    get_config_service.cache_clear()


@pytest.fixture()
def cli_clock(clock):
    """Make every command built during the test run on the manual clock."""
    with patch("pomodoro_cli.services.timer_service.SystemClock", return_value=clock):
        yield clock
