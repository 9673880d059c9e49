"""Tests for timer phases, configuration, state serialisation and commands."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from pomodoro_cli.models.exceptions import ConfigurationError
from pomodoro_cli.models.timer.session import Session, SessionStatus
from pomodoro_cli.models.timer.state import (
    Pause,
    Start,
    Tick,
    TimerConfig,
    TimerPhase,
    TimerState,
    parse_command,
)

T0 = datetime(2024, 3, 4, 9, 0, tzinfo=UTC)


class TestTimerPhase:
    def test_running_phases(self):
        assert TimerPhase.WORKING.is_running
        assert TimerPhase.SHORT_BREAK.is_running
        assert TimerPhase.LONG_BREAK.is_running
        assert not TimerPhase.PAUSED.is_running
        assert not TimerPhase.IDLE.is_running
        assert not TimerPhase.FINISHED.is_running

    def test_label(self):
        assert TimerPhase.SHORT_BREAK.label == "Short Break"


class TestTimerConfig:
    def test_defaults(self):
        config = TimerConfig()
        assert config.work == timedelta(minutes=25)
        assert config.short_break == timedelta(minutes=5)
        assert config.long_break == timedelta(minutes=15)
        assert config.intervals_before_long_break == 4

    def test_from_minutes(self):
        config = TimerConfig.from_minutes(work=50, short_break=10, long_break=30)
        assert config.work == timedelta(minutes=50)
        assert config.duration_for(TimerPhase.LONG_BREAK) == timedelta(minutes=30)

    @pytest.mark.parametrize("work", [0, -5])
    def test_non_positive_duration_rejected(self, work):
        with pytest.raises(ConfigurationError) as exc_info:
            TimerConfig.from_minutes(work=work)
        assert exc_info.value.key == "work"

    @pytest.mark.parametrize("count", [0, -1, True])
    def test_interval_count_must_be_positive_int(self, count):
        with pytest.raises(ConfigurationError):
            TimerConfig(intervals_before_long_break=count)

    def test_duration_for_non_running_phase(self):
        with pytest.raises(ValueError):
            TimerConfig().duration_for(TimerPhase.IDLE)

    def test_dict_round_trip(self):
        config = TimerConfig.from_minutes(work=0.5, short_break=1, long_break=2, intervals_before_long_break=3)
        assert TimerConfig.from_dict(config.to_dict()) == config


class TestTimerState:
    def test_default_is_idle(self):
        state = TimerState()
        assert state.phase == TimerPhase.IDLE
        assert not state.is_active
        assert state.current_phase == TimerPhase.IDLE

    def test_current_phase_while_paused(self):
        state = TimerState(phase=TimerPhase.PAUSED, suspended_phase=TimerPhase.LONG_BREAK)
        assert state.current_phase == TimerPhase.LONG_BREAK
        assert state.is_active

    def test_dict_round_trip_keeps_offset(self):
        local = datetime(2024, 3, 4, 10, 0, tzinfo=UTC).astimezone()
        state = TimerState(
            phase=TimerPhase.PAUSED,
            suspended_phase=TimerPhase.WORKING,
            elapsed_at_pause=timedelta(minutes=7, seconds=3),
            completed_intervals=2,
            work_started_at=local,
            end_requested=True,
        )
        restored = TimerState.from_dict(state.to_dict())
        assert restored == state
        assert restored.work_started_at.utcoffset() == local.utcoffset()

    def test_evolve_returns_new_state(self):
        state = TimerState()
        changed = state.evolve(completed_intervals=3)
        assert changed.completed_intervals == 3
        assert state.completed_intervals == 0


class TestCommands:
    @pytest.mark.parametrize(
        "word, expected", [("start", Start()), ("PAUSE", Pause()), (" tick ", Tick())]
    )
    def test_parse_command(self, word, expected):
        assert parse_command(word) == expected

    def test_unknown_command_rejected(self):
        with pytest.raises(ValueError, match="Unknown command 'skip'"):
            parse_command("skip")


class TestSession:
    @pytest.fixture
    def session(self):
        return Session(
            session_id="abc",
            phase=TimerPhase.WORKING,
            scheduled=timedelta(minutes=25),
            actual=timedelta(minutes=8),
            started_at=T0,
            ended_at=T0 + timedelta(minutes=8),
            status=SessionStatus.ABANDONED,
        )

    def test_flags(self, session):
        assert session.is_work
        assert not session.is_completed

    def test_superseding_creates_linked_record(self, session):
        correction = session.superseding(status=SessionStatus.COMPLETED)
        assert correction.session_id != session.session_id
        assert correction.supersedes == session.session_id
        assert correction.status == SessionStatus.COMPLETED
        assert session.status == SessionStatus.ABANDONED

    def test_superseding_rejects_identity_changes(self, session):
        with pytest.raises(ValueError):
            session.superseding(session_id="other")

    def test_dict_round_trip(self, session):
        assert Session.from_dict(session.to_dict()) == session
