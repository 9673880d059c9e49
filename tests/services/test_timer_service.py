"""Tests for TimerService wiring."""

from datetime import timedelta

import pytest

from pomodoro_cli.models.timer.state import TimerPhase
from pomodoro_cli.services.timer_service import TimerService


@pytest.fixture
def service(tmp_config, clock):
    return TimerService(config_service=tmp_config, clock=clock)


def test_store_is_created_lazily_once(service, tmp_config):
    assert not tmp_config.db_path.exists()
    assert service.store is service.store
    assert tmp_config.db_path.exists()


def test_controller_uses_configured_durations(service, tmp_config):
    tmp_config.set("work", "40")
    controller = service.controller()
    assert controller.config.work == timedelta(minutes=40)
    assert controller.journal_path == tmp_config.journal_path


def test_controllers_share_timer_through_store(service, clock):
    service.controller().start()
    clock.advance(minutes=3)
    assert service.controller().snapshot().phase == TimerPhase.WORKING
    assert service.controller().snapshot().elapsed == timedelta(minutes=3)


def test_time_range_uses_configured_timezone(service, tmp_config):
    tmp_config.set("timezone", "Asia/Tokyo")
    window = service.time_range("today")
    # 09:00 UTC on 2024-03-04 is 18:00 in Tokyo
    assert window.start.isoformat() == "2024-03-04T00:00:00+09:00"


def test_time_range_rejects_unknown(service):
    with pytest.raises(ValueError):
        service.time_range("someday")


def test_defaults_from_module_lookups(tmp_config, cli_clock):
    service = TimerService()
    assert service.config_service is tmp_config
    assert service.clock is cli_clock
    assert service.analytics().clock is cli_clock
    assert service.exporter().clock is cli_clock
