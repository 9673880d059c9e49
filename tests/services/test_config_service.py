"""Tests for ConfigService."""

from datetime import UTC, timedelta
from unittest.mock import patch

import pytest

from pomodoro_cli.models.config_models import AppConfig
from pomodoro_cli.models.exceptions import ConfigurationError
from pomodoro_cli.services.config_service import (
    ConfigService,
    get_config_service,
    resolve_key,
)


@pytest.fixture
def service(tmp_path):
    return ConfigService(config_dir=tmp_path / "config", data_dir=tmp_path / "data")


class TestLoadSave:
    def test_defaults_on_first_run(self, service):
        assert service.config == AppConfig()
        assert not service.config_path.exists()

    def test_round_trip_through_file(self, service, tmp_path):
        service.set("work", "45")
        reloaded = ConfigService(config_dir=tmp_path / "config", data_dir=tmp_path / "data")
        assert reloaded.get("timer.work_minutes") == 45

    def test_invalid_file_raises(self, service):
        service.config_path.parent.mkdir(parents=True)
        service.config_path.write_text('{"timer": {"work_minutes": -5}}')
        with pytest.raises(ConfigurationError) as exc_info:
            service.load_config()
        assert exc_info.value.key == "config file"

    def test_garbage_file_raises(self, service):
        service.config_path.parent.mkdir(parents=True)
        service.config_path.write_text("not json")
        with pytest.raises(ConfigurationError):
            service.load_config()

    def test_reset_removes_file(self, service):
        service.set("intervals", "6")
        service.reset_config()
        assert service.get("intervals") == 4
        assert not service.config_path.exists()


class TestKeys:
    def test_resolve_alias(self):
        assert resolve_key("work") == "timer.work_minutes"
        assert resolve_key("break") == resolve_key("short_break")
        assert resolve_key("timer.long_break_minutes") == "timer.long_break_minutes"

    def test_keys_are_dotted(self, service):
        keys = service.keys()
        assert keys[0] == "timer.work_minutes"
        assert "storage.db_path" in keys
        assert "output.format" in keys

    def test_as_dict(self, service):
        assert service.as_dict()["timer.short_break_minutes"] == 5

    @pytest.mark.parametrize("key", ["nope", "timer", "timer.nope", "config_path.x"])
    def test_unknown_key(self, service, key):
        with pytest.raises(ConfigurationError, match="unknown setting"):
            service.get(key)


class TestSet:
    def test_coerces_strings(self, service):
        assert service.set("intervals", "3") == 3
        assert service.set("work", "12.5") == 12.5

    @pytest.mark.parametrize(
        "key, value",
        [
            ("work", "0"),
            ("break", "-1"),
            ("long_break", "abc"),
            ("intervals", "0"),
            ("format", "xml"),
            ("storage.timeout_seconds", "0"),
        ],
    )
    def test_rejected_values_leave_config_unchanged(self, service, key, value):
        before = service.get(key)
        with pytest.raises(ConfigurationError) as exc_info:
            service.set(key, value)
        assert exc_info.value.key == resolve_key(key)
        assert service.get(key) == before
        assert not service.config_path.exists()

    def test_null_clears_optional(self, service):
        service.set("timezone", "Europe/Berlin")
        assert service.set("timezone", "none") is None

    def test_null_on_required_is_rejected(self, service):
        with pytest.raises(ConfigurationError):
            service.set("work", "none")


class TestDerivedValues:
    def test_default_db_path(self, service, tmp_path):
        assert service.db_path == tmp_path / "data" / "sessions.db"
        assert service.journal_path.parent == tmp_path / "data"

    def test_configured_db_path(self, service, tmp_path):
        service.set("storage.db_path", str(tmp_path / "elsewhere.db"))
        assert service.db_path == tmp_path / "elsewhere.db"

    def test_timezone(self, service):
        service.set("timezone", "UTC")
        assert service.timezone.utcoffset(None) == UTC.utcoffset(None)

    def test_timer_config_defaults(self, service):
        config = service.timer_config()
        assert config.work == timedelta(minutes=25)
        assert config.intervals_before_long_break == 4

    def test_timer_config_overrides(self, service):
        config = service.timer_config(work_minutes=50, short_break_minutes=None)
        assert config.work == timedelta(minutes=50)
        assert config.short_break == timedelta(minutes=5)
        assert service.get("work") == 25

    def test_timer_config_rejects_bad_override(self, service):
        with pytest.raises(ConfigurationError) as exc_info:
            service.timer_config(intervals_before_long_break=0)
        assert "intervals_before_long_break" in exc_info.value.key


def test_get_config_service_is_cached(tmp_path):
    get_config_service.cache_clear()
    with patch("pomodoro_cli.services.config_service.user_config_dir", return_value=str(tmp_path / "c")), patch(
        "pomodoro_cli.services.config_service.user_data_dir", return_value=str(tmp_path / "d")
    ):
        first = get_config_service()
        assert get_config_service() is first
        assert first.config_dir == tmp_path / "c"
    get_config_service.cache_clear()
