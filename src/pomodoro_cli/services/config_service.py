"""Configuration service for managing Pomodoro CLI configuration.

This module provides the ConfigService class, the single source of truth for
settings. It handles:

- Loading and saving config.json in the user config dir
- Reading and writing single settings by dotted key (``timer.work_minutes``)
  or by their short aliases (``work``)
- Resolving derived values: the session database path, the timezone and the
  ``TimerConfig`` the state machine runs with
"""

from __future__ import annotations

import logging
from datetime import tzinfo
from functools import lru_cache
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import BaseModel, ValidationError

from pomodoro_cli.models.config_models import AppConfig
from pomodoro_cli.models.exceptions import ConfigurationError
from pomodoro_cli.models.timer.state import TimerConfig
from pomodoro_cli.models.timer.window import resolve_timezone

APP_NAME = "pomodoro_cli"

ALIASES = {
    "work": "timer.work_minutes",
    "break": "timer.short_break_minutes",
    "short_break": "timer.short_break_minutes",
    "long_break": "timer.long_break_minutes",
    "intervals": "timer.intervals_before_long_break",
    "timezone": "ui.timezone",
    "format": "output.format",
}

_NULL_VALUES = {"", "none", "null"}

logger = logging.getLogger(__name__)


def resolve_key(key: str) -> str:
    """Expand an alias to its dotted key."""
    return ALIASES.get(key, key)


class ConfigService:
    """Service for loading, changing and saving the application configuration."""

    def __init__(self, config_dir: Path | None = None, data_dir: Path | None = None):
        self.config_dir = Path(config_dir or user_config_dir(APP_NAME))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(data_dir or user_data_dir(APP_NAME))

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from disk, falling back to defaults on first run.

        Raises:
            ConfigurationError: The file exists but is not a valid config
        """
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # First run; defaults are written on the first change.
            self._config = AppConfig()
        except ValidationError as e:
            raise ConfigurationError(
                "config file", str(self.config_path), _first_error(e)
            ) from e
        except OSError as e:
            raise ConfigurationError("config file", str(self.config_path), str(e)) from e

        return self._config

    def save_config(self) -> None:
        """Save the current configuration to disk."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self.config.model_dump_json(indent=4))
        except OSError as e:
            raise ConfigurationError("config file", str(self.config_path), str(e)) from e

    def reset_config(self) -> None:
        """Reset configuration to defaults."""
        self._config = AppConfig()
        if self.config_path.exists():
            self.config_path.unlink()
        logger.info("configuration reset to defaults")

    def keys(self) -> list[str]:
        """All dotted setting keys, in declaration order."""
        return [
            f"{section}.{name}"
            for section, field in AppConfig.model_fields.items()
            for name in field.annotation.model_fields  # type: ignore[union-attr]
        ]

    def as_dict(self) -> dict[str, Any]:
        return {key: self.get(key) for key in self.keys()}

    def _locate(self, key: str, value: Any = None) -> tuple[BaseModel, str]:
        dotted = resolve_key(key)
        section_name, _, field_name = dotted.partition(".")
        section = getattr(self.config, section_name, None)
        if not isinstance(section, BaseModel) or field_name not in type(section).model_fields:
            raise ConfigurationError(key, value, "unknown setting")
        return section, field_name

    def get(self, key: str) -> Any:
        """Read one setting.

        Raises:
            ConfigurationError: The key is unknown
        """
        section, field_name = self._locate(key)
        return getattr(section, field_name)

    def set(self, key: str, value: Any) -> Any:
        """Validate and store one setting, then save the file.

        Values arrive as strings from the command line; pydantic coerces
        them. ``none`` clears an optional setting.

        Returns:
            The stored value after coercion

        Raises:
            ConfigurationError: Unknown key or rejected value. Nothing is
                changed or saved in that case.
        """
        section, field_name = self._locate(key, value)
        field = type(section).model_fields[field_name]
        if (
            isinstance(value, str)
            and value.strip().lower() in _NULL_VALUES
            and field.default is None
        ):
            value = None

        try:
            setattr(section, field_name, value)
        except ValidationError as e:
            raise ConfigurationError(resolve_key(key), value, _first_error(e)) from e

        self.save_config()
        stored = getattr(section, field_name)
        logger.info("config %s set to %r", resolve_key(key), stored)
        return stored

    @property
    def db_path(self) -> Path:
        configured = self.config.storage.db_path
        if configured:
            return Path(configured).expanduser()
        return self.data_dir / "sessions.db"

    @property
    def journal_path(self) -> Path:
        """Where sessions go when the database refuses them."""
        return self.data_dir / "unsaved_sessions.jsonl"

    @property
    def timezone(self) -> tzinfo:
        return resolve_timezone(self.config.ui.timezone)

    def timer_config(self, **overrides: float | None) -> TimerConfig:
        """Timer durations from config, with per-run overrides in minutes.

        Raises:
            ConfigurationError: An override is not positive
        """
        settings = self.config.timer.model_dump()
        for name, value in overrides.items():
            if value is not None:
                settings[name] = value
        try:
            return AppConfig(timer=settings).to_timer_config()
        except ValidationError as e:
            error = e.errors()[0]
            key = ".".join(str(part) for part in error["loc"])
            raise ConfigurationError(key, error.get("input"), error["msg"]) from e


def _first_error(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    return details[0]["msg"]


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
