"""Configuration models for Pomodoro CLI.

The config file is a JSON dump of ``AppConfig``. Every section validates on
assignment, so a bad value is rejected before it reaches the file.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pomodoro_cli.models.timer.state import TimerConfig
from pomodoro_cli.models.timer.window import resolve_timezone
from pomodoro_cli.utils.ui.formatters import OUTPUT_FORMATS


class TimerSettings(BaseModel):
    """Durations of the Pomodoro cycle, in minutes."""

    model_config = ConfigDict(validate_assignment=True)

    work_minutes: float = Field(default=25, gt=0)
    short_break_minutes: float = Field(default=5, gt=0)
    long_break_minutes: float = Field(default=15, gt=0)
    intervals_before_long_break: int = Field(default=4, ge=1)


class StorageSettings(BaseModel):
    """Session database location and lock timeout."""

    model_config = ConfigDict(validate_assignment=True)

    db_path: str | None = Field(default=None, description="Defaults to the user data dir")
    timeout_seconds: float = Field(default=5.0, gt=0)


class UISettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    timezone: str | None = Field(default=None, description="IANA name; local time when unset")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        resolve_timezone(v.strip())
        return v.strip()


class OutputSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    format: str = Field(default="pretty")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in OUTPUT_FORMATS:
            raise ValueError(f"must be one of {', '.join(OUTPUT_FORMATS)}")
        return v


class AppConfig(BaseModel):
    """Main Pomodoro CLI configuration"""

    model_config = ConfigDict(validate_assignment=True)

    timer: TimerSettings = Field(default_factory=TimerSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    ui: UISettings = Field(default_factory=UISettings)
    output: OutputSettings = Field(default_factory=OutputSettings)

    def to_timer_config(self) -> TimerConfig:
        """Build the state machine's ``TimerConfig`` from the timer section."""
        return TimerConfig.from_minutes(
            work=self.timer.work_minutes,
            short_break=self.timer.short_break_minutes,
            long_break=self.timer.long_break_minutes,
            intervals_before_long_break=self.timer.intervals_before_long_break,
        )
