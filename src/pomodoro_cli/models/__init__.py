"""Domain models for Pomodoro CLI."""

from .exceptions import (
    ConfigurationError,
    ExportFailure,
    InvalidTransition,
    PomodoroError,
    StorageFailure,
)

__all__ = [
    "PomodoroError",
    "InvalidTransition",
    "StorageFailure",
    "ExportFailure",
    "ConfigurationError",
]
