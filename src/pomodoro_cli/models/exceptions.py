"""Custom exceptions for Pomodoro CLI."""

from __future__ import annotations

from typing import Any


class PomodoroError(Exception):
    """Base exception for all Pomodoro CLI errors."""


class InvalidTransition(PomodoroError):
    """Raised when a command is not valid for the current phase.

    The timer state is left exactly as it was.
    """

    def __init__(self, command: str, phase: str, reason: str | None = None):
        self.command = command
        self.phase = phase
        self.reason = reason
        message = f"Cannot '{command}' while {phase}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StorageFailure(PomodoroError):
    """Raised when the session store cannot be read or written."""

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Session store {operation} failed: {detail}")


class ExportFailure(PomodoroError):
    """Raised on I/O errors of an export sink or a malformed import document."""

    def __init__(self, sink: str, detail: str):
        self.sink = sink
        self.detail = detail
        super().__init__(f"Export to {sink} failed: {detail}")


class ConfigurationError(PomodoroError):
    """Raised when a timer setting is rejected (non-positive value, unknown key)."""

    def __init__(self, key: str, value: Any, reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value for '{key}' ({value!r}): {reason}")


class StaleTimerState(StorageFailure):
    """Raised when the in-progress slot was changed by another process.

    Nothing is written. The caller should reload the timer and try again.
    """

    def __init__(self, expected: str | None, found: str | None):
        self.expected = expected
        self.found = found
        super().__init__(
            "append", f"in-progress timer changed elsewhere (expected {expected}, found {found})"
        )
