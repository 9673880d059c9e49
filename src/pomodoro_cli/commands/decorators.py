"""Decorators for command functions."""

import functools
import time
import traceback
from collections.abc import Callable

import typer

from pomodoro_cli.models.exceptions import (
    ConfigurationError,
    ExportFailure,
    InvalidTransition,
    StorageFailure,
)
from pomodoro_cli.utils import exit_codes
from pomodoro_cli.utils.logger import get_logger
from pomodoro_cli.utils.ui.formatters import format_error


class AppError(Exception):
    """Custom application error with exit code."""

    def __init__(self, message: str, exit_code: int = exit_codes.ERROR_GENERAL):
        super().__init__(message)
        self.exit_code = exit_code


# Checked in order; the first matching class decides the exit code.
ERROR_EXIT_CODES: list[tuple[type[Exception], int]] = [
    (AppError, exit_codes.ERROR_GENERAL),
    (InvalidTransition, exit_codes.ERROR_INVALID_TRANSITION),
    (StorageFailure, exit_codes.ERROR_STORAGE),
    (ExportFailure, exit_codes.ERROR_EXPORT),
    (ConfigurationError, exit_codes.ERROR_CONFIGURATION),
]


def exit_code_for(error: Exception) -> int | None:
    """Exit code of a known error class, None for unexpected errors."""
    if isinstance(error, AppError):
        return error.exit_code
    for error_class, code in ERROR_EXIT_CODES:
        if isinstance(error, error_class):
            return code
    return None


def command_wrapper(func: Callable):
    """Wrap a command with timing logs and error-to-exit-code mapping."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger()
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            result = func(*args, **kwargs)
            elapsed = time.monotonic() - start
            logger.info("command completed: %s (%.3fs)", cmd, elapsed)
            return result

        except typer.Exit:
            # Re-raise Typer's own exits (like --help or explicit Exit(0))
            raise

        except Exception as e:
            elapsed = time.monotonic() - start
            code = exit_code_for(e)
            if code is not None:
                logger.error(
                    "command failed: %s (%.3fs) - %s: %s",
                    cmd,
                    elapsed,
                    type(e).__name__,
                    str(e),
                )
                format_error(str(e))
                raise typer.Exit(code=code) from e

            logger.error(
                "command failed: %s (%.3fs) - %s\n%s",
                cmd,
                elapsed,
                str(e),
                traceback.format_exc(),
            )
            # Generic fallback for unexpected crashes
            format_error(f"An unexpected error occurred: {str(e)}")
            raise typer.Exit(code=exit_codes.ERROR_GENERAL) from e

    return wrapper
