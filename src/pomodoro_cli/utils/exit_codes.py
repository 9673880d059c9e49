"""
Exit codes for Pomodoro CLI.

Each failure class of the timer has its own code so scripts can tell a
rejected command from a storage or export problem. These values are stable.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments (bad option value, unknown window, unknown command)
ERROR_INVALID_ARGS = 2

# Command not valid for the current timer phase; state unchanged
ERROR_INVALID_TRANSITION = 3

# Session store could not be read or written
ERROR_STORAGE = 4

# Export sink I/O error or unreadable import document; store untouched
ERROR_EXPORT = 5

# Rejected timer setting (non-positive duration, interval count < 1, unknown key)
ERROR_CONFIGURATION = 6


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_INVALID_TRANSITION: "ERROR_INVALID_TRANSITION",
        ERROR_STORAGE: "ERROR_STORAGE",
        ERROR_EXPORT: "ERROR_EXPORT",
        ERROR_CONFIGURATION: "ERROR_CONFIGURATION",
    }
    return code_names.get(code, f"UNKNOWN({code})")


def get_exit_code_description(code: int) -> str:
    """Get a human-readable description of an exit code."""
    descriptions = {
        SUCCESS: "Command executed successfully",
        ERROR_GENERAL: "A general error occurred",
        ERROR_INVALID_ARGS: "Invalid arguments or validation error",
        ERROR_INVALID_TRANSITION: "Command not valid for the current timer phase",
        ERROR_STORAGE: "Session history could not be read or written",
        ERROR_EXPORT: "Export or import file could not be written or read",
        ERROR_CONFIGURATION: "Timer setting rejected",
    }
    return descriptions.get(code, "Unknown error")
