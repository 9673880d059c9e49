"""Pomodoro CLI - a local Pomodoro timer with session history and analytics."""

__version__ = "0.1.0"
