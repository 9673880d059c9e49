"""CLI commands for Pomodoro CLI."""
