"""Storage adapters for Pomodoro CLI."""
