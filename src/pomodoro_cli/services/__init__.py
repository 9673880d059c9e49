"""Services module for Pomodoro CLI - configuration and component wiring."""
