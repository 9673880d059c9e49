"""Configuration command: view, read and change settings."""

import typer

from pomodoro_cli.services.config_service import ALIASES, get_config_service
from pomodoro_cli.utils import exit_codes
from pomodoro_cli.utils.ui.console import get_console
from pomodoro_cli.utils.ui.formatters import format_output, format_success

from .decorators import AppError, command_wrapper
from .options import OUTPUT_HELP, resolve_output


@command_wrapper
def config(
    key: str | None = typer.Argument(
        None, help="Setting, e.g. timer.work_minutes or an alias such as 'work'"
    ),
    value: str | None = typer.Argument(None, help="New value"),
    reset: bool = typer.Option(False, "--reset", help="Reset all settings to defaults"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    output: str | None = typer.Option(None, "--output", "-o", help=OUTPUT_HELP),
) -> None:
    """
    Show or change settings. Changes apply to the next started session.

    Examples:
        pomodoro config
        pomodoro config work
        pomodoro config work 50
        pomodoro config --reset
    """
    service = get_config_service()
    output = resolve_output(output, service)

    if reset:
        if key is not None:
            raise AppError("--reset takes no key", exit_codes.ERROR_INVALID_ARGS)
        if not yes and not typer.confirm("Reset all settings to defaults?"):
            raise typer.Exit(0)
        service.reset_config()
        format_success("Configuration reset to defaults")
        return

    if key is None:
        format_output(service.as_dict(), output)
        if output == "pretty":
            aliases = ", ".join(f"{a}={k}" for a, k in ALIASES.items())
            get_console().print(f"\n[dim]Aliases: {aliases}[/dim]")
        return

    if value is None:
        get_console().print(service.get(key))
        return

    stored = service.set(key, value)
    format_success(f"Configuration '{key}' set to '{stored}'")
