"""Export and import commands for the session history."""

from pathlib import Path

import typer
from rich.table import Table

from pomodoro_cli.models.timer.export import import_into, load_file
from pomodoro_cli.models.timer.window import WINDOW_HELP
from pomodoro_cli.services.timer_service import TimerService
from pomodoro_cli.utils import exit_codes
from pomodoro_cli.utils.ui.console import get_console
from pomodoro_cli.utils.ui.formatters import format_info, format_success

from .decorators import AppError, command_wrapper


@command_wrapper
def export(
    range_: str = typer.Option("all", "--range", "-r", help=f"Window: {WINDOW_HELP}"),
    out: Path | None = typer.Option(
        None, "--out", "-o", help="Output file path (default: stdout)"
    ),
    compress: bool = typer.Option(
        False,
        "--compress",
        "-z",
        help="Compress output with gzip",
    ),
) -> None:
    """
    Export recorded sessions as a JSON document.

    Examples:
        pomodoro export --range week --out week.json
        pomodoro export --compress --out backup.json.gz
    """
    service = TimerService()
    try:
        window = service.time_range(range_)
    except ValueError as e:
        raise AppError(str(e), exit_codes.ERROR_INVALID_ARGS) from e

    size = service.exporter().write(window, out, compress=compress)
    if out is not None:
        format_success(f"Sessions exported to: {out.absolute()} ({size} bytes)")


@command_wrapper
def import_(
    file: Path = typer.Argument(..., help="Export document to import (.json or .json.gz)"),
) -> None:
    """
    Import sessions from an export document.

    Sessions already in the history (same id) are skipped.
    """
    sessions = load_file(file)
    format_info(f"Importing {len(sessions)} session(s) from {file}")
    result = import_into(TimerService().store, sessions)

    table = Table(title="Import Results", show_header=True)
    table.add_column("Sessions", style="cyan")
    table.add_column("Count", justify="right", style="green")
    table.add_row("In file", str(result.total))
    table.add_row("Imported", str(result.imported))
    table.add_row("Already present", str(result.skipped))
    get_console().print(table)

    format_success("Import completed")
