"""Statistics and history commands for recorded sessions."""

import typer
from rich.table import Table

from pomodoro_cli.models.timer.state import TimerPhase
from pomodoro_cli.models.timer.window import WINDOW_HELP, TimeRange
from pomodoro_cli.services.timer_service import TimerService
from pomodoro_cli.utils import exit_codes
from pomodoro_cli.utils.ui.console import get_console
from pomodoro_cli.utils.ui.formatters import (
    format_duration,
    format_output,
    render_progress_bar,
)

from .decorators import AppError, command_wrapper
from .options import OUTPUT_HELP, resolve_output

LOGGED_PHASES = (TimerPhase.WORKING, TimerPhase.SHORT_BREAK, TimerPhase.LONG_BREAK)


def _time_range(service: TimerService, expression: str | None) -> TimeRange:
    try:
        return service.time_range(expression)
    except ValueError as e:
        raise AppError(str(e), exit_codes.ERROR_INVALID_ARGS) from e


@command_wrapper
def stats(
    range_: str = typer.Option("all", "--range", "-r", help=f"Window: {WINDOW_HELP}"),
    by: str = typer.Option("day", "--by", help="Breakdown period: day or week"),
    output: str | None = typer.Option(None, "--output", "-o", help=OUTPUT_HELP),
) -> None:
    """Show productivity statistics for a time window."""
    if by not in ("day", "week"):
        raise AppError("--by must be 'day' or 'week'", exit_codes.ERROR_INVALID_ARGS)

    service = TimerService()
    output = resolve_output(output, service.config_service)
    window = _time_range(service, range_)
    analytics = service.analytics()

    summary = analytics.summary(window)
    totals = analytics.daily_totals(window) if by == "day" else analytics.weekly_totals(window)
    top_days = analytics.most_productive_days(window)

    if output in ("json", "yaml"):
        data = summary.to_dict()
        data["breakdown"] = [t.to_dict() for t in totals]
        data["most_productive_days"] = [d.to_dict() for d in top_days]
        format_output(data, output)
        return

    console = get_console()
    console.print(f"\n[bold cyan]🍅 Pomodoro Statistics ({window.label})[/bold cyan]\n")
    console.print(f"Completed: [bold]{summary.completed}[/bold] work intervals")
    console.print(f"Abandoned: [bold]{summary.abandoned}[/bold]")
    console.print(f"Completion Rate: [bold]{summary.completion_rate:.0%}[/bold]")
    console.print(f"Total Focus Time: [bold]{format_duration(summary.total_focused)}[/bold]")
    console.print(
        f"Current Streak: [bold]{summary.current_streak}[/bold] day(s)"
        f"  (longest: {summary.longest_streak})"
    )

    if totals:
        busiest = max(t.focused for t in totals)
        table = Table(title="Day by day" if by == "day" else "Week by week", show_header=True)
        table.add_column("Period", style="cyan")
        table.add_column("Completed", justify="right", style="green")
        table.add_column("Abandoned", justify="right", style="red")
        table.add_column("Focus", justify="right")
        table.add_column("")
        for total in totals:
            table.add_row(
                total.label,
                str(total.completed),
                str(total.abandoned),
                format_duration(total.focused),
                render_progress_bar(total.focused / busiest if busiest else 0, 10),
            )
        console.print()
        console.print(table)

    if top_days:
        console.print("\n[bold]Most Productive Days:[/bold]")
        for rank, day in enumerate(top_days, start=1):
            console.print(
                f"  {rank}. {day.label}: {day.completed} interval(s), "
                f"{format_duration(day.focused)}"
            )
    console.print()


@command_wrapper
def history(
    range_: str = typer.Option("today", "--range", "-r", help=f"Window: {WINDOW_HELP}"),
    phase: str | None = typer.Option(
        None, "--phase", help="Only this phase: working, short_break or long_break"
    ),
    include_superseded: bool = typer.Option(
        False, "--all", help="Include records replaced by corrections"
    ),
    output: str | None = typer.Option(None, "--output", "-o", help=OUTPUT_HELP),
) -> None:
    """List recorded sessions, oldest first."""
    phase_filter = None
    if phase is not None:
        try:
            phase_filter = TimerPhase(phase)
        except ValueError:
            phase_filter = None
        if phase_filter not in LOGGED_PHASES:
            names = ", ".join(p.value for p in LOGGED_PHASES)
            raise AppError(
                f"Unknown phase '{phase}'. Use one of: {names}", exit_codes.ERROR_INVALID_ARGS
            )

    service = TimerService()
    output = resolve_output(output, service.config_service)
    window = _time_range(service, range_)
    sessions = list(
        service.store.query(window, phase=phase_filter, include_superseded=include_superseded)
    )

    if output != "pretty":
        format_output([s.to_dict() for s in sessions], output)
        return

    console = get_console()
    if not sessions:
        console.print(f"[yellow]No sessions recorded ({window.label})[/yellow]")
        return

    tz = service.config_service.timezone
    table = Table(title=f"Sessions ({window.label})", show_header=True)
    table.add_column("Started", style="cyan")
    table.add_column("Phase")
    table.add_column("Scheduled", justify="right")
    table.add_column("Actual", justify="right")
    table.add_column("Status")
    table.add_column("ID", style="dim")
    for session in sessions:
        status_text = (
            "[green]✓ completed[/green]" if session.is_completed else "[red]✗ abandoned[/red]"
        )
        if session.supersedes:
            status_text += " [dim](correction)[/dim]"
        table.add_row(
            session.started_at.astimezone(tz).strftime("%Y-%m-%d %H:%M"),
            session.phase.label,
            format_duration(session.scheduled),
            format_duration(session.actual),
            status_text,
            session.session_id[:8],
        )
    console.print(table)
