"""Pomodoro timer commands: start, pause, resume, reset, finish, status, watch."""

import time

import typer
from rich.live import Live

from pomodoro_cli.models.timer.controller import DispatchResult
from pomodoro_cli.models.timer.state import Finish, Pause, Reset, Resume, TimerPhase
from pomodoro_cli.services.timer_service import TimerService
from pomodoro_cli.utils import exit_codes
from pomodoro_cli.utils.ui.console import get_console
from pomodoro_cli.utils.ui.formatters import (
    format_duration,
    format_info,
    format_output,
    format_success,
)
from pomodoro_cli.utils.ui.timer_display import phase_title, render_snapshot

from .decorators import AppError, command_wrapper
from .options import OUTPUT_HELP, resolve_output

REFRESH_SECONDS = 0.5


def _report(result: DispatchResult) -> None:
    """Tell the user about sessions logged while the command ran."""
    for session in result.sessions:
        if session.is_completed:
            format_success(f"Work interval completed ({format_duration(session.actual)})")
        else:
            format_info(
                f"Work interval abandoned after {format_duration(session.actual)}"
            )


@command_wrapper
def start(
    work: float | None = typer.Option(None, "--work", help="Work minutes for this session"),
    short_break: float | None = typer.Option(
        None, "--break", help="Short break minutes for this session"
    ),
    long_break: float | None = typer.Option(
        None, "--long-break", help="Long break minutes for this session"
    ),
    intervals: int | None = typer.Option(
        None, "--intervals", help="Work intervals before a long break"
    ),
) -> None:
    """Start a Pomodoro session."""
    service = TimerService()
    config = service.config_service.timer_config(
        work_minutes=work,
        short_break_minutes=short_break,
        long_break_minutes=long_break,
        intervals_before_long_break=intervals,
    )
    result = service.controller().start(config)
    _report(result)
    format_success(
        f"Started working for {format_duration(config.work)} "
        f"(breaks {format_duration(config.short_break)} / "
        f"{format_duration(config.long_break)}, long break every "
        f"{config.intervals_before_long_break})"
    )


@command_wrapper
def pause() -> None:
    """Pause the running phase."""
    result = TimerService().controller().dispatch(Pause())
    _report(result)
    format_success(
        f"Paused {phase_title(result.snapshot)} with "
        f"{format_duration(result.snapshot.remaining)} left"
    )


@command_wrapper
def resume() -> None:
    """Resume the paused phase."""
    result = TimerService().controller().dispatch(Resume())
    _report(result)
    format_success(
        f"Resumed {result.snapshot.phase.label} with "
        f"{format_duration(result.snapshot.remaining)} left"
    )


@command_wrapper
def reset() -> None:
    """Stop the session and return to idle."""
    result = TimerService().controller().dispatch(Reset())
    _report(result)
    format_success("Timer reset")


@command_wrapper
def finish() -> None:
    """End the session once the current phase runs out."""
    result = TimerService().controller().dispatch(Finish())
    _report(result)
    format_success(
        f"Session will finish when this {result.snapshot.phase.label.lower()} ends"
    )


@command_wrapper
def status(
    output: str | None = typer.Option(None, "--output", "-o", help=OUTPUT_HELP),
) -> None:
    """Show the timer without changing it."""
    service = TimerService()
    output = resolve_output(output, service.config_service)
    snapshot = service.controller().snapshot(catch_up=True)
    if output == "pretty":
        get_console().print(render_snapshot(snapshot))
    else:
        format_output(snapshot.to_dict(), output)


@command_wrapper
def watch(
    exit_on_finish: bool = typer.Option(
        True, "--exit/--no-exit", help="Stop watching when the session ends"
    ),
) -> None:
    """Show a live countdown and advance phases as they run out."""
    controller = TimerService().controller()
    if not controller.state.is_active:
        raise AppError(
            "No session running. Use 'pomodoro start' first.",
            exit_codes.ERROR_INVALID_TRANSITION,
        )

    console = get_console()
    try:
        with Live(render_snapshot(controller.snapshot()), console=console) as live:
            while True:
                controller.reload()
                result = controller.tick()
                live.update(render_snapshot(result.snapshot))
                for phase in result.phases:
                    console.bell()
                    live.console.print(f"[bold]→ {phase.label}[/bold]")
                if exit_on_finish and result.snapshot.phase in (
                    TimerPhase.FINISHED,
                    TimerPhase.IDLE,
                ):
                    break
                time.sleep(REFRESH_SECONDS)
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped watching; the timer keeps running.[/dim]")
