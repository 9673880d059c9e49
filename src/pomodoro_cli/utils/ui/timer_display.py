"""Rich rendering of timer snapshots for ``status`` and ``watch``."""

from rich.align import Align
from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from pomodoro_cli.models.timer.machine import TimerSnapshot
from pomodoro_cli.models.timer.state import TimerPhase

from .formatters import format_clock, render_progress_bar

PHASE_STYLES = {
    TimerPhase.IDLE: ("⏹", "dim"),
    TimerPhase.WORKING: ("🍅", "red"),
    TimerPhase.SHORT_BREAK: ("☕", "green"),
    TimerPhase.LONG_BREAK: ("🌴", "cyan"),
    TimerPhase.PAUSED: ("⏸", "yellow"),
    TimerPhase.FINISHED: ("✓", "green"),
}


def phase_title(snapshot: TimerSnapshot) -> str:
    if snapshot.phase == TimerPhase.PAUSED and snapshot.suspended_phase:
        return f"Paused ({snapshot.suspended_phase.label})"
    return snapshot.phase.label


def render_snapshot(snapshot: TimerSnapshot) -> Panel:
    """Build a panel with the countdown, progress bar and cycle position."""
    emoji, color = PHASE_STYLES[snapshot.phase]
    components = []

    if snapshot.duration:
        components.append(
            Text(format_clock(snapshot.remaining), style=f"bold {color}", justify="center")
        )
        bar = Text(justify="center")
        bar.append(render_progress_bar(snapshot.progress, 40), style="dim")
        bar.append(f"  {int(snapshot.progress * 100)}%", style="dim")
        components.append(bar)
    elif snapshot.phase == TimerPhase.FINISHED:
        components.append(Text("Session finished", style="bold green", justify="center"))
    else:
        components.append(Text("No session running", style="dim", justify="center"))

    cycle = snapshot.completed_intervals % snapshot.intervals_before_long_break
    info = Text(justify="center", style="dim")
    info.append(
        f"Completed intervals: {snapshot.completed_intervals}"
        f"  •  Cycle: {cycle}/{snapshot.intervals_before_long_break}"
    )
    if snapshot.end_requested:
        info.append("  •  Ending after this phase", style="yellow")
    components.append(Text(""))
    components.append(info)

    return Panel(
        Align.center(Group(*components)),
        title=f"{emoji}  {phase_title(snapshot)}",
        border_style=color,
        padding=(1, 4),
    )
