"""Main entry point for Pomodoro CLI."""

import typer

from pomodoro_cli import __version__
from pomodoro_cli.commands import config, export_command, stats, timer
from pomodoro_cli.utils.typer_helpers import SuggestingGroup
from pomodoro_cli.utils.ui.console import get_console

# Create main app with custom group class
app = typer.Typer(
    name="pomodoro",
    cls=SuggestingGroup,
    help="A command-line Pomodoro timer with session history and analytics",
    no_args_is_help=True,
)

# Timer commands
app.command("start")(timer.start)
app.command("pause")(timer.pause)
app.command("resume")(timer.resume)
app.command("reset")(timer.reset)
app.command("finish")(timer.finish)
app.command("status")(timer.status)
app.command("watch")(timer.watch)

# History commands
app.command("stats")(stats.stats)
app.command("history")(stats.history)
app.command("export")(export_command.export)
app.command("import")(export_command.import_)

app.command("config")(config.config)


@app.command()
def version() -> None:
    """Show version information"""
    get_console(highlight=False).print(__version__)


# Main entry point
def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
