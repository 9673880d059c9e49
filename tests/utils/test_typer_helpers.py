"""Unit tests for SuggestingGroup (typer_helpers.py)."""

from __future__ import annotations

import typer
from typer.testing import CliRunner

from pomodoro_cli.utils.typer_helpers import SuggestingGroup

runner = CliRunner()


def _app() -> typer.Typer:
    app = typer.Typer(name="tp", cls=SuggestingGroup)

    @app.command()
    def start():
        typer.echo("started")

    @app.command()
    def status():
        typer.echo("status")

    @app.command()
    def stats():
        typer.echo("stats")

    @app.command()
    def watch():
        typer.echo("watching")

    return app


class TestSuggestingGroup:
    def test_valid_command_passes_through(self):
        result = runner.invoke(_app(), ["start"])
        assert result.exit_code == 0
        assert "started" in result.output

    def test_single_suggestion(self):
        result = runner.invoke(_app(), ["wacth"])
        assert result.exit_code == 2
        assert "Did you mean this?" in result.output
        assert "watch" in result.output

    def test_multiple_suggestions(self):
        result = runner.invoke(_app(), ["stat"])
        assert result.exit_code == 2
        assert "Did you mean one of these?" in result.output
        assert "status" in result.output
        assert "stats" in result.output

    def test_no_close_match_falls_back_to_click_error(self):
        result = runner.invoke(_app(), ["xyzzy"])
        assert result.exit_code == 2
        assert "Did you mean" not in result.output
