"""Migration 002: revision token on the in-progress slot."""

from __future__ import annotations

import sqlite3

from pomodoro_cli.adapters.sqlite import schema

from .runner import Migration


class InProgressRevisionMigration(Migration):
    @property
    def version(self) -> int:
        return 2

    @property
    def description(self) -> str:
        return "Add revision token to in_progress"

    def up(self, connection: sqlite3.Connection) -> None:
        connection.execute(schema.ADD_IN_PROGRESS_REVISION)


in_progress_revision_migration = InProgressRevisionMigration()
