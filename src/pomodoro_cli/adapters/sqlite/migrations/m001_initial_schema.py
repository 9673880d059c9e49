"""Migration 001: session log, in-progress slot and append-only triggers."""

from __future__ import annotations

import sqlite3

from pomodoro_cli.adapters.sqlite import schema

from .runner import Migration


class InitialSchemaMigration(Migration):
    """Create the sessions table, its indexes and the in-progress slot."""

    @property
    def version(self) -> int:
        return 1

    @property
    def description(self) -> str:
        return "Initial session history schema"

    def up(self, connection: sqlite3.Connection) -> None:
        connection.execute(schema.CREATE_SESSIONS_TABLE)
        for statement in schema.CREATE_SESSIONS_INDEXES:
            connection.execute(statement)
        connection.execute(schema.CREATE_IN_PROGRESS_TABLE)
        for statement in schema.CREATE_APPEND_ONLY_TRIGGERS:
            connection.execute(statement)


initial_migration = InitialSchemaMigration()
