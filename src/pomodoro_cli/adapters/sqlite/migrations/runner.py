"""Migration framework for the session history database.

Migrations are numbered, run in order, and only ever move forward. Each one
runs in its own transaction together with its ``schema_version`` row.
"""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from datetime import UTC, datetime


class Migration(ABC):
    """Base class for database migrations."""

    @property
    @abstractmethod
    def version(self) -> int:
        """Migration version number (sequential)."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of the migration."""

    @abstractmethod
    def up(self, connection: sqlite3.Connection) -> None:
        """Execute forward migration."""


class MigrationRunner:
    """Applies pending migrations to a connection in autocommit mode."""

    def __init__(self, connection: sqlite3.Connection):
        self.connection = connection
        self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                description TEXT NOT NULL,
                applied_at TEXT NOT NULL
            )
            """
        )

    def get_current_version(self) -> int:
        """Highest applied version, 0 for a fresh database."""
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] if row[0] is not None else 0

    def run_migration(self, migration: Migration) -> None:
        current_version = self.get_current_version()
        if migration.version <= current_version:
            raise ValueError(
                f"Migration version {migration.version} is not greater than "
                f"current version {current_version}"
            )

        self.connection.execute("BEGIN IMMEDIATE")
        try:
            migration.up(self.connection)
            self.connection.execute(
                "INSERT INTO schema_version (version, description, applied_at) VALUES (?, ?, ?)",
                (migration.version, migration.description, datetime.now(UTC).isoformat()),
            )
        except Exception as e:
            self.connection.execute("ROLLBACK")
            raise RuntimeError(f"Migration {migration.version} failed: {e}") from e
        self.connection.execute("COMMIT")

    def run_migrations(self, migrations: list[Migration]) -> int:
        """Run every migration newer than the current version.

        Returns:
            Number of migrations applied
        """
        current_version = self.get_current_version()
        pending = sorted(
            (m for m in migrations if m.version > current_version),
            key=lambda m: m.version,
        )
        for migration in pending:
            self.run_migration(migration)
        return len(pending)

    def get_migration_history(self) -> list[dict]:
        cursor = self.connection.execute(
            "SELECT version, description, applied_at FROM schema_version ORDER BY version"
        )
        return [
            {"version": row[0], "description": row[1], "applied_at": row[2]}
            for row in cursor.fetchall()
        ]
