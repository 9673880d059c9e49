"""Connection setup for the session history database."""

from __future__ import annotations

import os
import sqlite3
from pathlib import Path

from .migrations import MIGRATIONS
from .migrations.runner import MigrationRunner

DEFAULT_TIMEOUT = 5.0


def open_connection(
    db_path: str | Path, timeout: float = DEFAULT_TIMEOUT
) -> sqlite3.Connection:
    """Open a configured connection and bring the schema up to date.

    Connections run in autocommit mode (``isolation_level=None``); callers
    open explicit ``BEGIN`` blocks so every write is all-or-nothing.

    Raises:
        sqlite3.Error: The database cannot be opened or migrated.
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    is_new_database = not db_path.exists()

    connection = sqlite3.connect(
        str(db_path),
        timeout=timeout,
        isolation_level=None,
        check_same_thread=False,
    )
    try:
        connection.row_factory = sqlite3.Row
        connection.execute(f"PRAGMA busy_timeout = {int(timeout * 1000)}")
        # WAL lets readers keep a consistent snapshot while the timer appends.
        connection.execute("PRAGMA journal_mode = WAL")

        if is_new_database:
            os.chmod(db_path, 0o600)

        MigrationRunner(connection).run_migrations(MIGRATIONS)
    except Exception:
        connection.close()
        raise
    return connection
