"""Session history and in-progress record, stored in SQLite."""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

from platformdirs import user_data_dir

from pomodoro_cli.adapters.sqlite.connection import DEFAULT_TIMEOUT, open_connection
from pomodoro_cli.models.exceptions import ConfigurationError, StaleTimerState, StorageFailure

from .session import Session, SessionStatus
from .state import TimerConfig, TimerPhase, TimerState
from .window import TimeRange

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MICROSECOND = timedelta(microseconds=1)

# Passed as expected_revision to skip the concurrent-change check.
ANY_REVISION = object()

logger = logging.getLogger(__name__)


def to_epoch_us(value: datetime) -> int:
    """Aware datetime to integer microseconds since the epoch."""
    if value.tzinfo is None:
        raise ValueError("Session timestamps must be timezone-aware")
    return (value - EPOCH) // _ONE_MICROSECOND


@dataclass(frozen=True)
class InProgress:
    """The persisted mirror of a live timer."""

    state: TimerState
    config: TimerConfig
    updated_at: datetime
    revision: str = ""


class SessionStore:
    """Append-only log of sessions plus the single in-progress slot.

    Every write runs in its own ``BEGIN IMMEDIATE`` transaction, so readers
    see a new session entirely or not at all. Reads run inside a read
    transaction, which under WAL pins a consistent snapshot for the whole
    iteration.
    """

    def __init__(self, db_path: Path | None = None, timeout: float = DEFAULT_TIMEOUT):
        if db_path is None:
            db_path = Path(user_data_dir("pomodoro_cli")) / "sessions.db"

        self.db_path = Path(db_path)
        self.timeout = timeout
        with self._connect("open"):
            pass

    @contextmanager
    def _connect(self, operation: str) -> Iterator[sqlite3.Connection]:
        try:
            conn = open_connection(self.db_path, self.timeout)
        except (sqlite3.Error, RuntimeError, OSError) as e:
            logger.error("cannot open %s for %s: %s", self.db_path, operation, e)
            raise StorageFailure(operation, str(e)) from e
        try:
            yield conn
        except sqlite3.Error as e:
            logger.error("%s failed on %s: %s", operation, self.db_path, e)
            raise StorageFailure(operation, str(e)) from e
        finally:
            conn.close()

    @contextmanager
    def _write(self, operation: str) -> Iterator[sqlite3.Connection]:
        with self._connect(operation) as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def append(self, session: Session) -> None:
        """Durably persist one session.

        Raises:
            StorageFailure: The database is unavailable, locked past the
                timeout, or already holds a session with this id.
        """
        with self._write("append") as conn:
            self._insert(conn, session)
        logger.info(
            "appended %s %s session %s", session.status.value, session.phase.value, session.session_id
        )

    def append_many(self, sessions: Iterable[Session]) -> int:
        """Persist sessions in one transaction, skipping ids already stored.

        Returns:
            Number of sessions inserted
        """
        inserted = 0
        with self._write("append") as conn:
            for session in sessions:
                if self._exists(conn, session.session_id):
                    continue
                self._insert(conn, session)
                inserted += 1
        return inserted

    def record(
        self,
        sessions: Iterable[Session],
        state: TimerState,
        config: TimerConfig,
        expected_revision: str | None | object = ANY_REVISION,
    ) -> str | None:
        """Append sessions and mirror the live timer in one transaction.

        An idle timer clears the in-progress slot. Writing both together
        keeps a restart from replaying a work interval that was already
        logged.

        Args:
            expected_revision: Revision of the in-progress slot the caller
                last loaded, or None if it saw the slot empty.

        Returns:
            The new revision of the slot, None once it is cleared

        Raises:
            StaleTimerState: The slot no longer holds ``expected_revision``.
                Nothing is written.
        """
        with self._write("append") as conn:
            if expected_revision is not ANY_REVISION:
                found = self._current_revision(conn)
                if found != expected_revision:
                    raise StaleTimerState(expected_revision, found)
            for session in sessions:
                self._insert(conn, session)
            if state.phase == TimerPhase.IDLE:
                conn.execute("DELETE FROM in_progress")
                return None
            return self._upsert_in_progress(conn, state, config)

    def save_in_progress(self, state: TimerState, config: TimerConfig) -> str:
        with self._write("save in-progress") as conn:
            return self._upsert_in_progress(conn, state, config)

    def clear_in_progress(self) -> None:
        with self._write("clear in-progress") as conn:
            conn.execute("DELETE FROM in_progress")

    def _insert(self, conn: sqlite3.Connection, session: Session) -> None:
        try:
            conn.execute(
                """
                INSERT INTO sessions (
                    id, phase, scheduled_seconds, actual_seconds,
                    started_at, ended_at, started_at_us, status,
                    supersedes, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    session.session_id,
                    session.phase.value,
                    session.scheduled.total_seconds(),
                    session.actual.total_seconds(),
                    session.started_at.isoformat(),
                    session.ended_at.isoformat(),
                    to_epoch_us(session.started_at),
                    session.status.value,
                    session.supersedes,
                    datetime.now(UTC).isoformat(),
                ),
            )
        except sqlite3.IntegrityError as e:
            raise StorageFailure(
                "append", f"session {session.session_id} already exists"
            ) from e

    @staticmethod
    def _exists(conn: sqlite3.Connection, session_id: str) -> bool:
        row = conn.execute("SELECT 1 FROM sessions WHERE id = ?", (session_id,)).fetchone()
        return row is not None

    @staticmethod
    def _upsert_in_progress(
        conn: sqlite3.Connection, state: TimerState, config: TimerConfig
    ) -> str:
        revision = uuid.uuid4().hex
        conn.execute(
            """
            INSERT OR REPLACE INTO in_progress (slot, state, config, updated_at, revision)
            VALUES (1, ?, ?, ?, ?)
            """,
            (
                json.dumps(state.to_dict()),
                json.dumps(config.to_dict()),
                datetime.now(UTC).isoformat(),
                revision,
            ),
        )
        return revision

    @staticmethod
    def _current_revision(conn: sqlite3.Connection) -> str | None:
        row = conn.execute("SELECT revision FROM in_progress WHERE slot = 1").fetchone()
        return row[0] if row is not None else None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def query(
        self,
        time_range: TimeRange | None = None,
        phase: TimerPhase | None = None,
        include_superseded: bool = False,
    ) -> Iterator[Session]:
        """Yield sessions that started inside ``time_range``, oldest first.

        The result is a one-shot generator. It opens its connection on the
        first ``next()`` and releases it when exhausted or closed.
        """
        clauses: list[str] = []
        params: list[object] = []

        if time_range is not None:
            if time_range.start is not None:
                clauses.append("started_at_us >= ?")
                params.append(to_epoch_us(time_range.start))
            if time_range.end is not None:
                clauses.append("started_at_us < ?")
                params.append(to_epoch_us(time_range.end))
        if phase is not None:
            clauses.append("phase = ?")
            params.append(TimerPhase(phase).value)
        if not include_superseded:
            clauses.append(
                "id NOT IN (SELECT supersedes FROM sessions WHERE supersedes IS NOT NULL)"
            )

        sql = "SELECT * FROM sessions"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY started_at_us ASC, id ASC"

        with self._connect("query") as conn:
            conn.execute("BEGIN")
            try:
                for row in conn.execute(sql, params):
                    yield _row_to_session(row)
            finally:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")

    def get(self, session_id: str) -> Session | None:
        with self._connect("get") as conn:
            row = conn.execute("SELECT * FROM sessions WHERE id = ?", (session_id,)).fetchone()
        return _row_to_session(row) if row is not None else None

    def count(self) -> int:
        with self._connect("count") as conn:
            return conn.execute("SELECT COUNT(*) FROM sessions").fetchone()[0]

    def current_revision(self) -> str | None:
        """Revision of the in-progress slot, None when it is empty."""
        with self._connect("load in-progress") as conn:
            return self._current_revision(conn)

    def latest_in_progress(self) -> InProgress | None:
        """Return the persisted live timer, if a session was running."""
        with self._connect("load in-progress") as conn:
            row = conn.execute(
                "SELECT state, config, updated_at, revision FROM in_progress WHERE slot = 1"
            ).fetchone()
        if row is None:
            return None
        try:
            return InProgress(
                state=TimerState.from_dict(json.loads(row["state"])),
                config=TimerConfig.from_dict(json.loads(row["config"])),
                updated_at=datetime.fromisoformat(row["updated_at"]),
                revision=row["revision"],
            )
        except (ValueError, KeyError, TypeError, ConfigurationError) as e:
            raise StorageFailure("load in-progress", f"corrupt record: {e}") from e


def _row_to_session(row: sqlite3.Row) -> Session:
    return Session(
        session_id=row["id"],
        phase=TimerPhase(row["phase"]),
        scheduled=timedelta(seconds=row["scheduled_seconds"]),
        actual=timedelta(seconds=row["actual_seconds"]),
        started_at=datetime.fromisoformat(row["started_at"]),
        ended_at=datetime.fromisoformat(row["ended_at"]),
        status=SessionStatus(row["status"]),
        supersedes=row["supersedes"],
    )
