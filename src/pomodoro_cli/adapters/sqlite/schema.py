"""SQL schema definitions for the session history database."""

CREATE_SESSIONS_TABLE = """
CREATE TABLE IF NOT EXISTS sessions (
    id TEXT PRIMARY KEY,
    phase TEXT NOT NULL,
    scheduled_seconds REAL NOT NULL,
    actual_seconds REAL NOT NULL,
    started_at TEXT NOT NULL,
    ended_at TEXT NOT NULL,
    started_at_us INTEGER NOT NULL,
    status TEXT NOT NULL CHECK (status IN ('completed', 'abandoned')),
    supersedes TEXT,
    created_at TEXT NOT NULL
)
"""

# started_at_us is the start timestamp in UTC microseconds since the epoch.
# It drives ordering and range filters; started_at keeps the original offset.
CREATE_SESSIONS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_sessions_started ON sessions(started_at_us)",
    "CREATE INDEX IF NOT EXISTS idx_sessions_phase ON sessions(phase)",
    "CREATE INDEX IF NOT EXISTS idx_sessions_supersedes ON sessions(supersedes)",
]

# A single row keyed by slot = 1: at most one session may be in progress.
CREATE_IN_PROGRESS_TABLE = """
CREATE TABLE IF NOT EXISTS in_progress (
    slot INTEGER PRIMARY KEY CHECK (slot = 1),
    state TEXT NOT NULL,
    config TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

# Sessions are append-only: refuse edits and deletes at the database level.
CREATE_APPEND_ONLY_TRIGGERS = [
    """
    CREATE TRIGGER IF NOT EXISTS sessions_no_update
    BEFORE UPDATE ON sessions
    BEGIN
        SELECT RAISE(ABORT, 'sessions are append-only');
    END
    """,
    """
    CREATE TRIGGER IF NOT EXISTS sessions_no_delete
    BEFORE DELETE ON sessions
    BEGIN
        SELECT RAISE(ABORT, 'sessions are append-only');
    END
    """,
]

# Opaque token rewritten on every save of the in-progress slot. Writers
# compare it inside their transaction to detect a concurrent change.
ADD_IN_PROGRESS_REVISION = (
    "ALTER TABLE in_progress ADD COLUMN revision TEXT NOT NULL DEFAULT ''"
)
