"""Portable, schema-versioned JSON export of the session history."""

from __future__ import annotations

import gzip
import json
import logging
import sys
from dataclasses import dataclass
from datetime import UTC
from pathlib import Path
from typing import Any

from pomodoro_cli.models.exceptions import ExportFailure

from .clock import Clock, SystemClock
from .session import Session
from .store import SessionStore
from .window import TimeRange

FORMAT = "pomodoro-sessions"
SCHEMA_VERSION = 1

_GZIP_MAGIC = b"\x1f\x8b"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportResult:
    total: int
    imported: int

    @property
    def skipped(self) -> int:
        return self.total - self.imported


class SessionExporter:
    """Serialise sessions from a store. Reading only; the store is never changed."""

    def __init__(self, store: SessionStore, clock: Clock | None = None):
        self.store = store
        self.clock = clock or SystemClock()

    def document(self, time_range: TimeRange | None = None) -> dict[str, Any]:
        time_range = time_range or TimeRange.everything()
        # Superseded records travel too so a re-import keeps the chain intact.
        sessions = (
            []
            if time_range.is_empty
            else self.store.query(time_range, include_superseded=True)
        )
        return {
            "format": FORMAT,
            "schema_version": SCHEMA_VERSION,
            "exported_at": self.clock.now().astimezone(UTC).isoformat(),
            "range": time_range.to_dict(),
            "sessions": [s.to_dict() for s in sessions],
        }

    def export(self, time_range: TimeRange | None = None, compress: bool = False) -> bytes:
        """Return the export document as UTF-8 JSON bytes, optionally gzipped."""
        payload = json.dumps(self.document(time_range), indent=2).encode("utf-8") + b"\n"
        if compress:
            return gzip.compress(payload)
        return payload

    def write(
        self,
        time_range: TimeRange | None = None,
        path: Path | None = None,
        compress: bool = False,
    ) -> int:
        """
        Write the export to ``path``, or to stdout when no path is given.

        Returns:
            Number of bytes written

        Raises:
            ExportFailure: The sink could not be written
        """
        data = self.export(time_range, compress=compress)
        sink = str(path) if path is not None else "<stdout>"
        try:
            if path is None:
                sys.stdout.buffer.write(data)
                sys.stdout.buffer.flush()
            else:
                Path(path).write_bytes(data)
        except OSError as e:
            logger.error("export to %s failed: %s", sink, e)
            raise ExportFailure(sink, e.strerror or str(e)) from e
        logger.info("exported %d bytes to %s", len(data), sink)
        return len(data)


def load(data: bytes, source: str = "<input>") -> list[Session]:
    """Parse an export document, gzipped or not.

    Raises:
        ExportFailure: The document is not valid JSON, is of another format
            or schema version, or holds malformed session records.
    """
    if data[:2] == _GZIP_MAGIC:
        try:
            data = gzip.decompress(data)
        except (OSError, EOFError) as e:
            raise ExportFailure(source, f"corrupt gzip data: {e}") from e

    try:
        document = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ExportFailure(source, f"not a JSON document: {e}") from e

    if not isinstance(document, dict) or document.get("format") != FORMAT:
        raise ExportFailure(source, f"not a {FORMAT} document")
    version = document.get("schema_version")
    if version != SCHEMA_VERSION:
        raise ExportFailure(source, f"unsupported schema version {version!r}")

    records = document.get("sessions")
    if not isinstance(records, list):
        raise ExportFailure(source, "'sessions' must be a list")

    sessions = []
    for index, record in enumerate(records):
        try:
            session = Session.from_dict(record)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise ExportFailure(source, f"session #{index} is malformed: {e}") from e
        if session.started_at.tzinfo is None or session.ended_at.tzinfo is None:
            raise ExportFailure(source, f"session #{index} has a naive timestamp")
        sessions.append(session)
    return sessions


def load_file(path: Path) -> list[Session]:
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ExportFailure(str(path), e.strerror or str(e)) from e
    return load(data, source=str(path))


def import_into(store: SessionStore, sessions: list[Session]) -> ImportResult:
    """Append sessions the store does not hold yet. Existing ids are skipped."""
    imported = store.append_many(sessions)
    logger.info("imported %d of %d sessions", imported, len(sessions))
    return ImportResult(total=len(sessions), imported=imported)

