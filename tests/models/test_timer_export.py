"""Tests for session export and import."""

from __future__ import annotations

import gzip
import json
from datetime import UTC, datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from pomodoro_cli.models.exceptions import ExportFailure
from pomodoro_cli.models.timer.clock import ManualClock
from pomodoro_cli.models.timer.export import (
    FORMAT,
    SCHEMA_VERSION,
    SessionExporter,
    import_into,
    load,
    load_file,
)
from pomodoro_cli.models.timer.session import Session, SessionStatus
from pomodoro_cli.models.timer.state import TimerPhase
from pomodoro_cli.models.timer.store import SessionStore
from pomodoro_cli.models.timer.window import TimeRange

T0 = datetime(2024, 3, 4, 9, 0, tzinfo=UTC)


@pytest.fixture
def sessions():
    plus_one = timezone(timedelta(hours=1))
    first = Session(
        session_id="s1",
        phase=TimerPhase.WORKING,
        scheduled=timedelta(minutes=25),
        actual=timedelta(minutes=25),
        started_at=T0,
        ended_at=T0 + timedelta(minutes=25),
        status=SessionStatus.COMPLETED,
    )
    second = Session(
        session_id="s2",
        phase=TimerPhase.WORKING,
        scheduled=timedelta(minutes=25),
        actual=timedelta(minutes=7, seconds=12.5),
        started_at=datetime(2024, 3, 4, 11, 0, tzinfo=plus_one),
        ended_at=datetime(2024, 3, 4, 11, 7, 12, 500000, tzinfo=plus_one),
        status=SessionStatus.ABANDONED,
    )
    return [first, second, second.superseding(status=SessionStatus.COMPLETED)]


@pytest.fixture
def filled_store(store, sessions):
    store.append_many(sessions)
    return store


@pytest.fixture
def exporter(filled_store):
    return SessionExporter(filled_store, clock=ManualClock(T0 + timedelta(days=1)))


class TestExport:
    def test_document_header(self, exporter):
        document = json.loads(exporter.export())
        assert document["format"] == FORMAT
        assert document["schema_version"] == SCHEMA_VERSION
        assert document["exported_at"] == "2024-03-05T09:00:00+00:00"
        assert document["range"]["label"] == "all"

    def test_sessions_ascending_with_all_fields(self, exporter, sessions):
        document = json.loads(exporter.export())
        records = document["sessions"]
        assert records[0]["id"] == "s1"
        assert len(records) == 3
        assert set(records[0]) == {
            "id",
            "phase",
            "scheduled_seconds",
            "actual_seconds",
            "started_at",
            "ended_at",
            "status",
            "supersedes",
        }
        assert [r["supersedes"] for r in records].count("s2") == 1

    def test_range_filters_sessions(self, exporter):
        window = TimeRange(T0, T0 + timedelta(hours=1))
        document = json.loads(exporter.export(window))
        assert [r["id"] for r in document["sessions"]] == ["s1"]

    def test_empty_range(self, exporter):
        document = json.loads(exporter.export(TimeRange(T0, T0)))
        assert document["sessions"] == []

    def test_compress(self, exporter):
        data = exporter.export(compress=True)
        assert json.loads(gzip.decompress(data))["format"] == FORMAT

    def test_write_file(self, exporter, tmp_path, filled_store):
        out = tmp_path / "export.json"
        size = exporter.write(path=out)
        assert out.stat().st_size == size
        assert filled_store.count() == 3

    def test_write_stdout(self, exporter, capsysbinary):
        exporter.write()
        assert json.loads(capsysbinary.readouterr().out)["format"] == FORMAT

    def test_unwritable_sink_raises_export_failure(self, exporter, tmp_path):
        with pytest.raises(ExportFailure) as exc_info:
            exporter.write(path=tmp_path / "missing" / "dir" / "out.json")
        assert "out.json" in exc_info.value.sink

    def test_write_error_leaves_store_untouched(self, exporter, filled_store, tmp_path):
        with patch("pathlib.Path.write_bytes", side_effect=OSError(28, "No space left on device")):
            with pytest.raises(ExportFailure, match="No space left"):
                exporter.write(path=tmp_path / "out.json")
        assert filled_store.count() == 3


class TestRoundTrip:
    def test_export_then_import_reproduces_sessions(self, exporter, filled_store, tmp_path):
        fresh = SessionStore(tmp_path / "other" / "sessions.db")
        result = import_into(fresh, load(exporter.export()))

        assert result.imported == 3
        original = list(filled_store.query(include_superseded=True))
        copied = list(fresh.query(include_superseded=True))
        assert copied == original
        assert [s.started_at.utcoffset() for s in copied] == [
            s.started_at.utcoffset() for s in original
        ]

    def test_gzip_round_trip_via_file(self, exporter, tmp_path):
        out = tmp_path / "backup.json.gz"
        exporter.write(path=out, compress=True)
        loaded = load_file(out)
        assert loaded[0].session_id == "s1"
        assert "s2" in {s.session_id for s in loaded}

    def test_reimport_skips_existing(self, exporter, filled_store):
        result = import_into(filled_store, load(exporter.export()))
        assert result.imported == 0
        assert result.skipped == 3
        assert filled_store.count() == 3


class TestLoadValidation:
    def test_not_json(self):
        with pytest.raises(ExportFailure, match="not a JSON document"):
            load(b"{nope")

    def test_wrong_format(self):
        with pytest.raises(ExportFailure, match="not a pomodoro-sessions document"):
            load(json.dumps({"format": "other"}).encode())

    def test_future_schema_version(self):
        data = json.dumps({"format": FORMAT, "schema_version": 99, "sessions": []}).encode()
        with pytest.raises(ExportFailure, match="unsupported schema version"):
            load(data)

    def test_malformed_session(self):
        data = json.dumps(
            {"format": FORMAT, "schema_version": SCHEMA_VERSION, "sessions": [{"id": "x"}]}
        ).encode()
        with pytest.raises(ExportFailure, match="session #0 is malformed"):
            load(data)

    def test_corrupt_gzip(self):
        with pytest.raises(ExportFailure, match="corrupt gzip"):
            load(b"\x1f\x8b\x08garbage")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ExportFailure):
            load_file(tmp_path / "absent.json")
