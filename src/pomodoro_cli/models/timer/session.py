"""Immutable session records written to the history store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from .state import TimerPhase


class SessionStatus(str, Enum):
    COMPLETED = "completed"
    ABANDONED = "abandoned"


def new_session_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Session:
    """One completed or abandoned phase. Never edited once stored."""

    session_id: str
    phase: TimerPhase
    scheduled: timedelta
    actual: timedelta
    started_at: datetime
    ended_at: datetime
    status: SessionStatus
    supersedes: str | None = None

    @property
    def is_work(self) -> bool:
        return self.phase == TimerPhase.WORKING

    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    def superseding(self, **changes: Any) -> Session:
        """Build a correction record that replaces this one in analytics.

        The original stays in the store; the new record gets a fresh id and
        points back at it.
        """
        if "session_id" in changes or "supersedes" in changes:
            raise ValueError("A superseding record gets its own id and back-reference")
        return replace(
            self, session_id=new_session_id(), supersedes=self.session_id, **changes
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.session_id,
            "phase": self.phase.value,
            "scheduled_seconds": self.scheduled.total_seconds(),
            "actual_seconds": self.actual.total_seconds(),
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat(),
            "status": self.status.value,
            "supersedes": self.supersedes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        return cls(
            session_id=data["id"],
            phase=TimerPhase(data["phase"]),
            scheduled=timedelta(seconds=data["scheduled_seconds"]),
            actual=timedelta(seconds=data["actual_seconds"]),
            started_at=datetime.fromisoformat(data["started_at"]),
            ended_at=datetime.fromisoformat(data["ended_at"]),
            status=SessionStatus(data["status"]),
            supersedes=data.get("supersedes"),
        )
