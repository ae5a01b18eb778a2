from __future__ import annotations  # deferred evaluation of type hints

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterator, Optional

from carnival_quiz.engine import QuizSession


def _ts_utc_iso() -> str:
    now_utc = datetime.now(timezone.utc)
    return now_utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SessionNotFound(KeyError):
    """Raised by ``checkout`` when the session id is unknown (or already discarded)."""


@dataclass
class SessionRecord:
    """A quiz session plus the bookkeeping the HTTP layer needs around it.

    ``quiz`` holds the live engine state while the quiz is in progress. It is
    released on completion, and after that only ``submission_id`` is kept.
    """
    session_id: str
    version: str
    quiz: Optional[QuizSession]
    submission_id: Optional[str] = None
    created_at: str = field(default_factory=_ts_utc_iso)
    updated_at: str = ""
    last_seen: float = field(default_factory=time.monotonic)  # for idle sweeps

    def __post_init__(self) -> None:
        if not self.updated_at:
            self.updated_at = self.created_at

    @property
    def completed(self) -> bool:
        return self.quiz is None or self.quiz.completed

    def release(self) -> None:
        """Drop the engine state once the answer set has been handed off."""
        self.quiz = None


class InMemorySessionStore:
    """Process-wide registry of quiz sessions keyed by session id.

    Unlike a plain record store, sessions are live objects, so callers borrow
    them through ``checkout`` which holds the lock for the whole intent.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, SessionRecord] = {}
        self._lock = threading.RLock()  # re-entrant: completion receivers call get() inside checkout()

    def create(self, record: SessionRecord) -> None:
        if not record.session_id:
            raise ValueError("create: record.session_id is required.")

        with self._lock:
            if record.session_id in self._sessions:
                raise ValueError(f"create: session_id '{record.session_id}' already exists.")
            self._sessions[record.session_id] = record

    def get(self, session_id: str) -> Optional[SessionRecord]:
        with self._lock:
            return self._sessions.get(session_id)

    @contextmanager
    def checkout(self, session_id: str) -> Iterator[SessionRecord]:
        """Hold the store lock while one intent is applied to ``session_id``."""
        with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                raise SessionNotFound(session_id)
            record.last_seen = time.monotonic()
            yield record
            record.updated_at = _ts_utc_iso()

    def discard(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def sweep_idle(self, max_idle_seconds: float, now: Optional[float] = None) -> int:
        """Discard sessions untouched for longer than ``max_idle_seconds``; returns how many."""
        now = time.monotonic() if now is None else now
        with self._lock:
            stale = [
                session_id
                for session_id, record in self._sessions.items()
                if now - record.last_seen > max_idle_seconds
            ]
            for session_id in stale:
                del self._sessions[session_id]
            return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
