"""History store: capped, newest-first list of past batch sessions.

Sessions live as one JSON array under a single storage key. When a write is
rejected for capacity, the write is retried once with every resume's content
blanked so that at least the results survive.
"""

from __future__ import annotations

import logging
import time
import uuid

from pydantic import TypeAdapter, ValidationError

from src.core.errors import StorageQuotaExceededError
from src.core.schemas import AnalysisStatus, BatchItem, HistorySession, JobContext
from src.core.storage import KeyValueStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "resume_ai_history_v1"
MAX_SESSIONS = 20

_SESSIONS = TypeAdapter(list[HistorySession])


def average_score(items: list[BatchItem]) -> int | None:
    """Rounded mean score of completed items, or None if none completed."""
    scores = [
        item.result.score
        for item in items
        if item.status is AnalysisStatus.COMPLETED and item.result is not None
    ]
    if not scores:
        return None
    # Half-up rounding; round() would send 80.5 to 80.
    return int(sum(scores) / len(scores) + 0.5)


def strip_content(session: HistorySession) -> HistorySession:
    """Return a copy of session with every file's content blanked."""
    items = [
        item.model_copy(update={"file": item.file.model_copy(update={"content": ""})})
        for item in session.items
    ]
    return session.model_copy(update={"items": items})


class HistoryStore:
    """Persists completed batch sessions.

    Usage::

        history = HistoryStore(store)
        session = history.save(job, items)   # None if nothing completed
        for s in history.list():
            ...
    """

    def __init__(self, store: KeyValueStore, max_sessions: int = MAX_SESSIONS) -> None:
        self._store = store
        self._max_sessions = max_sessions

    def list(self) -> list[HistorySession]:
        """Return stored sessions, newest first.

        Unreadable stored data yields an empty list.
        """
        raw = self._store.get(HISTORY_KEY)
        if not raw:
            return []
        try:
            return _SESSIONS.validate_json(raw)
        except ValidationError:
            logger.error("Failed to load history: stored data is invalid", exc_info=True)
            return []

    def get(self, session_id: str) -> HistorySession | None:
        for session in self.list():
            if session.id == session_id:
                return session
        return None

    def restore(self, session_id: str) -> HistorySession | None:
        """Return a deep copy of a stored session, safe to use as working state."""
        session = self.get(session_id)
        if session is None:
            return None
        return session.model_copy(deep=True)

    def save(self, job: JobContext, items: list[BatchItem]) -> HistorySession | None:
        """Record a finished batch.

        Returns the new session, or None when no item completed (storage is
        left untouched in that case).

        Raises:
            StorageQuotaExceededError: If even the content-stripped write fails.
                Previously stored history is left intact.
        """
        avg = average_score(items)
        if avg is None:
            logger.info("No completed items - history not saved")
            return None

        now_ms = int(time.time() * 1000)
        session = HistorySession(
            id=uuid.uuid4().hex,
            timestamp=now_ms,
            job_title=job.title,
            job_description=job.description,
            items=[item.model_copy(deep=True) for item in items],
            total_candidates=len(items),
            average_score=avg,
        )

        existing = self.list()
        try:
            self._write([session, *existing])
        except StorageQuotaExceededError:
            logger.warning(
                "Storage quota exceeded, saving session %s without file content",
                session.id,
            )
            self._write([strip_content(session), *existing])

        logger.info(
            "Saved session %s: %d candidates, average score %d",
            session.id, session.total_candidates, session.average_score,
        )
        return session

    def delete(self, session_id: str) -> list[HistorySession]:
        """Remove one session and return the remaining list."""
        remaining = [s for s in self.list() if s.id != session_id]
        self._write(remaining)
        return remaining

    def clear(self) -> None:
        self._store.delete(HISTORY_KEY)

    def _write(self, sessions: list[HistorySession]) -> None:
        capped = sessions[: self._max_sessions]
        self._store.set(HISTORY_KEY, _SESSIONS.dump_json(capped).decode())
