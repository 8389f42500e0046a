"""Completion ledger: at-most-one-duplicate delivery across restarts.

Only one session is ever active, so a single slot holding the most recent
:class:`CompletionRecord` is enough.  The engine writes the record *before*
emitting ``session_completed`` and marks it delivered once every listener
has returned:

* delivered record for id S  → recovery stays quiet for S
* undelivered record for S   → the process died mid-callback; recovery
  fires again (possibly a duplicate, never a lost completion)
* no record / corrupt record → nothing processed
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, asdict

from ..database.store import PersistedStore, StoreError, STORAGE_KEYS

logger = logging.getLogger(__name__)


@dataclass
class CompletionRecord:
    session_id: str
    completed_at: int
    mode: str
    delivered: bool = False

    def to_dict(self) -> dict:
        return {
            "sessionId": self.session_id,
            "completedAt": self.completed_at,
            "mode": self.mode,
            "delivered": self.delivered,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CompletionRecord:
        session_id = data["sessionId"]
        if not isinstance(session_id, str):
            raise TypeError("sessionId must be a string")
        return cls(
            session_id=session_id,
            completed_at=int(data["completedAt"]),
            mode=str(data["mode"]),
            delivered=bool(data.get("delivered", True)),
        )


class CompletionLedger:
    """Single-slot record of the last completed session id."""

    def __init__(self, store: PersistedStore) -> None:
        self._store = store

    @property
    def last(self) -> CompletionRecord | None:
        data = self._store.get(STORAGE_KEYS.COMPLETION_LEDGER)
        if data is None:
            return None
        try:
            return CompletionRecord.from_dict(data)
        except (KeyError, TypeError, ValueError):
            logger.warning("Corrupt completion ledger, treating as empty")
            return None

    def put(self, record: CompletionRecord) -> None:
        self._store.set(STORAGE_KEYS.COMPLETION_LEDGER, record.to_dict())

    def has_processed(self, session_id: str) -> bool:
        record = self.last
        return record is not None and record.session_id == session_id

    def needs_delivery(self, session_id: str) -> bool:
        """True unless *session_id*'s completion has already reached listeners."""
        record = self.last
        if record is None or record.session_id != session_id:
            return True
        return not record.delivered

    def mark_delivered(self, session_id: str) -> None:
        record = self.last
        if record is None or record.session_id != session_id:
            return
        record.delivered = True
        try:
            self.put(record)
        except StoreError:
            logger.warning("Could not mark session %s delivered", session_id)
