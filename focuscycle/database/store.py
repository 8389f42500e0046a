"""Key → JSON persisted store.

The timer core only needs three operations on durable state::

    store = PersistedStore()
    store.set(STORAGE_KEYS.TIMER_SESSION, {...})
    store.get(STORAGE_KEYS.TIMER_SESSION)     # dict, or None
    store.remove(STORAGE_KEYS.TIMER_SESSION)

Reads never raise: a missing row, unparsable JSON or a database error all
come back as ``None`` so callers substitute their defaults.  Writes raise
:class:`StoreError` and the caller decides whether the failure matters.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from .db import get_session
from .models import KeyValueEntry

logger = logging.getLogger(__name__)


class STORAGE_KEYS:
    TIMER_SESSION = "timer-session"
    COMPLETION_LEDGER = "completion-ledger"
    DAILY_PROGRESS = "daily-progress"


class StoreError(Exception):
    """A value could not be written to (or removed from) the store."""


class PersistedStore:
    """SQLite-backed JSON document store, one row per key."""

    def get(self, key: str) -> Any | None:
        try:
            with get_session() as db:
                entry = db.get(KeyValueEntry, key)
                raw = entry.value if entry is not None else None
        except SQLAlchemyError:
            logger.warning("Could not read store key %r", key, exc_info=True)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding corrupt JSON under store key %r", key)
            return None

    def set(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise StoreError(f"value for {key!r} is not JSON-serialisable") from exc
        try:
            with get_session() as db:
                entry = db.get(KeyValueEntry, key)
                if entry is None:
                    db.add(KeyValueEntry(key=key, value=payload))
                else:
                    entry.value = payload
        except SQLAlchemyError as exc:
            raise StoreError(f"could not write store key {key!r}") from exc

    def remove(self, key: str) -> None:
        try:
            with get_session() as db:
                entry = db.get(KeyValueEntry, key)
                if entry is not None:
                    db.delete(entry)
        except SQLAlchemyError as exc:
            raise StoreError(f"could not remove store key {key!r}") from exc
