"""Database package."""

from .db import get_session, init_db, configure_engine
from .models import KeyValueEntry
from .store import PersistedStore, StoreError, STORAGE_KEYS

__all__ = [
    "get_session",
    "init_db",
    "configure_engine",
    "KeyValueEntry",
    "PersistedStore",
    "StoreError",
    "STORAGE_KEYS",
]
