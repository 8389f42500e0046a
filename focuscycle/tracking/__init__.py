"""Session tracking package."""

from .tracker import (
    SessionTracker,
    DailyProgress,
    SESSIONS_BEFORE_LONG_BREAK,
    DAY_CHECK_INTERVAL_MS,
)

__all__ = [
    "SessionTracker",
    "DailyProgress",
    "SESSIONS_BEFORE_LONG_BREAK",
    "DAY_CHECK_INTERVAL_MS",
]
