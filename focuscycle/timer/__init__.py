"""Timer package."""

from .clock import now_ms, format_time, minutes_to_ms, ms_to_minutes, calculate_progress
from .engine import (
    TimerEngine,
    TimerMode,
    TimerStatus,
    TimerSession,
    duration_for,
    DEFAULT_TICK_MS,
    HIGH_RESOLUTION_TICK_MS,
)
from .ledger import CompletionLedger, CompletionRecord

__all__ = [
    "TimerEngine",
    "TimerMode",
    "TimerStatus",
    "TimerSession",
    "CompletionLedger",
    "CompletionRecord",
    "duration_for",
    "DEFAULT_TICK_MS",
    "HIGH_RESOLUTION_TICK_MS",
    "now_ms",
    "format_time",
    "minutes_to_ms",
    "ms_to_minutes",
    "calculate_progress",
]
