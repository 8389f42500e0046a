"""Wall-clock source and time conversions.

Everything in the timer core is integer epoch milliseconds.  The clock is
a plain callable so tests can substitute a fake one.
"""

from __future__ import annotations

import math
import time
from datetime import date
from typing import Callable

Clock = Callable[[], int]

MS_PER_MINUTE = 60 * 1000


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def minutes_to_ms(minutes: int | float) -> int:
    return int(minutes * MS_PER_MINUTE)


def ms_to_minutes(ms: int) -> int:
    """Whole minutes, rounded down."""
    return ms // MS_PER_MINUTE


def format_time(ms: int) -> str:
    """``MM:SS`` for display; partial seconds round up so 0:00.4 shows 00:01."""
    total_seconds = max(0, math.ceil(ms / 1000))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def calculate_progress(remaining: int, duration: int) -> float:
    """Percent of *duration* already elapsed (0-100)."""
    if duration <= 0:
        return 0.0
    return (duration - remaining) / duration * 100


def day_key(day: date) -> str:
    """Calendar-day key used to stamp daily progress (``YYYY-MM-DD``)."""
    return day.isoformat()
