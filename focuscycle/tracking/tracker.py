"""Daily session tracking: today's count and the 4-session cycle.

Progress is stamped with a calendar-day key.  Every read and write checks
that key against today first; a stale record is replaced wholesale by a
fresh one (no carry-over).  A 60 s ``QTimer`` repeats the check while the
app is open so the display flips at midnight even if nothing else reads
the tracker, but nothing depends on that timer for correctness.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..database.store import PersistedStore, StoreError, STORAGE_KEYS
from ..timer.clock import Clock, day_key, now_ms
from ..timer.engine import TimerMode

logger = logging.getLogger(__name__)

SESSIONS_BEFORE_LONG_BREAK = 4
DAY_CHECK_INTERVAL_MS = 60_000


@dataclass(frozen=True)
class DailyProgress:
    date: str
    completed_count: int = 0
    cycle_position: int = 0
    last_updated: int = 0

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "completedCount": self.completed_count,
            "cyclePosition": self.cycle_position,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict) -> DailyProgress:
        progress = cls(
            date=str(data["date"]),
            completed_count=int(data["completedCount"]),
            cycle_position=int(data["cyclePosition"]),
            last_updated=int(data.get("lastUpdated", 0)),
        )
        if progress.completed_count < 0:
            raise ValueError("negative completedCount")
        if not 0 <= progress.cycle_position < SESSIONS_BEFORE_LONG_BREAK:
            raise ValueError("cyclePosition out of range")
        return progress


class SessionTracker(QObject):
    """Owns :class:`DailyProgress`.

    Signals
    -------
    progress_changed(progress: DailyProgress)
        Emitted after every mutation, including a day rollover.
    """

    progress_changed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        store: PersistedStore,
        today: Callable[[], date] = date.today,
        clock: Clock = now_ms,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._today = today
        self._clock = clock
        self._progress = self._load()

        self._day_timer = QTimer(self)
        self._day_timer.setInterval(DAY_CHECK_INTERVAL_MS)
        self._day_timer.timeout.connect(self.check_day_boundary)
        self._day_timer.start()

    # ── reads ─────────────────────────────────────────────────────────

    @property
    def progress(self) -> DailyProgress:
        self.check_day_boundary()
        return self._progress

    @property
    def completed_count(self) -> int:
        """Focus sessions completed today."""
        return self.progress.completed_count

    @property
    def cycle_position(self) -> int:
        """0-3, progress toward the next long break."""
        return self.progress.cycle_position

    def get_next_break_mode(self) -> TimerMode:
        """LONG_BREAK right after the 4th session of a cycle, else SHORT_BREAK."""
        p = self.progress
        if p.cycle_position == 0 and p.completed_count > 0:
            return TimerMode.LONG_BREAK
        return TimerMode.SHORT_BREAK

    # ── writes ────────────────────────────────────────────────────────

    def increment_session(self) -> None:
        """Count one focus completion."""
        p = self.progress
        self._commit(replace(
            p,
            completed_count=p.completed_count + 1,
            cycle_position=(p.cycle_position + 1) % SESSIONS_BEFORE_LONG_BREAK,
            last_updated=self._clock(),
        ))

    def reset_cycle(self) -> None:
        """Restart the long-break cycle; today's count is untouched."""
        self._commit(replace(self.progress, cycle_position=0, last_updated=self._clock()))

    def reset_progress(self) -> None:
        """Explicit user reset: drop the stored record and start over."""
        try:
            self._store.remove(STORAGE_KEYS.DAILY_PROGRESS)
        except StoreError:
            logger.warning("Could not remove stored daily progress", exc_info=True)
        self._commit(self._fresh())

    def check_day_boundary(self) -> bool:
        """Replace progress with a zeroed record if it isn't dated today.

        Returns True when a rollover happened.
        """
        if self._progress.date == day_key(self._today()):
            return False
        logger.info("New day: resetting progress dated %s", self._progress.date)
        self._commit(self._fresh())
        return True

    # ── internal ──────────────────────────────────────────────────────

    def _fresh(self) -> DailyProgress:
        return DailyProgress(date=day_key(self._today()), last_updated=self._clock())

    def _commit(self, progress: DailyProgress) -> None:
        self._progress = progress
        self._save(progress)
        self.progress_changed.emit(progress)

    def _save(self, progress: DailyProgress) -> None:
        try:
            self._store.set(STORAGE_KEYS.DAILY_PROGRESS, progress.to_dict())
        except StoreError:
            logger.warning("Could not persist daily progress", exc_info=True)

    def _load(self) -> DailyProgress:
        data = self._store.get(STORAGE_KEYS.DAILY_PROGRESS)
        if data is None:
            return self._fresh()
        try:
            progress = DailyProgress.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.warning("Stored daily progress is corrupt, starting fresh")
            return self._fresh()
        if progress.date != day_key(self._today()):
            logger.info("New day: resetting progress dated %s", progress.date)
            fresh = self._fresh()
            self._save(fresh)
            return fresh
        return progress
