"""Timer session state machine for FocusCycle.

States
------
IDLE        Not running, waiting for user to start.
RUNNING     Counting down.
PAUSED      Frozen; remaining time is kept.
COMPLETED   Reached zero (naturally or via skip).  Sticky: the engine
            never leaves COMPLETED on its own, only ``switch_mode`` /
            ``reset`` move it on.

Transitions
-----------
IDLE → RUNNING                      (start)
RUNNING → PAUSED                    (pause)
PAUSED → RUNNING                    (resume)
RUNNING → COMPLETED                 (countdown reaches 0, skip)
Any → IDLE                          (reset, switch_mode)
Any → RUNNING                       (switch_mode with auto_start)

Timekeeping
-----------
The tick is *not* the source of truth for elapsed time.  Each tick
recomputes ``remaining`` from the wall clock::

    remaining = duration - (elapsed_before_start + (now - started_at))

so a late, skipped or suspended tick is reconciled in a single step.
The persisted record of a running session always holds the remaining
time *at* ``started_at``; that pair is all recovery needs after a
restart.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..database.store import PersistedStore, StoreError, STORAGE_KEYS
from ..settings import Preferences
from .clock import Clock, minutes_to_ms, now_ms
from .ledger import CompletionLedger, CompletionRecord

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class TimerMode(Enum):
    FOCUS = "focus"
    SHORT_BREAK = "short-break"
    LONG_BREAK = "long-break"

    @property
    def is_break(self) -> bool:
        return self is not TimerMode.FOCUS


class TimerStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_TICK_MS = 100
HIGH_RESOLUTION_TICK_MS = 10  # sub-second display


def duration_for(mode: TimerMode, prefs: Preferences) -> int:
    """Duration of *mode* in milliseconds under the given preferences."""
    if mode is TimerMode.FOCUS:
        return minutes_to_ms(prefs.focus_duration_minutes)
    if mode is TimerMode.SHORT_BREAK:
        return minutes_to_ms(prefs.short_break_duration_minutes)
    return minutes_to_ms(prefs.long_break_duration_minutes)


def new_session_id(mode: TimerMode, now: int) -> str:
    return f"{now}-{mode.value}-{uuid.uuid4().hex[:8]}"


# ── session record ────────────────────────────────────────────────────────


@dataclass
class TimerSession:
    mode: TimerMode
    duration: int
    remaining: int
    status: TimerStatus
    started_at: int | None
    session_id: str

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "duration": self.duration,
            "remaining": self.remaining,
            "status": self.status.value,
            "startedAt": self.started_at,
            "sessionId": self.session_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> TimerSession:
        """Parse a stored session.  Raises ``ValueError``/``KeyError``/
        ``TypeError`` if the record is malformed or breaks an invariant."""
        session = cls(
            mode=TimerMode(data["mode"]),
            duration=int(data["duration"]),
            remaining=int(data["remaining"]),
            status=TimerStatus(data["status"]),
            started_at=None if data.get("startedAt") is None else int(data["startedAt"]),
            session_id=str(data["sessionId"]),
        )
        if session.duration <= 0 or not 0 <= session.remaining <= session.duration:
            raise ValueError("remaining out of range")
        if (session.status is TimerStatus.RUNNING) != (session.started_at is not None):
            raise ValueError("startedAt must be set exactly when running")
        return session


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Wall-clock countdown that survives restarts.

    Signals
    -------
    tick(remaining_ms: int)
        Emitted on every recomputation and whenever remaining is reset.
    state_changed(new_status: TimerStatus)
        Emitted on every status transition.
    session_completed(mode: TimerMode)
        Emitted once per completed session (natural end, ``skip()``, or a
        completion discovered during recovery that was never delivered).
        Not emitted by ``skip_silent()``.
    """

    tick = pyqtSignal(int)
    state_changed = pyqtSignal(object)
    session_completed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        store: PersistedStore,
        preferences: Callable[[], Preferences],
        clock: Clock = now_ms,
        ledger: CompletionLedger | None = None,
        high_resolution: bool | None = None,
    ) -> None:
        super().__init__(parent)

        self._store = store
        self._preferences = preferences
        self._clock = clock
        self._ledger = ledger if ledger is not None else CompletionLedger(store)

        # Elapsed time accumulated before the current started_at.
        self._elapsed_base: int = 0

        if high_resolution is None:
            high_resolution = preferences().high_resolution_timer

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(
            HIGH_RESOLUTION_TICK_MS if high_resolution else DEFAULT_TICK_MS
        )
        self._qt_timer.timeout.connect(self._on_tick)

        self._session: TimerSession = self._restore()
        self._persist()
        if self._session.status is TimerStatus.RUNNING:
            self._qt_timer.start()
            self._on_tick()

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def mode(self) -> TimerMode:
        return self._session.mode

    @property
    def status(self) -> TimerStatus:
        return self._session.status

    @property
    def remaining(self) -> int:
        """Milliseconds left on the clock."""
        return self._session.remaining

    @property
    def duration(self) -> int:
        return self._session.duration

    @property
    def session_id(self) -> str:
        return self._session.session_id

    @property
    def started_at(self) -> int | None:
        return self._session.started_at

    @property
    def percent_complete(self) -> float:
        """0.0 → 1.0 progress through the current session."""
        if self._session.duration <= 0:
            return 0.0
        elapsed = self._session.duration - self._session.remaining
        return max(0.0, min(1.0, elapsed / self._session.duration))

    @property
    def is_running(self) -> bool:
        return self._session.status is TimerStatus.RUNNING

    @property
    def is_ticking(self) -> bool:
        return self._qt_timer.isActive()

    @property
    def tick_interval(self) -> int:
        return self._qt_timer.interval()

    def set_high_resolution(self, enabled: bool) -> None:
        self._qt_timer.setInterval(
            HIGH_RESOLUTION_TICK_MS if enabled else DEFAULT_TICK_MS
        )

    def snapshot(self) -> TimerSession:
        s = self._session
        return TimerSession(
            s.mode, s.duration, s.remaining, s.status, s.started_at, s.session_id,
        )

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Start (or resume) the countdown.  No-op when running or completed."""
        if self._session.status in (TimerStatus.RUNNING, TimerStatus.COMPLETED):
            return
        self._qt_timer.stop()
        now = self._clock()
        s = self._session
        self._elapsed_base = s.duration - s.remaining
        s.status = TimerStatus.RUNNING
        s.started_at = now
        s.session_id = new_session_id(s.mode, now)
        self._persist()
        self.state_changed.emit(s.status)
        self._qt_timer.start()

    def pause(self) -> None:
        """Freeze the countdown at its last computed value."""
        if self._session.status is not TimerStatus.RUNNING:
            return
        self._qt_timer.stop()
        s = self._session
        s.status = TimerStatus.PAUSED
        s.started_at = None
        self._persist()
        self.state_changed.emit(s.status)

    def resume(self) -> None:
        if self._session.status is TimerStatus.PAUSED:
            self.start()

    def reset(self) -> None:
        """Back to IDLE at the full (freshly read) duration of the current mode."""
        self._qt_timer.stop()
        self._enter_mode(self._session.mode, auto_start=False)

    def skip(self) -> None:
        """Complete the current session now; counts like a natural finish."""
        if self._session.status is TimerStatus.COMPLETED:
            return
        self._finish(notify=True)

    def skip_silent(self) -> None:
        """Complete the current session without emitting ``session_completed``.

        The ledger entry is still written so recovery never re-fires this
        session; the caller does its own bookkeeping.
        """
        if self._session.status is TimerStatus.COMPLETED:
            return
        self._finish(notify=False)

    def switch_mode(self, mode: TimerMode, auto_start: bool = False) -> None:
        """Enter *mode* at full duration; optionally start it in the same step.

        Never emits ``session_completed`` for the mode being left.
        """
        self._qt_timer.stop()
        self._enter_mode(mode, auto_start=auto_start)

    def deliver_pending_completion(self) -> bool:
        """Emit ``session_completed`` for a recovered COMPLETED session
        whose completion never reached listeners.  Returns True if fired."""
        s = self._session
        if s.status is not TimerStatus.COMPLETED:
            return False
        if not self._ledger.needs_delivery(s.session_id):
            logger.debug("Completion of %s already delivered", s.session_id)
            return False
        if not self._ledger.has_processed(s.session_id):
            self._write_ledger(CompletionRecord(
                s.session_id, self._clock(), s.mode.value, delivered=False,
            ))
        logger.info("Delivering completion of %s found at startup", s.session_id)
        self._deliver(s.mode, s.session_id)
        return True

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: timer mechanics
    # ══════════════════════════════════════════════════════════════════

    def _enter_mode(self, mode: TimerMode, *, auto_start: bool) -> None:
        now = self._clock()
        duration = duration_for(mode, self._preferences())
        s = self._session
        s.mode = mode
        s.duration = duration
        s.remaining = duration
        s.session_id = new_session_id(mode, now)
        self._elapsed_base = 0
        if auto_start:
            s.status = TimerStatus.RUNNING
            s.started_at = now
        else:
            s.status = TimerStatus.IDLE
            s.started_at = None
        self._persist()
        self.tick.emit(s.remaining)
        self.state_changed.emit(s.status)
        if auto_start:
            self._qt_timer.start()
            self._on_tick()

    def _compute_remaining(self, now: int) -> int:
        s = self._session
        elapsed = self._elapsed_base + max(0, now - s.started_at)
        remaining = max(0, min(s.duration, s.duration - elapsed))
        # A backwards clock jump must never hand time back.
        return min(remaining, s.remaining)

    def _on_tick(self) -> None:
        s = self._session
        if s.status is not TimerStatus.RUNNING or s.started_at is None:
            self._qt_timer.stop()
            return
        s.remaining = self._compute_remaining(self._clock())
        self.tick.emit(s.remaining)
        if s.remaining <= 0:
            self._finish(notify=True)

    def _finish(self, *, notify: bool) -> None:
        self._qt_timer.stop()
        s = self._session
        finished_mode = s.mode
        finished_id = s.session_id
        s.remaining = 0
        s.status = TimerStatus.COMPLETED
        s.started_at = None
        self._persist()
        self._write_ledger(CompletionRecord(
            finished_id, self._clock(), finished_mode.value, delivered=not notify,
        ))
        self.tick.emit(0)
        self.state_changed.emit(s.status)
        if notify:
            self._deliver(finished_mode, finished_id)

    def _deliver(self, mode: TimerMode, session_id: str) -> None:
        logger.info("Session %s (%s) completed", session_id, mode.value)
        self.session_completed.emit(mode)
        self._ledger.mark_delivered(session_id)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: persistence & recovery
    # ══════════════════════════════════════════════════════════════════

    def _persist(self) -> None:
        s = self._session
        data = s.to_dict()
        if s.status is TimerStatus.RUNNING:
            # remaining as of started_at, not as of the last tick
            data["remaining"] = s.duration - self._elapsed_base
        try:
            self._store.set(STORAGE_KEYS.TIMER_SESSION, data)
        except StoreError:
            logger.warning("Could not persist timer session", exc_info=True)

    def _write_ledger(self, record: CompletionRecord) -> None:
        try:
            self._ledger.put(record)
        except StoreError:
            logger.warning(
                "Could not write completion ledger for %s", record.session_id,
                exc_info=True,
            )

    def _default_session(self) -> TimerSession:
        now = self._clock()
        duration = duration_for(TimerMode.FOCUS, self._preferences())
        return TimerSession(
            mode=TimerMode.FOCUS,
            duration=duration,
            remaining=duration,
            status=TimerStatus.IDLE,
            started_at=None,
            session_id=new_session_id(TimerMode.FOCUS, now),
        )

    def _restore(self) -> TimerSession:
        data = self._store.get(STORAGE_KEYS.TIMER_SESSION)
        if data is None:
            return self._default_session()
        try:
            session = TimerSession.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.warning("Stored timer session is corrupt, starting fresh")
            return self._default_session()

        if session.status is TimerStatus.IDLE:
            # Nothing elapsed yet: pick up any duration change.
            session.duration = duration_for(session.mode, self._preferences())
            session.remaining = session.duration
            return session

        if session.status is not TimerStatus.RUNNING:
            return session

        now = self._clock()
        elapsed = max(0, now - session.started_at)
        remaining = max(0, min(session.duration, session.remaining - elapsed))
        if remaining == 0:
            logger.info("Session %s finished while closed", session.session_id)
            session.remaining = 0
            session.status = TimerStatus.COMPLETED
            session.started_at = None
            return session

        # Keep the original started_at so persisted state stays consistent.
        self._elapsed_base = session.duration - session.remaining
        session.remaining = remaining
        logger.info(
            "Resuming session %s with %d ms left", session.session_id, remaining,
        )
        return session
