"""Focus ↔ break policy.

The whole transition table lives in :meth:`ModeCoordinator.next_step`:

==============  ==========================  =====================
Finished        Next mode                   Auto-start when
==============  ==========================  =====================
FOCUS           tracker's next break mode   ``auto_start_breaks``
SHORT_BREAK     FOCUS                       ``auto_start_focus``
LONG_BREAK      FOCUS                       ``auto_start_focus``
==============  ==========================  =====================

When a transition doesn't auto-start, the engine stays COMPLETED and
``next_offered`` asks the host to show a "start next" affordance.

Skipping
--------
- Skipping FOCUS counts as a completed session, long-break cycle
  included (``reset_cycle`` is *not* called), then follows the FOCUS row.
- Skipping a break leaves tracking alone and goes straight into a
  running FOCUS session, no confirmation.

The coordinator subscribes to ``TimerEngine.session_completed`` after
both objects exist, so neither needs the other at construction time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from PyQt6.QtCore import QObject, pyqtSignal

from .settings import Preferences
from .timer.engine import TimerEngine, TimerMode, TimerStatus
from .tracking.tracker import SessionTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    next_mode: TimerMode
    auto_start: bool


class ModeCoordinator(QObject):
    """Wires engine completions to tracking and mode advancement.

    Signals
    -------
    sound_requested(mode: TimerMode)
        A session of *mode* finished and sounds are enabled.
    next_offered(mode: TimerMode)
        A session of *mode* finished and the next one waits for the user.
    advanced(mode: TimerMode)
        The coordinator started a session of *mode* on its own.
    """

    sound_requested = pyqtSignal(object)
    next_offered = pyqtSignal(object)
    advanced = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        engine: TimerEngine,
        tracker: SessionTracker,
        preferences: Callable[[], Preferences],
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._tracker = tracker
        self._preferences = preferences
        engine.session_completed.connect(self.on_complete)

    # ── policy ────────────────────────────────────────────────────────

    def next_step(self, finished: TimerMode) -> Transition:
        prefs = self._preferences()
        if finished is TimerMode.FOCUS:
            return Transition(self._tracker.get_next_break_mode(), prefs.auto_start_breaks)
        return Transition(TimerMode.FOCUS, prefs.auto_start_focus)

    def on_complete(self, mode: TimerMode) -> None:
        """Handle a session that ran out (or was skipped via ``engine.skip()``)."""
        if mode is TimerMode.FOCUS:
            self._tracker.increment_session()
        self._follow(mode)

    def on_skip(self, mode: TimerMode) -> None:
        """Bookkeeping after ``engine.skip_silent()`` on a session of *mode*."""
        if mode is TimerMode.FOCUS:
            self._tracker.increment_session()
            self._follow(mode)
            return
        logger.info("Break skipped, starting focus")
        self._start(TimerMode.FOCUS)

    # ── host actions ──────────────────────────────────────────────────

    def resolve_pending(self) -> bool:
        """Deliver a completion that happened while the app was closed."""
        return self._engine.deliver_pending_completion()

    def skip(self) -> None:
        """The Skip button."""
        mode = self._engine.mode
        if self._engine.status is TimerStatus.COMPLETED:
            # Already counted; skipping now means skipping the offered break
            # (or jumping into the offered focus session).
            self.skip_break()
            return
        self._engine.skip_silent()
        self.on_skip(mode)

    def skip_break(self) -> bool:
        """The "skip break, start focus" action.

        Valid during a break or once a session has completed; a focus
        session that is still idle, running or paused is left alone.
        Returns True if focus was started.
        """
        if not (self._engine.mode.is_break
                or self._engine.status is TimerStatus.COMPLETED):
            return False
        logger.info("Break skipped, starting focus")
        self._start(TimerMode.FOCUS)
        return True

    def start_next(self) -> None:
        """The "start next" action offered after a completion."""
        if self._engine.status is not TimerStatus.COMPLETED:
            return
        self._start(self.next_step(self._engine.mode).next_mode)

    def reset_progress(self) -> None:
        self._tracker.reset_progress()

    # ── internal ──────────────────────────────────────────────────────

    def _follow(self, finished: TimerMode) -> None:
        if self._preferences().sounds_enabled:
            self.sound_requested.emit(finished)
        step = self.next_step(finished)
        if step.auto_start:
            self._start(step.next_mode)
        else:
            logger.info("%s finished, offering %s", finished.value, step.next_mode.value)
            self.next_offered.emit(finished)

    def _start(self, mode: TimerMode) -> None:
        # switch_mode(auto_start=True) only arms a new countdown; it never
        # reports a completion for the mode being left.
        self._engine.switch_mode(mode, auto_start=True)
        self.advanced.emit(mode)
