"""Visual notification state: the "session finished" banner.

The banner only ever knows which mode just finished.  Its "start next"
button re-enters the core through ``start_next_requested``; whoever
hosts the banner routes that to ``ModeCoordinator.start_next``.
"""

from __future__ import annotations

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .timer.engine import TimerMode

NOTIFICATION_AUTO_DISMISS_MS = 10_000


BANNER_MESSAGES: dict[TimerMode, tuple[str, str]] = {
    TimerMode.FOCUS:       ("Focus session complete. Nice work!", "Start break"),
    TimerMode.SHORT_BREAK: ("Break's over.", "Start focus"),
    TimerMode.LONG_BREAK:  ("Long break's over. Ready for a new cycle?", "Start focus"),
}


class NotificationCenter(QObject):
    """Banner visibility with a 10 s auto-dismiss.

    Signals
    -------
    banner_changed(visible: bool)
    start_next_requested()
    """

    banner_changed = pyqtSignal(bool)
    start_next_requested = pyqtSignal()

    def __init__(self, parent: QObject | None = None, *, enabled: bool = True) -> None:
        super().__init__(parent)
        self._enabled = enabled
        self._visible = False
        self._completed_mode: TimerMode | None = None

        self._dismiss_timer = QTimer(self)
        self._dismiss_timer.setSingleShot(True)
        self._dismiss_timer.setInterval(NOTIFICATION_AUTO_DISMISS_MS)
        self._dismiss_timer.timeout.connect(self.dismiss)

    @property
    def banner_visible(self) -> bool:
        return self._visible

    @property
    def completed_mode(self) -> TimerMode | None:
        return self._completed_mode

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled
        if not enabled:
            self.dismiss()

    def show_banner(self, mode: TimerMode) -> None:
        if not self._enabled:
            return
        self._completed_mode = mode
        self._visible = True
        self._dismiss_timer.start()  # restarts if already running
        self.banner_changed.emit(True)

    def dismiss(self) -> None:
        self._dismiss_timer.stop()
        if not self._visible:
            return
        self._visible = False
        self._completed_mode = None
        self.banner_changed.emit(False)

    def accept(self) -> None:
        """The banner's "start next" button."""
        self.dismiss()
        self.start_next_requested.emit()
