"""Main timer card.

Layout (top → bottom):
    - Mode label ("FOCUS", "SHORT BREAK", ...)
    - Large MM:SS countdown
    - Control row: Reset · Start/Pause/Resume · Skip
    - Cycle dots (4 = one long-break cycle) and today's count
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QFrame,
)

from ..coordinator import ModeCoordinator
from ..timer.clock import format_time
from ..timer.engine import TimerEngine, TimerMode, TimerStatus
from ..tracking.tracker import DailyProgress, SessionTracker, SESSIONS_BEFORE_LONG_BREAK


MODE_LABELS: dict[TimerMode, str] = {
    TimerMode.FOCUS:       "FOCUS",
    TimerMode.SHORT_BREAK: "SHORT BREAK",
    TimerMode.LONG_BREAK:  "LONG BREAK",
}


class TimerWidget(QWidget):
    """Countdown display and controls for one engine."""

    def __init__(
        self,
        engine: TimerEngine,
        coordinator: ModeCoordinator,
        tracker: SessionTracker,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._coordinator = coordinator
        self._tracker = tracker
        self._build_ui()
        self._connect_signals()
        self._on_state_changed(engine.status)
        self._on_progress_changed(tracker.progress)

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        card = QFrame(self)
        card.setObjectName("card")
        root.addWidget(card)

        layout = QVBoxLayout(card)
        layout.setContentsMargins(32, 24, 32, 28)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._mode_label = QLabel("", card)
        self._mode_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._mode_label)

        self._time_label = QLabel("", card)
        self._time_label.setObjectName("timeLabel")
        self._time_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._time_label.setStyleSheet("font-size: 64px; font-weight: 600;")
        layout.addWidget(self._time_label)

        btn_row = QHBoxLayout()
        btn_row.setSpacing(12)
        btn_row.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._reset_btn = QPushButton("Reset", card)
        self._start_pause_btn = QPushButton("Start", card)
        self._start_pause_btn.setObjectName("primaryButton")
        self._skip_btn = QPushButton("Skip", card)
        btn_row.addWidget(self._reset_btn)
        btn_row.addWidget(self._start_pause_btn)
        btn_row.addWidget(self._skip_btn)
        layout.addLayout(btn_row)

        layout.addSpacing(12)

        dot_row = QHBoxLayout()
        dot_row.setAlignment(Qt.AlignmentFlag.AlignCenter)
        dot_row.setSpacing(10)
        self._dots: list[QLabel] = []
        for _ in range(SESSIONS_BEFORE_LONG_BREAK):
            dot = QLabel("○", card)
            dot.setStyleSheet("font-size: 18px;")
            self._dots.append(dot)
            dot_row.addWidget(dot)
        layout.addLayout(dot_row)

        self._count_label = QLabel("", card)
        self._count_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._count_label)

    # ── signals ───────────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._start_pause_btn.clicked.connect(self._on_start_pause)
        self._reset_btn.clicked.connect(self._engine.reset)
        self._skip_btn.clicked.connect(self._coordinator.skip)

        self._engine.tick.connect(self._refresh_time)
        self._engine.state_changed.connect(self._on_state_changed)
        self._tracker.progress_changed.connect(self._on_progress_changed)

    # ── slots ─────────────────────────────────────────────────────────────

    def _on_start_pause(self) -> None:
        status = self._engine.status
        if status is TimerStatus.RUNNING:
            self._engine.pause()
        elif status is TimerStatus.PAUSED:
            self._engine.resume()
        elif status is TimerStatus.COMPLETED:
            self._coordinator.start_next()
        else:
            self._engine.start()

    def _on_state_changed(self, status: TimerStatus) -> None:
        if status is TimerStatus.RUNNING:
            self._start_pause_btn.setText("Pause")
        elif status is TimerStatus.PAUSED:
            self._start_pause_btn.setText("Resume")
        elif status is TimerStatus.COMPLETED:
            self._start_pause_btn.setText("Start next")
        else:
            self._start_pause_btn.setText("Start")

        label = MODE_LABELS[self._engine.mode]
        if status is TimerStatus.PAUSED:
            label += " · PAUSED"
        elif status is TimerStatus.COMPLETED:
            label += " · DONE"
        self._mode_label.setText(label)
        self._reset_btn.setEnabled(status is not TimerStatus.IDLE)
        self._refresh_time(self._engine.remaining)

    def _on_progress_changed(self, progress: DailyProgress) -> None:
        for i, dot in enumerate(self._dots):
            dot.setText("●" if i < progress.cycle_position else "○")
        noun = "session" if progress.completed_count == 1 else "sessions"
        self._count_label.setText(f"{progress.completed_count} {noun} today")

    def _refresh_time(self, remaining: int) -> None:
        self._time_label.setText(format_time(remaining))
