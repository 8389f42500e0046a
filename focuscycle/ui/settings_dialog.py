"""Preferences dialog for FocusCycle.

A modal dialog for durations, auto-start, tick resolution, audio and
notification preferences.  Every edit is announced through
``preferences_changed`` so the host can apply (and save) it straight away.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QSpinBox, QSlider, QCheckBox, QPushButton,
    QFrame, QWidget,
)

from ..settings import DURATION_CONSTRAINTS, Preferences


class SettingsDialog(QDialog):
    """Modal dialog for all user preferences.

    Signals
    -------
    preferences_changed(prefs: Preferences)
        Emitted with a fresh copy after every edit.
    """

    preferences_changed = pyqtSignal(object)

    def __init__(
        self,
        preferences: Preferences,
        parent: QWidget | None = None,
        *,
        sound_preview_callback: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Preferences")
        self.setMinimumWidth(400)
        self.setModal(True)

        self._preferences = replace(preferences)
        self._sound_preview = sound_preview_callback
        self._populating = False

        self._build_ui()
        self._populate()

    # ══════════════════════════════════════════════════════════════════
    #  BUILD UI
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(16)

        # ── Timer section ────────────────────────────────────────────
        root.addWidget(self._section_label("Timer"))
        timer_form = QFormLayout()
        timer_form.setContentsMargins(0, 0, 0, 0)
        timer_form.setHorizontalSpacing(20)
        timer_form.setVerticalSpacing(10)

        self._focus_spin = self._minutes_spin("focus_duration_minutes")
        timer_form.addRow("Focus:", self._focus_spin)
        self._short_spin = self._minutes_spin("short_break_duration_minutes")
        timer_form.addRow("Short break:", self._short_spin)
        self._long_spin = self._minutes_spin("long_break_duration_minutes")
        timer_form.addRow("Long break:", self._long_spin)

        self._auto_breaks_cb = QCheckBox("Auto-start breaks")
        self._auto_breaks_cb.toggled.connect(self._on_toggle_changed)
        timer_form.addRow("", self._auto_breaks_cb)

        self._auto_focus_cb = QCheckBox("Auto-start focus sessions")
        self._auto_focus_cb.toggled.connect(self._on_toggle_changed)
        timer_form.addRow("", self._auto_focus_cb)

        self._high_res_cb = QCheckBox("High-resolution timer (10 ms)")
        self._high_res_cb.toggled.connect(self._on_toggle_changed)
        timer_form.addRow("", self._high_res_cb)

        root.addLayout(timer_form)
        root.addWidget(self._separator())

        # ── Sound & Notifications section ────────────────────────────
        root.addWidget(self._section_label("Sound & Notifications"))
        snd_form = QFormLayout()
        snd_form.setContentsMargins(0, 0, 0, 0)
        snd_form.setHorizontalSpacing(20)
        snd_form.setVerticalSpacing(10)

        self._sound_cb = QCheckBox("Completion sounds")
        self._sound_cb.toggled.connect(self._on_toggle_changed)
        snd_form.addRow("", self._sound_cb)

        vol_row = QHBoxLayout()
        vol_row.setSpacing(10)
        self._vol_slider = QSlider(Qt.Orientation.Horizontal)
        self._vol_slider.setRange(0, 100)
        self._vol_slider.setTickInterval(10)
        self._vol_label = QLabel("70%")
        self._vol_label.setMinimumWidth(36)
        self._vol_slider.valueChanged.connect(self._on_volume_changed)
        self._vol_slider.sliderReleased.connect(self._on_volume_released)
        vol_row.addWidget(self._vol_slider)
        vol_row.addWidget(self._vol_label)

        vol_wrapper = QWidget()
        vol_wrapper.setLayout(vol_row)
        snd_form.addRow("Volume:", vol_wrapper)

        self._notif_cb = QCheckBox("Show banner when a session ends")
        self._notif_cb.toggled.connect(self._on_toggle_changed)
        snd_form.addRow("", self._notif_cb)

        root.addLayout(snd_form)

        # ── close button ─────────────────────────────────────────────
        root.addStretch()
        btn_row = QHBoxLayout()
        btn_row.addStretch()
        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.accept)
        btn_row.addWidget(close_btn)
        root.addLayout(btn_row)

    # ── helpers ──────────────────────────────────────────────────────

    def _minutes_spin(self, field: str) -> QSpinBox:
        low, high = DURATION_CONSTRAINTS[field]
        spin = QSpinBox()
        spin.setRange(low, high)
        spin.setSuffix(" min")
        spin.valueChanged.connect(self._on_timer_changed)
        return spin

    @staticmethod
    def _section_label(text: str) -> QLabel:
        lbl = QLabel(text)
        lbl.setStyleSheet("font-size: 15px; font-weight: 700; margin-top: 4px;")
        return lbl

    @staticmethod
    def _separator() -> QFrame:
        line = QFrame()
        line.setFrameShape(QFrame.Shape.HLine)
        line.setFixedHeight(1)
        return line

    # ══════════════════════════════════════════════════════════════════
    #  POPULATE FROM PREFERENCES
    # ══════════════════════════════════════════════════════════════════

    def _populate(self) -> None:
        p = self._preferences
        self._populating = True
        try:
            self._focus_spin.setValue(p.focus_duration_minutes)
            self._short_spin.setValue(p.short_break_duration_minutes)
            self._long_spin.setValue(p.long_break_duration_minutes)
            self._auto_breaks_cb.setChecked(p.auto_start_breaks)
            self._auto_focus_cb.setChecked(p.auto_start_focus)
            self._high_res_cb.setChecked(p.high_resolution_timer)
            self._sound_cb.setChecked(p.sounds_enabled)
            self._vol_slider.setValue(p.sound_volume)
            self._vol_label.setText(f"{p.sound_volume}%")
            self._notif_cb.setChecked(p.notifications_enabled)
        finally:
            self._populating = False

    # ══════════════════════════════════════════════════════════════════
    #  CHANGE HANDLERS: announce immediately
    # ══════════════════════════════════════════════════════════════════

    def _on_timer_changed(self) -> None:
        if self._populating:
            return
        p = self._preferences
        p.focus_duration_minutes = self._focus_spin.value()
        p.short_break_duration_minutes = self._short_spin.value()
        p.long_break_duration_minutes = self._long_spin.value()
        self._emit()

    def _on_toggle_changed(self) -> None:
        if self._populating:
            return
        p = self._preferences
        p.auto_start_breaks = self._auto_breaks_cb.isChecked()
        p.auto_start_focus = self._auto_focus_cb.isChecked()
        p.high_resolution_timer = self._high_res_cb.isChecked()
        p.sounds_enabled = self._sound_cb.isChecked()
        p.notifications_enabled = self._notif_cb.isChecked()
        self._emit()

    def _on_volume_changed(self, value: int) -> None:
        self._vol_label.setText(f"{value}%")
        if self._populating:
            return
        self._preferences.sound_volume = value
        self._emit()

    def _on_volume_released(self) -> None:
        """Preview the completion sound at the new volume."""
        if self._sound_preview:
            self._sound_preview()

    def _emit(self) -> None:
        self.preferences_changed.emit(replace(self._preferences))

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    @property
    def preferences(self) -> Preferences:
        return replace(self._preferences)
