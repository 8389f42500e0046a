"""Dismissible banner shown when a session ends and the next one waits."""

from __future__ import annotations

from PyQt6.QtWidgets import QFrame, QHBoxLayout, QLabel, QPushButton, QWidget

from ..notifications import BANNER_MESSAGES, NotificationCenter


class NotificationBanner(QFrame):
    def __init__(self, center: NotificationCenter, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setObjectName("notificationBanner")
        self._center = center

        layout = QHBoxLayout(self)
        layout.setContentsMargins(16, 10, 16, 10)
        self._message = QLabel("", self)
        self._next_btn = QPushButton("", self)
        self._dismiss_btn = QPushButton("✕", self)
        self._dismiss_btn.setFixedWidth(32)
        layout.addWidget(self._message, 1)
        layout.addWidget(self._next_btn)
        layout.addWidget(self._dismiss_btn)

        self._next_btn.clicked.connect(center.accept)
        self._dismiss_btn.clicked.connect(center.dismiss)
        center.banner_changed.connect(self._on_banner_changed)
        self._on_banner_changed(center.banner_visible)

    def _on_banner_changed(self, visible: bool) -> None:
        mode = self._center.completed_mode
        if visible and mode is not None:
            message, action = BANNER_MESSAGES[mode]
            self._message.setText(message)
            self._next_btn.setText(action)
        self.setVisible(visible)
