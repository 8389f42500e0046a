"""Main application window for FocusCycle, also the composition root."""

from __future__ import annotations

import logging
from pathlib import Path

from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import QMainWindow, QWidget, QVBoxLayout

from .audio.sounds import SoundManager
from .coordinator import ModeCoordinator
from .database.store import PersistedStore
from .notifications import NotificationCenter
from .settings import Preferences, load_preferences, save_preferences, validate_preferences
from .timer.engine import TimerEngine
from .tracking.tracker import SessionTracker
from .ui.notification_banner import NotificationBanner
from .ui.settings_dialog import SettingsDialog
from .ui.timer_widget import TimerWidget

logger = logging.getLogger(__name__)


class FocusCycleApp(QMainWindow):
    """Main application window."""

    def __init__(
        self,
        *,
        preferences: Preferences | None = None,
        store: PersistedStore | None = None,
        sounds_dir: Path | None = None,
        persist_preferences: bool = True,
    ) -> None:
        super().__init__()
        self.setWindowTitle("FocusCycle")
        self.setMinimumSize(420, 360)

        # ── preferences ───────────────────────────────────────────────
        self._preferences: Preferences = (
            validate_preferences(preferences) if preferences is not None
            else load_preferences()
        )
        self._persist_preferences = persist_preferences

        # ── core ──────────────────────────────────────────────────────
        self._store = store or PersistedStore()
        self._engine = TimerEngine(
            self, store=self._store, preferences=self.preferences,
        )
        self._tracker = SessionTracker(self, store=self._store)
        self._coordinator = ModeCoordinator(
            self,
            engine=self._engine,
            tracker=self._tracker,
            preferences=self.preferences,
        )

        # ── notifications & sound ─────────────────────────────────────
        self._notifications = NotificationCenter(
            self, enabled=self._preferences.notifications_enabled,
        )
        self._sound_manager = SoundManager(parent=self, sounds_dir=sounds_dir)
        self._sound_manager.set_volume(self._preferences.sound_volume)
        self._sound_manager.set_enabled(self._preferences.sounds_enabled)

        self._coordinator.sound_requested.connect(self._sound_manager.play_for_mode)
        self._coordinator.next_offered.connect(self._notifications.show_banner)
        self._coordinator.advanced.connect(lambda _mode: self._notifications.dismiss())
        self._notifications.start_next_requested.connect(self._coordinator.start_next)

        # ── widgets ───────────────────────────────────────────────────
        central = QWidget(self)
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(16, 12, 16, 12)
        self._banner = NotificationBanner(self._notifications, central)
        layout.addWidget(self._banner)
        self._timer_widget = TimerWidget(
            self._engine, self._coordinator, self._tracker, central,
        )
        layout.addWidget(self._timer_widget)

        self._build_menu()

        # Anything that finished while we were closed.
        self._coordinator.resolve_pending()

    # ── accessors ─────────────────────────────────────────────────────

    def preferences(self) -> Preferences:
        """Current preferences; handed to the core as a provider."""
        return self._preferences

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    @property
    def tracker(self) -> SessionTracker:
        return self._tracker

    @property
    def coordinator(self) -> ModeCoordinator:
        return self._coordinator

    @property
    def notifications(self) -> NotificationCenter:
        return self._notifications

    # ── preferences ───────────────────────────────────────────────────

    def update_preferences(self, prefs: Preferences) -> None:
        """Apply new preferences.  Durations take effect on the next
        reset or mode switch; the running countdown is left alone."""
        self._preferences = validate_preferences(prefs)
        if self._persist_preferences:
            try:
                save_preferences(self._preferences)
            except OSError:
                logger.warning("Could not save preferences", exc_info=True)
        self._sound_manager.set_enabled(self._preferences.sounds_enabled)
        self._sound_manager.set_volume(self._preferences.sound_volume)
        self._notifications.set_enabled(self._preferences.notifications_enabled)
        self._engine.set_high_resolution(self._preferences.high_resolution_timer)

    # ── menu ──────────────────────────────────────────────────────────

    def _build_menu(self) -> None:
        app_menu = self.menuBar().addMenu("&FocusCycle")
        prefs_action = QAction("Preferences…", self)
        prefs_action.setShortcut(QKeySequence("Ctrl+,"))
        prefs_action.setMenuRole(QAction.MenuRole.PreferencesRole)
        prefs_action.triggered.connect(self._open_preferences)
        app_menu.addAction(prefs_action)

        timer_menu = self.menuBar().addMenu("&Timer")

        reset_action = QAction("Reset Timer", self)
        reset_action.setShortcut(QKeySequence("Ctrl+R"))
        reset_action.triggered.connect(self._engine.reset)
        timer_menu.addAction(reset_action)

        skip_action = QAction("Skip", self)
        skip_action.setShortcut(QKeySequence("Ctrl+S"))
        skip_action.triggered.connect(self._coordinator.skip)
        timer_menu.addAction(skip_action)

        timer_menu.addSeparator()

        progress_action = QAction("Reset Today's Progress", self)
        progress_action.triggered.connect(self._coordinator.reset_progress)
        timer_menu.addAction(progress_action)

    # ── preferences dialog ────────────────────────────────────────────

    def _make_preferences_dialog(self) -> SettingsDialog:
        dialog = SettingsDialog(
            self._preferences,
            self,
            sound_preview_callback=lambda: self._sound_manager.play("focus_complete"),
        )
        dialog.preferences_changed.connect(self.update_preferences)
        return dialog

    def _open_preferences(self) -> None:
        self._make_preferences_dialog().exec()
