"""UI package."""

from .timer_widget import TimerWidget
from .notification_banner import NotificationBanner
from .settings_dialog import SettingsDialog

__all__ = ["TimerWidget", "NotificationBanner", "SettingsDialog"]
