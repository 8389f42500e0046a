"""User preferences with JSON persistence.

Preferences are stored at:
    ~/Library/Application Support/FocusCycle/preferences.json

Durations are kept in minutes (that's what the settings form edits) and
are clamped here, at the boundary, so the timer engine can trust whatever
it is handed.

Usage::

    prefs = load_preferences()
    prefs.focus_duration_minutes = 50
    save_preferences(prefs)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

logger = logging.getLogger(__name__)


# Reuse the app-support directory from db.py
APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "FocusCycle"
PREFERENCES_PATH = APP_SUPPORT_DIR / "preferences.json"

# (min, max) in minutes
DURATION_CONSTRAINTS: dict[str, tuple[int, int]] = {
    "focus_duration_minutes": (5, 60),
    "short_break_duration_minutes": (1, 15),
    "long_break_duration_minutes": (10, 30),
}


@dataclass
class Preferences:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    focus_duration_minutes: int = 25
    short_break_duration_minutes: int = 5
    long_break_duration_minutes: int = 15
    auto_start_breaks: bool = False
    auto_start_focus: bool = False
    high_resolution_timer: bool = False    # 10 ms ticks instead of 100 ms

    # ── audio ─────────────────────────────────────────────────────────
    sounds_enabled: bool = True
    sound_volume: int = 70                 # 0-100

    # ── notifications ─────────────────────────────────────────────────
    notifications_enabled: bool = True


def _clamp(value: int, low: int, high: int) -> int:
    return min(max(value, low), high)


def validate_preferences(prefs: Preferences) -> Preferences:
    """Return a copy of *prefs* with every value coerced into range.

    Non-numeric durations fall back to the default for that field.
    """
    defaults = Preferences()
    data = asdict(prefs)

    for name, (low, high) in DURATION_CONSTRAINTS.items():
        value = data[name]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            value = getattr(defaults, name)
        data[name] = _clamp(int(value), low, high)

    volume = data["sound_volume"]
    if isinstance(volume, bool) or not isinstance(volume, (int, float)):
        volume = defaults.sound_volume
    data["sound_volume"] = _clamp(int(volume), 0, 100)

    for name in (
        "auto_start_breaks", "auto_start_focus", "high_resolution_timer",
        "sounds_enabled", "notifications_enabled",
    ):
        if not isinstance(data[name], bool):
            data[name] = getattr(defaults, name)

    return Preferences(**data)


def load_preferences() -> Preferences:
    """Load preferences from disk, falling back to defaults."""
    try:
        if PREFERENCES_PATH.exists():
            data = json.loads(PREFERENCES_PATH.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Preferences)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return validate_preferences(Preferences(**filtered))
    except (OSError, ValueError, TypeError, AttributeError):
        logger.warning("Ignoring unreadable preferences at %s", PREFERENCES_PATH)
    return Preferences()


def save_preferences(prefs: Preferences) -> None:
    """Write preferences to disk as JSON."""
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    PREFERENCES_PATH.write_text(
        json.dumps(asdict(validate_preferences(prefs)), indent=2) + "\n",
        encoding="utf-8",
    )
