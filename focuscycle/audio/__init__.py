"""Audio package."""

from .sounds import SoundManager, SOUND_NAMES, sound_for_mode

__all__ = ["SoundManager", "SOUND_NAMES", "sound_for_mode"]
