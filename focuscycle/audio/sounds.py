"""Completion sounds, synthesised with numpy and played via QSoundEffect.

WAV files are rendered once into the cache directory and reused on later
launches.

Sound names
-----------
- ``focus_complete``: rising three-note chime: time for a break
- ``break_complete``: two soft bell strikes: back to work
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..timer.engine import TimerMode

logger = logging.getLogger(__name__)


# ── paths ────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "FocusCycle"
SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SOUND_NAMES = (
    "focus_complete",
    "break_complete",
)

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _envelope(length: int, attack: int, release: int, sustain: float = 0.6) -> np.ndarray:
    """Linear attack → flat sustain → linear release (durations in samples)."""
    env = np.full(length, sustain, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, sustain, a)
    r = min(release, length - a)
    if r > 0:
        env[length - r:] = np.linspace(sustain, 0.0, r)
    return env


def _tone(freq: float, seconds: float, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(int(SAMPLE_RATE * seconds)) / SAMPLE_RATE
    return amplitude * np.sin(2 * np.pi * freq * t)


def _silence(seconds: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * seconds))


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Float samples in -1..1 → mono 16-bit PCM WAV."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(pcm.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_focus_complete() -> bytes:
    """D5 → F#5 → A5, last note ringing out."""
    parts: list[np.ndarray] = []
    for freq, length in ((587.33, 0.14), (739.99, 0.14), (880.00, 0.45)):
        tone = _tone(freq, length)
        parts.append(tone * _envelope(len(tone), attack=120, release=len(tone) // 2))
        parts.append(_silence(0.025))
    return _to_wav_bytes(np.concatenate(parts))


def _generate_break_complete() -> bytes:
    """Two strikes of a low bell (E4 with an octave overtone)."""
    strike_len = 0.6
    strike = _tone(329.63, strike_len, 0.4) + _tone(659.25, strike_len, 0.1)
    strike = strike * _envelope(
        len(strike), attack=int(SAMPLE_RATE * 0.01), release=int(SAMPLE_RATE * 0.5),
    )
    return _to_wav_bytes(np.concatenate([strike, _silence(0.08), strike]))


_GENERATORS = {
    "focus_complete": _generate_focus_complete,
    "break_complete": _generate_break_complete,
}


def sound_for_mode(mode: TimerMode) -> str:
    """Name of the sound played when a session of *mode* finishes."""
    return "break_complete" if mode.is_break else "focus_complete"


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Manages sound synthesis, caching, and playback.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(70)
        mgr.play_for_mode(TimerMode.FOCUS)
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, name: str) -> None:
        """Play a sound by name.  No-op if disabled or name unknown."""
        if not self._enabled:
            return
        effect = self._effects.get(name)
        if effect is not None:
            effect.play()

    def play_for_mode(self, mode: TimerMode) -> None:
        self.play(sound_for_mode(mode))

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        """Render any missing WAV files into the cache directory."""
        try:
            self._sounds_dir.mkdir(parents=True, exist_ok=True)
            for name, gen_fn in _GENERATORS.items():
                path = self._sounds_dir / f"{name}.wav"
                if not path.exists():
                    path.write_bytes(gen_fn())
        except OSError:
            logger.warning("Could not write sounds to %s", self._sounds_dir, exc_info=True)

    def _load_effects(self) -> None:
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
