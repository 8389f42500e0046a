"""FocusCycle: a focus/break countdown timer that survives restarts."""

__version__ = "0.1.0"
