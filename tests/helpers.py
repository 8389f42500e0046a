"""Shared test helpers for FocusCycle."""

from datetime import date, timedelta

from focuscycle.database.store import PersistedStore, StoreError
from focuscycle.timer.engine import TimerEngine


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Epoch-ms clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeToday:
    def __init__(self, day: date = date(2024, 3, 14)):
        self.day = day

    def __call__(self) -> date:
        return self.day

    def next_day(self) -> None:
        self.day += timedelta(days=1)


class FlakyStore(PersistedStore):
    """A store whose writes can be made to fail on demand."""

    def __init__(self):
        self.fail_writes = False

    def set(self, key, value):
        if self.fail_writes:
            raise StoreError(f"simulated failure writing {key}")
        super().set(key, value)


def run_for(engine: TimerEngine, clock: FakeClock, ms: int) -> None:
    """Let *ms* of wall-clock time pass, then deliver one (late) tick."""
    clock.advance(ms)
    engine._on_tick()
