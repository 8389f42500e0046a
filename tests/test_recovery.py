"""Restart recovery and completion-ledger dedup.

A "restart" is simulated by building a second engine over the same
store; the FakeClock stands in for wall-clock time passing while the
process was gone.
"""

import pytest

from focuscycle.database.store import STORAGE_KEYS
from focuscycle.timer.engine import TimerMode, TimerStatus
from focuscycle.timer.ledger import CompletionLedger, CompletionRecord

from helpers import SignalCollector, run_for

FOCUS_MS = 25 * 60 * 1000


def _persist_running(store, *, started_at, remaining, duration=FOCUS_MS,
                     mode="focus", session_id="S-1"):
    store.set(STORAGE_KEYS.TIMER_SESSION, {
        "mode": mode,
        "duration": duration,
        "remaining": remaining,
        "status": "running",
        "startedAt": started_at,
        "sessionId": session_id,
    })


# ═══════════════════════════════════════════════════════════════════════════
#  WALL-CLOCK RECOVERY
# ═══════════════════════════════════════════════════════════════════════════


class TestRecovery:

    @pytest.mark.parametrize("r0, gap", [
        (FOCUS_MS, 0),
        (FOCUS_MS, 60_000),
        (1_000_000, 400_000),
        (1_000_000, 999_999),
    ])
    def test_running_session_resumes_with_wall_clock(
        self, make_engine, store, clock, r0, gap,
    ):
        t0 = clock.now
        _persist_running(store, started_at=t0, remaining=r0)
        clock.advance(gap)

        engine = make_engine()

        assert engine.remaining == max(0, min(FOCUS_MS, r0 - gap))
        assert engine.status == TimerStatus.RUNNING
        assert engine.session_id == "S-1"
        assert engine.is_ticking

    @pytest.mark.parametrize("gap", [1_000_000, 1_000_001, 50_000_000])
    def test_session_that_ran_out_while_closed_is_completed(
        self, make_engine, store, clock, gap,
    ):
        _persist_running(store, started_at=clock.now, remaining=1_000_000)
        clock.advance(gap)

        engine = make_engine()

        assert engine.remaining == 0
        assert engine.status == TimerStatus.COMPLETED
        assert engine.started_at is None
        assert not engine.is_ticking

    def test_clock_behind_started_at_keeps_remaining(self, make_engine, store, clock):
        _persist_running(store, started_at=clock.now + 60_000, remaining=500_000)
        engine = make_engine()
        assert engine.remaining == 500_000

    def test_recovered_countdown_keeps_ticking(self, make_engine, store, clock):
        _persist_running(store, started_at=clock.now, remaining=1_000_000)
        clock.advance(100_000)
        engine = make_engine()
        run_for(engine, clock, 50_000)
        assert engine.remaining == 850_000

    def test_restart_mid_run_does_not_double_count(self, make_engine, clock):
        first = make_engine()
        first.start()
        run_for(first, clock, 100_000)
        run_for(first, clock, 100_000)

        second = make_engine()
        assert second.remaining == FOCUS_MS - 200_000
        run_for(second, clock, 50_000)
        assert second.remaining == FOCUS_MS - 250_000

    def test_paused_session_restored_exactly(self, make_engine, clock):
        first = make_engine()
        first.start()
        run_for(first, clock, 42_000)
        first.pause()
        clock.advance(3_600_000)

        second = make_engine()
        assert second.status == TimerStatus.PAUSED
        assert second.remaining == FOCUS_MS - 42_000
        assert not second.is_ticking

    def test_idle_session_picks_up_new_duration(self, make_engine, prefs):
        first = make_engine()
        first.switch_mode(TimerMode.SHORT_BREAK)
        prefs.short_break_duration_minutes = 10

        second = make_engine()
        assert second.mode == TimerMode.SHORT_BREAK
        assert second.duration == second.remaining == 10 * 60 * 1000

    @pytest.mark.parametrize("garbage", [
        "not a session",
        42,
        [],
        {"mode": "focus"},
        {"mode": "nap", "duration": 1, "remaining": 1, "status": "idle",
         "startedAt": None, "sessionId": "x"},
        {"mode": "focus", "duration": 1000, "remaining": 2000, "status": "idle",
         "startedAt": None, "sessionId": "x"},
        {"mode": "focus", "duration": 1000, "remaining": 500, "status": "running",
         "startedAt": None, "sessionId": "x"},
    ])
    def test_corrupt_session_falls_back_to_default(self, make_engine, store, garbage):
        store.set(STORAGE_KEYS.TIMER_SESSION, garbage)
        engine = make_engine()
        assert engine.mode == TimerMode.FOCUS
        assert engine.status == TimerStatus.IDLE
        assert engine.remaining == engine.duration == FOCUS_MS


# ═══════════════════════════════════════════════════════════════════════════
#  LEDGER DEDUP
# ═══════════════════════════════════════════════════════════════════════════


class TestLedgerDedup:

    def test_recovery_does_not_fire_during_load(self, make_engine, store, clock):
        _persist_running(store, started_at=clock.now, remaining=1000)
        clock.advance(5000)
        engine = make_engine()
        completed = SignalCollector()
        engine.session_completed.connect(completed)
        assert len(completed) == 0

    def test_undelivered_recovered_completion_fires_once(self, make_engine, store, clock):
        _persist_running(store, started_at=clock.now, remaining=1000)
        clock.advance(5000)
        engine = make_engine()
        completed = SignalCollector()
        engine.session_completed.connect(completed)

        assert engine.deliver_pending_completion() is True
        assert engine.deliver_pending_completion() is False
        assert completed.items == [TimerMode.FOCUS]

        again = make_engine()
        again_completed = SignalCollector()
        again.session_completed.connect(again_completed)
        assert again.deliver_pending_completion() is False
        assert len(again_completed) == 0

    def test_natural_completion_not_redelivered_after_restart(self, make_engine, clock):
        first = make_engine()
        first.start()
        run_for(first, clock, FOCUS_MS)
        assert first.status == TimerStatus.COMPLETED

        second = make_engine()
        completed = SignalCollector()
        second.session_completed.connect(completed)
        assert second.status == TimerStatus.COMPLETED
        assert second.deliver_pending_completion() is False
        assert len(completed) == 0

    def test_processed_session_is_not_refired(self, make_engine, store, clock):
        _persist_running(store, started_at=clock.now, remaining=1000, session_id="S-9")
        CompletionLedger(store).put(
            CompletionRecord("S-9", clock.now + 1000, "focus", delivered=True)
        )
        clock.advance(5000)
        engine = make_engine()
        completed = SignalCollector()
        engine.session_completed.connect(completed)
        assert engine.deliver_pending_completion() is False
        assert len(completed) == 0

    def test_crash_between_ledger_write_and_callback_redelivers(
        self, make_engine, store, clock,
    ):
        """The ledger was written but listeners never ran: deliver again."""
        _persist_running(store, started_at=clock.now, remaining=1000, session_id="S-7")
        CompletionLedger(store).put(
            CompletionRecord("S-7", clock.now + 1000, "focus", delivered=False)
        )
        clock.advance(5000)
        engine = make_engine()
        completed = SignalCollector()
        engine.session_completed.connect(completed)
        assert engine.deliver_pending_completion() is True
        assert completed.items == [TimerMode.FOCUS]

    def test_ledger_for_other_session_does_not_suppress(self, make_engine, store, clock):
        _persist_running(store, started_at=clock.now, remaining=1000, session_id="S-2")
        CompletionLedger(store).put(
            CompletionRecord("S-1", clock.now, "focus", delivered=True)
        )
        clock.advance(5000)
        engine = make_engine()
        assert engine.deliver_pending_completion() is True

    def test_corrupt_ledger_means_nothing_processed(self, make_engine, store, clock):
        _persist_running(store, started_at=clock.now, remaining=1000, session_id="S-3")
        store.set(STORAGE_KEYS.COMPLETION_LEDGER, {"sessionId": 17})
        clock.advance(5000)
        engine = make_engine()
        assert engine.deliver_pending_completion() is True

    def test_skip_silent_is_never_redelivered(self, make_engine):
        first = make_engine()
        first.start()
        first.skip_silent()

        second = make_engine()
        assert second.status == TimerStatus.COMPLETED
        assert second.deliver_pending_completion() is False

    def test_nothing_pending_when_not_completed(self, engine):
        assert engine.deliver_pending_completion() is False


class TestCompletionLedger:

    def test_empty_ledger(self, store):
        ledger = CompletionLedger(store)
        assert ledger.last is None
        assert not ledger.has_processed("anything")
        assert ledger.needs_delivery("anything")

    def test_put_replaces_single_slot(self, store):
        ledger = CompletionLedger(store)
        ledger.put(CompletionRecord("A", 1, "focus"))
        ledger.put(CompletionRecord("B", 2, "short-break"))
        assert not ledger.has_processed("A")
        assert ledger.has_processed("B")
        assert ledger.last.mode == "short-break"

    def test_mark_delivered(self, store):
        ledger = CompletionLedger(store)
        ledger.put(CompletionRecord("A", 1, "focus"))
        assert ledger.needs_delivery("A")
        ledger.mark_delivered("A")
        assert not ledger.needs_delivery("A")

    def test_mark_delivered_ignores_other_ids(self, store):
        ledger = CompletionLedger(store)
        ledger.put(CompletionRecord("A", 1, "focus"))
        ledger.mark_delivered("B")
        assert ledger.needs_delivery("A")

    def test_stored_shape(self, store):
        CompletionLedger(store).put(CompletionRecord("A", 123, "focus"))
        assert store.get(STORAGE_KEYS.COMPLETION_LEDGER) == {
            "sessionId": "A", "completedAt": 123, "mode": "focus", "delivered": False,
        }
