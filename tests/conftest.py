"""Shared pytest fixtures for FocusCycle tests."""

import os
import sys

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from PyQt6.QtWidgets import QApplication

from focuscycle.coordinator import ModeCoordinator
from focuscycle.database.db import configure_engine, init_db
from focuscycle.database.store import PersistedStore
from focuscycle.settings import Preferences
from focuscycle.timer.engine import TimerEngine
from focuscycle.tracking.tracker import SessionTracker

from helpers import FakeClock, FakeToday


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def today():
    return FakeToday()


@pytest.fixture
def store():
    return PersistedStore()


@pytest.fixture
def prefs():
    """Mutable preferences; tests edit fields to simulate a settings change."""
    return Preferences()


@pytest.fixture
def make_engine(qapp, store, prefs, clock):
    """Build an engine over the shared store; call twice to simulate a restart."""
    def _make(**kwargs):
        return TimerEngine(
            parent=None, store=store, preferences=lambda: prefs, clock=clock, **kwargs,
        )
    return _make


@pytest.fixture
def engine(make_engine):
    return make_engine()


@pytest.fixture
def tracker(qapp, store, today, clock):
    return SessionTracker(parent=None, store=store, today=today, clock=clock)


@pytest.fixture
def coordinator(engine, tracker, prefs):
    return ModeCoordinator(
        parent=None, engine=engine, tracker=tracker, preferences=lambda: prefs,
    )
