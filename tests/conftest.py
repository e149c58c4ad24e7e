"""Shared test fixtures.

- Database isolation with a temporary SQLite file per test
- Repositories / services wired against that database
- A fixed "now" so date-based stats are deterministic
"""

import datetime as dt
import time
from collections.abc import Generator

import pytest

from core.session_engine import SessionEngine
from domain.models import SessionConfig
from domain.templates import get_template_by_id
from services.settings_service import SettingsService
from services.side_effects import SessionSideEffects
from storage.db import Database
from storage.repos import AppStateRepo, FocusSessionRepo, ProfileRepo


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def db(tmp_path) -> Generator[Database, None, None]:
    """Fresh schema in a temporary database file."""
    database = Database(db_path=str(tmp_path / "focus-test.db"))
    database.init_schema()

    yield database

    database.close()


@pytest.fixture
def state_repo(db) -> AppStateRepo:
    return AppStateRepo(db)


@pytest.fixture
def session_repo(db) -> FocusSessionRepo:
    return FocusSessionRepo(db)


@pytest.fixture
def profile_repo(db) -> ProfileRepo:
    return ProfileRepo(db)


@pytest.fixture
def settings_service(state_repo) -> SettingsService:
    return SettingsService(state_repo)


@pytest.fixture
def side_effects(session_repo, profile_repo) -> SessionSideEffects:
    return SessionSideEffects(session_repo, profile_repo)


# ─────────────────────────────────────────────────────────────────────────────
# Engine Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def classic_config() -> SessionConfig:
    """classic-pomodoro: 25 / 5 / 15, long break every 4."""
    return SessionConfig.from_template(get_template_by_id("classic-pomodoro"))


@pytest.fixture
def short_config() -> SessionConfig:
    """1-minute phases so tests can tick through whole phases quickly."""
    return SessionConfig(
        focus_duration=1,
        short_break_duration=1,
        long_break_duration=2,
        sessions_until_long_break=3,
        points_per_focus=2,
        points_per_short_break=1,
        points_per_long_break=3,
    )


@pytest.fixture
def engine(classic_config) -> SessionEngine:
    return SessionEngine(classic_config)


def _run_phase(engine: SessionEngine):
    for _ in range(engine.remaining_sec):
        event = engine.tick()
        if event is not None:
            return event
    raise AssertionError("phase did not finish")


@pytest.fixture
def run_phase():
    """Tick until the current phase finishes; returns the completion event."""
    return _run_phase


# ─────────────────────────────────────────────────────────────────────────────
# Time Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def now_ts() -> int:
    """Wednesday 2026-03-18 15:00 local time."""
    return int(time.mktime(dt.datetime(2026, 3, 18, 15, 0, 0).timetuple()))


class FakeClock:
    """Wall clock the tests move by hand."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
