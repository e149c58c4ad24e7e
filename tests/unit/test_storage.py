"""Tests for storage/db.py and storage/repos.py."""

import sqlite3

import pytest

from domain.models import PHASE_FOCUS, PHASE_SHORT_BREAK, level_for, tree_type_for
from storage.db import Database


class TestSchema:
    def test_init_schema_is_repeatable(self, db):
        db.init_schema()

        tables = {
            r["name"]
            for r in db.conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()
        }
        assert {"app_state", "focus_sessions", "profile"} <= tables

    def test_adds_missing_session_number_column(self, tmp_path):
        database = Database(db_path=str(tmp_path / "old.db"))
        database.conn.execute(
            """
            CREATE TABLE focus_sessions (
                id TEXT PRIMARY KEY,
                phase TEXT NOT NULL,
                duration INTEGER NOT NULL,
                elapsed_sec INTEGER NOT NULL DEFAULT 0,
                completed INTEGER NOT NULL DEFAULT 1,
                tree_type TEXT,
                points_earned INTEGER NOT NULL DEFAULT 0,
                completed_at INTEGER NOT NULL
            )
            """
        )

        database.init_schema()

        assert "session_number" in database._cols("focus_sessions")
        database.close()


class TestTransaction:
    def test_transaction_commits_together(self, db, state_repo, profile_repo):
        with db.transaction():
            state_repo.set("template_id", "deep-work")
            profile_repo.add_progress(50)

        assert state_repo.get("template_id") == "deep-work"
        assert profile_repo.get().points == 50

    def test_transaction_rolls_back_on_error(self, db, state_repo, profile_repo):
        with pytest.raises(sqlite3.OperationalError):
            with db.transaction():
                profile_repo.add_progress(50)
                state_repo.set("template_id", "deep-work")
                raise sqlite3.OperationalError("disk I/O error")

        assert profile_repo.get().points == 0
        assert state_repo.get("template_id") is None


class TestAppStateRepo:
    def test_set_get_overwrite_delete(self, state_repo):
        assert state_repo.get("template_id") is None

        state_repo.set("template_id", "deep-work")
        state_repo.set("template_id", "micro-focus")
        assert state_repo.get("template_id") == "micro-focus"

        state_repo.delete("template_id")
        assert state_repo.get("template_id") is None


class TestFocusSessionRepo:
    def test_add_and_list(self, session_repo, now_ts):
        rec = session_repo.add(
            phase=PHASE_FOCUS,
            duration_minutes=25,
            elapsed_sec=1500,
            points_earned=50,
            session_number=1,
            completed_at=now_ts,
        )

        assert rec.tree_type == "tree"
        assert session_repo.list() == [rec]

    def test_filters_and_orders_newest_first(self, session_repo, now_ts):
        old = session_repo.add(PHASE_FOCUS, 25, 1500, 50, 1, completed_at=now_ts - 3600)
        brk = session_repo.add(PHASE_SHORT_BREAK, 5, 300, 10, 2, completed_at=now_ts - 60)
        new = session_repo.add(PHASE_FOCUS, 50, 3000, 100, 2, completed_at=now_ts)

        assert session_repo.list() == [new, brk, old]
        assert session_repo.list(phase=PHASE_FOCUS) == [new, old]
        assert session_repo.list(since_ts=now_ts - 120) == [new, brk]
        assert session_repo.count() == 3
        assert session_repo.count(PHASE_FOCUS) == 2


class TestProfileRepo:
    def test_starts_empty(self, profile_repo):
        p = profile_repo.get()

        assert (p.points, p.weekly_points, p.focus_hours, p.level) == (0, 0, 0.0, 1)

    def test_add_progress_accumulates_and_levels(self, profile_repo, now_ts):
        profile_repo.add_progress(600, 0.5, now_ts=now_ts)
        p = profile_repo.add_progress(500, 0.25, now_ts=now_ts)

        assert p.points == 1100
        assert p.weekly_points == 1100
        assert p.focus_hours == pytest.approx(0.75)
        assert p.level == 2

    def test_weekly_points_restart_on_new_week(self, profile_repo, now_ts):
        profile_repo.add_progress(100, now_ts=now_ts)
        p = profile_repo.add_progress(50, now_ts=now_ts + 7 * 24 * 3600)

        assert p.points == 150
        assert p.weekly_points == 50

    def test_weekly_points_read_as_zero_in_a_later_week(self, profile_repo, now_ts):
        profile_repo.add_progress(100, now_ts=now_ts)

        assert profile_repo.get(now_ts=now_ts).weekly_points == 100

        later = profile_repo.get(now_ts=now_ts + 7 * 24 * 3600)
        assert later.weekly_points == 0
        assert later.points == 100


class TestDerivedValues:
    @pytest.mark.parametrize(
        "minutes,tree",
        [(5, "sapling"), (19, "sapling"), (20, "tree"), (44, "tree"), (45, "large_tree"), (90, "ancient_tree")],
    )
    def test_tree_type(self, minutes, tree):
        assert tree_type_for(minutes) == tree

    def test_level(self):
        assert level_for(0) == 1
        assert level_for(999) == 1
        assert level_for(1000) == 2
        assert level_for(-5) == 1
