"""Tests for services/stats_service.py and ui/markdown_renderer.py"""

import pytest

from domain.models import PHASE_FOCUS, PHASE_SHORT_BREAK
from services.stats_service import StatsService
from ui.markdown_renderer import MarkdownRenderer

DAY = 24 * 3600


@pytest.fixture
def stats(db) -> StatsService:
    return StatsService(db)


@pytest.fixture
def three_day_history(session_repo, now_ts):
    """Mon 50m, Tue 25m, Wed (today) 25m, plus a break that stats ignore."""
    session_repo.add(PHASE_FOCUS, 25, 1500, 50, 1, completed_at=now_ts - 3600)
    session_repo.add(PHASE_SHORT_BREAK, 5, 300, 10, 2, completed_at=now_ts - 1800)
    session_repo.add(PHASE_FOCUS, 25, 1500, 50, 1, completed_at=now_ts - DAY)
    session_repo.add(PHASE_FOCUS, 50, 3000, 100, 1, completed_at=now_ts - 2 * DAY)


class TestCompute:
    def test_empty(self, stats, now_ts):
        s = stats.compute(now_ts)

        assert s.total_sessions == 0
        assert s.total_hours == 0.0
        assert s.current_streak == 0
        assert s.productivity_trend == 0
        assert [d.day for d in s.weekly] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert s.buckets == []

    def test_totals(self, stats, now_ts, three_day_history):
        s = stats.compute(now_ts)

        assert s.total_sessions == 3
        assert s.total_hours == 1.7
        assert s.total_points == 200
        assert s.avg_session_minutes == 33
        assert s.todays_sessions == 1

    def test_streak_counts_back_from_today(self, stats, now_ts, three_day_history):
        assert stats.compute(now_ts).current_streak == 3

    def test_weekly_breakdown(self, stats, now_ts, three_day_history):
        s = stats.compute(now_ts)

        by_day = {d.day: (d.sessions, d.minutes, d.points) for d in s.weekly}
        assert by_day["Mon"] == (1, 50, 100)
        assert by_day["Tue"] == (1, 25, 50)
        assert by_day["Wed"] == (1, 25, 50)
        assert by_day["Thu"] == (0, 0, 0)
        assert s.weekly_goal_progress == 4

    def test_trend_without_previous_week(self, stats, now_ts, three_day_history):
        assert stats.compute(now_ts).productivity_trend == 100

    def test_trend_after_quiet_week(self, stats, session_repo, now_ts):
        session_repo.add(PHASE_FOCUS, 25, 1500, 50, 1, completed_at=now_ts - 10 * DAY)

        s = stats.compute(now_ts)

        assert s.productivity_trend == -100
        assert s.current_streak == 0

    def test_trend_is_capped(self, stats, session_repo, now_ts):
        session_repo.add(PHASE_FOCUS, 10, 600, 20, 1, completed_at=now_ts - 10 * DAY)
        session_repo.add(PHASE_FOCUS, 120, 7200, 240, 1, completed_at=now_ts)

        assert stats.compute(now_ts).productivity_trend == 200

    def test_length_buckets(self, stats, now_ts, three_day_history):
        buckets = {b.label: b for b in stats.compute(now_ts).buckets}

        assert buckets["Tree (20-44m)"].count == 2
        assert buckets["Tree (20-44m)"].percentage == 67
        assert buckets["Large tree (45-89m)"].percentage == 33
        assert buckets["Large tree (45-89m)"].total_minutes == 50


class TestToday:
    def test_total_today_focus_sec(self, stats, now_ts, three_day_history):
        assert stats.total_today_focus_sec(now_ts) == 1500

    def test_nothing_today(self, stats, now_ts, three_day_history):
        assert stats.total_today_focus_sec(now_ts + 2 * DAY) == 0


class TestReport:
    def test_markdown_report(self, stats, profile_repo, now_ts, three_day_history):
        profile_repo.add_progress(1200, 1.5, now_ts=now_ts)

        md = stats.report_markdown(now_ts)

        assert md.startswith("## Focus stats")
        assert "**Level 2**" in md
        assert "| Sessions | 3 |" in md
        assert "| Streak | 3 days |" in md
        assert "| 7-day trend | +100% |" in md
        assert "| Mon | 1 | 50 | 100 |" in md

    def test_report_does_not_carry_last_weeks_points(self, stats, profile_repo, now_ts):
        profile_repo.add_progress(300, now_ts=now_ts)

        assert "300 points · 300 this week" in stats.report_markdown(now_ts)
        assert "300 points · 0 this week" in stats.report_markdown(now_ts + 7 * DAY)

    def test_renders_to_html(self, stats, now_ts, three_day_history):
        html = MarkdownRenderer().to_html(stats.report_markdown(now_ts))

        assert "<h2>Focus stats</h2>" in html
        assert "<table>" in html
        assert "<strong>Level 1</strong>" in html

    def test_empty_text(self):
        html = MarkdownRenderer().to_html("")

        assert "<style>" in html
