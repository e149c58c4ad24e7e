# -*- coding: utf-8 -*-

import datetime as dt
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from domain.models import PHASE_FOCUS, FocusSessionRecord
from storage.db import Database
from storage.repos import FocusSessionRepo, ProfileRepo

WEEKLY_GOAL_HOURS = 40
DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
TREE_LABELS = {
    "sapling": "Sapling (< 20m)",
    "tree": "Tree (20-44m)",
    "large_tree": "Large tree (45-89m)",
    "ancient_tree": "Ancient tree (90m+)",
}


def _start_of_today_ts(now_ts: int) -> int:
    d = dt.date.fromtimestamp(now_ts)
    return int(time.mktime(d.timetuple()))


@dataclass
class DayStats:
    day: str
    sessions: int = 0
    minutes: int = 0
    points: int = 0


@dataclass
class LengthBucket:
    label: str
    count: int
    total_minutes: int
    percentage: int


@dataclass
class FocusStats:
    total_sessions: int = 0
    total_hours: float = 0.0
    total_points: int = 0
    avg_session_minutes: int = 0
    current_streak: int = 0
    todays_sessions: int = 0
    weekly: List[DayStats] = field(default_factory=list)
    productivity_trend: int = 0
    weekly_goal_progress: int = 0
    buckets: List[LengthBucket] = field(default_factory=list)


class StatsService:
    def __init__(self, db: Database):
        self.db = db
        self.sessions = FocusSessionRepo(db)
        self.profile = ProfileRepo(db)

    def total_today_focus_sec(self, now_ts: Optional[int] = None) -> int:
        now = now_ts if now_ts is not None else int(time.time())
        row = self.db.connect().execute(
            """
            SELECT COALESCE(SUM(elapsed_sec), 0) AS total
            FROM focus_sessions
            WHERE phase = ?
              AND completed = 1
              AND completed_at >= ?
            """,
            (PHASE_FOCUS, _start_of_today_ts(now)),
        ).fetchone()
        return int(row["total"] or 0)

    # ---- aggregate stats ----
    def compute(self, now_ts: Optional[int] = None) -> FocusStats:
        now = now_ts if now_ts is not None else int(time.time())
        records = self.sessions.list(phase=PHASE_FOCUS)
        if not records:
            return FocusStats(weekly=[DayStats(day=d) for d in DAY_NAMES])

        total_minutes = sum(r.duration_minutes for r in records)
        weekly = _weekly_data(records, now)
        week_hours = sum(d.minutes for d in weekly) / 60

        return FocusStats(
            total_sessions=len(records),
            total_hours=round(total_minutes / 60, 1),
            total_points=sum(r.points_earned for r in records),
            avg_session_minutes=round(total_minutes / len(records)),
            current_streak=_streak(records, now),
            todays_sessions=sum(
                1 for r in records if r.completed_at >= _start_of_today_ts(now)
            ),
            weekly=weekly,
            productivity_trend=_productivity_trend(records, now),
            weekly_goal_progress=round(min(week_hours / WEEKLY_GOAL_HOURS * 100, 100)),
            buckets=_length_buckets(records),
        )

    def report_markdown(self, now_ts: Optional[int] = None) -> str:
        s = self.compute(now_ts)
        p = self.profile.get(now_ts=now_ts)

        trend = f"+{s.productivity_trend}%" if s.productivity_trend > 0 else f"{s.productivity_trend}%"
        lines = [
            "## Focus stats",
            "",
            f"**Level {p.level}** · {p.points} points · {p.weekly_points} this week",
            "",
            "| Metric | Value |",
            "| --- | --- |",
            f"| Sessions | {s.total_sessions} |",
            f"| Focus hours | {s.total_hours} |",
            f"| Points from focus | {s.total_points} |",
            f"| Average session | {s.avg_session_minutes} min |",
            f"| Streak | {s.current_streak} days |",
            f"| Today | {s.todays_sessions} sessions |",
            f"| 7-day trend | {trend} |",
            f"| Weekly goal ({WEEKLY_GOAL_HOURS}h) | {s.weekly_goal_progress}% |",
            "",
            "### This week",
            "",
            "| Day | Sessions | Minutes | Points |",
            "| --- | --- | --- | --- |",
        ]
        for d in s.weekly:
            lines.append(f"| {d.day} | {d.sessions} | {d.minutes} | {d.points} |")

        if s.buckets:
            lines += ["", "### Session lengths", ""]
            for b in s.buckets:
                lines.append(f"- {b.label}: {b.count} ({b.percentage}%)")

        return "\n".join(lines) + "\n"


def _streak(records: List[FocusSessionRecord], now_ts: int) -> int:
    days = {dt.date.fromtimestamp(r.completed_at) for r in records}
    day = dt.date.fromtimestamp(now_ts)
    streak = 0
    while day in days:
        streak += 1
        day -= dt.timedelta(days=1)
    return streak


def _weekly_data(records: List[FocusSessionRecord], now_ts: int) -> List[DayStats]:
    today = dt.date.fromtimestamp(now_ts)
    monday = today - dt.timedelta(days=today.weekday())
    week = [DayStats(day=d) for d in DAY_NAMES]
    for r in records:
        d = dt.date.fromtimestamp(r.completed_at)
        if monday <= d <= today:
            slot = week[d.weekday()]
            slot.sessions += 1
            slot.minutes += r.duration_minutes
            slot.points += r.points_earned
    return week


def _productivity_trend(records: List[FocusSessionRecord], now_ts: int) -> int:
    """Focus hours of the last 7 days vs the 7 days before, in percent."""
    last7 = now_ts - 7 * 24 * 3600
    prev7 = now_ts - 14 * 24 * 3600

    recent = sum(r.duration_minutes for r in records if r.completed_at >= last7) / 60
    previous = (
        sum(r.duration_minutes for r in records if prev7 <= r.completed_at < last7) / 60
    )

    if previous == 0:
        return 100 if recent > 0 else 0
    trend = (recent - previous) / previous * 100
    return max(-100, min(200, round(trend)))


def _length_buckets(records: List[FocusSessionRecord]) -> List[LengthBucket]:
    grouped: Dict[str, List[FocusSessionRecord]] = {}
    for r in records:
        grouped.setdefault(r.tree_type or "sapling", []).append(r)

    total = len(records)
    out: List[LengthBucket] = []
    for tree, label in TREE_LABELS.items():
        rows = grouped.get(tree)
        if not rows:
            continue
        out.append(
            LengthBucket(
                label=label,
                count=len(rows),
                total_minutes=sum(r.duration_minutes for r in rows),
                percentage=round(len(rows) / total * 100),
            )
        )
    return out
