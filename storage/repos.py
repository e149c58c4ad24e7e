# storage/repos.py
#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import datetime as dt
import time
import uuid
from typing import List, Optional

from domain.models import FocusSessionRecord, Profile, level_for, tree_type_for
from storage.db import Database


def _now_ts() -> int:
    return int(time.time())


def _week_key(ts: int) -> str:
    year, week, _ = dt.date.fromtimestamp(ts).isocalendar()
    return f"{year}-W{week:02d}"


class AppStateRepo:
    def __init__(self, db: Database):
        self.db = db

    def get(self, key: str) -> Optional[str]:
        row = self.db.conn.execute(
            "SELECT value FROM app_state WHERE key=?",
            (key,),
        ).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        self.db.conn.execute(
            """
            INSERT INTO app_state(key, value) VALUES(?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, value),
        )
        self.db.commit()

    def delete(self, key: str) -> None:
        self.db.conn.execute("DELETE FROM app_state WHERE key=?", (key,))
        self.db.commit()


class FocusSessionRepo:
    def __init__(self, db: Database):
        self.db = db

    def add(
        self,
        phase: str,
        duration_minutes: int,
        elapsed_sec: int,
        points_earned: int,
        session_number: int,
        completed_at: Optional[int] = None,
    ) -> FocusSessionRecord:
        rec = FocusSessionRecord(
            id=str(uuid.uuid4()),
            phase=phase,
            duration_minutes=int(duration_minutes),
            elapsed_sec=int(elapsed_sec),
            points_earned=int(points_earned),
            session_number=int(session_number),
            tree_type=tree_type_for(duration_minutes),
            completed_at=int(completed_at if completed_at is not None else _now_ts()),
        )
        self.db.conn.execute(
            """
            INSERT INTO focus_sessions(
                id, phase, duration, elapsed_sec, completed,
                tree_type, points_earned, session_number, completed_at
            )
            VALUES(?,?,?,?,1,?,?,?,?)
            """,
            (
                rec.id,
                rec.phase,
                rec.duration_minutes,
                rec.elapsed_sec,
                rec.tree_type,
                rec.points_earned,
                rec.session_number,
                rec.completed_at,
            ),
        )
        self.db.commit()
        return rec

    def list(
        self,
        phase: Optional[str] = None,
        since_ts: Optional[int] = None,
    ) -> List[FocusSessionRecord]:
        sql = """
            SELECT id, phase, duration AS duration_minutes, elapsed_sec,
                   points_earned, session_number, COALESCE(tree_type,'') AS tree_type,
                   completed_at
            FROM focus_sessions
            WHERE completed = 1
        """
        params: list = []
        if phase:
            sql += " AND phase = ?"
            params.append(phase)
        if since_ts is not None:
            sql += " AND completed_at >= ?"
            params.append(since_ts)
        sql += " ORDER BY completed_at DESC"

        rows = self.db.conn.execute(sql, params).fetchall()
        return [FocusSessionRecord(**dict(r)) for r in rows]

    def count(self, phase: Optional[str] = None) -> int:
        if phase:
            row = self.db.conn.execute(
                "SELECT COUNT(1) AS c FROM focus_sessions WHERE completed = 1 AND phase = ?",
                (phase,),
            ).fetchone()
        else:
            row = self.db.conn.execute(
                "SELECT COUNT(1) AS c FROM focus_sessions WHERE completed = 1"
            ).fetchone()
        return int(row["c"])


class ProfileRepo:
    def __init__(self, db: Database):
        self.db = db

    def get(self, now_ts: Optional[int] = None) -> Profile:
        r = self.db.conn.execute(
            "SELECT points, weekly_points, focus_hours, level, week_key FROM profile WHERE id = 1"
        ).fetchone()
        if r is None:
            return Profile(points=0, weekly_points=0, focus_hours=0.0, level=1)
        # weekly points belong to the ISO week they were earned in
        week = _week_key(now_ts if now_ts is not None else _now_ts())
        return Profile(
            points=int(r["points"]),
            weekly_points=int(r["weekly_points"]) if r["week_key"] == week else 0,
            focus_hours=float(r["focus_hours"]),
            level=int(r["level"]),
        )

    def add_progress(
        self, points: int, focus_hours: float = 0.0, now_ts: Optional[int] = None
    ) -> Profile:
        """
        Credit points / hours. Weekly points restart when the ISO week changes.
        """
        week = _week_key(now_ts if now_ts is not None else _now_ts())
        r = self.db.conn.execute(
            "SELECT points, weekly_points, focus_hours, week_key FROM profile WHERE id = 1"
        ).fetchone()
        if r is None:
            self.db.conn.execute("INSERT OR IGNORE INTO profile(id) VALUES (1)")
            cur_points, cur_weekly, cur_hours, cur_week = 0, 0, 0.0, ""
        else:
            cur_points = int(r["points"])
            cur_weekly = int(r["weekly_points"])
            cur_hours = float(r["focus_hours"])
            cur_week = r["week_key"] or ""

        if cur_week != week:
            cur_weekly = 0

        new_points = cur_points + int(points)
        self.db.conn.execute(
            """
            UPDATE profile
            SET points=?, weekly_points=?, focus_hours=?, level=?, week_key=?
            WHERE id = 1
            """,
            (
                new_points,
                cur_weekly + int(points),
                cur_hours + float(focus_hours),
                level_for(new_points),
                week,
            ),
        )
        self.db.commit()
        return self.get(now_ts=now_ts)
