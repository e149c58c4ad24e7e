#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import sqlite3
from contextlib import contextmanager
from typing import Iterator


class Database:
    def __init__(self, db_path: str = "focus.db"):
        self.db_path = db_path
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON;")
        self._tx_depth = 0

    def connect(self) -> sqlite3.Connection:
        return self.conn

    def commit(self) -> None:
        # inside transaction() the outermost block commits
        if self._tx_depth == 0:
            self.conn.commit()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        All repo writes inside the block are committed together, or rolled
        back together if the block raises.
        """
        self._tx_depth += 1
        try:
            yield self.conn
        except Exception:
            self._tx_depth -= 1
            if self._tx_depth == 0:
                self.conn.rollback()
            raise
        self._tx_depth -= 1
        if self._tx_depth == 0:
            self.conn.commit()

    def _cols(self, table: str):
        try:
            return [
                r["name"]
                for r in self.conn.execute(f"PRAGMA table_info({table});").fetchall()
            ]
        except sqlite3.Error:
            return []

    def init_schema(self):
        cur = self.conn.cursor()

        cur.execute("""
            CREATE TABLE IF NOT EXISTS app_state (
                key TEXT PRIMARY KEY,
                value TEXT
            );
        """)

        cur.execute("""
            CREATE TABLE IF NOT EXISTS focus_sessions (
                id TEXT PRIMARY KEY,
                phase TEXT NOT NULL,
                duration INTEGER NOT NULL,
                elapsed_sec INTEGER NOT NULL DEFAULT 0,
                completed INTEGER NOT NULL DEFAULT 1,
                tree_type TEXT,
                points_earned INTEGER NOT NULL DEFAULT 0,
                session_number INTEGER NOT NULL DEFAULT 1,
                completed_at INTEGER NOT NULL
            );
        """)

        # older databases lack session_number
        cols = self._cols("focus_sessions")
        if "session_number" not in cols:
            cur.execute(
                "ALTER TABLE focus_sessions ADD COLUMN session_number INTEGER NOT NULL DEFAULT 1;"
            )

        # single-row profile (id is always 1)
        cur.execute("""
            CREATE TABLE IF NOT EXISTS profile (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                points INTEGER NOT NULL DEFAULT 0,
                weekly_points INTEGER NOT NULL DEFAULT 0,
                focus_hours REAL NOT NULL DEFAULT 0,
                level INTEGER NOT NULL DEFAULT 1,
                week_key TEXT NOT NULL DEFAULT ''
            );
        """)
        cur.execute("INSERT OR IGNORE INTO profile(id) VALUES (1);")

        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_focus_sessions_completed ON focus_sessions(completed_at);"
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_focus_sessions_phase ON focus_sessions(phase);"
        )

        self.conn.commit()

    def close(self):
        try:
            self.conn.close()
        except sqlite3.Error:
            pass
