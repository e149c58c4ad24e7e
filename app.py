#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
import os
import tkinter as tk

from services.settings_service import SettingsService
from services.side_effects import SessionSideEffects
from services.stats_service import StatsService
from services.timer_service import TimerService
from storage.db import Database
from storage.repos import AppStateRepo, FocusSessionRepo, ProfileRepo
from ui.main_window import MainWindow

logger = logging.getLogger(__name__)


def main():
    logging.basicConfig(
        level=os.environ.get("BOOSTLY_FOCUS_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    db = Database(db_path=os.environ.get("BOOSTLY_FOCUS_DB", "focus.db"))
    db.init_schema()
    logger.info("Using database %s", db.db_path)

    root = tk.Tk()

    state_repo = AppStateRepo(db)
    side_effects = SessionSideEffects(
        FocusSessionRepo(db),
        ProfileRepo(db),
        play_sound=root.bell,
    )
    timer_service = TimerService(state_repo, SettingsService(state_repo), side_effects)
    timer_service.restore_state()
    stats_service = StatsService(db)

    app = MainWindow(root, timer_service, stats_service, side_effects)
    try:
        app.run()
    finally:
        db.close()


if __name__ == "__main__":
    main()
