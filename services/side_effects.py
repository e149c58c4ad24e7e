# -*- coding: utf-8 -*-

import logging
import sqlite3
from typing import Callable, Optional

from core.events import EventChannel
from core.session_engine import SessionEngine
from domain.models import PHASE_FOCUS, FocusSessionRecord, PhaseCompletion, Profile
from storage.repos import FocusSessionRepo, ProfileRepo

logger = logging.getLogger(__name__)


class SessionSideEffects:
    """
    Reacts to finished phases:
    - completion sound
    - points / focus hours / level on the profile
    - one focus_sessions row per finished phase

    Storage failures are reported through on_error and never reach the engine.
    """

    def __init__(
        self,
        session_repo: FocusSessionRepo,
        profile_repo: ProfileRepo,
        play_sound: Optional[Callable[[], None]] = None,
        sound_enabled: bool = True,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self.session_repo = session_repo
        self.profile_repo = profile_repo
        self.play_sound = play_sound
        self.sound_enabled = sound_enabled
        self.on_error = on_error

        self.level_ups: EventChannel[Profile] = EventChannel("level up")
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self, engine: SessionEngine) -> None:
        self.detach()
        self._unsubscribe = engine.completions.subscribe(self.handle_completion)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def handle_completion(self, event: PhaseCompletion) -> Optional[FocusSessionRecord]:
        if self.sound_enabled and self.play_sound is not None:
            try:
                self.play_sound()
            except Exception:
                logger.exception("Completion sound failed")

        hours = event.duration_minutes / 60 if event.phase == PHASE_FOCUS else 0.0

        try:
            before = self.profile_repo.get(now_ts=event.completed_at)
            # profile credit and session row land together or not at all
            with self.profile_repo.db.transaction():
                after = self.profile_repo.add_progress(
                    event.points_awarded, hours, now_ts=event.completed_at
                )
                record = self.session_repo.add(
                    phase=event.phase,
                    duration_minutes=event.duration_minutes,
                    elapsed_sec=event.elapsed_sec,
                    points_earned=event.points_awarded,
                    session_number=event.session_number,
                    completed_at=event.completed_at,
                )
        except sqlite3.Error as e:
            logger.exception("Saving finished %s failed", event.phase)
            if self.on_error is not None:
                self.on_error(e)
            return None

        if after.level > before.level:
            logger.info("Level up: %s -> %s", before.level, after.level)
            self.level_ups.emit(after)
        return record
