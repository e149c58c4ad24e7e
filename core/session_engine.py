# -*- coding: utf-8 -*-

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.events import EventChannel
from domain.models import (
    PHASE_FOCUS,
    PHASE_LABELS,
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
    PHASES,
    STATUS_COMPLETED,
    STATUS_IDLE,
    STATUS_PAUSED,
    STATUS_RUNNING,
    STATUSES,
    InvalidConfigError,
    PhaseCompletion,
    SessionConfig,
)

logger = logging.getLogger(__name__)

# What update_config does to a phase that is already under way.
RELOAD_DEFER = "defer"  # keep the in-flight phase, new durations from next phase
RELOAD_APPLY = "apply"  # resize the in-flight phase, clamp remaining time
RELOAD_POLICIES = (RELOAD_DEFER, RELOAD_APPLY)


def _now_ts() -> int:
    return int(time.time())


@dataclass(frozen=True)
class EngineSnapshot:
    phase: str  # focus | shortBreak | longBreak
    status: str  # idle | running | paused | completed
    remaining_sec: int
    total_sec: int
    completed_sessions: int
    session_number: int
    progress: float
    session_label: str
    can_start: bool
    can_skip: bool
    is_break: bool


class SessionEngine:
    """
    Pure focus-session state machine (no UI, no storage).

    The host calls tick() once per second while the engine is running.
    Finished phases are announced on `completions` exactly once, while the
    engine still reports the finished phase with status "completed"; the
    next phase starts right after unless auto_advance is off, in which case
    skip_to_next_session() moves on.
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        reload_policy: str = RELOAD_DEFER,
        reset_clears_count: bool = False,
        auto_advance: bool = True,
    ):
        if reload_policy not in RELOAD_POLICIES:
            raise ValueError(f"Unknown reload policy: {reload_policy}")

        self.config = self._safe_config(config)
        self.reload_policy = reload_policy
        self.reset_clears_count = bool(reset_clears_count)
        self.auto_advance = bool(auto_advance)

        self.phase = PHASE_FOCUS
        self.status = STATUS_IDLE
        self.total_sec = self.config.duration_sec(self.phase)
        self.remaining_sec = self.total_sec
        self.completed_sessions = 0
        self._pending_phase: Optional[str] = None

        self.completions: EventChannel[PhaseCompletion] = EventChannel("phase completion")

    @staticmethod
    def _safe_config(config: Optional[SessionConfig]) -> SessionConfig:
        if config is None:
            return SessionConfig()
        try:
            return config.validate()
        except InvalidConfigError as e:
            logger.warning("Invalid session config (%s), using defaults", e)
            return SessionConfig()

    # ----- Derived values -----
    @property
    def progress(self) -> float:
        if self.total_sec <= 0:
            return 0.0
        pct = (self.total_sec - self.remaining_sec) / self.total_sec * 100
        return max(0.0, min(100.0, pct))

    @property
    def session_label(self) -> str:
        return PHASE_LABELS[self.phase]

    @property
    def session_number(self) -> int:
        return 1 + self.completed_sessions % self.config.sessions_until_long_break

    @property
    def is_break_session(self) -> bool:
        return self.phase != PHASE_FOCUS

    @property
    def can_start_session(self) -> bool:
        return self.status in (STATUS_IDLE, STATUS_PAUSED)

    @property
    def can_skip_session(self) -> bool:
        return self.status in (STATUS_RUNNING, STATUS_PAUSED, STATUS_COMPLETED)

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            phase=self.phase,
            status=self.status,
            remaining_sec=self.remaining_sec,
            total_sec=self.total_sec,
            completed_sessions=self.completed_sessions,
            session_number=self.session_number,
            progress=self.progress,
            session_label=self.session_label,
            can_start=self.can_start_session,
            can_skip=self.can_skip_session,
            is_break=self.is_break_session,
        )

    # ----- Operations -----
    def start_session(self) -> bool:
        if not self.can_start_session:
            return False
        resumed = self.status == STATUS_PAUSED
        self.status = STATUS_RUNNING
        logger.info(
            "%s %s (%ss left)",
            "Resumed" if resumed else "Started",
            self.session_label,
            self.remaining_sec,
        )
        return True

    def pause_session(self) -> bool:
        if self.status != STATUS_RUNNING:
            return False
        self.status = STATUS_PAUSED
        return True

    def complete_session(self) -> bool:
        """Finish the current phase early; it is credited like a natural finish."""
        if self.status not in (STATUS_RUNNING, STATUS_PAUSED):
            return False
        self._finish_phase()
        return True

    def skip_to_next_session(self) -> bool:
        if self.status == STATUS_COMPLETED:
            self._begin_phase(self._pending_phase or self._next_phase())
            return True
        if self.status in (STATUS_RUNNING, STATUS_PAUSED):
            # a skipped focus phase does not move the cycle slot
            logger.info("Skipped %s", self.session_label)
            self._begin_phase(self._next_phase())
            return True
        return False

    def reset_session(self) -> bool:
        self.status = STATUS_IDLE
        self.total_sec = self.config.duration_sec(self.phase)
        self.remaining_sec = self.total_sec
        self._pending_phase = None
        if self.reset_clears_count:
            self.completed_sessions = 0
        return True

    def update_config(self, config: SessionConfig) -> bool:
        try:
            config = config.validate()
        except InvalidConfigError as e:
            logger.warning("Rejected session config: %s", e)
            return False

        self.config = config
        if self.status == STATUS_IDLE:
            self.total_sec = config.duration_sec(self.phase)
            self.remaining_sec = self.total_sec
        elif self.reload_policy == RELOAD_APPLY:
            self.total_sec = config.duration_sec(self.phase)
            self.remaining_sec = min(self.remaining_sec, self.total_sec)
        return True

    def tick(self, remaining_sec: Optional[int] = None) -> Optional[PhaseCompletion]:
        """
        Advance the countdown. Without an argument one second passes;
        with remaining_sec (measured from a wall-clock deadline) the
        countdown jumps there, never upwards. Returns the completion event
        if the phase ended on this tick.
        """
        if self.status != STATUS_RUNNING:
            return None

        if remaining_sec is None:
            if self.remaining_sec > 0:
                self.remaining_sec -= 1
        else:
            self.remaining_sec = max(0, min(int(remaining_sec), self.remaining_sec))

        if self.remaining_sec <= 0:
            return self._finish_phase()

        return None

    def set_remaining(self, seconds: int) -> None:
        self.remaining_sec = max(0, min(int(seconds), self.total_sec))

    # ----- Internals -----
    def _next_phase(self) -> str:
        if self.phase != PHASE_FOCUS:
            return PHASE_FOCUS
        # leaving the last focus slot of the cycle
        if self.session_number == self.config.sessions_until_long_break:
            return PHASE_LONG_BREAK
        return PHASE_SHORT_BREAK

    def _finish_phase(self) -> PhaseCompletion:
        finished = self.phase
        slot = self.session_number
        self._pending_phase = self._next_phase()

        if finished == PHASE_FOCUS:
            self.completed_sessions += 1

        event = PhaseCompletion(
            phase=finished,
            elapsed_sec=self.total_sec - self.remaining_sec,
            points_awarded=self.config.points_for(finished),
            duration_minutes=self.total_sec // 60,
            session_number=slot,
            completed_sessions=self.completed_sessions,
            completed_at=_now_ts(),
        )
        self.remaining_sec = 0
        self.status = STATUS_COMPLETED
        logger.info(
            "%s finished (%ss, %s pts)",
            PHASE_LABELS[finished],
            event.elapsed_sec,
            event.points_awarded,
        )

        self.completions.emit(event)

        # a listener may already have reset or skipped the engine
        if (
            self.auto_advance
            and self.status == STATUS_COMPLETED
            and self._pending_phase is not None
        ):
            self._begin_phase(self._pending_phase)
        return event

    def _begin_phase(self, phase: str) -> None:
        self.phase = phase
        self.total_sec = self.config.duration_sec(phase)
        self.remaining_sec = self.total_sec
        self.status = STATUS_RUNNING
        self._pending_phase = None
        logger.info("Starting %s for %ss", self.session_label, self.total_sec)

    # ----- Persistence helpers -----
    def export_state(self) -> Dict[str, Any]:
        return {
            "phase": self.phase,
            "status": self.status,
            "remaining_sec": self.remaining_sec,
            "total_sec": self.total_sec,
            "completed_sessions": self.completed_sessions,
            "pending_phase": self._pending_phase,
            "config": self.config.to_dict(),
        }

    def load_state(self, data: Dict[str, Any]) -> None:
        phase = data.get("phase")
        status = data.get("status")
        if phase not in PHASES or status not in STATUSES:
            raise ValueError("Stored engine state is not valid.")
        pending = data.get("pending_phase")
        if pending is not None and pending not in PHASES:
            raise ValueError("Stored engine state is not valid.")

        config = SessionConfig.from_dict(data.get("config") or {}).validate()
        total = int(data.get("total_sec") or config.duration_sec(phase))
        if total <= 0:
            raise ValueError("Stored engine state is not valid.")

        self.config = config
        self.phase = phase
        self.status = status
        self.total_sec = total
        self.remaining_sec = max(0, min(int(data.get("remaining_sec", total)), total))
        self.completed_sessions = max(0, int(data.get("completed_sessions", 0)))
        self._pending_phase = pending
