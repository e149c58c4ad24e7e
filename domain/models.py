# -*- coding: utf-8 -*-

from dataclasses import asdict, dataclass
from typing import Any, Dict

PHASE_FOCUS = "focus"
PHASE_SHORT_BREAK = "shortBreak"
PHASE_LONG_BREAK = "longBreak"
PHASES = (PHASE_FOCUS, PHASE_SHORT_BREAK, PHASE_LONG_BREAK)

STATUS_IDLE = "idle"
STATUS_RUNNING = "running"
STATUS_PAUSED = "paused"
STATUS_COMPLETED = "completed"
STATUSES = (STATUS_IDLE, STATUS_RUNNING, STATUS_PAUSED, STATUS_COMPLETED)

CATEGORIES = ("classic", "extended", "custom")

PHASE_LABELS = {
    PHASE_FOCUS: "Focus Session",
    PHASE_SHORT_BREAK: "Short Break",
    PHASE_LONG_BREAK: "Long Break",
}


class InvalidConfigError(ValueError):
    pass


@dataclass(frozen=True)
class SessionTemplate:
    id: str
    name: str
    description: str
    work_duration: int  # minutes
    short_break_duration: int  # minutes
    long_break_duration: int  # minutes
    sessions_until_long_break: int
    category: str  # classic | extended | custom
    points_per_work_session: int
    points_per_short_break: int
    points_per_long_break: int


@dataclass(frozen=True)
class SessionConfig:
    """
    Durations / cadence / points the engine runs with.
    Copied from a SessionTemplate; the engine never sees the template itself.
    """

    focus_duration: int = 25  # minutes
    short_break_duration: int = 5  # minutes
    long_break_duration: int = 15  # minutes
    sessions_until_long_break: int = 4
    points_per_focus: int = 50
    points_per_short_break: int = 10
    points_per_long_break: int = 15

    @classmethod
    def from_template(cls, template: SessionTemplate) -> "SessionConfig":
        return cls(
            focus_duration=template.work_duration,
            short_break_duration=template.short_break_duration,
            long_break_duration=template.long_break_duration,
            sessions_until_long_break=template.sessions_until_long_break,
            points_per_focus=template.points_per_work_session,
            points_per_short_break=template.points_per_short_break,
            points_per_long_break=template.points_per_long_break,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionConfig":
        fields = cls.__dataclass_fields__
        return cls(**{k: int(v) for k, v in data.items() if k in fields})

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    def validate(self) -> "SessionConfig":
        for name in ("focus_duration", "short_break_duration", "long_break_duration"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise InvalidConfigError(f"{name} must be a positive number of minutes.")
        if self.sessions_until_long_break < 2:
            raise InvalidConfigError("sessions_until_long_break must be at least 2.")
        for name in ("points_per_focus", "points_per_short_break", "points_per_long_break"):
            if getattr(self, name) < 0:
                raise InvalidConfigError(f"{name} cannot be negative.")
        return self

    def duration_minutes(self, phase: str) -> int:
        if phase == PHASE_FOCUS:
            return self.focus_duration
        if phase == PHASE_SHORT_BREAK:
            return self.short_break_duration
        if phase == PHASE_LONG_BREAK:
            return self.long_break_duration
        raise ValueError(f"Unknown phase: {phase}")

    def duration_sec(self, phase: str) -> int:
        return self.duration_minutes(phase) * 60

    def points_for(self, phase: str) -> int:
        if phase == PHASE_FOCUS:
            return self.points_per_focus
        if phase == PHASE_SHORT_BREAK:
            return self.points_per_short_break
        if phase == PHASE_LONG_BREAK:
            return self.points_per_long_break
        raise ValueError(f"Unknown phase: {phase}")


@dataclass(frozen=True)
class PhaseCompletion:
    phase: str
    elapsed_sec: int
    points_awarded: int
    duration_minutes: int
    session_number: int  # focus slot the finished phase belonged to
    completed_sessions: int
    completed_at: int


@dataclass(frozen=True)
class FocusSessionRecord:
    id: str
    phase: str
    duration_minutes: int
    elapsed_sec: int
    points_earned: int
    session_number: int
    tree_type: str  # sapling | tree | large_tree | ancient_tree
    completed_at: int


@dataclass(frozen=True)
class Profile:
    points: int
    weekly_points: int
    focus_hours: float
    level: int


def tree_type_for(duration_minutes: int) -> str:
    if duration_minutes < 20:
        return "sapling"
    if duration_minutes < 45:
        return "tree"
    if duration_minutes < 90:
        return "large_tree"
    return "ancient_tree"


def level_for(points: int) -> int:
    return 1 + max(0, int(points)) // 1000
