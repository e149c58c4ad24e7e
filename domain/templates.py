# -*- coding: utf-8 -*-

from typing import List, Optional, Tuple

from domain.models import InvalidConfigError, SessionConfig, SessionTemplate

DEFAULT_TEMPLATE_ID = "classic-pomodoro"
CUSTOM_TEMPLATE_ID = "custom"

SESSION_TEMPLATES: Tuple[SessionTemplate, ...] = (
    SessionTemplate(
        id="classic-pomodoro",
        name="Classic Pomodoro",
        description="Traditional 25-minute focus sessions with short breaks",
        work_duration=25,
        short_break_duration=5,
        long_break_duration=15,
        sessions_until_long_break=4,
        category="classic",
        points_per_work_session=50,
        points_per_short_break=10,
        points_per_long_break=15,
    ),
    SessionTemplate(
        id="extended-pomodoro",
        name="Extended Pomodoro",
        description="50-minute focus sessions for deep work",
        work_duration=50,
        short_break_duration=10,
        long_break_duration=30,
        sessions_until_long_break=4,
        category="extended",
        points_per_work_session=100,
        points_per_short_break=20,
        points_per_long_break=30,
    ),
    SessionTemplate(
        id="ultradian-rhythm",
        name="Ultradian Rhythm",
        description="90-minute focus sessions aligned with natural brain cycles",
        work_duration=90,
        short_break_duration=20,
        long_break_duration=45,
        sessions_until_long_break=3,
        category="extended",
        points_per_work_session=180,
        points_per_short_break=40,
        points_per_long_break=60,
    ),
    SessionTemplate(
        id="timeboxing",
        name="Timeboxing",
        description="45-minute focused work blocks with moderate breaks",
        work_duration=45,
        short_break_duration=8,
        long_break_duration=20,
        sessions_until_long_break=4,
        category="extended",
        points_per_work_session=90,
        points_per_short_break=16,
        points_per_long_break=25,
    ),
    SessionTemplate(
        id="sprint-method",
        name="Sprint Method",
        description="75-minute intense work sessions for complex tasks",
        work_duration=75,
        short_break_duration=15,
        long_break_duration=35,
        sessions_until_long_break=3,
        category="extended",
        points_per_work_session=150,
        points_per_short_break=30,
        points_per_long_break=50,
    ),
    SessionTemplate(
        id="micro-focus",
        name="Micro Focus",
        description="15-minute quick sessions for small tasks",
        work_duration=15,
        short_break_duration=3,
        long_break_duration=8,
        sessions_until_long_break=6,
        category="classic",
        points_per_work_session=30,
        points_per_short_break=6,
        points_per_long_break=10,
    ),
    SessionTemplate(
        id="deep-work",
        name="Deep Work",
        description="120-minute extended sessions for complex projects",
        work_duration=120,
        short_break_duration=25,
        long_break_duration=60,
        sessions_until_long_break=2,
        category="extended",
        points_per_work_session=240,
        points_per_short_break=50,
        points_per_long_break=80,
    ),
    SessionTemplate(
        id=CUSTOM_TEMPLATE_ID,
        name="Custom",
        description="Set your own session durations",
        work_duration=25,
        short_break_duration=5,
        long_break_duration=15,
        sessions_until_long_break=4,
        category="custom",
        points_per_work_session=50,
        points_per_short_break=10,
        points_per_long_break=15,
    ),
)


def get_default_template() -> SessionTemplate:
    return get_template_by_id(DEFAULT_TEMPLATE_ID)


def get_template_by_id(template_id: str) -> Optional[SessionTemplate]:
    for t in SESSION_TEMPLATES:
        if t.id == template_id:
            return t
    return None


def get_templates_by_category(category: str) -> List[SessionTemplate]:
    return [t for t in SESSION_TEMPLATES if t.category == category]


def _points(duration_minutes: float) -> int:
    return int(round(duration_minutes * 2))


def make_custom_template(
    work_duration: int,
    short_break_duration: int,
    long_break_duration: int,
    sessions_until_long_break: int = 4,
) -> SessionTemplate:
    """
    Build a fresh "custom" template from user-entered durations.
    Points are recomputed from the durations every time (2 points per minute).
    """
    try:
        work = int(work_duration)
        short = int(short_break_duration)
        long_ = int(long_break_duration)
        cadence = int(sessions_until_long_break)
    except (TypeError, ValueError):
        raise InvalidConfigError("Durations must be whole minutes.")

    base = get_template_by_id(CUSTOM_TEMPLATE_ID)
    template = SessionTemplate(
        id=CUSTOM_TEMPLATE_ID,
        name=base.name,
        description=base.description,
        work_duration=work,
        short_break_duration=short,
        long_break_duration=long_,
        sessions_until_long_break=cadence,
        category="custom",
        points_per_work_session=_points(work),
        points_per_short_break=_points(short),
        points_per_long_break=_points(long_),
    )
    SessionConfig.from_template(template).validate()
    return template
