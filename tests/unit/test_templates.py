"""Tests for domain/templates.py (session template catalog)."""

import pytest

from domain.models import CATEGORIES, InvalidConfigError, SessionConfig
from domain.templates import (
    SESSION_TEMPLATES,
    get_default_template,
    get_template_by_id,
    get_templates_by_category,
    make_custom_template,
)


class TestCatalog:
    def test_has_eight_templates_in_order(self):
        assert [t.id for t in SESSION_TEMPLATES] == [
            "classic-pomodoro",
            "extended-pomodoro",
            "ultradian-rhythm",
            "timeboxing",
            "sprint-method",
            "micro-focus",
            "deep-work",
            "custom",
        ]

    def test_ids_are_unique_and_one_custom(self):
        ids = [t.id for t in SESSION_TEMPLATES]
        assert len(ids) == len(set(ids))
        assert ids.count("custom") == 1

    def test_every_template_is_a_valid_config(self):
        for t in SESSION_TEMPLATES:
            SessionConfig.from_template(t).validate()

    def test_default_is_classic_pomodoro(self):
        t = get_default_template()

        assert t.id == "classic-pomodoro"
        assert (t.work_duration, t.short_break_duration, t.long_break_duration) == (25, 5, 15)
        assert t.sessions_until_long_break == 4


class TestLookup:
    def test_by_id(self):
        assert get_template_by_id("deep-work").work_duration == 120

    def test_missing_id_returns_none(self):
        assert get_template_by_id("nope") is None

    def test_by_category_preserves_order(self):
        assert [t.id for t in get_templates_by_category("classic")] == [
            "classic-pomodoro",
            "micro-focus",
        ]
        assert [t.id for t in get_templates_by_category("custom")] == ["custom"]
        assert len(get_templates_by_category("extended")) == 5

    def test_unknown_category_has_no_matches(self):
        assert get_templates_by_category("legendary") == []

    def test_every_template_has_a_known_category(self):
        assert {t.category for t in SESSION_TEMPLATES} == set(CATEGORIES)


class TestCustomTemplate:
    def test_points_follow_durations(self):
        t = make_custom_template(45, 5, 15)

        assert t.id == "custom"
        assert t.category == "custom"
        assert t.points_per_work_session == 90
        assert t.points_per_short_break == 10
        assert t.points_per_long_break == 30

    def test_creates_new_instance(self):
        before = get_template_by_id("custom")

        t = make_custom_template(40, 10, 20, 3)

        assert t is not before
        assert get_template_by_id("custom").work_duration == 25
        assert t.sessions_until_long_break == 3

    @pytest.mark.parametrize(
        "args",
        [
            (0, 5, 15, 4),
            (25, 0, 15, 4),
            (25, 5, -1, 4),
            (25, 5, 15, 1),
            ("abc", 5, 15, 4),
        ],
    )
    def test_rejects_invalid_durations(self, args):
        with pytest.raises(InvalidConfigError):
            make_custom_template(*args)
