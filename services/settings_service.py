# -*- coding: utf-8 -*-

from dataclasses import dataclass, replace

from core.session_engine import RELOAD_DEFER, RELOAD_POLICIES
from storage.repos import AppStateRepo

_TRUE = ("1", "true", "yes", "on")


def _as_bool(raw, default: bool) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE


@dataclass(frozen=True)
class TimerSettings:
    reload_policy: str = RELOAD_DEFER
    reset_clears_count: bool = False
    auto_advance: bool = True
    sound_enabled: bool = True


class SettingsService:
    """Timer settings stored as plain strings in app_state."""

    def __init__(self, state: AppStateRepo):
        self.state = state

    def load(self) -> TimerSettings:
        policy = (self.state.get("reload_policy") or RELOAD_DEFER).strip().lower()
        if policy not in RELOAD_POLICIES:
            policy = RELOAD_DEFER
        d = TimerSettings()
        return TimerSettings(
            reload_policy=policy,
            reset_clears_count=_as_bool(
                self.state.get("reset_clears_count"), d.reset_clears_count
            ),
            auto_advance=_as_bool(self.state.get("auto_advance"), d.auto_advance),
            sound_enabled=_as_bool(self.state.get("sound_enabled"), d.sound_enabled),
        )

    def save(self, settings: TimerSettings) -> None:
        if settings.reload_policy not in RELOAD_POLICIES:
            raise ValueError("Invalid reload policy. Use defer/apply.")
        self.state.set("reload_policy", settings.reload_policy)
        self.state.set("reset_clears_count", "1" if settings.reset_clears_count else "0")
        self.state.set("auto_advance", "1" if settings.auto_advance else "0")
        self.state.set("sound_enabled", "1" if settings.sound_enabled else "0")

    def update(self, **changes) -> TimerSettings:
        settings = replace(self.load(), **changes)
        self.save(settings)
        return settings
