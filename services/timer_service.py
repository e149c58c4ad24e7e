# -*- coding: utf-8 -*-

import json
import logging
import math
import time
from dataclasses import asdict
from typing import Callable, List, Optional

from core.session_engine import EngineSnapshot, SessionEngine
from domain.models import STATUS_RUNNING, SessionConfig, SessionTemplate
from domain.templates import (
    CUSTOM_TEMPLATE_ID,
    SESSION_TEMPLATES,
    get_default_template,
    get_template_by_id,
    make_custom_template,
)
from services.settings_service import SettingsService, TimerSettings
from services.side_effects import SessionSideEffects
from storage.repos import AppStateRepo

logger = logging.getLogger(__name__)


class TimerService:
    """
    Orchestrates:
    - SessionEngine state
    - template selection (built-in + custom) persisted in app_state
    - engine state save / restore across restarts
    - callbacks for UI
    """

    def __init__(
        self,
        state_repo: AppStateRepo,
        settings_service: SettingsService,
        side_effects: Optional[SessionSideEffects] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.state = state_repo
        self._clock = clock or time.time
        # wall-clock end of the running phase; None unless running
        self._ends_at: Optional[float] = None
        self.settings_service = settings_service
        self.settings = settings_service.load()
        self.side_effects = side_effects

        self.custom_template = self._load_custom_template()
        self.template = self._load_selected_template()

        self.engine = SessionEngine(
            SessionConfig.from_template(self.template),
            reload_policy=self.settings.reload_policy,
            reset_clears_count=self.settings.reset_clears_count,
            auto_advance=self.settings.auto_advance,
        )
        if self.side_effects is not None:
            self.side_effects.sound_enabled = self.settings.sound_enabled
            self.side_effects.attach(self.engine)

        self._on_tick: Optional[Callable[[EngineSnapshot], None]] = None
        self._on_phase_change: Optional[Callable[[EngineSnapshot], None]] = None
        self._on_state_change: Optional[Callable[[EngineSnapshot], None]] = None

    # ----- Callbacks -----
    def set_on_tick(self, fn: Callable[[EngineSnapshot], None]) -> None:
        self._on_tick = fn

    def set_on_phase_change(self, fn: Callable[[EngineSnapshot], None]) -> None:
        self._on_phase_change = fn

    def set_on_state_change(self, fn: Callable[[EngineSnapshot], None]) -> None:
        self._on_state_change = fn

    def _emit_tick(self) -> None:
        if self._on_tick:
            self._on_tick(self.engine.snapshot())

    def _emit_phase_change(self) -> None:
        if self._on_phase_change:
            self._on_phase_change(self.engine.snapshot())

    def _emit_state_change(self) -> None:
        if self._on_state_change:
            self._on_state_change(self.engine.snapshot())

    # ----- Templates -----
    def _load_custom_template(self) -> SessionTemplate:
        raw = self.state.get("custom_template")
        if raw:
            try:
                data = json.loads(raw)
                return make_custom_template(
                    data["work_duration"],
                    data["short_break_duration"],
                    data["long_break_duration"],
                    data["sessions_until_long_break"],
                )
            except (ValueError, KeyError, TypeError) as e:
                logger.warning("Ignoring stored custom template: %s", e)
        return get_template_by_id(CUSTOM_TEMPLATE_ID)

    def _load_selected_template(self) -> SessionTemplate:
        template_id = self.state.get("template_id")
        if template_id:
            t = self.get_template(template_id)
            if t is not None:
                return t
            logger.warning("Unknown template %r, using default", template_id)
        return get_default_template()

    def list_templates(self) -> List[SessionTemplate]:
        return [
            self.custom_template if t.id == CUSTOM_TEMPLATE_ID else t
            for t in SESSION_TEMPLATES
        ]

    def get_template(self, template_id: str) -> Optional[SessionTemplate]:
        if template_id == CUSTOM_TEMPLATE_ID:
            return self.custom_template
        return get_template_by_id(template_id)

    def select_template(self, template_id: str) -> SessionTemplate:
        t = self.get_template(template_id)
        if t is None:
            logger.warning("Unknown template %r, using default", template_id)
            t = get_default_template()

        self.template = t
        self.state.set("template_id", t.id)
        self.engine.update_config(SessionConfig.from_template(t))
        self._sync_deadline()
        self.save_state()
        self._emit_state_change()
        return t

    def set_custom_durations(
        self,
        work_duration: int,
        short_break_duration: int,
        long_break_duration: int,
        sessions_until_long_break: int = 4,
    ) -> SessionTemplate:
        # raises InvalidConfigError (ValueError) for the UI to show
        t = make_custom_template(
            work_duration,
            short_break_duration,
            long_break_duration,
            sessions_until_long_break,
        )
        self.custom_template = t
        self.state.set("custom_template", json.dumps(asdict(t)))
        return self.select_template(CUSTOM_TEMPLATE_ID)

    # ----- Settings -----
    def apply_settings(self, settings: TimerSettings) -> None:
        self.settings_service.save(settings)
        self.settings = settings
        self.engine.reload_policy = settings.reload_policy
        self.engine.reset_clears_count = settings.reset_clears_count
        self.engine.auto_advance = settings.auto_advance
        if self.side_effects is not None:
            self.side_effects.sound_enabled = settings.sound_enabled

    # ----- Public API -----
    def get_snapshot(self) -> EngineSnapshot:
        return self.engine.snapshot()

    def start(self) -> bool:
        return self._run(self.engine.start_session)

    def pause(self) -> bool:
        return self._run(self.engine.pause_session)

    def complete(self) -> bool:
        changed = self._run(self.engine.complete_session)
        if changed:
            self._emit_phase_change()
        return changed

    def skip(self) -> bool:
        changed = self._run(self.engine.skip_to_next_session)
        if changed:
            self._emit_phase_change()
        return changed

    def reset(self) -> bool:
        return self._run(self.engine.reset_session)

    def _run(self, op: Callable[[], bool]) -> bool:
        changed = op()
        if changed:
            self._sync_deadline()
            self.save_state()
            self._emit_state_change()
            self._emit_tick()
        return changed

    def tick(self) -> bool:
        """
        Should be called about once per second by the UI loop. The remaining
        time is measured against the wall clock, so late or missed calls do
        not slow the countdown.
        Returns True while the engine keeps running.
        """
        if self.engine.status != STATUS_RUNNING:
            return False

        if self._ends_at is None:
            self._sync_deadline()
        left = math.ceil(self._ends_at - self._clock())
        event = self.engine.tick(remaining_sec=left)

        # always emit tick
        self._emit_tick()

        if event is not None:
            self._sync_deadline()
            self.save_state()
            self._emit_phase_change()

        return self.engine.status == STATUS_RUNNING

    def _sync_deadline(self) -> None:
        if self.engine.status == STATUS_RUNNING:
            self._ends_at = self._clock() + self.engine.remaining_sec
        else:
            self._ends_at = None

    # ----- Persistence -----
    def save_state(self, now_ts: Optional[int] = None) -> None:
        now = now_ts if now_ts is not None else int(self._clock())
        data = self.engine.export_state()
        data["saved_at"] = now
        if self.engine.status == STATUS_RUNNING:
            data["ends_at"] = now + self.engine.remaining_sec
        self.state.set("engine_state", json.dumps(data))

    def restore_state(self, now_ts: Optional[int] = None) -> bool:
        """
        Bring back the engine saved by save_state().
        A running phase that ran out while the app was closed comes back idle
        at the start of that phase.
        """
        raw = self.state.get("engine_state")
        if not raw:
            return False

        try:
            data = json.loads(raw)
            self.engine.load_state(data)
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning("Discarding stored engine state: %s", e)
            self.state.delete("engine_state")
            return False

        if self.engine.status == STATUS_RUNNING:
            now = now_ts if now_ts is not None else int(self._clock())
            left = int(data.get("ends_at") or now) - now
            if left <= 0:
                logger.info("Phase ran out while away, back to idle")
                self.engine.reset_session()
            else:
                self.engine.set_remaining(left)

        self._sync_deadline()
        self._emit_state_change()
        return True

    def close(self) -> None:
        self.save_state()
        if self.side_effects is not None:
            self.side_effects.detach()
