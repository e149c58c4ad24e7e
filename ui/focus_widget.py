# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import ttk
from typing import Callable

from core.session_engine import EngineSnapshot
from core.tick_loop import TickLoop
from domain.models import STATUS_COMPLETED, STATUS_IDLE, STATUS_PAUSED, STATUS_RUNNING
from services.timer_service import TimerService

PHASE_COLORS = {
    "focus": "#4A90E2",
    "shortBreak": "#7ED321",
    "longBreak": "#10B981",
}


def format_time(seconds: int) -> str:
    m = max(0, seconds) // 60
    s = max(0, seconds) % 60
    return f"{m:02d}:{s:02d}"


class FocusWidget(ttk.Frame):
    def __init__(
        self,
        master,
        timer_service: TimerService,
        on_request_refresh: Callable[[], None],
    ):
        super().__init__(master)

        self.timer_service = timer_service
        self.on_request_refresh = on_request_refresh
        self.ticker = TickLoop(self.after, self.after_cancel, self.timer_service.tick)

        self._build_ui()

        # wire callbacks from service -> widget UI
        self.timer_service.set_on_tick(self._on_tick)
        self.timer_service.set_on_phase_change(self._on_phase_change)
        self.timer_service.set_on_state_change(self._on_state_change)

        # initial render
        snap = self.timer_service.get_snapshot()
        self._render(snap)
        self._update_buttons(snap)
        self._sync_tick_loop(snap)

    def _build_ui(self):
        self.columnconfigure(0, weight=1)

        self.phase_var = tk.StringVar(value="Focus Session")
        self.time_var = tk.StringVar(value="25:00")
        self.info_var = tk.StringVar(value="Ready")

        title = ttk.Label(self, text="Focus", font=("Sans", 12, "bold"))
        title.grid(row=0, column=0, sticky="w", pady=(0, 6))

        self.phase_label = ttk.Label(self, textvariable=self.phase_var)
        self.phase_label.grid(row=1, column=0, sticky="w")

        self.time_label = tk.Label(
            self, textvariable=self.time_var, font=("Sans", 32, "bold"), fg="white"
        )
        self.time_label.grid(row=2, column=0, sticky="ew", pady=(8, 4))

        self.progress = ttk.Progressbar(self, maximum=100, mode="determinate")
        self.progress.grid(row=3, column=0, sticky="ew")

        self.info_label = ttk.Label(self, textvariable=self.info_var)
        self.info_label.grid(row=4, column=0, sticky="w", pady=(4, 10))

        btns = ttk.Frame(self)
        btns.grid(row=5, column=0, sticky="w")

        self.start_btn = ttk.Button(btns, text="Start", command=self._start)
        self.pause_btn = ttk.Button(btns, text="Pause", command=self._pause)
        self.complete_btn = ttk.Button(btns, text="Complete", command=self._complete)
        self.skip_btn = ttk.Button(btns, text="Skip", command=self._skip)
        self.reset_btn = ttk.Button(btns, text="Reset", command=self._reset)

        for i, b in enumerate(
            (self.start_btn, self.pause_btn, self.complete_btn, self.skip_btn, self.reset_btn)
        ):
            b.grid(row=0, column=i, padx=(0, 6))

    def destroy(self):
        self.ticker.stop()
        super().destroy()

    def _update_buttons(self, snap: EngineSnapshot):
        def _enable(btn, on: bool):
            btn.state(["!disabled"] if on else ["disabled"])

        _enable(self.start_btn, snap.can_start)
        _enable(self.pause_btn, snap.status == STATUS_RUNNING)
        _enable(self.complete_btn, snap.status in (STATUS_RUNNING, STATUS_PAUSED))
        _enable(self.skip_btn, snap.can_skip)
        _enable(self.reset_btn, snap.status != STATUS_IDLE)

    def _start(self):
        self.timer_service.start()
        self.on_request_refresh()

    def _pause(self):
        self.timer_service.pause()

    def _complete(self):
        self.timer_service.complete()

    def _skip(self):
        self.timer_service.skip()

    def _reset(self):
        self.timer_service.reset()

    # ---- Tick loop (UI-driven) ----
    def _sync_tick_loop(self, snap: EngineSnapshot):
        if snap.status == STATUS_RUNNING:
            self.ticker.start()
        else:
            self.ticker.stop()

    # ---- Service callbacks ----
    def _on_tick(self, snap: EngineSnapshot):
        self._render(snap)
        self._update_buttons(snap)

    def _on_phase_change(self, snap: EngineSnapshot):
        self._render(snap)
        self._update_buttons(snap)
        self._sync_tick_loop(snap)
        self.on_request_refresh()

    def _on_state_change(self, snap: EngineSnapshot):
        self._render(snap)
        self._update_buttons(snap)
        self._sync_tick_loop(snap)

    def _render(self, snap: EngineSnapshot):
        self.time_var.set(format_time(snap.remaining_sec))
        if snap.is_break:
            self.phase_var.set(snap.session_label)
        else:
            self.phase_var.set(f"{snap.session_label} #{snap.session_number}")
        self.progress["value"] = snap.progress
        self.time_label.configure(bg=PHASE_COLORS.get(snap.phase, "#4A90E2"))

        if snap.status == STATUS_IDLE:
            self.info_var.set(f"Ready · {snap.completed_sessions} done")
        elif snap.status == STATUS_RUNNING:
            self.info_var.set("Running...")
        elif snap.status == STATUS_PAUSED:
            self.info_var.set("Paused")
        elif snap.status == STATUS_COMPLETED:
            self.info_var.set("Done! Skip to start the next one.")
