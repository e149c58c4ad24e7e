# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import messagebox, ttk
from typing import Dict

from tkinterweb import HtmlFrame

from core.session_engine import RELOAD_POLICIES
from domain.models import Profile
from services.settings_service import TimerSettings
from services.side_effects import SessionSideEffects
from services.stats_service import StatsService
from services.timer_service import TimerService
from ui.focus_widget import FocusWidget
from ui.markdown_renderer import MarkdownRenderer


def _fmt_hms(sec: int) -> str:
    sec = max(0, int(sec))
    h = sec // 3600
    m = (sec % 3600) // 60
    s = sec % 60
    if h > 0:
        return f"{h}h {m:02d}m"
    return f"{m}m {s:02d}s"


class MainWindow:
    def __init__(
        self,
        root: tk.Tk,
        timer_service: TimerService,
        stats_service: StatsService,
        side_effects: SessionSideEffects,
    ):
        self.timer_service = timer_service
        self.stats_service = stats_service
        self.side_effects = side_effects

        self.root = root
        self.root.title("Boostly Focus")
        self.root.geometry("900x520")

        self._name_to_template_id: Dict[str, str] = {}
        self._md = MarkdownRenderer()

        self._build_ui()
        self._unsubscribe_level_ups = self.side_effects.level_ups.subscribe(
            self._on_level_up
        )
        self.side_effects.on_error = self._on_storage_error
        self.root.protocol("WM_DELETE_WINDOW", self._on_close)
        self._refresh_templates()
        self._refresh_stats()

    def _build_ui(self):
        outer = ttk.Frame(self.root, padding=10)
        outer.pack(fill="both", expand=True)

        outer.columnconfigure(0, weight=1)
        outer.columnconfigure(1, weight=2)
        outer.rowconfigure(0, weight=1)

        # LEFT: templates + timer
        left = ttk.Frame(outer)
        left.grid(row=0, column=0, sticky="nsew", padx=(0, 10))
        left.columnconfigure(0, weight=1)

        tpl = ttk.Labelframe(left, text="Session template", padding=10)
        tpl.grid(row=0, column=0, sticky="ew")
        tpl.columnconfigure(0, weight=1)

        self.template_var = tk.StringVar()
        self.template_box = ttk.Combobox(
            tpl, textvariable=self.template_var, state="readonly"
        )
        self.template_box.grid(row=0, column=0, columnspan=4, sticky="ew")
        self.template_box.bind("<<ComboboxSelected>>", self._on_select_template)

        self.template_info_var = tk.StringVar(value="")
        ttk.Label(tpl, textvariable=self.template_info_var, wraplength=280).grid(
            row=1, column=0, columnspan=4, sticky="w", pady=(6, 6)
        )

        # custom durations
        custom = self.timer_service.custom_template
        self.work_var = tk.StringVar(value=str(custom.work_duration))
        self.short_var = tk.StringVar(value=str(custom.short_break_duration))
        self.long_var = tk.StringVar(value=str(custom.long_break_duration))
        self.cadence_var = tk.StringVar(value=str(custom.sessions_until_long_break))

        for col, (label, var) in enumerate(
            (
                ("Focus", self.work_var),
                ("Short", self.short_var),
                ("Long", self.long_var),
                ("Every", self.cadence_var),
            )
        ):
            ttk.Label(tpl, text=label).grid(row=2, column=col, sticky="w")
            ttk.Spinbox(tpl, from_=1, to=240, width=5, textvariable=var).grid(
                row=3, column=col, sticky="w", padx=(0, 4)
            )

        ttk.Button(tpl, text="Use custom", command=self._apply_custom).grid(
            row=4, column=0, columnspan=2, sticky="w", pady=(6, 0)
        )

        self.err_var = tk.StringVar(value="")
        ttk.Label(tpl, textvariable=self.err_var, foreground="red").grid(
            row=5, column=0, columnspan=4, sticky="w", pady=(4, 0)
        )

        # settings
        opts = ttk.Labelframe(left, text="Settings", padding=10)
        opts.grid(row=1, column=0, sticky="ew", pady=(10, 0))

        s = self.timer_service.settings
        self.policy_var = tk.StringVar(value=s.reload_policy)
        self.reset_count_var = tk.BooleanVar(value=s.reset_clears_count)
        self.auto_var = tk.BooleanVar(value=s.auto_advance)
        self.sound_var = tk.BooleanVar(value=s.sound_enabled)

        ttk.Label(opts, text="Template change while running").grid(row=0, column=0, sticky="w")
        ttk.Combobox(
            opts,
            textvariable=self.policy_var,
            values=RELOAD_POLICIES,
            state="readonly",
            width=8,
        ).grid(row=0, column=1, sticky="w")
        ttk.Checkbutton(opts, text="Reset clears session count", variable=self.reset_count_var).grid(
            row=1, column=0, columnspan=2, sticky="w"
        )
        ttk.Checkbutton(opts, text="Start next phase automatically", variable=self.auto_var).grid(
            row=2, column=0, columnspan=2, sticky="w"
        )
        ttk.Checkbutton(opts, text="Completion sound", variable=self.sound_var).grid(
            row=3, column=0, columnspan=2, sticky="w"
        )
        ttk.Button(opts, text="Save", command=self._save_settings).grid(
            row=4, column=0, sticky="w", pady=(6, 0)
        )

        self.focus = FocusWidget(
            left,
            timer_service=self.timer_service,
            on_request_refresh=self._refresh_stats,
        )
        self.focus.grid(row=2, column=0, sticky="ew", pady=(10, 0))

        # RIGHT: stats
        right = ttk.Labelframe(outer, text="Stats", padding=6)
        right.grid(row=0, column=1, sticky="nsew")
        right.columnconfigure(0, weight=1)
        right.rowconfigure(1, weight=1)

        self.today_var = tk.StringVar(value="")
        ttk.Label(right, textvariable=self.today_var, font=("Sans", 11)).grid(
            row=0, column=0, sticky="w"
        )

        self.stats_view = HtmlFrame(right, horizontal_scrollbar="auto")
        self.stats_view.grid(row=1, column=0, sticky="nsew", pady=(6, 0))

    def run(self):
        self.root.mainloop()

    # ----- UI actions -----
    def _on_select_template(self, event=None):
        template_id = self._name_to_template_id.get(self.template_var.get())
        if template_id:
            self.timer_service.select_template(template_id)
            self._refresh_templates()

    def _apply_custom(self):
        try:
            self.timer_service.set_custom_durations(
                int(self.work_var.get()),
                int(self.short_var.get()),
                int(self.long_var.get()),
                int(self.cadence_var.get()),
            )
            self.err_var.set("")
        except ValueError as e:
            self.err_var.set(str(e))
        self._refresh_templates()

    def _save_settings(self):
        try:
            self.timer_service.apply_settings(
                TimerSettings(
                    reload_policy=self.policy_var.get(),
                    reset_clears_count=bool(self.reset_count_var.get()),
                    auto_advance=bool(self.auto_var.get()),
                    sound_enabled=bool(self.sound_var.get()),
                )
            )
        except ValueError as e:
            self.err_var.set(str(e))

    def _on_level_up(self, profile: Profile):
        # fired from inside a tick; show the dialog once the tick is done
        self.root.after_idle(
            messagebox.showinfo, "Level up", f"You reached level {profile.level}!"
        )

    def _on_storage_error(self, error: Exception):
        # also fired from inside a tick
        self.root.after_idle(
            messagebox.showerror,
            "Session not saved",
            f"The finished session could not be saved:\n{error}",
        )

    def _on_close(self):
        self._unsubscribe_level_ups()
        self.side_effects.on_error = None
        self.timer_service.close()
        self.root.destroy()

    # ----- Refresh -----
    def _refresh_templates(self):
        templates = self.timer_service.list_templates()
        self._name_to_template_id = {t.name: t.id for t in templates}
        self.template_box["values"] = [t.name for t in templates]

        t = self.timer_service.template
        self.template_var.set(t.name)
        self.template_info_var.set(
            f"{t.description}\n"
            f"{t.work_duration}/{t.short_break_duration}/{t.long_break_duration} min, "
            f"long break every {t.sessions_until_long_break} · "
            f"{t.points_per_work_session} pts per focus"
        )

    def _refresh_stats(self):
        today = self.stats_service.total_today_focus_sec()
        self.today_var.set(f"Today (focus): {_fmt_hms(today)}")
        self.stats_view.load_html(self._md.to_html(self.stats_service.report_markdown()))
