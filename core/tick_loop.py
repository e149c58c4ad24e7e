# -*- coding: utf-8 -*-

from typing import Any, Callable, Optional


class TickLoop:
    """
    One-callback-per-interval loop on the host's event loop.

    schedule(ms, fn) -> handle and cancel(handle) are the host primitives
    (tkinter: widget.after / widget.after_cancel). on_tick returns True to
    keep ticking. At most one callback is ever pending.
    """

    def __init__(
        self,
        schedule: Callable[[int, Callable[[], None]], Any],
        cancel: Callable[[Any], None],
        on_tick: Callable[[], bool],
        interval_ms: int = 1000,
    ):
        self._schedule = schedule
        self._cancel = cancel
        self._on_tick = on_tick
        self.interval_ms = int(interval_ms)
        self._job: Optional[Any] = None

    @property
    def running(self) -> bool:
        return self._job is not None

    def start(self) -> None:
        if self._job is None:
            self._job = self._schedule(self.interval_ms, self._fire)

    def stop(self) -> None:
        if self._job is not None:
            job, self._job = self._job, None
            self._cancel(job)

    def _fire(self) -> None:
        self._job = None
        keep_going = self._on_tick()
        # on_tick may have restarted or stopped us already
        if keep_going and self._job is None:
            self._job = self._schedule(self.interval_ms, self._fire)
