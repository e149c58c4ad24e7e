# -*- coding: utf-8 -*-

import logging
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventChannel(Generic[T]):
    """
    Explicit observer registry for one kind of payload.
    The producer owns the channel; consumers subscribe and keep the returned
    callable to unsubscribe when they go away.
    """

    def __init__(self, name: str = "event"):
        self.name = name
        self._listeners: List[Callable[[T], None]] = []

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        if not callable(listener):
            raise ValueError("Listener must be callable")
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            self.unsubscribe(listener)

        return _unsubscribe

    def unsubscribe(self, listener: Callable[[T], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, payload: T) -> None:
        # copy: listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(payload)
            except Exception:
                logger.exception("Error in %s listener", self.name)

    def __len__(self) -> int:
        return len(self._listeners)
