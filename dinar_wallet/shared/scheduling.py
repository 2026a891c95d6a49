"""Delayed-call scheduling shared by debounced search and timed UI resets."""

from __future__ import annotations

import threading
from typing import Callable, Protocol


class ScheduledCall(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], ScheduledCall]


def thread_scheduler(delay: float, callback: Callable[[], None]) -> ScheduledCall:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class Debouncer:
    """Runs the most recently submitted callback once input has been idle for ``delay``."""

    def __init__(self, delay: float, scheduler: Scheduler = thread_scheduler):
        self.delay = delay
        self.scheduler = scheduler
        self._pending: ScheduledCall | None = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def is_pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def submit(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
            self._generation += 1
            generation = self._generation

        state = {"fired": False}

        def fire() -> None:
            with self._lock:
                if generation != self._generation:
                    return
                state["fired"] = True
                self._pending = None
            callback()

        handle = self.scheduler(self.delay, fire)
        with self._lock:
            if generation == self._generation and not state["fired"]:
                self._pending = handle

    def cancel(self) -> None:
        with self._lock:
            self._generation += 1
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
