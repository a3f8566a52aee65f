"""Cancellable timed tasks driven by an injected ``Clock``.

Nothing here spawns threads.  The owner calls ``pump()`` (once per frame in
the pygame shell, explicitly in tests) and every task whose due time has
passed runs on the caller's thread, in due-time order.  Periodic tasks keep a
fixed cadence: if the clock jumped 3.5 s, a 1 s task fires three times.
"""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Callable
from typing import Protocol

from .clock import Clock


class TaskHandle:
    def __init__(self, callback: Callable[[], None], *, due_s: float, interval_s: float | None) -> None:
        self._callback = callback
        self._due_s = due_s
        self._interval_s = interval_s
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def due_s(self) -> float:
        return self._due_s

    @property
    def periodic(self) -> bool:
        return self._interval_s is not None

    def cancel(self) -> None:
        self._cancelled = True


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TaskHandle: ...
    def call_every(self, interval_s: float, callback: Callable[[], None]) -> TaskHandle: ...
    def pump(self) -> int: ...


class ClockScheduler:
    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._seq = itertools.count()
        self._queue: list[tuple[float, int, TaskHandle]] = []

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TaskHandle:
        if delay_s < 0:
            raise ValueError("delay_s must be >= 0")
        task = TaskHandle(callback, due_s=self._clock.now() + float(delay_s), interval_s=None)
        self._push(task)
        return task

    def call_every(self, interval_s: float, callback: Callable[[], None]) -> TaskHandle:
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        task = TaskHandle(
            callback,
            due_s=self._clock.now() + float(interval_s),
            interval_s=float(interval_s),
        )
        self._push(task)
        return task

    def pending(self) -> int:
        return sum(1 for _, _, task in self._queue if not task.cancelled)

    def pump(self) -> int:
        """Run every due task; return how many callbacks ran."""

        now = self._clock.now()
        ran = 0
        while self._queue and self._queue[0][0] <= now:
            _, _, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            if task._interval_s is not None:
                task._due_s += task._interval_s
                self._push(task)
            task._callback()
            ran += 1
        return ran

    def cancel_all(self) -> None:
        for _, _, task in self._queue:
            task.cancel()
        self._queue.clear()

    def _push(self, task: TaskHandle) -> None:
        heapq.heappush(self._queue, (task.due_s, next(self._seq), task))
