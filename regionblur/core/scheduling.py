"""Deferred-call schedulers used between the two phases of a commit."""

from __future__ import annotations

from collections import deque
from typing import Callable, Deque, Protocol


class Scheduler(Protocol):
    def call_soon(self, fn: Callable[[], None]) -> None:
        ...


class ManualScheduler:
    """Queues callbacks until ``run_pending`` is called."""

    def __init__(self) -> None:
        self._queue: Deque[Callable[[], None]] = deque()

    def call_soon(self, fn: Callable[[], None]) -> None:
        self._queue.append(fn)

    @property
    def pending(self) -> int:
        return len(self._queue)

    def run_pending(self) -> int:
        ran = 0
        while self._queue:
            fn = self._queue.popleft()
            fn()
            ran += 1
        return ran
