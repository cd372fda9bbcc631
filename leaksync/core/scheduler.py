"""Deferred invocation used for wake-up sync and log toggles."""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

LOGGER = logging.getLogger(__name__)


class Scheduler(Protocol):
    def schedule(self, delay_s: float, task: Callable[[], None], *, name: str = "") -> None:
        """Run `task` once after `delay_s` seconds."""


@dataclass(order=True)
class _Pending:
    due: float
    seq: int
    name: str = field(compare=False)
    task: Callable[[], None] = field(compare=False)


class ManualScheduler:
    """Scheduler driven by an explicit clock.

    Nothing runs until `advance()` or `run_pending()` is called, which keeps
    one-shot hosts (the CLI) and tests deterministic. Tasks run in due order,
    ties in scheduling order.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[_Pending] = []
        self._seq = itertools.count()

    def schedule(self, delay_s: float, task: Callable[[], None], *, name: str = "") -> None:
        heapq.heappush(self._queue, _Pending(self.now + delay_s, next(self._seq), name, task))

    @property
    def pending(self) -> list[str]:
        return [item.name for item in sorted(self._queue)]

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run everything that became due."""
        deadline = self.now + seconds
        ran = 0
        while self._queue and self._queue[0].due <= deadline:
            item = heapq.heappop(self._queue)
            self.now = max(self.now, item.due)
            LOGGER.debug("Running scheduled task %s", item.name or item.task)
            item.task()
            ran += 1
        self.now = deadline
        return ran

    def run_pending(self, *, horizon_s: float = 60.0) -> int:
        """Run tasks due within `horizon_s`, including ones they schedule."""
        return self.advance(horizon_s)


class AsyncioScheduler:
    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def schedule(self, delay_s: float, task: Callable[[], None], *, name: str = "") -> None:
        loop = self._loop or asyncio.get_running_loop()
        LOGGER.debug("Scheduling task %s in %.1fs", name or task, delay_s)
        loop.call_later(delay_s, task)
