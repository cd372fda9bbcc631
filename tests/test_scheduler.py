from __future__ import annotations

import asyncio
import logging

import pytest

from leaksync.core.scheduler import AsyncioScheduler, ManualScheduler


def test_manual_scheduler_runs_tasks_in_due_order() -> None:
    scheduler = ManualScheduler()
    calls: list[str] = []
    scheduler.schedule(1.0, lambda: calls.append("sync"), name="deviceSync")
    scheduler.schedule(1800.0, lambda: calls.append("logs"), name="logsOff")
    scheduler.schedule(0.2, lambda: calls.append("early"), name="early")

    assert scheduler.pending == ["early", "deviceSync", "logsOff"]
    assert scheduler.advance(1.0) == 2
    assert calls == ["early", "sync"]
    assert scheduler.pending == ["logsOff"]

    scheduler.advance(1799.0)
    assert calls == ["early", "sync", "logs"]


def test_manual_scheduler_runs_tasks_scheduled_by_tasks() -> None:
    scheduler = ManualScheduler()
    calls: list[float] = []

    def first() -> None:
        calls.append(scheduler.now)
        scheduler.schedule(0.2, lambda: calls.append(scheduler.now))

    scheduler.schedule(1.0, first)
    assert scheduler.run_pending(horizon_s=5.0) == 2
    assert calls == pytest.approx([1.0, 1.2])
    assert scheduler.now == 5.0


def test_asyncio_scheduler_uses_running_loop() -> None:
    calls: list[str] = []

    async def _run() -> None:
        scheduler = AsyncioScheduler()
        scheduler.schedule(0.01, lambda: calls.append("ran"))
        await asyncio.sleep(0.05)

    asyncio.run(_run())
    assert calls == ["ran"]


def test_asyncio_scheduler_logs_task_name(caplog: pytest.LogCaptureFixture) -> None:
    async def _run() -> None:
        AsyncioScheduler().schedule(0.01, lambda: None, name="deviceSync")
        await asyncio.sleep(0.02)

    with caplog.at_level(logging.DEBUG, logger="leaksync.core.scheduler"):
        asyncio.run(_run())
    assert "Scheduling task deviceSync" in caplog.text
