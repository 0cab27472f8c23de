"""Tests for the asyncio-backed host scheduler."""

from __future__ import annotations

import asyncio
import unittest

from context_signal.scheduler import Scheduler, get_scheduler


class SchedulerTests(unittest.IsolatedAsyncioTestCase):
    """Validate spawning, deferral and task tracking."""

    async def test_spawn_runs_plain_and_async_callables(self) -> None:
        scheduler = Scheduler()
        calls: list[str] = []

        async def later(label: str) -> None:
            await asyncio.sleep(0)
            calls.append(label)

        scheduler.spawn(calls.append, "plain")
        scheduler.spawn(later, "async")
        self.assertEqual(calls, [])
        self.assertEqual(scheduler.pending, 2)

        await scheduler.drain()
        self.assertEqual(calls, ["plain", "async"])
        self.assertEqual(scheduler.pending, 0)

    async def test_defer_runs_after_current_turn(self) -> None:
        scheduler = Scheduler()
        calls: list[str] = []
        scheduler.defer(calls.append, "deferred")
        calls.append("now")
        await asyncio.sleep(0)
        self.assertEqual(calls, ["now", "deferred"])

    async def test_drain_waits_for_tasks_spawned_while_draining(self) -> None:
        scheduler = Scheduler()
        calls: list[str] = []

        def parent() -> None:
            calls.append("parent")
            scheduler.spawn(calls.append, "child")

        scheduler.spawn(parent)
        await scheduler.drain()
        self.assertEqual(calls, ["parent", "child"])

    async def test_task_exception_is_logged(self) -> None:
        scheduler = Scheduler()

        def broken() -> None:
            raise RuntimeError("nope")

        with self.assertLogs("context_signal.scheduler", level="WARNING") as logs:
            scheduler.spawn(broken)
            await scheduler.drain()
        self.assertTrue(any("scheduler.task.exception" in line for line in logs.output))

    async def test_cancel_all_stops_pending_tasks(self) -> None:
        scheduler = Scheduler()
        cancelled: list[bool] = []

        async def worker() -> None:
            try:
                await asyncio.sleep(9999)
            except asyncio.CancelledError:
                cancelled.append(True)
                raise

        task = scheduler.spawn(worker)
        await asyncio.sleep(0)
        await scheduler.cancel_all()
        self.assertTrue(task.done())
        self.assertTrue(cancelled)
        self.assertEqual(scheduler.pending, 0)

    async def test_monotonic_advances_with_sleep(self) -> None:
        scheduler = Scheduler()
        start = scheduler.monotonic()
        await scheduler.sleep(0.01)
        self.assertGreater(scheduler.monotonic(), start)

    def test_default_scheduler_is_shared(self) -> None:
        self.assertIs(get_scheduler(), get_scheduler())


if __name__ == "__main__":
    unittest.main()
