"""Host runtime adapter: spawning, deferral and ticking on the asyncio loop."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import inspect
import logging
from typing import Any

LOGGER = logging.getLogger(__name__)


async def invoke(fn: Callable[..., Any], *args: Any) -> Any:
    """Call ``fn`` and await its result when it hands back an awaitable."""
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class Scheduler:
    """Run callbacks as independent units of work on the running loop.

    Spawned tasks are tracked until they finish so they are not garbage
    collected mid-flight, and unhandled exceptions are logged instead of
    being dropped on the floor.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        """Number of spawned tasks that have not finished yet."""
        return len(self._tasks)

    def spawn(self, fn: Callable[..., Any], *args: Any) -> asyncio.Task[Any]:
        """Schedule ``fn(*args)`` as a new task without blocking the caller."""
        task = asyncio.get_running_loop().create_task(invoke(fn, *args))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(self._log_task_exception)
        return task

    def defer(self, fn: Callable[..., Any], *args: Any) -> asyncio.Handle:
        """Run ``fn(*args)`` once the current unit of work yields."""
        return asyncio.get_running_loop().call_soon(fn, *args)

    def monotonic(self) -> float:
        return asyncio.get_running_loop().time()

    async def sleep(self, seconds: float = 0) -> None:
        await asyncio.sleep(seconds)

    def _log_task_exception(self, task: asyncio.Task[Any]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.warning(
                "scheduler.task.exception",
                extra={
                    "event": "scheduler.task.exception",
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )

    async def drain(self) -> None:
        """Await every tracked task, including ones spawned while draining."""
        while True:
            # One yield first so already deferred callbacks get to spawn theirs.
            await asyncio.sleep(0)
            if not self._tasks:
                return
            for task in list(self._tasks):
                if not task.done():
                    try:
                        await task
                    except asyncio.CancelledError:
                        pass
                    except Exception:  # noqa: BLE001 - already logged by done callback.
                        pass

    async def cancel_all(self) -> None:
        """Cancel every tracked task and await them all."""
        tasks = [t for t in self._tasks if not t.done()]
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception:  # noqa: BLE001 - already logged by done callback.
                pass
        self._tasks.clear()


_default_scheduler: Scheduler | None = None


def get_scheduler() -> Scheduler:
    """Return the process-wide scheduler, creating it on first use."""
    global _default_scheduler
    if _default_scheduler is None:
        _default_scheduler = Scheduler()
    return _default_scheduler
