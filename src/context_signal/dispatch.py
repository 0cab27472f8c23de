"""Reusable worker tasks for running listener callbacks.

Firing an event should not cost a fresh task per listener. Workers park on a
future after finishing a job and are handed the next job directly; only when
every parked worker is busy does the pool start another one.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
from typing import Any

from .scheduler import invoke

LOGGER = logging.getLogger(__name__)

Job = tuple[Callable[..., Any], tuple[Any, ...]]


class DispatchPool:
    """Pool of parked worker tasks that each run one callback at a time."""

    def __init__(self, max_idle_workers: int = 1) -> None:
        if max_idle_workers < 0:
            raise ValueError("max_idle_workers must not be negative.")
        self._max_idle = max_idle_workers
        self._idle: list[asyncio.Future[Job]] = []
        self._workers: set[asyncio.Task[None]] = set()
        self._busy = 0
        self._quiet: asyncio.Event | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self.created = 0

    @property
    def idle_count(self) -> int:
        return sum(
            1 for slot in self._idle if not slot.done() and slot.get_loop() is self._loop
        )

    @property
    def busy_count(self) -> int:
        return self._busy

    def dispatch(self, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        """Run ``callback(*args)`` on a parked worker, or a new one if none is free."""
        loop = self._bind(asyncio.get_running_loop())
        self._mark_busy()
        slot = self._take_idle(loop)
        if slot is not None:
            slot.set_result((callback, args))
            return
        self.created += 1
        task = loop.create_task(self._work((callback, args)))
        self._workers.add(task)
        task.add_done_callback(self._workers.discard)
        LOGGER.debug(
            "dispatch.worker.started",
            extra={"event": "dispatch.worker.started", "workers": self.created},
        )

    async def join(self) -> None:
        """Wait until no dispatched callback is still running."""
        self._bind(asyncio.get_running_loop())
        if self._busy == 0:
            return
        if self._quiet is None:
            self._quiet = asyncio.Event()
        await self._quiet.wait()

    def _bind(self, loop: asyncio.AbstractEventLoop) -> asyncio.AbstractEventLoop:
        """Forget bookkeeping left over from a previous event loop."""
        if self._loop is not loop:
            self._loop = loop
            self._busy = 0
            self._quiet = None
            self._idle = [slot for slot in self._idle if slot.get_loop() is loop]
        return loop

    def _take_idle(self, loop: asyncio.AbstractEventLoop) -> asyncio.Future[Job] | None:
        while self._idle:
            slot = self._idle.pop()
            # Slots left behind by a cancelled worker or a closed loop are dead.
            if not slot.done() and slot.get_loop() is loop:
                return slot
        return None

    def _mark_busy(self) -> None:
        self._busy += 1
        if self._quiet is not None:
            self._quiet.clear()

    def _mark_done(self, loop: asyncio.AbstractEventLoop) -> None:
        if loop is not self._loop:
            return
        self._busy -= 1
        if self._busy == 0 and self._quiet is not None:
            self._quiet.set()

    async def _work(self, job: Job) -> None:
        loop = asyncio.get_running_loop()
        while True:
            callback, args = job
            try:
                await invoke(callback, *args)
            except Exception as exc:  # noqa: BLE001 - one listener must not starve the rest.
                LOGGER.warning(
                    "dispatch.listener.failed",
                    extra={
                        "event": "dispatch.listener.failed",
                        "callback": getattr(callback, "__qualname__", repr(callback)),
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    },
                    exc_info=exc,
                )
            finally:
                self._mark_done(loop)

            if self.idle_count >= self._max_idle:
                return
            slot: asyncio.Future[Job] = loop.create_future()
            self._idle.append(slot)
            job = await slot
