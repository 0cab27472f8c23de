"""Single-assignment promises settled through a paired Deferred."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Generator
from enum import Enum
import logging
from typing import Any

from .scheduler import Scheduler, get_scheduler

LOGGER = logging.getLogger(__name__)

Outcome = tuple[bool, tuple[Any, ...]]


class PromiseState(str, Enum):
    """Lifecycle of a promise; every state but PENDING is terminal."""

    PENDING = "PENDING"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"
    CANCELED = "CANCELED"


class Promise:
    """Consumer side of a request: register callbacks or await the outcome.

    Callbacks are never run inline. Ones registered while pending are spawned
    at settlement in registration order; ones registered after settlement are
    spawned straight away with the stored payload. ``and_then``/``catch``/
    ``canceled``/``finally_`` return the promise itself so registrations can
    be chained, but they do not produce derived promises.
    """

    def __init__(self, scheduler: Scheduler | None = None) -> None:
        self._scheduler = scheduler or get_scheduler()
        self._state = PromiseState.PENDING
        self._value: tuple[Any, ...] = ()
        self._error: tuple[Any, ...] = ()
        self._cancel_reason: tuple[Any, ...] = ()
        self._on_resolve: list[Callable[..., Any]] = []
        self._on_reject: list[Callable[..., Any]] = []
        self._on_cancel: list[Callable[..., Any]] = []
        self._on_settle: list[Callable[[], Any]] = []
        self._waiters: list[asyncio.Future[Outcome]] = []

    @classmethod
    def rejected(cls, *reason: Any, scheduler: Scheduler | None = None) -> Promise:
        """Return a promise that is already rejected with ``reason``."""
        deferred = Deferred(scheduler)
        deferred.reject(*reason)
        return deferred.promise

    @property
    def state(self) -> PromiseState:
        return self._state

    @property
    def is_pending(self) -> bool:
        return self._state is PromiseState.PENDING

    @property
    def is_settled(self) -> bool:
        return self._state is not PromiseState.PENDING

    @property
    def value(self) -> tuple[Any, ...]:
        return self._value

    @property
    def error(self) -> tuple[Any, ...]:
        return self._error

    @property
    def cancel_reason(self) -> tuple[Any, ...]:
        return self._cancel_reason

    def and_then(self, fn: Callable[..., Any]) -> Promise:
        return self._register(PromiseState.RESOLVED, fn)

    def catch(self, fn: Callable[..., Any]) -> Promise:
        return self._register(PromiseState.REJECTED, fn)

    def canceled(self, fn: Callable[..., Any]) -> Promise:
        return self._register(PromiseState.CANCELED, fn)

    def finally_(self, fn: Callable[[], Any]) -> Promise:
        """Run ``fn()`` once the promise settles, whatever the outcome."""
        if self._state is PromiseState.PENDING:
            self._on_settle.append(fn)
        else:
            self._scheduler.spawn(fn)
        return self

    async def wait(self) -> Outcome:
        """Return ``(True, value)`` when resolved, ``(False, reason)`` otherwise.

        Returns without suspending when the promise has already settled.
        """
        if self._state is not PromiseState.PENDING:
            return self._outcome()
        waiter: asyncio.Future[Outcome] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            return await waiter
        finally:
            if waiter in self._waiters:
                self._waiters.remove(waiter)

    async def wait_with_no_result(self) -> tuple[Any, ...]:
        _, payload = await self.wait()
        return payload

    def __await__(self) -> Generator[Any, None, Outcome]:
        return self.wait().__await__()

    def _register(self, state: PromiseState, fn: Callable[..., Any]) -> Promise:
        if self._state is PromiseState.PENDING:
            self._callbacks_for(state).append(fn)
        elif self._state is state:
            self._scheduler.spawn(fn, *self._payload())
        return self

    def _callbacks_for(self, state: PromiseState) -> list[Callable[..., Any]]:
        if state is PromiseState.RESOLVED:
            return self._on_resolve
        if state is PromiseState.REJECTED:
            return self._on_reject
        return self._on_cancel

    def _payload(self) -> tuple[Any, ...]:
        if self._state is PromiseState.RESOLVED:
            return self._value
        if self._state is PromiseState.REJECTED:
            return self._error
        return self._cancel_reason

    def _outcome(self) -> Outcome:
        return self._state is PromiseState.RESOLVED, self._payload()

    def _settle(self, state: PromiseState, payload: tuple[Any, ...]) -> bool:
        """Move out of PENDING once; returns False when already settled."""
        if self._state is not PromiseState.PENDING:
            return False
        self._state = state
        if state is PromiseState.RESOLVED:
            self._value = payload
        elif state is PromiseState.REJECTED:
            self._error = payload
        else:
            self._cancel_reason = payload

        callbacks = self._callbacks_for(state)
        self._on_resolve, self._on_reject, self._on_cancel = [], [], []
        for fn in callbacks:
            self._scheduler.spawn(fn, *payload)

        outcome = self._outcome()
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(outcome)

        LOGGER.debug(
            "promise.settled",
            extra={
                "event": "promise.settled",
                "state": state.value,
                "callbacks": len(callbacks),
            },
        )
        return True

    def _notify_settled(self) -> None:
        callbacks, self._on_settle = self._on_settle, []
        for fn in callbacks:
            self._scheduler.spawn(fn)

    def __repr__(self) -> str:
        return f"<Promise {self._state.value}>"


class Deferred:
    """Producer side of a promise and the only way to settle it.

    Settling an already settled promise is silently ignored.
    """

    def __init__(self, scheduler: Scheduler | None = None) -> None:
        self._scheduler = scheduler or get_scheduler()
        self.promise = Promise(self._scheduler)
        self._settle_scheduled = False

    def resolve(self, *values: Any) -> None:
        self._transition(PromiseState.RESOLVED, values)

    def reject(self, *reason: Any) -> None:
        self._transition(PromiseState.REJECTED, reason)

    def cancel(self, *reason: Any) -> None:
        self._transition(PromiseState.CANCELED, reason)

    def _transition(self, state: PromiseState, payload: tuple[Any, ...]) -> None:
        if self.promise._settle(state, payload):
            self._schedule_settle_notification()

    def _schedule_settle_notification(self) -> None:
        if self._settle_scheduled:
            return
        self._settle_scheduled = True
        # Deferred a turn so finally_ callbacks start after the outcome ones.
        if self.promise._on_settle:
            self._scheduler.defer(self.promise._notify_settled)

    def __repr__(self) -> str:
        return f"<Deferred {self.promise!r}>"
