"""Multi-listener broadcast event with an intrusive listener chain."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
from typing import Any

from .dispatch import DispatchPool

LOGGER = logging.getLogger(__name__)

_default_pool: DispatchPool | None = None


def get_dispatch_pool() -> DispatchPool:
    """Return the process-wide dispatch pool shared by standalone events."""
    global _default_pool
    if _default_pool is None:
        _default_pool = DispatchPool()
    return _default_pool


class Connection:
    """One listener's membership in an event's listener chain."""

    def __init__(self, event: Event, callback: Callable[..., Any]) -> None:
        self.connected = True
        self._event = event
        self._callback = callback
        self._next: Connection | None = None
        self._once = False

    def disconnect(self) -> None:
        """Unlink from the chain; calling it again does nothing."""
        if not self.connected:
            return
        self.connected = False

        event = self._event
        if event._head is self:
            event._head = self._next
            return
        previous = event._head
        while previous is not None and previous._next is not self:
            previous = previous._next
        if previous is not None:
            previous._next = self._next
        # _next is left intact so a fire currently on this node can move on.

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.disconnect()

    def __repr__(self) -> str:
        state = "connected" if self.connected else "disconnected"
        return f"<Connection {state} event={self._event.name!r}>"


class Event:
    """Fire-and-forget broadcast to every connected listener.

    Listeners are dispatched through a :class:`DispatchPool`, so ``fire``
    returns before they run and a slow listener never holds up the others.
    The newest listener sits at the head of the chain and runs first.
    """

    def __init__(self, name: str = "", pool: DispatchPool | None = None) -> None:
        self.name = name
        self._pool = pool or get_dispatch_pool()
        self._head: Connection | None = None

    @property
    def listener_count(self) -> int:
        count = 0
        item = self._head
        while item is not None:
            count += 1
            item = item._next
        return count

    def connect(self, callback: Callable[..., Any]) -> Connection:
        connection = Connection(self, callback)
        self._link(connection)
        return connection

    def once(self, callback: Callable[..., Any]) -> Connection:
        """Connect ``callback`` for a single invocation.

        The connection is claimed by the first ``fire`` that reaches it, so
        the callback runs even if the chain is cleared before it is picked up.
        """
        connection = Connection(self, callback)
        connection._once = True
        self._link(connection)
        return connection

    def fire(self, *args: Any) -> None:
        """Dispatch ``args`` to every listener still connected when reached."""
        item = self._head
        while item is not None:
            if item.connected:
                if item._once:
                    item.disconnect()
                self._pool.dispatch(item._callback, args)
            item = item._next

    async def wait(self) -> tuple[Any, ...]:
        """Suspend until the next ``fire`` and return its arguments."""
        future: asyncio.Future[tuple[Any, ...]] = (
            asyncio.get_running_loop().create_future()
        )

        def _resume(*args: Any) -> None:
            if not future.done():
                future.set_result(args)

        connection = self.once(_resume)
        try:
            return await future
        finally:
            connection.disconnect()

    def disconnect_all(self) -> None:
        """Detach the whole chain; every existing connection goes inert."""
        item = self._head
        self._head = None
        while item is not None:
            item.connected = False
            item = item._next
        LOGGER.debug(
            "event.disconnect_all",
            extra={"event": "event.disconnect_all", "signal": self.name},
        )

    def _link(self, connection: Connection) -> None:
        connection._next = self._head
        self._head = connection

    def __repr__(self) -> str:
        return f"<Event {self.name!r} listeners={self.listener_count}>"
