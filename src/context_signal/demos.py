"""Runnable walkthroughs of an event broadcast and a query round-trip."""

from __future__ import annotations

import asyncio
from numbers import Number
from typing import Any

from .promise import Deferred
from .registry import Registry


async def run_event_demo(registry: Registry) -> None:
    event = registry.get_event("MyEvent")

    def on_message(msg: str) -> None:
        print("Received:", msg)

    connection = event.connect(on_message)
    event.fire("Hello World")
    await registry.pool.join()
    connection.disconnect()


async def sum_responder(deferred: Deferred, a: Any, b: Any) -> None:
    if not isinstance(a, Number) or not isinstance(b, Number):
        deferred.reject("Invalid arguments")
        return
    await asyncio.sleep(0.1)
    deferred.resolve(a + b)


async def run_query_demo(registry: Registry) -> None:
    query = registry.get_query("Sum")
    query.on_request(sum_responder)

    for args in ((1, 2), (1, "x")):
        (
            query.request(*args)
            .and_then(lambda result: print("Result:", result))
            .catch(lambda error: print("Error:", error))
            .finally_(lambda: print("Done"))
        )
        await registry.scheduler.drain()


DEMOS = {
    "event": run_event_demo,
    "query": run_query_demo,
}
