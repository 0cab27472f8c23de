"""Named single-responder request/response rendezvous."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any

from .promise import Deferred, Promise
from .scheduler import Scheduler, get_scheduler, invoke

LOGGER = logging.getLogger(__name__)

REQUEST_TIMEOUT = "Request timeout"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 3.0
DEFAULT_POLL_INTERVAL_SECONDS = 1 / 60

Responder = Callable[..., Any]


class Query:
    """Answer requests through a single responder.

    The responder is called as ``responder(deferred, *args)`` and is expected
    to settle the deferred exactly once. It may be a coroutine function.
    """

    def __init__(
        self,
        name: str = "",
        scheduler: Scheduler | None = None,
        *,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self.name = name
        self._scheduler = scheduler or get_scheduler()
        self._request_timeout = request_timeout
        self._poll_interval = poll_interval
        self._responder: Responder | None = None

    @property
    def has_responder(self) -> bool:
        return self._responder is not None

    def on_request(self, responder: Responder) -> None:
        """Install ``responder``, replacing whichever one was there before."""
        if self._responder is not None:
            LOGGER.debug(
                "query.responder.replaced",
                extra={"event": "query.responder.replaced", "signal": self.name},
            )
        self._responder = responder

    def request(self, *args: Any) -> Promise:
        """Send ``args`` to the responder and return the pending promise.

        Without a responder the request waits up to the configured timeout
        for one to be installed, then rejects with ``REQUEST_TIMEOUT``.
        """
        deferred = Deferred(self._scheduler)
        if self._responder is not None:
            self._scheduler.spawn(self._respond, self._responder, deferred, args)
        else:
            self._scheduler.spawn(self._await_responder, deferred, args)
        return deferred.promise

    async def _await_responder(self, deferred: Deferred, args: tuple[Any, ...]) -> None:
        deadline = self._scheduler.monotonic() + self._request_timeout
        while self._responder is None:
            if self._scheduler.monotonic() >= deadline:
                LOGGER.warning(
                    "query.request.timeout",
                    extra={
                        "event": "query.request.timeout",
                        "signal": self.name,
                        "timeout_seconds": self._request_timeout,
                    },
                )
                deferred.reject(REQUEST_TIMEOUT)
                return
            await self._scheduler.sleep(self._poll_interval)
        await self._respond(self._responder, deferred, args)

    async def _respond(
        self, responder: Responder, deferred: Deferred, args: tuple[Any, ...]
    ) -> None:
        try:
            await invoke(responder, deferred, *args)
        except Exception as exc:  # noqa: BLE001 - responder faults become rejections.
            LOGGER.warning(
                "query.responder.failed",
                extra={
                    "event": "query.responder.failed",
                    "signal": self.name,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            deferred.reject(exc)

    def __repr__(self) -> str:
        return f"<Query {self.name!r} responder={self.has_responder}>"
