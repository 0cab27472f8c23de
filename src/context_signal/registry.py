"""Lazy name to instance lookup for events and queries."""

from __future__ import annotations

from enum import Enum
import logging
from typing import Any

from .config import DEFAULT_CONFIG
from .dispatch import DispatchPool
from .event import Event
from .exceptions import UnknownSignalKindError
from .query import Query
from .scheduler import Scheduler, get_scheduler

LOGGER = logging.getLogger(__name__)


class SignalKind(str, Enum):
    """Kinds of primitive a registry hands out."""

    EVENT = "event"
    QUERY = "query"


def _resolve_kind(kind: SignalKind | str) -> SignalKind:
    try:
        return SignalKind(kind)
    except ValueError as exc:
        raise UnknownSignalKindError(f"Unknown signal kind {kind!r}.") from exc


class Registry:
    """Create events and queries on first lookup and reuse them afterwards.

    Every instance built by one registry shares its scheduler and dispatch
    pool. Entries are never removed.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler | None = None,
        pool: DispatchPool | None = None,
        request_timeout: float = DEFAULT_CONFIG["query"]["request_timeout_seconds"],
        poll_interval: float = DEFAULT_CONFIG["query"]["poll_interval_seconds"],
    ) -> None:
        self._scheduler = scheduler or get_scheduler()
        self._pool = pool or DispatchPool(
            DEFAULT_CONFIG["dispatch"]["max_idle_workers"]
        )
        self._request_timeout = request_timeout
        self._poll_interval = poll_interval
        self._events: dict[str, Event] = {}
        self._queries: dict[str, Query] = {}

    @classmethod
    def from_config(
        cls, config: dict[str, dict[str, Any]], scheduler: Scheduler | None = None
    ) -> Registry:
        """Build a registry from a validated configuration mapping."""
        return cls(
            scheduler=scheduler,
            pool=DispatchPool(config["dispatch"]["max_idle_workers"]),
            request_timeout=config["query"]["request_timeout_seconds"],
            poll_interval=config["query"]["poll_interval_seconds"],
        )

    @property
    def pool(self) -> DispatchPool:
        return self._pool

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    def get(self, kind: SignalKind | str, name: str) -> Event | Query:
        """Return the instance registered under ``(kind, name)``, creating it if needed."""
        if _resolve_kind(kind) is SignalKind.EVENT:
            return self.get_event(name)
        return self.get_query(name)

    def get_event(self, name: str) -> Event:
        event = self._events.get(name)
        if event is None:
            event = Event(name, pool=self._pool)
            self._events[name] = event
            LOGGER.debug(
                "registry.created",
                extra={"event": "registry.created", "kind": "event", "signal": name},
            )
        return event

    def get_query(self, name: str) -> Query:
        query = self._queries.get(name)
        if query is None:
            query = Query(
                name,
                self._scheduler,
                request_timeout=self._request_timeout,
                poll_interval=self._poll_interval,
            )
            self._queries[name] = query
            LOGGER.debug(
                "registry.created",
                extra={"event": "registry.created", "kind": "query", "signal": name},
            )
        return query

    def __contains__(self, key: tuple[SignalKind | str, str]) -> bool:
        kind, name = key
        if _resolve_kind(kind) is SignalKind.EVENT:
            return name in self._events
        return name in self._queries


_default_registry: Registry | None = None


def default_registry() -> Registry:
    """Return the process-wide registry, creating it on first use."""
    global _default_registry
    if _default_registry is None:
        _default_registry = Registry()
    return _default_registry


def get_event(name: str) -> Event:
    return default_registry().get_event(name)


def get_query(name: str) -> Query:
    return default_registry().get_query(name)
