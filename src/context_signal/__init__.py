"""Top-level package for context-signal."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config import ensure_config_dir, load_config
    from .dispatch import DispatchPool
    from .event import Connection, Event
    from .exceptions import (
        ConfigValidationError,
        ContextSignalError,
        UnknownSignalKindError,
    )
    from .promise import Deferred, Promise, PromiseState
    from .query import REQUEST_TIMEOUT, Query
    from .registry import (
        Registry,
        SignalKind,
        default_registry,
        get_event,
        get_query,
    )
    from .scheduler import Scheduler, get_scheduler

__all__ = [
    "ConfigValidationError",
    "Connection",
    "ContextSignalError",
    "Deferred",
    "DispatchPool",
    "Event",
    "Promise",
    "PromiseState",
    "Query",
    "REQUEST_TIMEOUT",
    "Registry",
    "Scheduler",
    "SignalKind",
    "UnknownSignalKindError",
    "default_registry",
    "ensure_config_dir",
    "get_event",
    "get_query",
    "get_scheduler",
    "load_config",
]

_EXPORTS = {
    "ensure_config_dir": ".config",
    "load_config": ".config",
    "DispatchPool": ".dispatch",
    "Connection": ".event",
    "Event": ".event",
    "ConfigValidationError": ".exceptions",
    "ContextSignalError": ".exceptions",
    "UnknownSignalKindError": ".exceptions",
    "Deferred": ".promise",
    "Promise": ".promise",
    "PromiseState": ".promise",
    "REQUEST_TIMEOUT": ".query",
    "Query": ".query",
    "Registry": ".registry",
    "SignalKind": ".registry",
    "default_registry": ".registry",
    "get_event": ".registry",
    "get_query": ".registry",
    "Scheduler": ".scheduler",
    "get_scheduler": ".scheduler",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols so importing the package stays cheap."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    return getattr(import_module(module_name, __name__), name)
