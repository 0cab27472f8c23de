"""Tests for the named event/query registry."""

from __future__ import annotations

import logging
import unittest

from context_signal import registry as registry_module
from context_signal.config import DEFAULT_CONFIG
from context_signal.event import Event
from context_signal.exceptions import UnknownSignalKindError
from context_signal.query import Query
from context_signal.registry import Registry, SignalKind
from context_signal.scheduler import Scheduler


class RegistryTests(unittest.TestCase):
    """Validate lazy creation and reuse by name."""

    def setUp(self) -> None:
        self.registry = Registry(scheduler=Scheduler())

    def test_same_name_returns_same_instance(self) -> None:
        event = self.registry.get_event("MyEvent")
        self.assertIsInstance(event, Event)
        self.assertIs(self.registry.get_event("MyEvent"), event)
        self.assertIsNot(self.registry.get_event("Other"), event)

        query = self.registry.get_query("Sum")
        self.assertIsInstance(query, Query)
        self.assertIs(self.registry.get_query("Sum"), query)

    def test_events_and_queries_use_separate_maps(self) -> None:
        event = self.registry.get("event", "shared")
        query = self.registry.get(SignalKind.QUERY, "shared")
        self.assertIsInstance(event, Event)
        self.assertIsInstance(query, Query)
        self.assertIs(self.registry.get(SignalKind.EVENT, "shared"), event)

    def test_contains_reports_created_entries(self) -> None:
        self.assertNotIn(("event", "lazy"), self.registry)
        self.registry.get_event("lazy")
        self.assertIn(("event", "lazy"), self.registry)
        self.assertNotIn(("query", "lazy"), self.registry)

    def test_unknown_kind_raises(self) -> None:
        with self.assertRaises(UnknownSignalKindError):
            self.registry.get("signal", "nope")

    def test_unknown_kind_in_membership_check_raises(self) -> None:
        with self.assertRaises(UnknownSignalKindError):
            ("signal", "x") in self.registry  # noqa: B015

    def test_events_share_the_registry_pool(self) -> None:
        first = self.registry.get_event("a")
        second = self.registry.get_event("b")
        self.assertIs(first._pool, self.registry.pool)
        self.assertIs(second._pool, self.registry.pool)

    def test_from_config_applies_settings(self) -> None:
        config = {
            "dispatch": {"max_idle_workers": 4},
            "query": {"request_timeout_seconds": 0.5, "poll_interval_seconds": 0.05},
            "logging": dict(DEFAULT_CONFIG["logging"]),
        }
        registry = Registry.from_config(config)
        query = registry.get_query("configured")
        self.assertEqual(query._request_timeout, 0.5)
        self.assertEqual(query._poll_interval, 0.05)
        self.assertEqual(registry.pool._max_idle, 4)

    def test_module_level_lookup_uses_default_registry(self) -> None:
        default = registry_module.default_registry()
        self.assertIs(registry_module.default_registry(), default)
        self.assertIs(registry_module.get_event("global"), default.get_event("global"))
        self.assertIs(registry_module.get_query("global"), default.get_query("global"))


class RegistryDebugLoggingTests(unittest.TestCase):
    """Creation records name the signal under a key LogRecord does not reserve."""

    def setUp(self) -> None:
        self.logger = logging.getLogger("context_signal")
        self._original_level = self.logger.level
        self.logger.setLevel(logging.DEBUG)

    def tearDown(self) -> None:
        self.logger.setLevel(self._original_level)

    def test_lazy_creation_logs_signal_name(self) -> None:
        registry = Registry(scheduler=Scheduler())
        with self.assertLogs("context_signal.registry", level="DEBUG") as logs:
            registry.get_event("traced")
            registry.get_query("traced")
        self.assertEqual([record.signal for record in logs.records], ["traced", "traced"])
        self.assertEqual([record.kind for record in logs.records], ["event", "query"])


if __name__ == "__main__":
    unittest.main()
