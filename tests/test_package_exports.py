"""Tests for top-level package lazy exports."""

from __future__ import annotations

import unittest

import context_signal
from context_signal.event import Event
from context_signal.promise import Promise


class PackageExportTests(unittest.TestCase):
    """Ensure __getattr__ and exported symbols behave as expected."""

    def test_lazy_exports_resolve_known_symbols(self) -> None:
        for name in context_signal.__all__:
            self.assertIsNotNone(getattr(context_signal, name), name)
        self.assertIs(context_signal.Event, Event)
        self.assertIs(context_signal.Promise, Promise)
        self.assertTrue(callable(context_signal.get_event))
        self.assertEqual(context_signal.REQUEST_TIMEOUT, "Request timeout")

    def test_unknown_symbol_raises_attribute_error(self) -> None:
        with self.assertRaises(AttributeError):
            getattr(context_signal, "THIS_DOES_NOT_EXIST")


if __name__ == "__main__":
    unittest.main()
