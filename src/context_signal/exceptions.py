"""Domain exception hierarchy for context-signal."""

from __future__ import annotations


class ContextSignalError(RuntimeError):
    """Base class for all context-signal errors."""


class ConfigValidationError(ContextSignalError):
    """Raised when configuration cannot be validated safely."""


class UnknownSignalKindError(ContextSignalError):
    """Raised when the registry is asked for a kind it does not manage."""
