"""Error taxonomy shared by cleaners and the execution engine."""

from __future__ import annotations


class DevsweepError(Exception):
    """Base class for all devsweep errors."""


class ScanError(DevsweepError):
    """Raised when a cleaner cannot determine what to report.

    The search root is missing or unreadable, or the external engine is
    unreachable. Fatal to the invocation.
    """


class DeletionFailure(DevsweepError):
    """Raised when a single item could not be removed."""


class ConfigError(DevsweepError):
    """Raised when a settings or safety table file cannot be used."""
