"""Exception hierarchy for ratebench.

All errors are raised synchronously and never retried.  Exceptions raised
by a benchmarked callable are not wrapped: they propagate unchanged.
"""

from __future__ import annotations


class RateBenchError(Exception):
    """Base class for errors raised by ratebench itself."""


class ConfigurationError(RateBenchError, ValueError):
    """A settings value is out of range (e.g. a window larger than the t-table)."""


class InvalidOperation(RateBenchError):
    """An operation was requested in a state that cannot support it."""


class CalibrationFault(RateBenchError):
    """Calibration produced a batch size of zero."""
