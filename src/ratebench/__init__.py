"""ratebench: adaptive throughput benchmarking for Python callables.

Times zero-argument callables in calibrated batches, repeating until the
relative error of the mean falls below a threshold, and ranks several
callables against the fastest one.
"""

from __future__ import annotations

__version__ = "0.1.0"

from ratebench.api import Benchmark, ThisClause, just, these, this  # noqa: E402
from ratebench.bench.config import BenchSettings, default_settings  # noqa: E402
from ratebench.errors import (  # noqa: E402
    CalibrationFault,
    ConfigurationError,
    InvalidOperation,
    RateBenchError,
)

__all__ = [
    "Benchmark",
    "BenchSettings",
    "CalibrationFault",
    "ConfigurationError",
    "InvalidOperation",
    "RateBenchError",
    "ThisClause",
    "__version__",
    "default_settings",
    "just",
    "these",
    "this",
]
