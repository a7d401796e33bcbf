"""Running statistics over a trailing window of batch timings.

After every timed batch the runner asks this module for a fresh
:class:`RunStatistics` snapshot: mean, population variance, standard
deviation, the standard error of the mean widened by a Student's t
critical value, the relative error in percent, and operations per second.

The relative error is the convergence criterion.  Only the last
``window`` timings contribute to it, so the estimate follows the steady
state after warm-up instead of averaging over the whole history.

References:
    Student's t critical values (two-tailed, 95%): any standard table,
        e.g. NIST/SEMATECH e-Handbook of Statistical Methods, 1.3.6.7.2.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence

from ratebench.errors import CalibrationFault


# ---------------------------------------------------------------------------
# Student's t table
# ---------------------------------------------------------------------------

# Two-tailed 95% critical values, entry i is for i + 1 degrees of freedom.
# The table length is the largest usable window size.
T_DISTRIBUTION_95: tuple[float, ...] = (
    12.706, 4.303, 3.182, 2.776, 2.571, 2.447, 2.365, 2.306, 2.262, 2.228,
    2.201, 2.179, 2.160, 2.145, 2.131, 2.120, 2.110, 2.101, 2.093, 2.086,
    2.080, 2.074, 2.069, 2.064, 2.060, 2.056, 2.052, 2.048, 2.045, 2.042,
)  # fmt: skip

MAX_WINDOW = len(T_DISTRIBUTION_95)


def critical_value(degrees: int) -> float:
    """Look up the t critical value for *degrees* (1..MAX_WINDOW)."""
    if degrees < 1 or degrees > MAX_WINDOW:
        raise ValueError(f"No t critical value stored for {degrees} degrees of freedom")
    return T_DISTRIBUTION_95[degrees - 1]


# ---------------------------------------------------------------------------
# RunStatistics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RunStatistics:
    """Snapshot computed after one accepted batch."""

    mean_ticks: float
    variance: float
    standard_deviation: float
    standard_error_mean: float
    error: float  # relative error of the mean, percent
    operations_per_second: float  # from the latest batch only
    ticks: int  # elapsed ticks of the latest batch
    exceeded_max_time: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "mean_ticks": round(self.mean_ticks, 3),
            "variance": round(self.variance, 3),
            "standard_deviation": round(self.standard_deviation, 3),
            "standard_error_mean": round(self.standard_error_mean, 3),
            "error": round(self.error, 6),
            "operations_per_second": round(self.operations_per_second, 3),
            "ticks": self.ticks,
            "exceeded_max_time": self.exceeded_max_time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunStatistics:
        """Deserialize from a dict, ignoring unknown fields."""
        known = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in known}
        return cls(**filtered)


# ---------------------------------------------------------------------------
# Computation
# ---------------------------------------------------------------------------


def trailing_window(values: Sequence[int], window: int) -> list[int]:
    """Return the last *window* values (all of them if there are fewer)."""
    return list(values[max(0, len(values) - window) :])


def ticks_to_ms(ticks: float, frequency: int) -> float:
    """Convert clock ticks to milliseconds."""
    return ticks / frequency * 1000.0


def compute_run_statistics(
    timings: Sequence[int],
    batch_size: int,
    *,
    window: int,
    frequency: int,
) -> RunStatistics:
    """Compute statistics for the batch timings collected so far.

    Args:
        timings: Elapsed ticks of every batch in execution order (at
            least one).
        batch_size: Invocations per batch.
        window: Number of trailing timings to use (1..MAX_WINDOW).
        frequency: Clock ticks per second.

    Returns:
        RunStatistics for the most recent batch.

    Raises:
        CalibrationFault: If *batch_size* is zero.
        ValueError: If *timings* is empty.
    """
    if batch_size <= 0:
        raise CalibrationFault(
            f"Batch size must be positive to compute throughput (got {batch_size})"
        )
    if not timings:
        raise ValueError("At least one batch timing is required")

    recent = trailing_window(timings, window)
    n = len(recent)
    ticks = timings[-1]

    # Population variance: divide by n, not n - 1.
    mean = sum(recent) / n
    variance = sum((v - mean) ** 2 for v in recent) / n
    deviation = math.sqrt(variance)

    degrees = min(window, len(timings))
    standard_error_mean = deviation / math.sqrt(n) * critical_value(degrees)
    error = max(standard_error_mean / mean * 100, 0.0) if mean > 0 else 0.0

    ms = ticks_to_ms(ticks, frequency)
    if ms > 0:
        operations_per_second = batch_size * (1000.0 / ms)
    else:
        # Below timer resolution: report an unbounded rate.
        operations_per_second = float("inf")

    return RunStatistics(
        mean_ticks=mean,
        variance=variance,
        standard_deviation=deviation,
        standard_error_mean=standard_error_mean,
        error=error,
        operations_per_second=operations_per_second,
        ticks=ticks,
    )
