"""Tick clock, batch timing and batch-size calibration.

Elapsed times are measured in integer ticks of a high-resolution clock
(``time.perf_counter_ns`` by default) and converted to milliseconds with
the clock's frequency.  The clock is passed in explicitly so the runner
can be driven by a deterministic clock in tests.
"""

from __future__ import annotations

import gc
import logging
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from ratebench.bench.stats import ticks_to_ms
from ratebench.errors import CalibrationFault

log = logging.getLogger("ratebench")

Benchmarkable = Callable[[], object]
QuiesceHook = Callable[[], None]


# ---------------------------------------------------------------------------
# Clocks
# ---------------------------------------------------------------------------


class Clock(Protocol):
    """Monotonic tick source."""

    frequency: int  # ticks per second

    def ticks(self) -> int: ...


class PerfCounterClock:
    """Nanosecond ticks from ``time.perf_counter_ns``."""

    frequency = 1_000_000_000

    def ticks(self) -> int:
        return time.perf_counter_ns()


DEFAULT_CLOCK = PerfCounterClock()


def elapsed_ms(clock: Clock, start_ticks: int) -> float:
    """Milliseconds elapsed on *clock* since *start_ticks*."""
    return ticks_to_ms(clock.ticks() - start_ticks, clock.frequency)


# ---------------------------------------------------------------------------
# Quiesce hooks
# ---------------------------------------------------------------------------


def collect_garbage() -> None:
    """Run the cyclic garbage collector before a batch.

    The second pass picks up objects released by finalizers run in the
    first one.
    """
    gc.collect()
    gc.collect()


def no_quiesce() -> None:
    """Quiesce hook that does nothing."""


# ---------------------------------------------------------------------------
# Calibration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Calibration:
    """Outcome of calibrating a batch size."""

    batch_size: int
    batch_time_ms: int  # the budget that was requested
    elapsed_ms: float  # time the calibration loop actually took


def calibrate(
    func: Benchmarkable,
    budget_ms: int,
    *,
    clock: Clock = DEFAULT_CLOCK,
) -> Calibration:
    """Count how many calls of *func* fit in *budget_ms* milliseconds.

    The loop checks the elapsed time before each call and stops once the
    budget is reached, so the returned ``elapsed_ms`` is never below the
    budget.  This pass doubles as the warm-up for *func*.

    Raises:
        CalibrationFault: If no call fit in the budget (batch size 0).
    """
    count = 0
    start = clock.ticks()
    while True:
        spent = elapsed_ms(clock, start)
        if spent >= budget_ms:
            break
        func()
        count += 1

    if count == 0:
        raise CalibrationFault(
            f"Calibration with a {budget_ms} ms budget produced a batch size of 0; "
            f"increase initial_batch_time"
        )

    log.debug("Calibrated batch size %d in %.1f ms (budget %d ms)", count, spent, budget_ms)
    return Calibration(batch_size=count, batch_time_ms=budget_ms, elapsed_ms=spent)


# ---------------------------------------------------------------------------
# Batch timing
# ---------------------------------------------------------------------------


def time_batch(
    func: Benchmarkable,
    batch_size: int,
    *,
    clock: Clock = DEFAULT_CLOCK,
) -> int:
    """Call *func* exactly *batch_size* times and return the elapsed ticks."""
    start = clock.ticks()
    for _ in range(batch_size):
        func()
    return clock.ticks() - start
