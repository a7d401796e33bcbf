"""Benchmark execution engine.

Orchestrates, for each registered callable in turn:
1. Calibration of the batch size (which also warms the callable up)
2. The convergence loop: quiesce, time one batch, recompute statistics
3. Stopping once the relative error is small enough (with at least
   three batches) or once the time ceiling is exceeded

Callables run strictly one after another on the calling thread.  A batch
is never interrupted, so a run can overshoot ``max_time`` by at most one
batch.  Exceptions raised by a callable propagate out of :meth:`run`.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Sequence

from ratebench.bench.config import BenchSettings, default_settings
from ratebench.bench.results import (
    BatchTiming,
    BenchmarkResult,
    BenchmarkSpec,
    BenchmarkSuiteResult,
)
from ratebench.bench.stats import RunStatistics, compute_run_statistics
from ratebench.bench.timing import (
    DEFAULT_CLOCK,
    Calibration,
    Clock,
    QuiesceHook,
    calibrate,
    collect_garbage,
    elapsed_ms,
    no_quiesce,
    time_batch,
)
from ratebench.errors import InvalidOperation
from ratebench.logging import ensure_progress_output, progress_level

log = logging.getLogger("ratebench")

# Fewest batches before convergence may be accepted.
MIN_BATCHES = 3


class ConvergenceState(enum.Enum):
    """State of the measurement loop for one callable."""

    COLLECTING = "collecting"
    CONVERGED = "converged"
    TIMED_OUT = "timed_out"


# ---------------------------------------------------------------------------
# Progress callback
# ---------------------------------------------------------------------------


@dataclass
class BenchProgress:
    """Progress info passed to the callback."""

    phase: str  # "calibrate", "measure", "done"
    label: str
    position: int  # 1-based index of the callable
    total: int
    batch: int = 0  # 1-based batch number
    batch_size: int = 0
    elapsed_ms: float = 0.0
    stats: RunStatistics | None = None
    state: ConvergenceState = ConvergenceState.COLLECTING


ProgressCallback = Callable[[BenchProgress], None]


# ---------------------------------------------------------------------------
# ConvergenceController
# ---------------------------------------------------------------------------


class ConvergenceController:
    """Runs batches of one callable until its measurement converges."""

    def __init__(
        self,
        settings: BenchSettings,
        *,
        clock: Clock = DEFAULT_CLOCK,
        quiesce: QuiesceHook = no_quiesce,
    ) -> None:
        self.settings = settings
        self.clock = clock
        self.quiesce = quiesce

    def next_state(
        self, stats: RunStatistics, batches: int, spent_ms: float
    ) -> ConvergenceState:
        """Decide the transition after a batch.

        Convergence needs both a small enough error and MIN_BATCHES
        batches; the time ceiling stops the loop unconditionally.
        """
        if stats.error <= self.settings.minimum_error_to_accept and batches >= MIN_BATCHES:
            return ConvergenceState.CONVERGED
        if spent_ms > self.settings.max_time:
            return ConvergenceState.TIMED_OUT
        return ConvergenceState.COLLECTING

    def measure(
        self,
        spec: BenchmarkSpec,
        calibration: Calibration,
        on_batch: Callable[[int, RunStatistics, float, ConvergenceState], None] | None = None,
    ) -> BenchmarkResult:
        """Measure *spec* with the calibrated batch size.

        Args:
            spec: The callable and its label.
            calibration: Batch size and budget from :func:`calibrate`.
            on_batch: Optional hook called after every accepted batch
                with (batch number, statistics, elapsed ms, new state).

        Returns:
            BenchmarkResult holding the full timing and statistics history.
        """
        batch_size = calibration.batch_size
        frequency = self.clock.frequency
        window = self.settings.batches_to_work_across

        ticks_history: list[int] = []
        timings: list[BatchTiming] = []
        runs: list[RunStatistics] = []
        state = ConvergenceState.COLLECTING
        start = self.clock.ticks()
        spent = 0.0

        while state is ConvergenceState.COLLECTING:
            self.quiesce()

            ticks = time_batch(spec.func, batch_size, clock=self.clock)
            ticks_history.append(ticks)
            timings.append(BatchTiming(index=len(timings) + 1, ticks=ticks))

            stats = compute_run_statistics(
                ticks_history,
                batch_size,
                window=window,
                frequency=frequency,
            )
            spent = elapsed_ms(self.clock, start)
            state = self.next_state(stats, len(ticks_history), spent)
            if state is ConvergenceState.TIMED_OUT:
                stats = replace(stats, exceeded_max_time=True)
            runs.append(stats)

            if on_batch is not None:
                on_batch(len(runs), stats, spent, state)

        return BenchmarkResult(
            label=spec.label,
            batch_size=batch_size,
            batch_time_ms=calibration.batch_time_ms,
            runs=runs,
            timings=timings,
            state=state.value,
            elapsed_ms=spent,
        )


# ---------------------------------------------------------------------------
# BenchRunner
# ---------------------------------------------------------------------------


class BenchRunner:
    """Benchmarks a list of specs according to BenchSettings.

    Usage::

        runner = BenchRunner(default_settings())
        suite = runner.run([BenchmarkSpec(func, "label")])
    """

    def __init__(
        self,
        settings: BenchSettings | None = None,
        *,
        clock: Clock = DEFAULT_CLOCK,
        quiesce: QuiesceHook | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        self.settings = settings or default_settings()
        self.clock = clock
        if quiesce is None:
            quiesce = collect_garbage if self.settings.collect_garbage else no_quiesce
        self.quiesce = quiesce
        self._logs_progress = progress_callback is None
        self.progress: Any = progress_callback or self._default_progress

    def run(self, specs: Sequence[BenchmarkSpec]) -> BenchmarkSuiteResult:
        """Benchmark every spec in order.

        With verbose settings and the default progress callback, a console
        handler is attached if the ratebench logger has none.

        Raises:
            InvalidOperation: If *specs* is empty.
            CalibrationFault: If a callable calibrates to a batch size of 0.
        """
        if not specs:
            raise InvalidOperation(
                "Can not run a benchmark when no callables have been added. "
                "Call add() first."
            )
        if self._logs_progress and self.settings.verbose:
            ensure_progress_output()

        controller = ConvergenceController(self.settings, clock=self.clock, quiesce=self.quiesce)
        results = [
            self._run_one(controller, spec, position, len(specs))
            for position, spec in enumerate(specs, start=1)
        ]
        return BenchmarkSuiteResult(results)

    def _run_one(
        self,
        controller: ConvergenceController,
        spec: BenchmarkSpec,
        position: int,
        total: int,
    ) -> BenchmarkResult:
        self.progress(
            BenchProgress(phase="calibrate", label=spec.label, position=position, total=total)
        )
        calibration = calibrate(spec.func, self.settings.initial_batch_time, clock=self.clock)

        def on_batch(
            batch: int, stats: RunStatistics, spent: float, state: ConvergenceState
        ) -> None:
            self.progress(
                BenchProgress(
                    phase="measure",
                    label=spec.label,
                    position=position,
                    total=total,
                    batch=batch,
                    batch_size=calibration.batch_size,
                    elapsed_ms=spent,
                    stats=stats,
                    state=state,
                )
            )

        result = controller.measure(spec, calibration, on_batch)

        self.progress(
            BenchProgress(
                phase="done",
                label=spec.label,
                position=position,
                total=total,
                batch=result.run_count,
                batch_size=result.batch_size,
                elapsed_ms=result.elapsed_ms,
                stats=result.final,
                state=ConvergenceState(result.state),
            )
        )
        return result

    def _default_progress(self, progress: BenchProgress) -> None:
        """Default progress callback: log per-batch diagnostics."""
        level = progress_level(self.settings.verbose)
        prefix = f"[{progress.position}/{progress.total}] {progress.label}"

        if progress.phase == "calibrate":
            log.log(level, "%s: calibrating batch size...", prefix)
        elif progress.phase == "measure" and progress.stats is not None:
            log.log(
                level,
                "%s: batch %d  error: %.4f%%  s.d.: %.1f ticks",
                prefix,
                progress.batch,
                progress.stats.error,
                progress.stats.standard_deviation,
            )
        elif progress.phase == "done":
            log.log(
                level,
                "%s: time ran for %.1f ms (%s after %d batches of %d)",
                prefix,
                progress.elapsed_ms,
                progress.state.value,
                progress.batch,
                progress.batch_size,
            )
