"""Ranking of benchmark results against the fastest one.

The result with the highest final operations/second is the baseline.
Every result gets a slowdown factor ``baseline_ops / result_ops``; the
baseline's own factor is 1.0, and it is identified by an explicit
``is_baseline`` flag rather than by its factor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ratebench.bench.results import BenchmarkResult

log = logging.getLogger("ratebench")


# ---------------------------------------------------------------------------
# Ranked entries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RankedEntry:
    """One row of the ranked summary."""

    label: str
    runs: int
    operations_per_second: float
    error: float  # percent
    slowdown: float  # times slower than the baseline
    rank: int  # 1 = fastest
    is_baseline: bool
    exceeded_max_time: bool = False


@dataclass(frozen=True)
class Ranking:
    """Read-only ranked view over a suite's results.

    ``entries`` keep registration order; use :meth:`by_rank` for the
    fastest-first order.
    """

    entries: tuple[RankedEntry, ...] = field(default_factory=tuple)

    @property
    def baseline(self) -> RankedEntry | None:
        """The fastest entry, or None for an empty ranking."""
        for entry in self.entries:
            if entry.is_baseline:
                return entry
        return None

    def by_rank(self) -> list[RankedEntry]:
        """Entries ordered fastest first."""
        return sorted(self.entries, key=lambda e: e.rank)

    def __len__(self) -> int:
        return len(self.entries)


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def _slowdown(fastest_ops: float, ops: float) -> float:
    if fastest_ops == ops:
        # Covers the baseline itself, including an unbounded rate.
        return 1.0
    if ops <= 0:
        return float("inf")
    return fastest_ops / ops


def rank_results(results: list[BenchmarkResult]) -> Ranking:
    """Rank *results* by final operations/second.

    Ties go to the earliest registered result.  The input results are
    not modified.
    """
    if not results:
        return Ranking()

    fastest_idx = 0
    for i, result in enumerate(results):
        if result.operations_per_second > results[fastest_idx].operations_per_second:
            fastest_idx = i
    fastest_ops = results[fastest_idx].operations_per_second

    # Stable sort: equal rates keep registration order.
    order = sorted(
        range(len(results)),
        key=lambda i: (i != fastest_idx, -results[i].operations_per_second),
    )
    ranks = {idx: pos + 1 for pos, idx in enumerate(order)}

    entries = tuple(
        RankedEntry(
            label=r.label,
            runs=r.run_count,
            operations_per_second=r.operations_per_second,
            error=r.error,
            slowdown=_slowdown(fastest_ops, r.operations_per_second),
            rank=ranks[i],
            is_baseline=i == fastest_idx,
            exceeded_max_time=r.exceeded_max_time,
        )
        for i, r in enumerate(results)
    )
    log.debug("Baseline is '%s' at %.3f ops/sec", results[fastest_idx].label, fastest_ops)
    return Ranking(entries=entries)
