"""Benchmark result data structures and serialization.

Hierarchy::

    BenchmarkSuiteResult (one invocation of run)
      → results: list[BenchmarkResult] (one per registered BenchmarkSpec)
        → timings: list[BatchTiming]   (raw history)
        → runs: list[RunStatistics]    (one per accepted batch)

File produced by :func:`save_suite`::

    {"settings": {...}, "results": [{...}, ...]}
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterator, overload

from ratebench.bench.stats import RunStatistics

if TYPE_CHECKING:
    from ratebench.bench.compare import Ranking
    from ratebench.bench.config import BenchSettings
    from ratebench.bench.timing import Benchmarkable

log = logging.getLogger("ratebench")


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BenchmarkSpec:
    """A callable to benchmark and its label."""

    func: Benchmarkable
    label: str

    @classmethod
    def create(cls, func: Benchmarkable, label: str | None, position: int) -> BenchmarkSpec:
        """Build a spec, defaulting the label to ``Test {position}`` (1-based)."""
        if not callable(func):
            raise TypeError(f"Benchmark target must be callable, got {type(func).__name__}")
        return cls(func=func, label=label if label is not None else f"Test {position}")


# ---------------------------------------------------------------------------
# Per-batch records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BatchTiming:
    """Elapsed ticks of one batch of ``batch_size`` calls."""

    index: int  # 1-based batch number
    ticks: int

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {"index": self.index, "ticks": self.ticks}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BatchTiming:
        """Deserialize from a dict."""
        return cls(index=data["index"], ticks=data["ticks"])


# ---------------------------------------------------------------------------
# Per-callable result
# ---------------------------------------------------------------------------


@dataclass
class BenchmarkResult:
    """Measurement of one registered callable.

    The last element of ``runs`` is the authoritative final measurement.
    """

    label: str
    batch_size: int
    batch_time_ms: int
    runs: list[RunStatistics] = field(default_factory=list)
    timings: list[BatchTiming] = field(default_factory=list)
    state: str = "collecting"  # "collecting", "converged", "timed_out"
    elapsed_ms: float = 0.0

    @property
    def final(self) -> RunStatistics:
        """The statistics of the last accepted batch."""
        if not self.runs:
            raise ValueError(f"Benchmark '{self.label}' has no accepted batches")
        return self.runs[-1]

    @property
    def operations_per_second(self) -> float:
        return self.final.operations_per_second

    @property
    def error(self) -> float:
        """Final relative error of the mean, in percent."""
        return self.final.error

    @property
    def run_count(self) -> int:
        return len(self.runs)

    @property
    def converged(self) -> bool:
        return self.state == "converged"

    @property
    def exceeded_max_time(self) -> bool:
        return bool(self.runs) and self.final.exceeded_max_time

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "label": self.label,
            "batch_size": self.batch_size,
            "batch_time_ms": self.batch_time_ms,
            "state": self.state,
            "elapsed_ms": round(self.elapsed_ms, 3),
            "runs": [r.to_dict() for r in self.runs],
            "timings": [t.to_dict() for t in self.timings],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BenchmarkResult:
        """Deserialize from a dict."""
        return cls(
            label=data["label"],
            batch_size=data["batch_size"],
            batch_time_ms=data.get("batch_time_ms", 0),
            runs=[RunStatistics.from_dict(r) for r in data.get("runs", [])],
            timings=[BatchTiming.from_dict(t) for t in data.get("timings", [])],
            state=data.get("state", "collecting"),
            elapsed_ms=data.get("elapsed_ms", 0.0),
        )


# ---------------------------------------------------------------------------
# Suite result
# ---------------------------------------------------------------------------


class BenchmarkSuiteResult:
    """Ordered, read-only collection of results from one run."""

    def __init__(self, results: list[BenchmarkResult]) -> None:
        self._results = tuple(results)

    @overload
    def __getitem__(self, index: int) -> BenchmarkResult: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[BenchmarkResult, ...]: ...

    def __getitem__(self, index: int | slice) -> BenchmarkResult | tuple[BenchmarkResult, ...]:
        return self._results[index]

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[BenchmarkResult]:
        return iter(self._results)

    def __repr__(self) -> str:
        labels = ", ".join(r.label for r in self._results)
        return f"BenchmarkSuiteResult([{labels}])"

    def ranking(self) -> Ranking:
        """Rank the results against the fastest one."""
        from ratebench.bench.compare import rank_results

        return rank_results(list(self._results))

    def summary(self) -> str:
        """Render the ranking as a text table."""
        from ratebench.bench.display import format_ranking

        return format_ranking(self.ranking())

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {"results": [r.to_dict() for r in self._results]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BenchmarkSuiteResult:
        """Deserialize from a dict."""
        return cls([BenchmarkResult.from_dict(r) for r in data.get("results", [])])


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def save_suite(
    path: Path,
    suite: BenchmarkSuiteResult,
    settings: BenchSettings | None = None,
) -> None:
    """Write a suite result (and the settings used) as JSON."""
    data = suite.to_dict()
    if settings is not None:
        data["settings"] = settings.to_dict()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n")
    log.debug("Saved %d results to %s", len(suite), path)


def load_suite(path: Path) -> tuple[BenchmarkSuiteResult, BenchSettings | None]:
    """Read a suite result written by :func:`save_suite`.

    Returns:
        Tuple of (suite, settings); settings is None if the file has none.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the file is not a saved suite, or one of its
            results is malformed or has no accepted batches.
    """
    from ratebench.bench.config import BenchSettings

    if not path.exists():
        raise FileNotFoundError(f"Result file not found: {path}")

    data = json.loads(path.read_text())
    if not isinstance(data, dict) or "results" not in data:
        raise ValueError(f"Not a ratebench result file: {path}")

    try:
        suite = BenchmarkSuiteResult.from_dict(data)
        raw_settings = data.get("settings")
        settings = BenchSettings.from_dict(raw_settings) if raw_settings else None
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"Not a ratebench result file: {path} (malformed entry: {exc})") from exc

    for result in suite:
        if not result.runs:
            raise ValueError(
                f"Not a ratebench result file: {path} (result '{result.label}' has no runs)"
            )
    return suite, settings
