"""Registration builders for benchmarks.

Every entry point accumulates an ordered list of BenchmarkSpec and hands
it to :class:`~ratebench.bench.runner.BenchRunner`::

    just(func, "label")                    # one callable
    this(func_a, "A").against(func_b, "B")  # two callables
    these([(func_a, "A"), (func_b, "B")])  # any number

    bench = Benchmark()                    # incremental
    bench.add(func_a)
    bench.add(func_b, "B")
    suite = bench.run()

Labels default to ``Test {n}`` where n is the 1-based registration
position.
"""

from __future__ import annotations

from typing import Iterable

from ratebench.bench.config import BenchSettings, default_settings
from ratebench.bench.results import BenchmarkSpec, BenchmarkSuiteResult
from ratebench.bench.runner import BenchRunner, ProgressCallback
from ratebench.bench.timing import Benchmarkable, QuiesceHook


class Benchmark:
    """An ordered set of callables benchmarked together."""

    def __init__(
        self,
        settings: BenchSettings | None = None,
        *,
        quiesce: QuiesceHook | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        self.settings = settings or default_settings()
        self._quiesce = quiesce
        self._progress_callback = progress_callback
        self._specs: list[BenchmarkSpec] = []

    @property
    def specs(self) -> tuple[BenchmarkSpec, ...]:
        """Registered specs in registration order."""
        return tuple(self._specs)

    def add(self, func: Benchmarkable, label: str | None = None) -> Benchmark:
        """Register *func*; returns self so calls can be chained."""
        self._specs.append(BenchmarkSpec.create(func, label, len(self._specs) + 1))
        return self

    def run(self) -> BenchmarkSuiteResult:
        """Benchmark every registered callable.

        Raises:
            InvalidOperation: If nothing has been added.
        """
        runner = BenchRunner(
            self.settings,
            quiesce=self._quiesce,
            progress_callback=self._progress_callback,
        )
        return runner.run(self._specs)


class ThisClause:
    """First half of a pairwise benchmark; finish it with :meth:`against`."""

    def __init__(self, benchmark: Benchmark) -> None:
        self._benchmark = benchmark

    def against(self, func: Benchmarkable, label: str | None = None) -> BenchmarkSuiteResult:
        """Add the second callable and run both."""
        return self._benchmark.add(func, label).run()


def just(
    func: Benchmarkable,
    label: str | None = None,
    *,
    settings: BenchSettings | None = None,
) -> BenchmarkSuiteResult:
    """Benchmark a single callable."""
    return Benchmark(settings).add(func, label).run()


def this(
    func: Benchmarkable,
    label: str | None = None,
    *,
    settings: BenchSettings | None = None,
) -> ThisClause:
    """Start a pairwise benchmark: ``this(a).against(b)``."""
    return ThisClause(Benchmark(settings).add(func, label))


def these(
    actions: Iterable[tuple[Benchmarkable, str | None]],
    *,
    settings: BenchSettings | None = None,
) -> BenchmarkSuiteResult:
    """Benchmark a list of ``(callable, label)`` pairs against each other."""
    bench = Benchmark(settings)
    for func, label in actions:
        bench.add(func, label)
    return bench.run()
