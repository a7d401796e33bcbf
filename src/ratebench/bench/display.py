"""Terminal display formatting for benchmark results.

Produces the ranked summary table and a per-batch history view.
No external dependencies.
"""

from __future__ import annotations

from ratebench.bench.compare import Ranking
from ratebench.bench.results import BenchmarkResult
from ratebench.formatting import format_duration_ms, format_number, format_table

BASELINE_MARKER = "*"
TIMED_OUT_MARKER = "!"


def format_rate(ops: float, error: float) -> str:
    """Format ``ops/sec ± error%``."""
    return f"{format_number(ops)} ±{format_number(error)}%"


def format_ranking(ranking: Ranking) -> str:
    """Format the ranked summary in registration order.

    The baseline (fastest) row is marked with ``*`` and results that hit
    the time ceiling with ``!`` after their run count.
    """
    if not len(ranking):
        return "No benchmark results."

    rows: list[list[str]] = []
    for entry in ranking.entries:
        marker = BASELINE_MARKER if entry.is_baseline else " "
        runs = str(entry.runs)
        if entry.exceeded_max_time:
            runs += TIMED_OUT_MARKER
        rows.append(
            [
                f"{marker} {entry.label}",
                runs,
                format_rate(entry.operations_per_second, entry.error),
                f"{format_number(entry.slowdown)}x",
            ]
        )

    lines = [
        format_table(
            ["  Label", "Runs", "Ops/Sec", "Times slower"],
            rows,
            alignments=["l", "r", "r", "r"],
        )
    ]

    notes: list[str] = []
    baseline = ranking.baseline
    if baseline is not None:
        notes.append(f"{BASELINE_MARKER} fastest: {baseline.label}")
    if any(e.exceeded_max_time for e in ranking.entries):
        notes.append(f"{TIMED_OUT_MARKER} stopped at the time ceiling before converging")
    if notes:
        lines.append("")
        lines.extend(notes)

    return "\n".join(lines)


def format_history(result: BenchmarkResult) -> str:
    """Format the per-batch statistics of one result."""
    header = (
        f"{result.label}: {result.run_count} batches of {result.batch_size} "
        f"({result.state}, {format_duration_ms(result.elapsed_ms)})"
    )
    rows = [
        [
            str(i),
            str(run.ticks),
            f"{run.mean_ticks:.0f}",
            f"{run.standard_deviation:.1f}",
            f"{run.error:.3f}%",
            format_number(run.operations_per_second),
        ]
        for i, run in enumerate(result.runs, start=1)
    ]
    table = format_table(
        ["Batch", "Ticks", "Mean", "S.D.", "Error", "Ops/Sec"],
        rows,
        alignments=["r", "r", "r", "r", "r", "r"],
        separator="  ",
        rule=False,
        indent=2,
    )
    return f"{header}\n{table}"
