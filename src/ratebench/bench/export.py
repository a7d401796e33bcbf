"""Export benchmark results to CSV and Markdown formats.

CSV format: one row per callable per accepted batch (long format for
pandas/R), carrying the raw ticks and the statistics computed after it.

Markdown format: the ranked summary as a table suitable for reports,
README files, and GitHub issues.
"""

from __future__ import annotations

import csv
import io

from ratebench.bench.results import BenchmarkSuiteResult
from ratebench.formatting import format_number


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------


def export_csv(suite: BenchmarkSuiteResult) -> str:
    """Export every accepted batch as CSV (long format).

    Columns:
        label, batch, batch_size, ticks, mean_ticks, standard_deviation,
        error_pct, operations_per_second, exceeded_max_time
    """
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(
        [
            "label",
            "batch",
            "batch_size",
            "ticks",
            "mean_ticks",
            "standard_deviation",
            "error_pct",
            "operations_per_second",
            "exceeded_max_time",
        ]
    )

    for result in suite:
        for i, run in enumerate(result.runs, start=1):
            writer.writerow(
                [
                    result.label,
                    i,
                    result.batch_size,
                    run.ticks,
                    f"{run.mean_ticks:.3f}",
                    f"{run.standard_deviation:.3f}",
                    f"{run.error:.6f}",
                    f"{run.operations_per_second:.3f}",
                    run.exceeded_max_time,
                ]
            )

    return output.getvalue()


# ---------------------------------------------------------------------------
# Markdown export
# ---------------------------------------------------------------------------


def export_markdown(suite: BenchmarkSuiteResult) -> str:
    """Export the ranked summary as a Markdown table, fastest first."""
    ranking = suite.ranking()
    lines = [
        "| Rank | Label | Runs | Ops/Sec | ± Error | Times slower |",
        "|-----:|-------|-----:|--------:|--------:|-------------:|",
    ]
    for entry in ranking.by_rank():
        label = f"**{entry.label}**" if entry.is_baseline else entry.label
        runs = f"{entry.runs}{' (timed out)' if entry.exceeded_max_time else ''}"
        lines.append(
            f"| {entry.rank} | {label} | {runs} | "
            f"{format_number(entry.operations_per_second)} | "
            f"{format_number(entry.error)}% | "
            f"{format_number(entry.slowdown)}x |"
        )
    return "\n".join(lines) + "\n"
