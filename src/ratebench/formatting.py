"""Shared text formatting helpers for ratebench.

Provides number formatting and aligned text tables used by the CLI and
the result summaries.
"""

from __future__ import annotations

import math


def format_number(value: float) -> str:
    """Format a rate or factor for display.

    Values above 1000 get thousands separators and no decimals; smaller
    values keep three decimals.

    Examples: ``'1,234,568'``, ``'12.500'``, ``'inf'``.
    """
    if math.isnan(value):
        return "N/A"
    if math.isinf(value):
        return "inf"
    if value > 1000:
        return f"{value:,.0f}"
    return f"{value:,.3f}"


def format_duration_ms(ms: float) -> str:
    """Format milliseconds with adaptive units (``'850.0ms'``, ``'2.35s'``)."""
    if ms < 1000:
        return f"{ms:.1f}ms"
    return f"{ms / 1000:.2f}s"


def format_table(
    headers: list[str],
    rows: list[list[str]],
    *,
    alignments: list[str] | None = None,
    separator: str = " | ",
    rule: bool = True,
    indent: int = 0,
) -> str:
    """Format a list of rows as an aligned text table.

    Auto-calculates column widths from content.  Right-aligns columns
    marked ``'r'`` in *alignments*.

    Args:
        headers: Column header strings.
        rows: List of rows, each a list of cell strings.
        alignments: Per-column alignment: ``'l'``, ``'r'``, or ``'c'``.
        separator: Text placed between columns.
        rule: Whether to draw a rule line under the header.
        indent: Number of leading spaces per line.

    Returns:
        The formatted table as a string.
    """
    if not headers:
        return ""

    ncols = len(headers)
    aligns = list(alignments or [])
    while len(aligns) < ncols:
        aligns.append("l")

    proc_rows: list[list[str]] = []
    for row in rows:
        padded = list(row) + [""] * (ncols - len(row))
        proc_rows.append(padded[:ncols])

    widths = [len(h) for h in headers]
    for row in proc_rows:
        for ci, cell in enumerate(row):
            widths[ci] = max(widths[ci], len(cell))

    prefix = " " * indent

    def _format_cell(text: str, width: int, align: str) -> str:
        if align == "r":
            return text.rjust(width)
        if align == "c":
            return text.center(width)
        return text.ljust(width)

    def _join(cells: list[str]) -> str:
        line = separator.join(_format_cell(cells[i], widths[i], aligns[i]) for i in range(ncols))
        return prefix + line.rstrip()

    lines = [_join(list(headers))]
    if rule:
        crossing = separator.replace("|", "+").replace(" ", "-")
        lines.append(prefix + crossing.join("-" * w for w in widths))
    for row in proc_rows:
        lines.append(_join(row))

    return "\n".join(lines)
