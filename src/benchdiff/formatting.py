"""Shared text formatting helpers for benchdiff.

Provides functions for formatting timing estimates, percentages, and aligned
text tables used by both the console and Markdown reports.
"""

from __future__ import annotations

# Unit suffixes with their size in seconds, largest first.
_TIME_UNITS: list[tuple[str, float]] = [
    ("s", 1.0),
    ("ms", 1e-3),
    ("µs", 1e-6),
    ("ns", 1e-9),
]


def pick_time_unit(seconds: float) -> tuple[str, float]:
    """Return ``(suffix, scale)`` for the largest unit not exceeding *seconds*.

    Values below one nanosecond (including zero) use nanoseconds.
    """
    magnitude = abs(seconds)
    for suffix, scale in _TIME_UNITS:
        if magnitude >= scale:
            return suffix, scale
    return _TIME_UNITS[-1]


def format_estimate(value: float, error: float, precision: int = 2) -> str:
    """Format a timing estimate as ``'21.60±0.53ms'``.

    Both numbers share the unit chosen for *value*, so the error reads at the
    same granularity as the measurement itself.
    """
    suffix, scale = pick_time_unit(value)
    return f"{value / scale:.{precision}f}±{error / scale:.{precision}f}{suffix}"


def format_percent(value: float | None, precision: int = 2) -> str:
    """Format a signed percentage: ``'+3.25%'``, ``'-54.17%'``.

    Returns ``""`` for an exact zero and ``"N/A"`` for None.
    """
    if value is None:
        return "N/A"
    if value == 0:
        return ""
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.{precision}f}%"


def format_table(
    headers: list[str],
    rows: list[list[str]],
    *,
    alignments: list[str] | None = None,
    indent: int = 2,
) -> str:
    """Format a list of rows as an aligned text table.

    Auto-calculates column widths from content. Right-aligns columns marked
    ``'r'`` in *alignments*.

    Args:
        headers: Column header strings.
        rows: List of rows, each a list of cell strings.
        alignments: Per-column alignment: ``'l'``, ``'r'``, or ``'c'``.
        indent: Number of leading spaces per line.

    Returns:
        The formatted table as a string.
    """
    if not headers:
        return ""

    ncols = len(headers)
    if alignments is None:
        alignments = ["l"] * ncols
    while len(alignments) < ncols:
        alignments.append("l")

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

    lines: list[str] = []
    header_line = "  ".join(
        _format_cell(headers[i], widths[i], alignments[i]) for i in range(ncols)
    )
    lines.append((prefix + header_line).rstrip())
    lines.append(prefix + "  ".join("─" * widths[i] for i in range(ncols)))

    for row in proc_rows:
        row_line = "  ".join(_format_cell(row[i], widths[i], alignments[i]) for i in range(ncols))
        lines.append((prefix + row_line).rstrip())

    return "\n".join(lines)
