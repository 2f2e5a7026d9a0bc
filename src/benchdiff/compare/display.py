"""Terminal display formatting for comparison results.

Produces an aligned table of every case followed by a short summary.  Used
for local output and as the fallback when the report cannot be posted.
"""

from __future__ import annotations

from benchdiff.compare.compare import ComparisonReport, ComparisonRow
from benchdiff.compare.results import Estimate
from benchdiff.formatting import format_estimate, format_percent, format_table

CONSOLE_HEADERS = ["Test", "Base", "Changes", "%", "Significant %"]


def format_duration_cell(estimate: Estimate | None) -> str:
    """Render an estimate as ``value±error<unit>``, or ``N/A`` when absent."""
    if estimate is None:
        return "N/A"
    return format_estimate(estimate.value, estimate.standard_error)


def console_row(row: ComparisonRow) -> list[str]:
    """Cells for one row of the console table."""
    return [
        row.name,
        format_duration_cell(row.base),
        format_duration_cell(row.changes),
        format_percent(row.percent_diff),
        format_percent(row.significant_percent_diff),
    ]


def format_console_table(report: ComparisonReport) -> str:
    """Format every row as an aligned text table."""
    if not report.rows:
        return "No benchmark cases found."
    return format_table(
        CONSOLE_HEADERS,
        [console_row(r) for r in report.rows],
        alignments=["l", "r", "r", "r", "r"],
    )


def format_summary(report: ComparisonReport) -> str:
    """One-paragraph summary of the comparison."""
    lines = [
        f"Cases compared:        {report.total_cases}",
        f"  Significantly faster: {report.faster_cases}",
        f"  Significantly slower: {report.slower_cases}",
    ]
    if report.unavailable_cases:
        lines.append(f"  Missing a result:     {report.unavailable_cases}")
    return "\n".join(lines)


def format_console_report(report: ComparisonReport) -> str:
    """Table plus summary for terminal output."""
    return format_console_table(report) + "\n\n" + format_summary(report)
