"""Markdown report for posting as a pull request comment.

Layout::

    ## <title>

    | Test | Base | PR | % | Significant % |      <- significant rows only,
    |------|-----:|---:|--:|--------------:|         omitted when there are none
    ...

    <details>
    <summary>Click to view full benchmark</summary>

    | Test | Base | PR | % | Significant % |      <- every row
    ...

    </details>
"""

from __future__ import annotations

from typing import Sequence

from benchdiff.compare.compare import ComparisonReport, ComparisonRow
from benchdiff.compare.display import format_duration_cell
from benchdiff.compare.results import Estimate
from benchdiff.formatting import format_percent

MARKDOWN_HEADER = "| Test | Base | PR | % | Significant % |"
MARKDOWN_RULE = "|------|-----:|---:|--:|--------------:|"
DETAILS_SUMMARY = "Click to view full benchmark"


def escape_cell(text: str) -> str:
    """Escape characters that would end a Markdown table cell."""
    return text.replace("\\", "\\\\").replace("|", "\\|").replace("\n", " ")


def _duration(estimate: Estimate | None, bold: bool) -> str:
    cell = format_duration_cell(estimate)
    return f"**{cell}**" if bold else cell


def markdown_row(row: ComparisonRow) -> str:
    """Render one row; the faster side is bold when the change is significant."""
    bold_base = bold_changes = False
    if row.is_significant and row.base is not None and row.changes is not None:
        if row.changes.value < row.base.value:
            bold_changes = True
        elif row.base.value < row.changes.value:
            bold_base = True
    cells = [
        escape_cell(row.name),
        _duration(row.base, bold_base),
        _duration(row.changes, bold_changes),
        format_percent(row.percent_diff),
        format_percent(row.significant_percent_diff),
    ]
    return "| " + " | ".join(cells) + " |"


def markdown_table(rows: Sequence[ComparisonRow]) -> str:
    """Render rows as a Markdown table with header."""
    lines = [MARKDOWN_HEADER, MARKDOWN_RULE]
    lines.extend(markdown_row(r) for r in rows)
    return "\n".join(lines)


def export_markdown(report: ComparisonReport, title: str) -> str:
    """Render the full comment body.

    The significant-only table is the visible body; the full table sits in a
    collapsible section.  With nothing significant, only the full table is
    included.
    """
    lines: list[str] = [f"## {title}", ""]

    significant = report.significant_rows
    if significant:
        lines.append(markdown_table(significant))
        lines.append("")

    lines.append("<details>")
    lines.append(f"<summary>{DETAILS_SUMMARY}</summary>")
    lines.append("")
    lines.append(markdown_table(report.rows))
    lines.append("")
    lines.append("</details>")
    return "\n".join(lines) + "\n"
