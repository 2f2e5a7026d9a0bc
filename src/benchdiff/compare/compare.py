"""Benchmark comparison across the two revisions.

Turns per-case estimates into ordered comparison rows and aggregate counts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from benchdiff.compare.results import CaseEstimates, Estimate
from benchdiff.compare.stats import Verdict, compare_estimates


# ---------------------------------------------------------------------------
# Per-case row
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ComparisonRow:
    """Comparison of one case between base and changes."""

    name: str
    base: Estimate | None
    changes: Estimate | None
    percent_diff: float | None
    significant_percent_diff: float | None
    verdict: Verdict

    @property
    def is_significant(self) -> bool:
        return self.verdict in (Verdict.FASTER, Verdict.SLOWER)


def make_row(estimates: CaseEstimates) -> ComparisonRow:
    """Build the comparison row for one case."""
    sig = compare_estimates(estimates.base, estimates.changes)
    return ComparisonRow(
        name=estimates.name,
        base=estimates.base,
        changes=estimates.changes,
        percent_diff=sig.percent_diff,
        significant_percent_diff=sig.significant_percent_diff,
        verdict=sig.verdict,
    )


# ---------------------------------------------------------------------------
# Aggregate comparison
# ---------------------------------------------------------------------------


@dataclass
class ComparisonReport:
    """Complete comparison between base and changes across all cases."""

    rows: list[ComparisonRow] = field(default_factory=list)

    @property
    def significant_rows(self) -> list[ComparisonRow]:
        return [r for r in self.rows if r.is_significant]

    @property
    def total_cases(self) -> int:
        return len(self.rows)

    @property
    def faster_cases(self) -> int:
        return sum(1 for r in self.rows if r.verdict is Verdict.FASTER)

    @property
    def slower_cases(self) -> int:
        return sum(1 for r in self.rows if r.verdict is Verdict.SLOWER)

    @property
    def unavailable_cases(self) -> int:
        return sum(1 for r in self.rows if r.verdict is Verdict.UNAVAILABLE)

    @property
    def has_significant(self) -> bool:
        return any(r.is_significant for r in self.rows)


def build_report(estimates: Sequence[CaseEstimates]) -> ComparisonReport:
    """Compare every case, one row per distinct name, sorted by name.

    If a name occurs more than once the first occurrence is kept.
    """
    seen: set[str] = set()
    rows: list[ComparisonRow] = []
    for est in estimates:
        if est.name in seen:
            continue
        seen.add(est.name)
        rows.append(make_row(est))
    rows.sort(key=lambda r: r.name)
    return ComparisonReport(rows=rows)
