"""Interval-overlap significance for benchmark estimates.

Each estimate is widened to ``value ± k·standard_error`` with ``k = 2``.  A
change is significant only when the two intervals do not overlap at all;
touching intervals are not significant.

The significant percentage is computed from the facing interval edges rather
than the point estimates, so it reports the smallest change the data
supports:

- faster: ``changes_max`` against ``base_min``
- slower: ``changes_min`` against ``base_max``
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from benchdiff.compare.results import Estimate

SIGNIFICANCE_FACTOR = 2.0


class Verdict(enum.Enum):
    """Outcome of the significance test for one case."""

    FASTER = "faster"
    SLOWER = "slower"
    NOT_SIGNIFICANT = "not significant"
    UNAVAILABLE = "unavailable"  # one or both estimates missing


@dataclass(frozen=True)
class Interval:
    """A closed interval ``[low, high]`` in seconds."""

    low: float
    high: float


def widen(estimate: Estimate, factor: float = SIGNIFICANCE_FACTOR) -> Interval:
    """Return ``value ± factor·standard_error`` as an Interval."""
    spread = factor * estimate.standard_error
    return Interval(low=estimate.value - spread, high=estimate.value + spread)


def diff_percentage(changes: float, base: float) -> float | None:
    """Relative change ``(changes / base - 1) * 100``; None if *base* is zero."""
    if base == 0:
        return None
    return (changes / base - 1) * 100


@dataclass(frozen=True)
class Significance:
    """Result of comparing two estimates."""

    verdict: Verdict
    percent_diff: float | None  # None when either estimate is absent
    significant_percent_diff: float | None  # 0.0 when not significant

    @property
    def is_significant(self) -> bool:
        return self.verdict in (Verdict.FASTER, Verdict.SLOWER)


def classify(
    base: Estimate,
    changes: Estimate,
    factor: float = SIGNIFICANCE_FACTOR,
) -> Verdict:
    """Classify *changes* against *base* by interval overlap."""
    b = widen(base, factor)
    c = widen(changes, factor)
    if c.high < b.low:
        return Verdict.FASTER
    if b.high < c.low:
        return Verdict.SLOWER
    return Verdict.NOT_SIGNIFICANT


def significant_diff_percentage(
    base: Estimate,
    changes: Estimate,
    factor: float = SIGNIFICANCE_FACTOR,
) -> float | None:
    """Percentage change between the facing interval edges; 0.0 if they overlap."""
    b = widen(base, factor)
    c = widen(changes, factor)
    if c.high < b.low:
        return diff_percentage(c.high, b.low)
    if b.high < c.low:
        return diff_percentage(c.low, b.high)
    return 0.0


def compare_estimates(
    base: Estimate | None,
    changes: Estimate | None,
    factor: float = SIGNIFICANCE_FACTOR,
) -> Significance:
    """Compare two optional estimates.

    If either side is missing, both percentages are None and the verdict is
    UNAVAILABLE, which never counts as significant.
    """
    if base is None or changes is None:
        return Significance(
            verdict=Verdict.UNAVAILABLE,
            percent_diff=None,
            significant_percent_diff=None,
        )
    return Significance(
        verdict=classify(base, changes, factor),
        percent_diff=diff_percentage(changes.value, base.value),
        significant_percent_diff=significant_diff_percentage(base, changes, factor),
    )
