"""Reading per-case timing estimates persisted by the benchmark harnesses.

Each run with ``--save-baseline <id>`` leaves::

    <result-root>/<case path>/<id>/estimates.json

holding named statistics such as ``slope`` and ``mean``, each with a
``point_estimate`` and ``standard_error`` in nanoseconds.  ``slope`` may be
``null`` when the harness did not use linear sampling.
"""

from __future__ import annotations

import json
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import AbstractSet, Any, Sequence

from benchdiff.compare.catalog import MergedCase
from benchdiff.compare.config import BASE_BASELINE, CHANGES_BASELINE
from benchdiff.errors import ResultFileUnreadable
from benchdiff.logging import get_logger

log = get_logger("results")

ESTIMATES_FILE = "estimates.json"

# Regression slope is less biased by per-iteration fixed overhead than the mean.
STATISTIC_PREFERENCE: tuple[str, ...] = ("slope", "mean")

UNIT_SECONDS: dict[str, float] = {
    "s": 1.0,
    "ms": 1e-3,
    "us": 1e-6,
    "µs": 1e-6,
    "ns": 1e-9,
}

_UNSAFE_CHARS = re.compile(r'[?"/\\*<>:|^]')
_MAX_DIR_NAME_BYTES = 64


@dataclass(frozen=True)
class Estimate:
    """A point estimate of mean execution time and its standard error, in seconds."""

    value: float
    standard_error: float


@dataclass(frozen=True)
class CaseEstimates:
    """Both revisions' estimates for one case."""

    name: str
    base: Estimate | None = None
    changes: Estimate | None = None


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def safe_dir_name(segment: str) -> str:
    """Make one case-name segment safe for use as a directory name.

    Like criterion, the result is cut to 64 UTF-8 bytes without splitting a
    character.
    """
    encoded = _UNSAFE_CHARS.sub("_", segment).encode("utf-8")
    return encoded[:_MAX_DIR_NAME_BYTES].decode("utf-8", "ignore")


def case_dir(result_root: Path, case: str) -> Path:
    """Directory holding all baselines of *case*."""
    path = result_root
    for segment in case.split("/"):
        path = path / safe_dir_name(segment)
    return path


def estimates_path(result_root: Path, case: str, baseline: str) -> Path:
    """Path of the estimates file for *case* under *baseline*."""
    return case_dir(result_root, case) / baseline / ESTIMATES_FILE


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def extract_estimate(
    data: dict[str, Any],
    *,
    preference: Sequence[str] = STATISTIC_PREFERENCE,
    unit: str = "ns",
) -> Estimate | None:
    """Pick the first statistic in *preference* that is present and numeric.

    Returns the estimate converted to seconds, or None if no listed statistic
    is usable.
    """
    scale = UNIT_SECONDS[unit]
    for key in preference:
        section = data.get(key)
        if not isinstance(section, dict):
            continue
        point = section.get("point_estimate")
        error = section.get("standard_error")
        if not _is_number(point) or not _is_number(error):
            continue
        return Estimate(value=point * scale, standard_error=error * scale)
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def load_estimate_file(path: Path, *, unit: str = "ns") -> Estimate:
    """Read an estimates file.

    Raises:
        ResultFileUnreadable: If the file is missing, is not JSON, or holds
            no usable statistic.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ResultFileUnreadable(str(path), exc.strerror or str(exc)) from exc
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise ResultFileUnreadable(str(path), f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ResultFileUnreadable(str(path), "not a JSON object")
    estimate = extract_estimate(data, unit=unit)
    if estimate is None:
        raise ResultFileUnreadable(str(path), "no usable statistic")
    return estimate


def read_estimate(result_root: Path, case: str, baseline: str) -> Estimate | None:
    """Read one case's estimate under one baseline; None when unavailable."""
    path = estimates_path(result_root, case, baseline)
    try:
        return load_estimate_file(path)
    except ResultFileUnreadable as exc:
        log.debug("No estimate for %s (%s): %s", case, baseline, exc.detail)
        return None


def read_case_estimates(
    result_root: Path,
    cases: Sequence[MergedCase],
    failed: AbstractSet[tuple[str, str]] = frozenset(),
) -> list[CaseEstimates]:
    """Read base and changes estimates for every merged case.

    *failed* holds ``(case, baseline)`` pairs whose run did not succeed.  Their
    estimate is None even if the harness saved a file before failing.
    """

    def read(case: str, baseline: str) -> Estimate | None:
        if (case, baseline) in failed:
            log.debug("Ignoring %s (%s): the run failed", case, baseline)
            return None
        return read_estimate(result_root, case, baseline)

    return [
        CaseEstimates(
            name=case.name,
            base=read(case.name, BASE_BASELINE),
            changes=read(case.name, CHANGES_BASELINE),
        )
        for case in cases
    ]


# ---------------------------------------------------------------------------
# Discovery from disk
# ---------------------------------------------------------------------------


def find_result_cases(
    result_root: Path,
    baselines: Sequence[str] = (BASE_BASELINE, CHANGES_BASELINE),
) -> list[MergedCase]:
    """Find cases with saved results under any of *baselines*.

    Used when re-rendering a report without the build catalogs; case names
    are rebuilt from directory paths, so they are the filename-safe forms.
    """
    names: set[str] = set()
    if result_root.is_dir():
        for path in result_root.rglob(ESTIMATES_FILE):
            baseline_dir = path.parent
            if baseline_dir.name not in baselines:
                continue
            rel = baseline_dir.parent.relative_to(result_root)
            if rel.parts:
                names.add("/".join(rel.parts))
    return [MergedCase(name=name) for name in sorted(names)]


def clear_baselines(
    result_root: Path,
    baselines: Sequence[str] = (BASE_BASELINE, CHANGES_BASELINE),
) -> int:
    """Delete saved results for *baselines* so earlier runs cannot leak in.

    Only directories named after a baseline that hold an estimates file are
    removed.  Returns the number of directories deleted.
    """
    if not result_root.is_dir():
        return 0
    targets = [
        path.parent
        for path in result_root.rglob(ESTIMATES_FILE)
        if path.parent.name in baselines
    ]
    removed = 0
    # Shortest first; a nested baseline dir may already be gone with its parent.
    for target in sorted(targets, key=lambda p: len(p.parts)):
        if not target.exists():
            continue
        shutil.rmtree(target)
        removed += 1
    log.debug("Cleared %d stale baseline dir(s) under %s", removed, result_root)
    return removed
