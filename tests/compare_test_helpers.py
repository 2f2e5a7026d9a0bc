"""Shared test fixtures for comparison tests."""

from __future__ import annotations

import json
from pathlib import Path

from benchdiff.compare.discover import Executable, ExecutableKind
from benchdiff.compare.results import CaseEstimates, Estimate, estimates_path

MS = 1e-3


def make_executable(
    name: str,
    kind: ExecutableKind = ExecutableKind.BENCH,
    path: str | None = None,
) -> Executable:
    """Create an Executable with a predictable path."""
    return Executable(name=name, kind=kind, path=Path(path or f"/target/release/deps/{name}-0123"))


def make_estimate(value_ms: float, error_ms: float) -> Estimate:
    """Create an Estimate from milliseconds."""
    return Estimate(value=value_ms * MS, standard_error=error_ms * MS)


def make_case(
    name: str,
    base: tuple[float, float] | None = None,
    changes: tuple[float, float] | None = None,
) -> CaseEstimates:
    """Create CaseEstimates from (value_ms, error_ms) pairs."""
    return CaseEstimates(
        name=name,
        base=make_estimate(*base) if base else None,
        changes=make_estimate(*changes) if changes else None,
    )


def estimates_data(
    point_ns: float,
    error_ns: float,
    *,
    statistic: str = "slope",
) -> dict[str, object]:
    """A minimal estimates.json payload with *statistic* populated."""
    data: dict[str, object] = {
        "mean": {
            "confidence_interval": {"confidence_level": 0.95},
            "point_estimate": point_ns * 1.5,
            "standard_error": error_ns * 1.5,
        },
        "median": {"point_estimate": point_ns, "standard_error": error_ns},
        "slope": None,
    }
    data[statistic] = {"point_estimate": point_ns, "standard_error": error_ns}
    return data


def write_estimates(
    result_root: Path,
    case: str,
    baseline: str,
    point_ns: float,
    error_ns: float,
    *,
    statistic: str = "slope",
) -> Path:
    """Write an estimates.json the way a harness would."""
    path = estimates_path(result_root, case, baseline)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(estimates_data(point_ns, error_ns, statistic=statistic)))
    return path
