"""Comparison execution engine.

Orchestrates:
1. Building and cataloguing the changes revision, then the base revision
2. Relocating executables out of the live target directory
3. Clearing stale baselines
4. Running every case once per revision on a greedy revision-switch schedule
5. Reading the estimates back and building the comparison report

Everything runs sequentially: the checked-out working tree and the result
directory are shared by every step.
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from benchdiff.compare.catalog import (
    CaseCatalog,
    MergedCase,
    build_catalog,
    create_bin_env,
    merge_catalogs,
)
from benchdiff.compare.compare import ComparisonReport, build_report
from benchdiff.compare.config import (
    BASE_BASELINE,
    CHANGES_BASELINE,
    CompareConfig,
    cargo_bench_args,
    validate_config,
)
from benchdiff.compare.discover import (
    Executable,
    discover_executables,
    relocate_executables,
    remove_staging,
)
from benchdiff.compare.git import RevisionState
from benchdiff.compare.results import clear_baselines, read_case_estimates
from benchdiff.errors import BuildFailed, CaseExecutionFailed
from benchdiff.logging import get_logger

log = get_logger("runner")


# ---------------------------------------------------------------------------
# Per-revision preparation
# ---------------------------------------------------------------------------


@dataclass
class RevisionBuild:
    """Relocated executables, case catalog, and bin env of one revision."""

    revision: str
    executables: list[Executable]
    catalog: CaseCatalog
    env: dict[str, str]


def prepare_revision(config: CompareConfig, revision: str) -> RevisionBuild:
    """Build the checked-out revision and catalogue its cases.

    Raises:
        BuildFailed: If the build or a harness listing fails.
    """
    built = discover_executables(cargo_bench_args(config), config.cwd)
    relocated = relocate_executables(built, config.resolved_target_dir, label=revision)
    env = create_bin_env(relocated)
    try:
        catalog = build_catalog(relocated, config.cwd, env={**os.environ, **env})
    except BuildFailed:
        remove_staging(relocated)
        raise
    log.info(
        "%s: %d executable(s), %d case(s)",
        revision.capitalize(),
        len(relocated),
        len(catalog),
    )
    return RevisionBuild(revision=revision, executables=relocated, catalog=catalog, env=env)


# ---------------------------------------------------------------------------
# Schedule
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScheduledRun:
    """One harness invocation in the schedule."""

    case: str
    revision: str
    executable: Executable


def plan_schedule(cases: Sequence[MergedCase]) -> list[ScheduledRun]:
    """Order the runs: per case in catalog order, changes first, then base."""
    plan: list[ScheduledRun] = []
    for case in cases:
        if case.changes_executable is not None:
            plan.append(ScheduledRun(case.name, CHANGES_BASELINE, case.changes_executable))
        if case.base_executable is not None:
            plan.append(ScheduledRun(case.name, BASE_BASELINE, case.base_executable))
    return plan


def count_switches(plan: Sequence[ScheduledRun]) -> int:
    """Checkouts the plan needs, starting and ending on changes."""
    switches = 0
    current = CHANGES_BASELINE
    for run in plan:
        if run.revision != current:
            switches += 1
            current = run.revision
    if current != CHANGES_BASELINE:
        switches += 1
    return switches


RunCase = Callable[[ScheduledRun], None]


def run_case(
    run: ScheduledRun,
    cwd: Path,
    env: dict[str, str],
) -> None:
    """Run one case and save its results under the run's baseline.

    Raises:
        CaseExecutionFailed: If the harness cannot start or exits non-zero.
    """
    cmd = [
        str(run.executable.path),
        "--bench",
        run.case,
        "--save-baseline",
        run.revision,
        "--noplot",
    ]
    log.debug("Running: %s", " ".join(cmd))
    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=str(cwd),
            env=env,
            check=False,
        )
    except OSError as exc:
        raise CaseExecutionFailed(run.case, run.revision, str(exc)) from exc
    if proc.stdout.strip():
        log.debug("%s (%s) output:\n%s", run.case, run.revision, proc.stdout.rstrip())
    if proc.returncode != 0:
        stderr_tail = (proc.stderr or "").strip()[-500:]
        raise CaseExecutionFailed(
            run.case, run.revision, f"exit {proc.returncode}: {stderr_tail}"
        )


def execute_schedule(
    plan: Sequence[ScheduledRun],
    state: RevisionState,
    run: RunCase,
) -> list[CaseExecutionFailed]:
    """Execute *plan*, switching revisions only when the next run needs it.

    Failed runs are logged and collected; they never stop the loop.  The
    working tree is left on the changes revision.
    """
    failures: list[CaseExecutionFailed] = []
    try:
        for step in plan:
            state.ensure(step.revision, reason=step.case)
            try:
                run(step)
            except CaseExecutionFailed as exc:
                log.warning("Benchmark failed: %s", exc)
                failures.append(exc)
                continue
            log.info("%s: %s benchmarked", step.case, step.revision.capitalize())
    finally:
        state.ensure_changes()
    return failures


# ---------------------------------------------------------------------------
# CompareRunner
# ---------------------------------------------------------------------------


@dataclass
class CompareOutcome:
    """Everything a comparison run produced."""

    report: ComparisonReport
    cases: list[MergedCase] = field(default_factory=list)
    failures: list[CaseExecutionFailed] = field(default_factory=list)
    switches: int = 0


class CompareRunner:
    """Executes a comparison according to a CompareConfig.

    Usage::

        runner = CompareRunner(config)
        outcome = runner.run()
    """

    def __init__(self, config: CompareConfig) -> None:
        self.config = config

    def run(self) -> CompareOutcome:
        """Build both revisions, benchmark every case, and compare.

        The relocated executables of both revisions are deleted afterwards,
        whether or not the comparison succeeded.

        Raises:
            ValueError: If configuration is invalid.
            BuildFailed: If either revision fails to build.
            CheckoutFailed: If the working tree cannot be switched.
        """
        errors = validate_config(self.config)
        fatal = [e for e in errors if e.severity == "error"]
        for w in errors:
            if w.severity == "warning":
                log.warning("Config warning: %s: %s", w.field, w.message)
        if fatal:
            messages = [f"  {e.field}: {e.message}" for e in fatal]
            raise ValueError("Invalid comparison configuration:\n" + "\n".join(messages))

        state = RevisionState(repo_dir=self.config.cwd, base_ref=self.config.branch_name)

        # Phase 1: build both revisions, ending back on changes.
        builds: list[RevisionBuild] = []
        try:
            builds.append(prepare_revision(self.config, CHANGES_BASELINE))
            try:
                state.ensure_base("build")
                builds.append(prepare_revision(self.config, BASE_BASELINE))
            finally:
                state.ensure_changes("build")
            changes, base = builds
            return self._compare(state, changes, base)
        finally:
            for build in builds:
                remove_staging(build.executables)

    def _compare(
        self,
        state: RevisionState,
        changes: RevisionBuild,
        base: RevisionBuild,
    ) -> CompareOutcome:
        # Phase 2: schedule and run.
        cases = merge_catalogs(changes.catalog, base.catalog)
        removed = clear_baselines(self.config.result_root)
        if removed:
            log.info("Cleared %d stale baseline(s)", removed)

        plan = plan_schedule(cases)
        log.info(
            "Benchmarking %d case(s): %d run(s), %d checkout(s) planned",
            len(cases),
            len(plan),
            count_switches(plan),
        )
        envs = {
            CHANGES_BASELINE: {**os.environ, **changes.env},
            BASE_BASELINE: {**os.environ, **base.env},
        }
        switches_before = state.switches
        failures = execute_schedule(
            plan,
            state,
            lambda step: run_case(step, self.config.cwd, envs[step.revision]),
        )

        # Phase 3: read back and compare.
        failed = {(f.case, f.revision) for f in failures}
        estimates = read_case_estimates(self.config.result_root, cases, failed)
        report = build_report(estimates)
        return CompareOutcome(
            report=report,
            cases=cases,
            failures=failures,
            switches=state.switches - switches_before,
        )
