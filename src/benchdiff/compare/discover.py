"""Executable discovery, case listing, and artifact relocation.

The build runs ``cargo bench ... --no-run --message-format json``; every
stdout line is one JSON message.  Only compiler artifacts for ``bench`` and
``bin`` targets that produced an executable are kept.  Benchmark harnesses are
then asked for their case names, and all executables are copied out of the
live target directory so that a later checkout cannot overwrite them.
"""

from __future__ import annotations

import enum
import json
import re
import shutil
import subprocess
import tempfile
from dataclasses import dataclass, replace
from pathlib import Path

from benchdiff.errors import BuildFailed
from benchdiff.logging import get_logger

log = get_logger("discover")

_CASE_LINE = re.compile(r"^(.+): bench\r?$")


class ExecutableKind(enum.Enum):
    """Kind of a build artifact we can use."""

    BENCH = "bench"
    BIN = "bin"


@dataclass(frozen=True)
class Executable:
    """A built executable: a benchmark harness or a plain binary."""

    name: str
    kind: ExecutableKind
    path: Path


# ---------------------------------------------------------------------------
# Build log parsing
# ---------------------------------------------------------------------------


def parse_artifact_line(line: str) -> Executable | None:
    """Decode one build-log line into an Executable.

    Returns None for anything that is not a bench/bin artifact with an
    executable path: blank or malformed lines, messages without a ``target``,
    library artifacts, and artifacts that were not linked.
    """
    line = line.strip()
    if not line:
        return None
    try:
        data = json.loads(line)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    target = data.get("target")
    if not isinstance(target, dict):
        return None
    kinds = target.get("kind")
    if not isinstance(kinds, list) or not kinds:
        return None
    try:
        kind = ExecutableKind(kinds[0])
    except ValueError:
        return None

    name = target.get("name")
    path = data.get("executable")
    if not isinstance(name, str) or not path:
        return None
    return Executable(name=name, kind=kind, path=Path(path))


def parse_build_log(output: str) -> list[Executable]:
    """Extract executables from a build log, preserving emission order."""
    executables: list[Executable] = []
    for line in output.splitlines():
        exe = parse_artifact_line(line)
        if exe is not None:
            executables.append(exe)
    return executables


def discover_executables(bench_args: list[str], cwd: Path) -> list[Executable]:
    """Build the benchmarks without running them and return the produced executables.

    Args:
        bench_args: ``cargo`` arguments selecting targets and features,
            starting with ``"bench"``.
        cwd: Working directory of the crate or workspace.

    Raises:
        BuildFailed: If cargo cannot be started or exits non-zero.
    """
    cmd = ["cargo", *bench_args, "--no-run", "--message-format", "json"]
    log.info("Building: %s", " ".join(cmd))
    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=str(cwd),
            check=False,
        )
    except OSError as exc:
        raise BuildFailed(f"could not start cargo: {exc}", command=cmd) from exc

    if proc.stderr:
        log.debug("cargo stderr:\n%s", proc.stderr.rstrip())
    if proc.returncode != 0:
        raise BuildFailed(
            f"build failed (exit {proc.returncode})",
            command=cmd,
            returncode=proc.returncode,
            output=(proc.stdout or "") + (proc.stderr or ""),
        )

    executables = parse_build_log(proc.stdout)
    log.debug(
        "Discovered %d executable(s): %s",
        len(executables),
        ", ".join(e.name for e in executables),
    )
    return executables


# ---------------------------------------------------------------------------
# Case listing
# ---------------------------------------------------------------------------


def parse_case_list(output: str) -> set[str]:
    """Extract case names from a harness's ``--list`` output."""
    cases: set[str] = set()
    for line in output.split("\n"):
        match = _CASE_LINE.match(line)
        if match:
            cases.add(match.group(1))
    return cases


def list_cases(
    executable: Executable,
    cwd: Path,
    env: dict[str, str] | None = None,
) -> set[str]:
    """Ask a benchmark harness for the names of the cases it contains.

    Raises:
        BuildFailed: If the harness cannot be started or exits non-zero.
    """
    cmd = [str(executable.path), "--bench", "--list"]
    log.debug("Listing cases: %s", " ".join(cmd))
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
        raise BuildFailed(
            f"could not start harness {executable.name}: {exc}", command=cmd
        ) from exc
    if proc.returncode != 0:
        raise BuildFailed(
            f"harness {executable.name} failed to list cases (exit {proc.returncode})",
            command=cmd,
            returncode=proc.returncode,
            output=(proc.stdout or "") + (proc.stderr or ""),
        )
    return parse_case_list(proc.stdout)


# ---------------------------------------------------------------------------
# Relocation
# ---------------------------------------------------------------------------


def relocate_executables(
    executables: list[Executable],
    staging_parent: Path,
    *,
    label: str = "",
) -> list[Executable]:
    """Copy executables into a fresh, uniquely named staging directory.

    Permission bits are preserved.  The returned records point at the copies;
    the inputs are left untouched.  Copy errors propagate.  No directory is
    created when there is nothing to copy.
    """
    if not executables:
        return []
    staging_parent.mkdir(parents=True, exist_ok=True)
    prefix = f"benchdiff-{label}-" if label else "benchdiff-"
    staging = Path(tempfile.mkdtemp(prefix=prefix, dir=str(staging_parent)))
    log.debug("Relocating %d executable(s) to %s", len(executables), staging)

    relocated: list[Executable] = []
    try:
        for exe in executables:
            dest = staging / exe.path.name
            shutil.copy2(exe.path, dest)
            relocated.append(replace(exe, path=dest))
    except OSError:
        shutil.rmtree(staging, ignore_errors=True)
        raise
    return relocated


def remove_staging(executables: list[Executable]) -> None:
    """Delete the staging directories holding relocated *executables*."""
    for staging in sorted({exe.path.parent for exe in executables}):
        log.debug("Removing staging directory %s", staging)
        shutil.rmtree(staging, ignore_errors=True)
