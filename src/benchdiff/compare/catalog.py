"""Case catalogs and their cross-revision merge.

A catalog maps each case name of one revision to the harness that runs it.
The merged catalog is the union of both revisions' case names, keeping each
side's harness (or None where a revision lacks the case).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from benchdiff.compare.discover import Executable, ExecutableKind, list_cases
from benchdiff.logging import get_logger

log = get_logger("catalog")

CaseCatalog = dict[str, Executable]

BIN_ENV_PREFIX = "CARGO_BIN_EXE_"


@dataclass(frozen=True)
class MergedCase:
    """One case name with the harness that runs it under each revision."""

    name: str
    base_executable: Executable | None = None
    changes_executable: Executable | None = None

    @property
    def in_both(self) -> bool:
        return self.base_executable is not None and self.changes_executable is not None


def build_catalog(
    executables: list[Executable],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> CaseCatalog:
    """List the cases of every harness and map each case to its harness.

    Plain binaries are skipped.  If two harnesses report the same case, the
    later one in *executables* wins.
    """
    catalog: CaseCatalog = {}
    for exe in executables:
        if exe.kind is not ExecutableKind.BENCH:
            continue
        cases = list_cases(exe, cwd, env=env)
        log.debug("%s: %d case(s)", exe.name, len(cases))
        # Sets are unordered; sort so catalog order does not depend on hashing.
        for case in sorted(cases):
            catalog[case] = exe
    return catalog


def merge_catalogs(changes: CaseCatalog, base: CaseCatalog) -> list[MergedCase]:
    """Merge the two revisions' catalogs into one ordered list.

    Order is the changes catalog's order followed by base-only cases in the
    base catalog's order.
    """
    names = list(changes)
    names += [name for name in base if name not in changes]
    return [
        MergedCase(
            name=name,
            base_executable=base.get(name),
            changes_executable=changes.get(name),
        )
        for name in names
    ]


def create_bin_env(executables: list[Executable]) -> dict[str, str]:
    """Expose every plain binary's path as ``CARGO_BIN_EXE_<name>``."""
    env: dict[str, str] = {}
    for exe in executables:
        if exe.kind is ExecutableKind.BENCH:
            continue
        env[f"{BIN_ENV_PREFIX}{exe.name}"] = str(exe.path)
    return env
