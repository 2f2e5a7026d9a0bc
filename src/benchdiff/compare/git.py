"""Working-tree revision switching.

The checked-out revision is process-wide state shared by builds and benchmark
runs.  It is tracked in an explicit :class:`RevisionState` so that every
switch is a visible, logged transition.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from benchdiff.compare.config import BASE_BASELINE, CHANGES_BASELINE
from benchdiff.errors import CheckoutFailed
from benchdiff.logging import get_logger

log = get_logger("git")


def checkout(repo_dir: Path, ref: str) -> None:
    """Check out *ref* (``"-"`` for the previously checked-out revision).

    Raises:
        CheckoutFailed: If git cannot be started or exits non-zero.
    """
    cmd = ["git", "checkout", ref]
    log.debug("Running: %s (in %s)", " ".join(cmd), repo_dir)
    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=str(repo_dir),
            check=True,
        )
    except subprocess.CalledProcessError as exc:
        raise CheckoutFailed(
            ref, command=cmd, returncode=exc.returncode, output=exc.stderr or ""
        ) from exc
    except OSError as exc:
        raise CheckoutFailed(ref, command=cmd, output=str(exc)) from exc
    if proc.stderr.strip():
        log.debug("git checkout: %s", proc.stderr.strip())


@dataclass
class RevisionState:
    """Which revision is checked out, starting on the changes."""

    repo_dir: Path
    base_ref: str
    on_base: bool = False
    switches: int = 0

    @property
    def current(self) -> str:
        return BASE_BASELINE if self.on_base else CHANGES_BASELINE

    def ensure_base(self, reason: str = "") -> None:
        """Switch to the base revision unless already there."""
        if self.on_base:
            return
        checkout(self.repo_dir, self.base_ref)
        self.on_base = True
        self.switches += 1
        log.info("%sChecked out base revision %s", _prefix(reason), self.base_ref)

    def ensure_changes(self, reason: str = "") -> None:
        """Switch back to the changes revision unless already there."""
        if not self.on_base:
            return
        checkout(self.repo_dir, "-")
        self.on_base = False
        self.switches += 1
        log.info("%sChecked out changes revision", _prefix(reason))

    def ensure(self, revision: str, reason: str = "") -> None:
        """Switch to *revision* (``"base"`` or ``"changes"``)."""
        if revision == BASE_BASELINE:
            self.ensure_base(reason)
        else:
            self.ensure_changes(reason)


def _prefix(reason: str) -> str:
    return f"{reason}: " if reason else ""
