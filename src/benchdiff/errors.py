"""Exception types for benchdiff.

Fatal errors (:class:`BuildFailed`) abort a comparison.  The others describe
conditions the pipeline recovers from: they are logged and show up as ``N/A``
cells or a local console report instead of stopping the run.
"""

from __future__ import annotations


class BenchdiffError(RuntimeError):
    """Base class for all benchdiff errors."""


class BuildFailed(BenchdiffError):
    """The build (or a harness it produced) failed; no comparison is possible.

    Attributes:
        command: The command that failed.
        returncode: Exit status, or None if the process never started.
        output: Captured stdout and stderr of the failed process.
    """

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        returncode: int | None = None,
        output: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.output = output


class CheckoutFailed(BenchdiffError):
    """git could not switch the working tree to another revision.

    Attributes:
        ref: The ref that was being checked out (``"-"`` for the previous one).
        command: The git command that failed.
        returncode: Exit status, or None if git never started.
        output: git's stderr.
    """

    def __init__(
        self,
        ref: str,
        *,
        command: list[str] | None = None,
        returncode: int | None = None,
        output: str = "",
    ) -> None:
        super().__init__(f"could not check out {ref}")
        self.ref = ref
        self.command = command or []
        self.returncode = returncode
        self.output = output


class CaseExecutionFailed(BenchdiffError):
    """A single benchmark case failed to run under one revision."""

    def __init__(self, case: str, revision: str, detail: str) -> None:
        super().__init__(f"{case} ({revision}): {detail}")
        self.case = case
        self.revision = revision
        self.detail = detail


class ResultFileUnreadable(BenchdiffError):
    """A result file is missing or does not hold a usable estimate."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"{path}: {detail}")
        self.path = path
        self.detail = detail


class ReportDeliveryError(BenchdiffError):
    """Posting the report to the code-review system failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ReportDeliveryUnauthorized(ReportDeliveryError):
    """The token may not comment (for example, a fork's read-only token)."""
