"""Comparison configuration and profile loading.

Handles:
- Loading comparison profiles from YAML files.
- Merging CLI options with profile values and CI environment defaults.
- Deriving the build selection flags for ``cargo bench``.
- Validating the final configuration before execution.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

log = logging.getLogger("benchdiff")

BASE_BASELINE = "base"
CHANGES_BASELINE = "changes"


# ---------------------------------------------------------------------------
# CompareConfig
# ---------------------------------------------------------------------------


@dataclass
class CompareConfig:
    """Resolved configuration for a comparison run."""

    # Revision selection
    branch_name: str = ""  # base ref to check out; falls back to GITHUB_BASE_REF

    # Build selection (passed through to cargo bench)
    bench_name: str | None = None
    features: str | None = None
    default_features: bool = True

    # Paths
    cwd: Path = field(default_factory=Path.cwd)
    target_dir: Path | None = None  # defaults to <cwd>/target

    # Report
    title: str = ""
    output: Path | None = None

    # Delivery
    token: str = ""
    repository: str = ""  # "owner/repo"
    issue_number: int | None = None
    sha: str = ""
    quiet: bool = False  # no comment when nothing is significant
    silent: bool = False  # never comment

    @property
    def resolved_target_dir(self) -> Path:
        """The cargo target directory for this working tree."""
        if self.target_dir is not None:
            return self.target_dir
        return self.cwd / "target"

    @property
    def result_root(self) -> Path:
        """Directory where the harnesses persist their baselines."""
        return self.resolved_target_dir / "criterion"

    @property
    def report_title(self) -> str:
        """The heading used for the Markdown report."""
        if self.title:
            return self.title
        short_sha = self.sha[:7] if self.sha else "unknown"
        return f"Benchmark for {short_sha}"


def cargo_bench_args(config: CompareConfig) -> list[str]:
    """Build the ``cargo bench`` argument list for target and feature selection."""
    args = ["bench"]
    if config.bench_name:
        args += ["--bench", config.bench_name]
    if not config.default_features:
        args.append("--no-default-features")
    if config.features:
        args += ["--features", config.features]
    return args


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


def validate_config(config: CompareConfig) -> list[ValidationError]:
    """Validate a comparison configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []

    if not config.branch_name:
        errors.append(
            ValidationError(
                field="branch_name",
                message=(
                    "No base branch to compare against. "
                    "Use --branch-name or set GITHUB_BASE_REF."
                ),
            )
        )

    if not config.cwd.is_dir():
        errors.append(
            ValidationError(
                field="cwd",
                message=f"Working directory does not exist: {config.cwd}",
            )
        )

    if not config.silent:
        if not config.token:
            errors.append(
                ValidationError(
                    field="token",
                    message="No token given; the report will only be printed locally.",
                    severity="warning",
                )
            )
        if not config.repository or config.issue_number is None:
            errors.append(
                ValidationError(
                    field="repository",
                    message=(
                        "No pull request context found; "
                        "the report will only be printed locally."
                    ),
                    severity="warning",
                )
            )

    return errors


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load a comparison profile from a YAML file.

    Profile format::

        branch_name: main
        bench_name: parser
        features: "simd,serde"
        default_features: false
        title: "Parser benchmarks"
        quiet: true

    Returns:
        The parsed YAML as a dict.
    """
    import yaml

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    data = yaml.safe_load(profile_path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")
    return data


def config_from_profile(
    profile_data: dict[str, Any],
    *,
    cli_overrides: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
) -> CompareConfig:
    """Build a CompareConfig from profile data, CLI overrides, and CI environment.

    Precedence, highest first: CLI overrides (values that are not None),
    profile values, environment defaults.

    Args:
        profile_data: Parsed YAML profile dict (may be empty).
        cli_overrides: CLI option values keyed by CompareConfig field name.
        environ: Environment mapping; defaults to ``os.environ``.

    Returns:
        CompareConfig with every field resolved.
    """
    cli = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    env = dict(os.environ) if environ is None else environ

    def pick(key: str, default: Any = None) -> Any:
        if key in cli:
            return cli[key]
        if key in profile_data:
            return profile_data[key]
        return default

    github = github_context_from_env(env)

    config = CompareConfig(
        branch_name=pick("branch_name") or github.get("base_ref", ""),
        bench_name=pick("bench_name") or None,
        features=pick("features") or None,
        default_features=bool(pick("default_features", True)),
        title=pick("title", ""),
        token=pick("token") or env.get("GITHUB_TOKEN", ""),
        repository=pick("repository") or github.get("repository", ""),
        issue_number=pick("issue_number", github.get("issue_number")),
        sha=pick("sha") or github.get("sha", ""),
        quiet=bool(pick("quiet", False)),
        silent=bool(pick("silent", False)),
    )

    cwd = pick("cwd")
    if cwd:
        config.cwd = Path(cwd)
    target_dir = pick("target_dir") or env.get("CARGO_TARGET_DIR")
    if target_dir:
        config.target_dir = Path(target_dir)
    output = pick("output")
    if output:
        config.output = Path(output)

    return config


def github_context_from_env(environ: dict[str, str]) -> dict[str, Any]:
    """Extract repository, pull request number, sha, and base ref from CI env vars.

    The pull request number is read from the event payload at
    ``GITHUB_EVENT_PATH``; unreadable payloads are ignored.
    """
    context: dict[str, Any] = {}
    if environ.get("GITHUB_REPOSITORY"):
        context["repository"] = environ["GITHUB_REPOSITORY"]
    if environ.get("GITHUB_SHA"):
        context["sha"] = environ["GITHUB_SHA"]
    if environ.get("GITHUB_BASE_REF"):
        context["base_ref"] = environ["GITHUB_BASE_REF"]

    event_path = environ.get("GITHUB_EVENT_PATH")
    if event_path:
        try:
            event = json.loads(Path(event_path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.debug("Could not read event payload %s: %s", event_path, exc)
            return context
        for key in ("pull_request", "issue"):
            section = event.get(key) if isinstance(event, dict) else None
            if isinstance(section, dict) and isinstance(section.get("number"), int):
                context["issue_number"] = section["number"]
                break
        pr = event.get("pull_request") if isinstance(event, dict) else None
        if isinstance(pr, dict):
            head_sha = (pr.get("head") or {}).get("sha")
            if head_sha:
                context["sha"] = head_sha
    return context
