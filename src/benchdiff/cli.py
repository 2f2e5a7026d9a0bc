"""Command-line interface for benchdiff.

Subcommands:
    benchdiff run      Build, benchmark, and compare two revisions
    benchdiff report   Re-render a report from results already on disk
"""

from __future__ import annotations

import os
from pathlib import Path

import click

from benchdiff import __version__
from benchdiff.compare.compare import ComparisonReport
from benchdiff.compare.config import CompareConfig, config_from_profile, load_profile
from benchdiff.errors import (
    BenchdiffError,
    BuildFailed,
    CheckoutFailed,
    ReportDeliveryError,
    ReportDeliveryUnauthorized,
)
from benchdiff.logging import get_logger, setup_logging

log = get_logger("cli")


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """benchdiff — Compare benchmark timings between a base branch and your changes."""


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@main.command()
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="YAML profile with default option values.",
)
@click.option(
    "--branch-name",
    type=str,
    default=None,
    help="Base branch to compare against (default: $GITHUB_BASE_REF).",
)
@click.option("--bench-name", type=str, default=None, help="Only build this bench target.")
@click.option("--features", type=str, default=None, help="Cargo features to enable.")
@click.option(
    "--default-features/--no-default-features",
    default=None,
    help="Build with the crate's default features (default: on).",
)
@click.option(
    "--cwd",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Working directory of the crate.",
)
@click.option(
    "--target-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Cargo target directory (default: <cwd>/target or $CARGO_TARGET_DIR).",
)
@click.option("--title", type=str, default=None, help="Report heading.")
@click.option("--token", type=str, default=None, help="API token (default: $GITHUB_TOKEN).")
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Also write the Markdown report to this file.",
)
@click.option(
    "--quiet",
    is_flag=True,
    default=False,
    help="Do not comment when no change is significant.",
)
@click.option("--silent", is_flag=True, default=False, help="Never comment; print locally.")
@click.option("-v", "--verbose", is_flag=True, help="Show detailed output.")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Also log everything (DEBUG) to this file.",
)
def run(  # noqa: PLR0913
    profile_path: Path | None,
    branch_name: str | None,
    bench_name: str | None,
    features: str | None,
    default_features: bool | None,
    cwd: Path | None,
    target_dir: Path | None,
    title: str | None,
    token: str | None,
    output: Path | None,
    quiet: bool,
    silent: bool,
    verbose: bool,
    log_file: Path | None,
) -> None:
    """Benchmark the base branch and the current checkout, then compare.

    The working tree must be on the changes when this starts; it is left
    there when the comparison finishes.

    \b
    Examples:
        # In a pull request workflow
        benchdiff run --branch-name main

        # One bench target, non-default features, quiet on no change
        benchdiff run --branch-name main --bench-name parser \\
            --no-default-features --features simd --quiet
    """
    from benchdiff.compare.display import format_console_report
    from benchdiff.compare.export import export_markdown
    from benchdiff.compare.runner import CompareRunner

    setup_logging(verbose=verbose, log_file=log_file)

    cli_overrides: dict[str, object] = {
        "branch_name": branch_name,
        "bench_name": bench_name,
        "features": features,
        "default_features": default_features,
        "cwd": cwd,
        "target_dir": target_dir,
        "title": title,
        "token": token,
        "output": output,
        # Unset flags leave profile values in place.
        "quiet": quiet or None,
        "silent": silent or None,
    }
    try:
        profile_data = load_profile(profile_path) if profile_path else {}
    except (OSError, ValueError) as exc:
        raise click.UsageError(str(exc)) from exc
    config = config_from_profile(profile_data, cli_overrides=cli_overrides)

    try:
        outcome = CompareRunner(config).run()
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    except (BuildFailed, CheckoutFailed) as exc:
        log.error("%s", exc)
        if exc.command:
            log.error("Command: %s", " ".join(exc.command))
        if exc.output:
            log.error("Output:\n%s", exc.output.rstrip())
        raise SystemExit(1) from exc
    except (BenchdiffError, OSError) as exc:
        log.error("Comparison failed: %s", exc)
        raise SystemExit(1) from exc

    if outcome.failures:
        log.warning("%d benchmark run(s) failed; their cells show N/A", len(outcome.failures))
    log.debug("Revision switches while benchmarking: %d", outcome.switches)

    report = outcome.report
    markdown = export_markdown(report, config.report_title)
    if config.output:
        config.output.write_text(markdown, encoding="utf-8")
        log.info("Wrote report to %s", config.output)

    outputs = {"report": markdown}
    comment_id = deliver_report(config, report, markdown)
    if comment_id is None:
        click.echo(format_console_report(report))
    else:
        outputs["comment-id"] = str(comment_id)

    github_output = os.environ.get("GITHUB_OUTPUT")
    if github_output:
        from benchdiff.github import write_outputs

        write_outputs(Path(github_output), outputs)


def deliver_report(
    config: CompareConfig,
    report: ComparisonReport,
    markdown: str,
) -> int | None:
    """Post the report as a comment when configured and allowed.

    Returns the comment id, or None when nothing was posted (the caller then
    prints the report locally).
    """
    from benchdiff.github import post_comment

    if config.silent:
        log.info("Silent mode: not commenting.")
        return None
    if config.quiet and not report.has_significant:
        log.info("No significant changes: not commenting.")
        return None
    if not config.token or not config.repository or config.issue_number is None:
        log.info("No token or pull request context: not commenting.")
        return None

    try:
        return post_comment(config.repository, config.issue_number, markdown, config.token)
    except ReportDeliveryUnauthorized as exc:
        log.warning("Failed to comment: %s", exc)
        log.info("Commenting is not possible from forks.")
    except ReportDeliveryError as exc:
        log.warning("Failed to comment: %s", exc)
    return None


# ---------------------------------------------------------------------------
# report
# ---------------------------------------------------------------------------


@main.command("report")
@click.option(
    "--cwd",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Working directory of the crate.",
)
@click.option(
    "--target-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Cargo target directory (default: <cwd>/target).",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["console", "markdown"]),
    default="console",
    show_default=True,
    help="Output format.",
)
@click.option("--title", type=str, default=None, help="Markdown report heading.")
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output file (default: stdout).",
)
def report_cmd(
    cwd: Path,
    target_dir: Path | None,
    fmt: str,
    title: str | None,
    output: Path | None,
) -> None:
    """Compare the base and changes baselines already saved on disk.

    No build or benchmark runs happen; case names come from the saved
    result directories.
    """
    from benchdiff.compare.compare import build_report
    from benchdiff.compare.display import format_console_report
    from benchdiff.compare.export import export_markdown
    from benchdiff.compare.results import find_result_cases, read_case_estimates

    config = config_from_profile(
        {},
        cli_overrides={"cwd": cwd, "target_dir": target_dir, "title": title},
    )
    cases = find_result_cases(config.result_root)
    report = build_report(read_case_estimates(config.result_root, cases))

    if fmt == "markdown":
        text = export_markdown(report, config.report_title)
    else:
        text = format_console_report(report)

    if output:
        output.write_text(text, encoding="utf-8")
        click.echo(f"Exported to {output}")
    else:
        click.echo(text)
