"""Posting the report as a pull request comment.

Uses the GitHub REST API.  Tokens issued to workflows triggered from forks
are read-only, so a 401/403 is an expected outcome that callers handle by
printing the report locally.
"""

from __future__ import annotations

import uuid
from pathlib import Path

import requests

from benchdiff import __version__
from benchdiff.errors import ReportDeliveryError, ReportDeliveryUnauthorized
from benchdiff.logging import get_logger

log = get_logger("github")

_API_URL = "https://api.github.com"
_USER_AGENT = f"benchdiff/{__version__}"


def post_comment(
    repository: str,
    issue_number: int,
    body: str,
    token: str,
    *,
    api_url: str = _API_URL,
    timeout: float = 30.0,
) -> int:
    """Create a comment on an issue or pull request.

    Args:
        repository: ``"owner/repo"``.
        issue_number: Pull request or issue number.
        body: Markdown comment body.
        token: API token.
        api_url: Base URL of the REST API.
        timeout: HTTP request timeout in seconds.

    Returns:
        The id of the created comment.

    Raises:
        ReportDeliveryUnauthorized: If the token may not comment.
        ReportDeliveryError: On any other failure.
    """
    url = f"{api_url.rstrip('/')}/repos/{repository}/issues/{issue_number}/comments"
    headers = {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {token}",
        "User-Agent": _USER_AGENT,
    }
    try:
        resp = requests.post(url, json={"body": body}, headers=headers, timeout=timeout)
    except requests.Timeout as exc:
        raise ReportDeliveryError(f"Timeout posting comment to {repository}") from exc
    except requests.RequestException as exc:
        raise ReportDeliveryError(f"Request error posting comment: {exc}") from exc

    if resp.status_code in (401, 403):
        raise ReportDeliveryUnauthorized(
            f"Not allowed to comment on {repository}#{issue_number} (HTTP {resp.status_code})",
            status_code=resp.status_code,
        )
    if resp.status_code != 201:
        raise ReportDeliveryError(
            f"Unexpected status {resp.status_code} posting comment",
            status_code=resp.status_code,
        )

    try:
        comment_id = int(resp.json()["id"])
    except (ValueError, KeyError, TypeError) as exc:
        raise ReportDeliveryError("Invalid JSON response for created comment") from exc
    log.info(
        "Created comment id '%d' on issue '%d' in '%s'.",
        comment_id,
        issue_number,
        repository,
    )
    return comment_id


def write_outputs(output_path: Path, outputs: dict[str, str]) -> None:
    """Append step outputs to a ``$GITHUB_OUTPUT`` style file.

    Multi-line values use the heredoc form with a random delimiter.
    """
    with open(output_path, "a", encoding="utf-8") as f:
        for key, value in outputs.items():
            if "\n" in value:
                delimiter = f"ghadelimiter_{uuid.uuid4()}"
                f.write(f"{key}<<{delimiter}\n{value}\n{delimiter}\n")
            else:
                f.write(f"{key}={value}\n")
