"""Client for the dependency graph comparison endpoint."""

from __future__ import annotations

import logging
from urllib.parse import quote

from pydantic import ValidationError

from depreview.exceptions import (
    ComparisonNotFoundError,
    DependencyGraphDisabledError,
    GitHubAPIError,
)
from depreview.github.client import GitHubClient
from depreview.github.context import DEFAULT_SERVER_URL
from depreview.models import Change, parse_changes

logger = logging.getLogger("depreview.github")


def compare(
    client: GitHubClient,
    owner: str,
    repo: str,
    base_ref: str,
    head_ref: str,
    server_url: str = DEFAULT_SERVER_URL,
) -> list[Change]:
    """Fetch the dependency changes between two commits.

    Raises:
        ComparisonNotFoundError: No dependency data exists for the range (404).
        DependencyGraphDisabledError: The dependency graph is off (403).
        GitHubAPIError: Any other error status or an unparseable body.
    """
    basehead = f"{quote(base_ref, safe='')}...{quote(head_ref, safe='')}"
    path = f"/repos/{owner}/{repo}/dependency-graph/compare/{basehead}"
    response = client.get(path)

    if response.status_code == 404:
        raise ComparisonNotFoundError()
    if response.status_code == 403:
        raise DependencyGraphDisabledError(owner, repo, server_url)
    if response.is_error:
        raise GitHubAPIError(
            f"Dependency graph comparison failed ({response.status_code}): {response.text}",
            status_code=response.status_code,
        )

    try:
        changes = parse_changes(response.json())
    except (ValueError, ValidationError) as e:
        raise GitHubAPIError(f"Unexpected dependency graph response: {e}") from e

    logger.debug("comparison %s returned %d changes", basehead, len(changes))
    return changes
