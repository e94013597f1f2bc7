"""Reporting sinks that publish review bodies as GitHub check runs."""

from __future__ import annotations

import logging
from typing import Protocol

from depreview.exceptions import GitHubAPIError
from depreview.github.client import GitHubClient

logger = logging.getLogger("depreview.github")

# The check-runs API rejects output summaries longer than this.
MAX_SUMMARY_LENGTH = 65535
TRUNCATION_NOTICE = "\n\n> Report truncated."


class ReportSink(Protocol):
    def publish(self, body: str, check_name: str, sha: str, failed: bool) -> None: ...


def truncate_summary(body: str, limit: int = MAX_SUMMARY_LENGTH) -> str:
    if len(body) <= limit:
        return body
    return body[: limit - len(TRUNCATION_NOTICE)] + TRUNCATION_NOTICE


class CheckRunSink:
    """Posts each report as a completed check run on the head commit."""

    def __init__(self, client: GitHubClient, owner: str, repo: str) -> None:
        self.client = client
        self.owner = owner
        self.repo = repo

    def publish(self, body: str, check_name: str, sha: str, failed: bool) -> None:
        response = self.client.post(
            f"/repos/{self.owner}/{self.repo}/check-runs",
            json={
                "name": check_name,
                "head_sha": sha,
                "status": "completed",
                "conclusion": "failure" if failed else "success",
                "output": {
                    "title": check_name,
                    "summary": truncate_summary(body),
                },
            },
        )
        if response.is_error:
            raise GitHubAPIError(
                f"Could not create check run '{check_name}' ({response.status_code}): "
                f"{response.text}",
                status_code=response.status_code,
            )

        data = response.json()
        logger.debug("Created check with id: %s url: %s", data.get("id"), data.get("url"))


class NullSink:
    """Sink used when check runs are disabled."""

    def publish(self, body: str, check_name: str, sha: str, failed: bool) -> None:
        logger.debug("check runs disabled, skipping '%s'", check_name)
