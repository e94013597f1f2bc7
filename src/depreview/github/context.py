"""GitHub Actions run context, read from the runner's environment."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from depreview.exceptions import ConfigError, UnsupportedEventError

SUPPORTED_EVENT = "pull_request"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_SERVER_URL = "https://github.com"


class GitRef(BaseModel):
    sha: str
    ref: str = ""


class PullRequest(BaseModel):
    """The subset of the pull_request webhook payload the review needs."""

    number: int = 0
    base: GitRef
    head: GitRef


class ActionContext(BaseModel):
    """Where and why the workflow is running."""

    event_name: str = ""
    payload: dict[str, Any] = Field(default_factory=dict)
    repository: str = ""
    sha: str = ""
    api_url: str = DEFAULT_API_URL
    server_url: str = DEFAULT_SERVER_URL

    @property
    def owner(self) -> str:
        return self.repository.partition("/")[0]

    @property
    def repo(self) -> str:
        return self.repository.partition("/")[2]

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ActionContext:
        source = os.environ if env is None else env

        payload: dict[str, Any] = {}
        event_path = source.get("GITHUB_EVENT_PATH", "")
        if event_path and Path(event_path).exists():
            with open(event_path) as f:
                payload = json.load(f)

        return cls(
            event_name=source.get("GITHUB_EVENT_NAME", ""),
            payload=payload,
            repository=source.get("GITHUB_REPOSITORY", ""),
            sha=source.get("GITHUB_SHA", ""),
            api_url=source.get("GITHUB_API_URL") or DEFAULT_API_URL,
            server_url=source.get("GITHUB_SERVER_URL") or DEFAULT_SERVER_URL,
        )

    def pull_request(self) -> PullRequest:
        """Validate and return the pull request this run was triggered for.

        Raises:
            UnsupportedEventError: If the triggering event is not a pull request.
            ConfigError: If the event payload lacks the base/head commits.
        """
        if self.event_name != SUPPORTED_EVENT:
            raise UnsupportedEventError(self.event_name or "unknown")
        if not self.owner or not self.repo:
            raise ConfigError("GITHUB_REPOSITORY must be set as 'owner/repo'")
        try:
            return PullRequest.model_validate(self.payload.get("pull_request") or {})
        except ValidationError as e:
            raise ConfigError(f"Invalid pull_request event payload: {e}") from e
