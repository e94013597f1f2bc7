"""Thin synchronous GitHub REST client built on httpx."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from depreview import __version__
from depreview.github.context import DEFAULT_API_URL

logger = logging.getLogger("depreview.github")

API_VERSION = "2022-11-28"
TIMEOUT_S = 30.0


class GitHubClient:
    """Authenticated session against the GitHub REST API.

    Connection failures are retried by the transport; HTTP error statuses are
    returned to the caller untouched so each endpoint can map them.
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        timeout_s: float = TIMEOUT_S,
        retries: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": f"depreview/{__version__}",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers=headers,
            timeout=timeout_s,
            transport=transport or httpx.HTTPTransport(retries=retries),
        )

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        logger.debug("%s %s", method, path)
        response = self._client.request(method, path, **kwargs)
        logger.debug("%s %s -> %s", method, path, response.status_code)
        return response

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("POST", path, **kwargs)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
