"""Shared test fixtures for depreview."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from depreview.models import Change, parse_changes


def _vuln(severity: str, ghsa: str, summary: str | None = None) -> dict[str, Any]:
    return {
        "severity": severity,
        "advisory_ghsa_id": ghsa,
        "advisory_summary": summary or f"Advisory {ghsa}",
        "advisory_url": f"https://github.com/advisories/{ghsa}",
    }


# A comparison API response covering the interesting shapes: vulnerable
# additions in two manifests, a removal, a null license and a clean package.
SAMPLE_COMPARISON: list[dict[str, Any]] = [
    {
        "change_type": "added",
        "manifest": "package-lock.json",
        "ecosystem": "npm",
        "name": "lodash",
        "version": "4.17.15",
        "package_url": "pkg:npm/lodash@4.17.15",
        "license": "MIT",
        "source_repository_url": "https://github.com/lodash/lodash",
        "vulnerabilities": [
            _vuln("high", "GHSA-p6mc-m468-83gw", "Prototype Pollution in lodash"),
            _vuln("low", "GHSA-29mw-wpgm-hmr9", "ReDoS in lodash"),
        ],
    },
    {
        "change_type": "removed",
        "manifest": "package-lock.json",
        "ecosystem": "npm",
        "name": "lodash",
        "version": "4.17.21",
        "package_url": "pkg:npm/lodash@4.17.21",
        "license": "MIT",
        "source_repository_url": "https://github.com/lodash/lodash",
        "vulnerabilities": [],
    },
    {
        "change_type": "added",
        "manifest": "requirements.txt",
        "ecosystem": "pip",
        "name": "pyyaml",
        "version": "5.3",
        "package_url": "pkg:pypi/pyyaml@5.3",
        "license": "GPL-3.0",
        "source_repository_url": None,
        "vulnerabilities": [
            _vuln("critical", "GHSA-8q59-q68h-6hv4", "Arbitrary code execution in PyYAML"),
        ],
    },
    {
        "change_type": "added",
        "manifest": "requirements.txt",
        "ecosystem": "pip",
        "name": "mystery",
        "version": "0.0.1",
        "package_url": "pkg:pypi/mystery@0.0.1",
        "license": None,
        "source_repository_url": None,
        "vulnerabilities": [],
    },
    {
        "change_type": "added",
        "manifest": "package-lock.json",
        "ecosystem": "npm",
        "name": "left-pad",
        "version": "1.3.0",
        "package_url": "pkg:npm/left-pad@1.3.0",
        "license": "WTFPL",
        "source_repository_url": "https://github.com/stevemao/left-pad",
        "vulnerabilities": [],
    },
]


@pytest.fixture
def comparison_data() -> list[dict[str, Any]]:
    return json.loads(json.dumps(SAMPLE_COMPARISON))


@pytest.fixture
def sample_changes(comparison_data: list[dict[str, Any]]) -> list[Change]:
    return parse_changes(comparison_data)


@pytest.fixture
def changes_file(tmp_path: Path, comparison_data: list[dict[str, Any]]) -> Path:
    path = tmp_path / "changes.json"
    path.write_text(json.dumps(comparison_data))
    return path


@pytest.fixture
def make_change() -> Callable[..., Change]:
    """Factory for Change objects with sensible defaults.

    `severities` is a list of severity names, one vulnerability each.
    """
    counter = {"n": 0}

    def _make(
        name: str = "pkg",
        version: str = "1.0.0",
        change_type: str = "added",
        manifest: str = "package-lock.json",
        license: str | None = "MIT",
        severities: list[str] | None = None,
        source_repository_url: str | None = None,
    ) -> Change:
        vulns = []
        for severity in severities or []:
            counter["n"] += 1
            vulns.append(_vuln(severity, f"GHSA-test-{counter['n']:04d}"))
        return Change.model_validate({
            "change_type": change_type,
            "manifest": manifest,
            "ecosystem": "npm",
            "name": name,
            "version": version,
            "package_url": f"pkg:npm/{name}@{version}",
            "license": license,
            "source_repository_url": source_repository_url,
            "vulnerabilities": vulns,
        })

    return _make


@pytest.fixture
def pull_request_event(tmp_path: Path) -> Path:
    """A pull_request webhook payload on disk, as the runner provides it."""
    path = tmp_path / "event.json"
    path.write_text(json.dumps({
        "action": "opened",
        "pull_request": {
            "number": 7,
            "base": {"sha": "basesha", "ref": "main"},
            "head": {"sha": "headsha", "ref": "feature"},
        },
    }))
    return path


@pytest.fixture
def action_env(tmp_path: Path, pull_request_event: Path) -> dict[str, str]:
    """Environment of a pull_request workflow run."""
    return {
        "GITHUB_EVENT_NAME": "pull_request",
        "GITHUB_EVENT_PATH": str(pull_request_event),
        "GITHUB_REPOSITORY": "octo-org/octo-repo",
        "GITHUB_SHA": "mergesha",
        "GITHUB_API_URL": "https://api.github.test",
        "GITHUB_SERVER_URL": "https://github.com",
        "GITHUB_STEP_SUMMARY": str(tmp_path / "summary.md"),
        "INPUT_REPO-TOKEN": "ghs_testtoken",
    }
