"""Dependency review - policy evaluation for pull requests.

This is the main entry point for the GitHub Action. It:
1. Fetches the dependency changes between the PR's base and head commits
2. Filters vulnerabilities by the configured minimum severity
3. Classifies added dependencies against the license policy
4. Publishes both reports (console, check runs, job summary)
5. Fails the run if a vulnerable or denied dependency was added

Usage:
    # In a GitHub Action step
    depreview run
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx

from depreview.config import ReviewConfig, load_config
from depreview.exceptions import DepReviewError, GitHubAPIError
from depreview.filter import filter_changes_by_severity, select_vulnerable_additions
from depreview.github.checks import CheckRunSink, NullSink, ReportSink
from depreview.github.client import GitHubClient
from depreview.github.context import ActionContext
from depreview.github.dependency_graph import compare
from depreview.github.renderer import (
    add_licenses_to_summary,
    add_vulnerabilities_to_summary,
    count_vulnerabilities,
    render_licenses_markdown,
    render_vulnerabilities_markdown,
)
from depreview.github.summary import StepSummary
from depreview.licenses import LicensePolicy, get_denied_license_changes
from depreview.models import Change, Severity
from depreview.ui.console import Console

logger = logging.getLogger("depreview.action")

VULNERABLE_MESSAGE = "Dependency review detected vulnerable packages."
LICENSE_MESSAGE = "Dependency review detected incompatible licenses."
FALLBACK_ERROR_MESSAGE = "Unexpected fatal error"


@dataclass
class ReviewResult:
    """Outcome of evaluating one set of dependency changes."""
    changes: list[Change]
    vulnerable: list[Change]
    denied: list[Change]
    unknown: list[Change]
    severity: Severity | None = None
    policy: LicensePolicy = field(default_factory=LicensePolicy)

    @property
    def vulnerabilities_failed(self) -> bool:
        return len(self.vulnerable) > 0

    @property
    def licenses_failed(self) -> bool:
        return len(self.denied) > 0

    @property
    def failed(self) -> bool:
        return self.vulnerabilities_failed or self.licenses_failed

    def to_dict(self) -> dict[str, Any]:
        def dump(changes: Sequence[Change]) -> list[dict[str, Any]]:
            return [c.model_dump(mode="json") for c in changes]

        return {
            "failed": self.failed,
            "fail_on_severity": self.severity.value if self.severity else None,
            "total_changes": len(self.changes),
            "vulnerability_count": count_vulnerabilities(self.vulnerable),
            "vulnerable_changes": dump(self.vulnerable),
            "denied_licenses": dump(self.denied),
            "unknown_licenses": dump(self.unknown),
        }


def evaluate_changes(changes: Sequence[Change], config: ReviewConfig) -> ReviewResult:
    """Run the policy pipeline over raw comparison results.

    Severity filtering only feeds the vulnerability report; license
    classification always sees the unfiltered changes.
    """
    filtered = filter_changes_by_severity(config.fail_on_severity, changes)
    vulnerable = select_vulnerable_additions(filtered)
    policy = config.license_policy
    denied, unknown = get_denied_license_changes(changes, policy)

    return ReviewResult(
        changes=list(changes),
        vulnerable=vulnerable,
        denied=denied,
        unknown=unknown,
        severity=config.fail_on_severity,
        policy=policy,
    )


def report_to_console(result: ReviewResult, console: Console) -> None:
    """Print findings to the workflow log and emit failure annotations."""
    for change in result.vulnerable:
        console.show_vulnerable_change(change)

    if result.licenses_failed:
        console.show_denied_licenses(result.denied)
        console.annotate_error(LICENSE_MESSAGE)

    console.debug(f"found {len(result.unknown)} unknown licenses")
    if result.unknown:
        console.show_unknown_licenses(result.unknown)
        console.annotate_warning(
            f"Dependency review could not detect a license for "
            f"{len(result.unknown)} dependencies."
        )

    if result.vulnerabilities_failed:
        console.annotate_error(VULNERABLE_MESSAGE)
    elif result.severity is not None:
        console.info(
            "Dependency review did not detect any vulnerable packages with severity "
            f'level "{result.severity.value}" or higher.'
        )
    else:
        console.info("Dependency review did not detect any vulnerable packages.")


def publish_reports(
    result: ReviewResult,
    config: ReviewConfig,
    sha: str,
    sink: ReportSink,
    summary: StepSummary,
    console: Console,
) -> None:
    """Send the vulnerability and license reports to every surface, once each.

    The job summary is written first and every check run is attempted even
    when an earlier one fails; sink errors are raised together afterwards.

    Raises:
        GitHubAPIError: If any check run could not be published.
    """
    add_vulnerabilities_to_summary(summary, result.vulnerable, result.severity)
    add_licenses_to_summary(summary, result.denied, result.unknown, result.policy)
    if not summary.write():
        console.debug("GITHUB_STEP_SUMMARY is not set, skipping job summary")

    reports = [
        (
            render_vulnerabilities_markdown(result.vulnerable, result.severity),
            config.check_name_vulnerability,
            result.vulnerabilities_failed,
        ),
        (
            render_licenses_markdown(result.denied, result.unknown, result.policy),
            config.check_name_license,
            result.licenses_failed,
        ),
    ]
    errors: list[str] = []
    for body, check_name, failed in reports:
        try:
            sink.publish(body, check_name, sha, failed)
        except (GitHubAPIError, httpx.HTTPError) as e:
            console.debug(f"publishing '{check_name}' failed: {e}")
            errors.append(str(e))

    if errors:
        raise GitHubAPIError("; ".join(errors))


def run_review(
    context: ActionContext,
    config: ReviewConfig,
    client: GitHubClient,
    console: Console,
    summary: StepSummary,
    sink: ReportSink | None = None,
) -> ReviewResult:
    """Review the pull request described by `context`.

    Raises:
        UnsupportedEventError: The run was not triggered by a pull request.
        ComparisonNotFoundError: No dependency data for the commit range.
        DependencyGraphDisabledError: The dependency graph is disabled.
        GitHubAPIError: A check run could not be published.
    """
    pull_request = context.pull_request()

    changes = compare(
        client,
        owner=context.owner,
        repo=context.repo,
        base_ref=pull_request.base.sha,
        head_ref=pull_request.head.sha,
        server_url=context.server_url,
    )
    console.debug(f"comparison returned {len(changes)} changes")

    result = evaluate_changes(changes, config)
    report_to_console(result, console)

    if sink is None:
        sink = CheckRunSink(client, context.owner, context.repo) if config.post_checks else NullSink()
    publish_reports(result, config, pull_request.head.sha, sink, summary, console)
    return result


def run_action(
    env: Mapping[str, str] | None = None,
    console: Console | None = None,
    transport: httpx.BaseTransport | None = None,
) -> int:
    """Run the Action end to end and return the process exit status.

    Every fatal error ends here as a single `::error::` annotation.
    """
    console = console or Console()

    try:
        context = ActionContext.from_env(env)
        # Fail fast on the wrong trigger before touching config or the network.
        context.pull_request()
        config = load_config(env)

        with GitHubClient(config.repo_token, context.api_url, transport=transport) as client:
            result = run_review(context, config, client, console, StepSummary(env))
    except DepReviewError as e:
        console.annotate_error(str(e))
        return 1
    except Exception as e:
        logger.debug("unexpected error", exc_info=True)
        console.annotate_error(str(e) or FALLBACK_ERROR_MESSAGE)
        return 1

    return 1 if result.failed else 0
