"""Command-line interface for depreview."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.logging import RichHandler

from depreview import __version__
from depreview.action import evaluate_changes, report_to_console, run_action
from depreview.config import ReviewConfig
from depreview.github.renderer import render_licenses_markdown, render_vulnerabilities_markdown
from depreview.models import Severity, parse_changes
from depreview.ui.console import Console

console = Console()


def _configure_logging(verbose: bool) -> None:
    # RUNNER_DEBUG is set when a workflow is re-run with debug logging.
    if verbose or os.environ.get("RUNNER_DEBUG") == "1":
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console.console, show_path=False)],
        )


@click.group()
@click.version_option(version=__version__, prog_name="depreview")
@click.option("--verbose", "-v", is_flag=True, help="Log HTTP traffic and pipeline details.")
def main(verbose: bool):
    """depreview - review dependency changes for vulnerabilities and license policy."""
    _configure_logging(verbose)


# =========================================================================
# GitHub Action
# =========================================================================

@main.command()
def run():
    """Run as a GitHub Action step on a pull_request event.

    Reads the Action inputs (INPUT_FAIL-ON-SEVERITY, INPUT_ALLOW-LICENSES,
    INPUT_DENY-LICENSES, ...) and the GITHUB_* environment, posts the
    vulnerability and license check runs, and writes the job summary.
    """
    sys.exit(run_action(console=console))


# =========================================================================
# Offline evaluation
# =========================================================================

@main.command()
@click.argument("changes_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--fail-on-severity",
    type=click.Choice([s.value for s in Severity], case_sensitive=False),
    default=None,
    help="Minimum vulnerability severity that fails the review.",
)
@click.option("--allow-licenses", default="", help="Comma-separated licenses to allow.")
@click.option("--deny-licenses", default="", help="Comma-separated licenses to deny.")
@click.option(
    "--format", "output_format",
    type=click.Choice(["markdown", "json", "console"]),
    default="markdown",
    help="Output format.",
)
def evaluate(
    changes_file: Path,
    fail_on_severity: str | None,
    allow_licenses: str,
    deny_licenses: str,
    output_format: str,
):
    """Evaluate a saved dependency-graph comparison against a policy.

    CHANGES_FILE is the JSON body returned by the dependency graph compare
    endpoint. Exits with status 1 when the policy fails.

    Example:

        depreview evaluate changes.json --fail-on-severity high --deny-licenses GPL-3.0
    """
    try:
        changes = parse_changes(json.loads(changes_file.read_text(encoding="utf-8")))
    except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
        console.error(f"Could not read changes from {changes_file}: {e}")
        sys.exit(2)

    config = ReviewConfig(
        fail_on_severity=fail_on_severity,
        allow_licenses=allow_licenses,
        deny_licenses=deny_licenses,
        post_checks=False,
    )
    result = evaluate_changes(changes, config)

    if output_format == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif output_format == "console":
        report_to_console(result, console)
    else:
        click.echo(render_vulnerabilities_markdown(result.vulnerable, result.severity))
        click.echo()
        click.echo(render_licenses_markdown(result.denied, result.unknown, result.policy))

    sys.exit(1 if result.failed else 0)


if __name__ == "__main__":
    main()
