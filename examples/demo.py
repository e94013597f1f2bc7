#!/usr/bin/env python3
"""Demo: Using depreview as a Python library.

This shows how to run the policy pipeline programmatically on a saved
dependency-graph comparison, without the GitHub Action around it.
"""

import json
import sys
from pathlib import Path

from depreview.action import evaluate_changes
from depreview.config import ReviewConfig
from depreview.github.renderer import render_licenses_markdown, render_vulnerabilities_markdown
from depreview.models import parse_changes


def main():
    # A JSON body saved from GET /repos/{owner}/{repo}/dependency-graph/compare/{basehead}
    path = Path(sys.argv[1] if len(sys.argv) > 1 else "changes.json")
    changes = parse_changes(json.loads(path.read_text()))
    print(f"Loaded {len(changes)} dependency changes")

    # 1. Describe the policy
    config = ReviewConfig(
        fail_on_severity="high",
        deny_licenses=["GPL-3.0", "AGPL-3.0"],
    )

    # 2. Evaluate
    result = evaluate_changes(changes, config)
    print(f"  Vulnerable additions: {len(result.vulnerable)}")
    print(f"  Denied licenses: {len(result.denied)}")
    print(f"  Unknown licenses: {len(result.unknown)}")

    # 3. Render the check-run bodies
    print()
    print(render_vulnerabilities_markdown(result.vulnerable, result.severity))
    print()
    print(render_licenses_markdown(result.denied, result.unknown, result.policy))

    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())
