"""Severity filtering for dependency changes."""

from __future__ import annotations

from collections.abc import Sequence

from depreview.models import Change, Severity, severity_rank


def filter_changes_by_severity(
    min_severity: Severity | str | None,
    changes: Sequence[Change],
) -> list[Change]:
    """Keep only the vulnerabilities at or above `min_severity`.

    A change whose vulnerabilities all fall below the threshold is dropped.
    A change with no vulnerabilities at all is kept as-is. Retained changes
    carry a narrowed copy of their vulnerability list; the inputs are never
    mutated.

    Args:
        min_severity: Threshold severity, or None to disable filtering.
        changes: Changes as returned by the comparison API.

    Raises:
        ValueError: If `min_severity` is not a known severity.
    """
    if min_severity is None:
        return list(changes)

    threshold = severity_rank(min_severity)
    filtered: list[Change] = []

    for change in changes:
        if not change.vulnerabilities:
            filtered.append(change)
            continue

        kept = [v for v in change.vulnerabilities if v.rank >= threshold]
        if not kept:
            continue
        if len(kept) == len(change.vulnerabilities):
            filtered.append(change)
        else:
            filtered.append(change.model_copy(update={"vulnerabilities": tuple(kept)}))

    return filtered


def select_vulnerable_additions(changes: Sequence[Change]) -> list[Change]:
    """Added changes that still carry at least one vulnerability, in input order."""
    return [c for c in changes if c.is_added and c.is_vulnerable]
