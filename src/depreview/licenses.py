"""License policy evaluation."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pydantic import BaseModel, Field

from depreview.models import Change


class LicensePolicy(BaseModel):
    """Allow and deny lists of license identifiers.

    An empty list means the list is not configured. When both are set the
    deny list is checked first and wins.
    """

    allow: list[str] = Field(default_factory=list)
    deny: list[str] = Field(default_factory=list)


def get_denied_license_changes(
    changes: Sequence[Change],
    policy: LicensePolicy,
) -> tuple[list[Change], list[Change]]:
    """Split added changes into (denied, unknown) license lists.

    Removed dependencies are ignored. A change without a license is always
    unknown, whatever the policy says. Both lists keep input order and never
    share an element.
    """
    allow = set(policy.allow)
    deny = set(policy.deny)

    denied: list[Change] = []
    unknown: list[Change] = []

    for change in changes:
        if not change.is_added:
            continue

        if change.license is None:
            unknown.append(change)
        elif deny and change.license in deny:
            denied.append(change)
        elif allow and change.license not in allow:
            denied.append(change)

    return denied, unknown


def format_license_list(licenses: Iterable[str]) -> str:
    return ", ".join(licenses)
