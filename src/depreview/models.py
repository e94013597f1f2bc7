"""Data models for dependency changes and their vulnerabilities."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter


class Severity(str, Enum):
    """Advisory severities, lowest first."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class ChangeType(str, Enum):
    """Direction of a dependency change between two manifest states."""

    ADDED = "added"
    REMOVED = "removed"


# Ordinal ranking used for every severity comparison.
SEVERITY_RANK: dict[Severity, int] = {
    Severity.LOW: 0,
    Severity.MODERATE: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


def parse_severity(value: Severity | str) -> Severity:
    """Coerce a severity name to a `Severity`, raising ValueError if unknown."""
    if isinstance(value, Severity):
        return value
    try:
        return Severity(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in Severity)
        raise ValueError(f"Unknown severity '{value}'. Expected one of: {allowed}") from None


def severity_rank(value: Severity | str) -> int:
    return SEVERITY_RANK[parse_severity(value)]


class Vulnerability(BaseModel):
    """A security advisory affecting one changed dependency."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    advisory_ghsa_id: str
    advisory_summary: str
    advisory_url: str

    @property
    def rank(self) -> int:
        return SEVERITY_RANK[self.severity]


class Change(BaseModel):
    """One dependency added or removed between the base and head of a pull request."""

    model_config = ConfigDict(frozen=True)

    change_type: ChangeType
    manifest: str
    ecosystem: str = ""
    name: str
    version: str
    package_url: str = ""
    license: str | None = None
    source_repository_url: str | None = None
    vulnerabilities: tuple[Vulnerability, ...] = ()

    @property
    def is_added(self) -> bool:
        return self.change_type == ChangeType.ADDED

    @property
    def is_vulnerable(self) -> bool:
        return len(self.vulnerabilities) > 0


_CHANGES_ADAPTER = TypeAdapter(list[Change])


def parse_changes(data: Any) -> list[Change]:
    """Validate a decoded comparison API response into Change objects.

    Raises:
        pydantic.ValidationError: If an entry does not match the Change shape.
    """
    return _CHANGES_ADAPTER.validate_python(data)
