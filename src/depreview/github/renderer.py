"""Report rendering for dependency review.

Produces the same report in two shapes:
  - Markdown bodies for check runs
  - Structured tables in the job summary

Both walk the changes through `group_by_manifest` and `vulnerability_rows`,
so grouping, ordering and row compression are identical in each.
"""

from __future__ import annotations

import html
from collections.abc import Sequence
from dataclasses import dataclass

from depreview.github.summary import StepSummary, TableCell
from depreview.licenses import LicensePolicy, format_license_list
from depreview.models import Change, Severity, Vulnerability

SEVERITY_COLORS: dict[Severity, str] = {
    Severity.CRITICAL: "red",
    Severity.HIGH: "red",
    Severity.MODERATE: "yellow",
    Severity.LOW: "grey50",
}

NO_VULNERABILITIES = "No vulnerabilities found in added packages."
NO_LICENSE_VIOLATIONS = "No license violations detected."


@dataclass(frozen=True)
class VulnerabilityRow:
    """One table row: a single advisory against a package version."""
    change: Change
    vulnerability: Vulnerability
    same_as_previous: bool


def group_by_manifest(changes: Sequence[Change]) -> dict[str, list[Change]]:
    """Group changes by manifest, manifests in order of first appearance."""
    groups: dict[str, list[Change]] = {}
    for change in changes:
        groups.setdefault(change.manifest, []).append(change)
    return groups


def vulnerability_rows(changes: Sequence[Change]) -> dict[str, list[VulnerabilityRow]]:
    """Flatten vulnerable changes into per-manifest table rows.

    Within a manifest, changes sharing a (name, version) are gathered
    together in order of first appearance. Only the first row of each
    package version shows the package; the rest are marked
    `same_as_previous`.
    """
    result: dict[str, list[VulnerabilityRow]] = {}
    for manifest, members in group_by_manifest(changes).items():
        packages: dict[tuple[str, str], list[Change]] = {}
        for change in members:
            packages.setdefault((change.name, change.version), []).append(change)

        rows: list[VulnerabilityRow] = []
        for package_changes in packages.values():
            first = True
            for change in package_changes:
                for vuln in change.vulnerabilities:
                    rows.append(VulnerabilityRow(change, vuln, same_as_previous=not first))
                    first = False
        result[manifest] = rows
    return result


def count_vulnerabilities(changes: Sequence[Change]) -> int:
    return sum(len(c.vulnerabilities) for c in changes)


def render_severity(severity: Severity) -> str:
    """Rich markup for a severity, coloured by how serious it is."""
    color = SEVERITY_COLORS[severity]
    return f"[{color}]({severity.value} severity)[/{color}]"


# -- Markdown (check runs) --------------------------------------------------


def _md_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def _md_link_text(text: str) -> str:
    return _md_cell(text).replace("[", "\\[").replace("]", "\\]")


def render_markdown_url(url: str | None, text: str) -> str:
    if url:
        destination = (
            url.replace("<", "%3C").replace(">", "%3E").replace("|", "%7C").replace("\n", "")
        )
        return f"[{_md_link_text(text)}](<{destination}>)"
    return _md_cell(text)


def render_vulnerabilities_markdown(
    changes: Sequence[Change],
    severity: Severity | None = None,
) -> str:
    """Render vulnerable additions as the body of the vulnerabilities check."""
    total = count_vulnerabilities(changes)
    sections: list[str] = ["## Dependency Review"]

    if not changes:
        sections.append(f"> {NO_VULNERABILITIES}")
        return "\n".join(sections)

    sections.append(f"We found {total} vulnerabilities in {len(changes)} added packages.")
    sections.append("")
    sections.append("## Vulnerabilities")
    if severity is not None:
        sections.append(f"> Vulnerabilities were filtered by **{severity.value}** severity.")
        sections.append("")

    for manifest, rows in vulnerability_rows(changes).items():
        sections.append(f"### _{_md_cell(manifest)}_")
        sections.append("|Package|Version|Vulnerability|Severity|")
        sections.append("|---|---:|---|---|")
        for row in rows:
            advisory = render_markdown_url(
                row.vulnerability.advisory_url, row.vulnerability.advisory_summary
            )
            if row.same_as_previous:
                package, version = "", ""
            else:
                package = render_markdown_url(row.change.source_repository_url, row.change.name)
                version = _md_cell(row.change.version)
            sections.append(
                f"|{package}|{version}|{advisory}|{row.vulnerability.severity.value}|"
            )
        sections.append("")

    return "\n".join(sections).rstrip("\n")


def _policy_banners_markdown(policy: LicensePolicy) -> list[str]:
    lines: list[str] = []
    if policy.allow:
        lines.append(f"> **Allowed Licenses**: {format_license_list(policy.allow)}")
        lines.append("")
    if policy.deny:
        lines.append(f"> **Denied Licenses**: {format_license_list(policy.deny)}")
        lines.append("")
    return lines


def render_licenses_markdown(
    denied: Sequence[Change],
    unknown: Sequence[Change],
    policy: LicensePolicy,
) -> str:
    """Render license findings as the body of the licenses check."""
    sections: list[str] = ["## Licenses", ""]
    sections.extend(_policy_banners_markdown(policy))

    if not denied and not unknown:
        sections.append(f"> {NO_LICENSE_VIOLATIONS}")
        return "\n".join(sections)

    if denied:
        sections.append("## Incompatible Licenses")
        for manifest, members in group_by_manifest(denied).items():
            sections.append(f"### _{_md_cell(manifest)}_")
            sections.append("|Package|Version|License|")
            sections.append("|---|---:|---|")
            for change in members:
                sections.append(
                    f"|{render_markdown_url(change.source_repository_url, change.name)}"
                    f"|{_md_cell(change.version)}|{_md_cell(change.license or '')}|"
                )
            sections.append("")

    if unknown:
        sections.append("## Unknown Licenses")
        for manifest, members in group_by_manifest(unknown).items():
            sections.append(f"### _{_md_cell(manifest)}_")
            sections.append("|Package|Version|")
            sections.append("|---|---:|")
            for change in members:
                sections.append(
                    f"|{render_markdown_url(change.source_repository_url, change.name)}"
                    f"|{_md_cell(change.version)}|"
                )
            sections.append("")

    return "\n".join(sections).rstrip("\n")


# -- Job summary (HTML tables) ----------------------------------------------


def render_html_url(url: str | None, text: str) -> str:
    if url:
        return f'<a href="{html.escape(url, quote=True)}">{html.escape(text)}</a>'
    return html.escape(text)


def add_vulnerabilities_to_summary(
    summary: StepSummary,
    changes: Sequence[Change],
    severity: Severity | None = None,
) -> StepSummary:
    summary.add_heading("Dependency Review Vulnerabilities", 2)
    if severity is not None:
        summary.add_quote(
            f"Vulnerabilities were filtered by minimum severity <strong>{severity.value}</strong>."
        )

    if not changes:
        return summary.add_quote(NO_VULNERABILITIES)

    header = [
        TableCell("Name", header=True),
        TableCell("Version", header=True),
        TableCell("Vulnerability", header=True),
        TableCell("Severity", header=True),
    ]
    for manifest, rows in vulnerability_rows(changes).items():
        table: list[list[TableCell | str]] = [header]
        for row in rows:
            advisory = render_html_url(
                row.vulnerability.advisory_url, row.vulnerability.advisory_summary
            )
            if row.same_as_previous:
                table.append([TableCell("", colspan=2), advisory, row.vulnerability.severity.value])
            else:
                table.append([
                    render_html_url(row.change.source_repository_url, row.change.name),
                    html.escape(row.change.version),
                    advisory,
                    row.vulnerability.severity.value,
                ])
        summary.add_heading(f"<em>{html.escape(manifest)}</em>", 3)
        summary.add_table(table)

    return summary


def add_licenses_to_summary(
    summary: StepSummary,
    denied: Sequence[Change],
    unknown: Sequence[Change],
    policy: LicensePolicy,
) -> StepSummary:
    summary.add_heading("Licenses", 2)

    if policy.allow:
        summary.add_quote(
            f"<strong>Allowed Licenses</strong>: {html.escape(format_license_list(policy.allow))}"
        )
    if policy.deny:
        summary.add_quote(
            f"<strong>Denied Licenses</strong>: {html.escape(format_license_list(policy.deny))}"
        )

    if not denied and not unknown:
        return summary.add_quote(NO_LICENSE_VIOLATIONS)

    if denied:
        summary.add_heading("Incompatible Licenses", 3)
        for manifest, members in group_by_manifest(denied).items():
            table: list[list[TableCell | str]] = [[
                TableCell("Package", header=True),
                TableCell("Version", header=True),
                TableCell("License", header=True),
            ]]
            for change in members:
                table.append([
                    render_html_url(change.source_repository_url, change.name),
                    html.escape(change.version),
                    html.escape(change.license or ""),
                ])
            summary.add_heading(f"<em>{html.escape(manifest)}</em>", 4)
            summary.add_table(table)

    if unknown:
        summary.add_heading("Unknown Licenses", 3)
        for manifest, members in group_by_manifest(unknown).items():
            table = [[TableCell("Package", header=True), TableCell("Version", header=True)]]
            for change in members:
                table.append([
                    render_html_url(change.source_repository_url, change.name),
                    html.escape(change.version),
                ])
            summary.add_heading(f"<em>{html.escape(manifest)}</em>", 4)
            summary.add_table(table)

    return summary
