"""Tests for report rendering and the job summary builder."""

from __future__ import annotations

from pathlib import Path

from depreview.github.renderer import (
    NO_LICENSE_VIOLATIONS,
    NO_VULNERABILITIES,
    add_licenses_to_summary,
    add_vulnerabilities_to_summary,
    group_by_manifest,
    render_licenses_markdown,
    render_markdown_url,
    render_severity,
    render_vulnerabilities_markdown,
    vulnerability_rows,
)
from depreview.github.summary import StepSummary, TableCell
from depreview.licenses import LicensePolicy
from depreview.models import Severity


class TestGrouping:
    def test_group_by_manifest_keeps_first_seen_order(self, make_change):
        changes = [
            make_change(name="a", manifest="b.lock"),
            make_change(name="b", manifest="a.lock"),
            make_change(name="c", manifest="b.lock"),
        ]
        groups = group_by_manifest(changes)
        assert list(groups) == ["b.lock", "a.lock"]
        assert [c.name for c in groups["b.lock"]] == ["a", "c"]

    def test_repeated_package_version_is_compressed(self, make_change):
        first = make_change(name="minimist", version="1.2.0", severities=["high", "low"])
        second = make_change(name="minimist", version="1.2.0", severities=["critical", "moderate"])
        rows = vulnerability_rows([first, second])["package-lock.json"]
        assert [r.same_as_previous for r in rows] == [False, True, True, True]

    def test_package_versions_grouped_together(self, make_change):
        changes = [
            make_change(name="a", version="1", severities=["high"]),
            make_change(name="b", version="1", severities=["high"]),
            make_change(name="a", version="1", severities=["low"]),
        ]
        rows = vulnerability_rows(changes)["package-lock.json"]
        assert [(r.change.name, r.same_as_previous) for r in rows] == [
            ("a", False), ("a", True), ("b", False),
        ]

    def test_different_versions_not_compressed(self, make_change):
        changes = [
            make_change(name="a", version="1", severities=["high"]),
            make_change(name="a", version="2", severities=["high"]),
        ]
        rows = vulnerability_rows(changes)["package-lock.json"]
        assert [r.same_as_previous for r in rows] == [False, False]


class TestMarkdown:
    def test_render_url(self):
        assert render_markdown_url("https://x.test", "x") == "[x](<https://x.test>)"
        assert render_markdown_url(None, "x") == "x"

    def test_pipes_are_escaped(self):
        assert render_markdown_url(None, "a|b") == "a\\|b"

    def test_link_text_and_destination_are_escaped(self):
        link = render_markdown_url("https://a.test/x)", "Foo [bar] | baz")
        assert link == "[Foo \\[bar\\] \\| baz](<https://a.test/x)>)"

    def test_angle_brackets_in_url_are_encoded(self):
        assert render_markdown_url("https://a.test/<x>", "x") == "[x](<https://a.test/%3Cx%3E>)"

    def test_vulnerabilities_report(self, make_change):
        first = make_change(name="minimist", version="1.2.0", severities=["high", "low"])
        second = make_change(name="minimist", version="1.2.0", severities=["critical"])
        body = render_vulnerabilities_markdown([first, second], Severity.LOW)
        lines = body.splitlines()

        assert lines[0] == "## Dependency Review"
        assert "We found 3 vulnerabilities in 2 added packages." in lines
        assert "> Vulnerabilities were filtered by **low** severity." in lines
        assert "### _package-lock.json_" in lines
        rows = [line for line in lines if line.startswith("|") and "GHSA" in line]
        assert rows[0].startswith("|minimist|1.2.0|[Advisory GHSA-test-")
        assert rows[0].endswith("|high|")
        assert all(r.startswith("|||") for r in rows[1:])
        assert len(rows) == 3

    def test_no_filter_banner_without_severity(self, make_change):
        body = render_vulnerabilities_markdown([make_change(severities=["low"])])
        assert "filtered by" not in body

    def test_empty_vulnerabilities_report(self):
        body = render_vulnerabilities_markdown([])
        assert NO_VULNERABILITIES in body
        assert "|Package|" not in body

    def test_source_url_linked(self, make_change):
        change = make_change(
            name="lodash", severities=["high"],
            source_repository_url="https://github.com/lodash/lodash",
        )
        body = render_vulnerabilities_markdown([change])
        assert "|[lodash](<https://github.com/lodash/lodash>)|" in body

    def test_licenses_report(self, make_change):
        denied = [make_change(name="gpl-lib", license="GPL-3.0", manifest="requirements.txt")]
        unknown = [make_change(name="mystery", license=None)]
        body = render_licenses_markdown(denied, unknown, LicensePolicy(deny=["GPL-3.0"]))

        assert "> **Denied Licenses**: GPL-3.0" in body
        assert "Allowed Licenses" not in body
        assert "## Incompatible Licenses" in body
        assert "|gpl-lib|1.0.0|GPL-3.0|" in body
        assert "## Unknown Licenses" in body
        assert "|Package|Version|\n|---|---:|\n|mystery|1.0.0|" in body
        assert body.index("Incompatible") < body.index("Unknown")

    def test_licenses_report_clean(self):
        body = render_licenses_markdown([], [], LicensePolicy(allow=["MIT", "ISC"]))
        assert "> **Allowed Licenses**: MIT, ISC" in body
        assert NO_LICENSE_VIOLATIONS in body

    def test_no_banners_without_policy(self, make_change):
        body = render_licenses_markdown([], [make_change(license=None)], LicensePolicy())
        assert "Allowed Licenses" not in body
        assert "Denied Licenses" not in body


class TestSeverityDisplay:
    def test_colors(self):
        assert render_severity(Severity.CRITICAL) == "[red](critical severity)[/red]"
        assert render_severity(Severity.HIGH).startswith("[red]")
        assert render_severity(Severity.MODERATE).startswith("[yellow]")
        assert "red" not in render_severity(Severity.LOW)
        assert "yellow" not in render_severity(Severity.LOW)


class TestStepSummary:
    def test_builder(self):
        summary = StepSummary(env={})
        summary.add_heading("Title", 2).add_quote("note").add_table([
            [TableCell("A", header=True), TableCell("B", header=True)],
            [TableCell("", colspan=2)],
            ["x", "y"],
        ])
        text = summary.stringify()
        assert "<h2>Title</h2>" in text
        assert "<blockquote>note</blockquote>" in text
        assert "<tr><th>A</th><th>B</th></tr>" in text
        assert '<td colspan="2"></td>' in text
        assert "<tr><td>x</td><td>y</td></tr>" in text

    def test_write_appends(self, tmp_path: Path):
        path = tmp_path / "summary.md"
        path.write_text("existing\n")
        summary = StepSummary(env={"GITHUB_STEP_SUMMARY": str(path)})
        assert summary.add_heading("Report").write()
        assert path.read_text().startswith("existing\n<h1>Report</h1>")
        assert summary.stringify() == ""

    def test_write_without_file(self):
        summary = StepSummary(env={})
        assert summary.add_heading("Report").write() is False
        assert summary.stringify() == ""


class TestSummaryTables:
    def test_vulnerability_table_compresses_rows(self, make_change):
        first = make_change(name="minimist", version="1.2.0", severities=["high", "low"])
        summary = add_vulnerabilities_to_summary(StepSummary(env={}), [first], Severity.LOW)
        text = summary.stringify()
        assert "<strong>low</strong>" in text
        assert "<h3><em>package-lock.json</em></h3>" in text
        assert "<th>Name</th><th>Version</th><th>Vulnerability</th><th>Severity</th>" in text
        assert text.count('<td colspan="2"></td>') == 1
        assert "<td>minimist</td><td>1.2.0</td>" in text

    def test_one_table_per_manifest(self, make_change):
        changes = [
            make_change(name="a", manifest="one.lock", severities=["high"]),
            make_change(name="b", manifest="two.lock", severities=["high"]),
        ]
        text = add_vulnerabilities_to_summary(StepSummary(env={}), changes).stringify()
        assert text.count("<table>") == 2
        one, two = text.split("<em>two.lock</em>")
        assert "<td>a</td>" in one and "<td>b</td>" not in one
        assert "<td>b</td>" in two and "<td>a</td>" not in two

    def test_empty_vulnerabilities(self):
        text = add_vulnerabilities_to_summary(StepSummary(env={}), []).stringify()
        assert NO_VULNERABILITIES in text
        assert "filtered" not in text

    def test_html_is_escaped(self, make_change):
        change = make_change(name="<script>", severities=["high"])
        text = add_vulnerabilities_to_summary(StepSummary(env={}), [change]).stringify()
        assert "<script>" not in text
        assert "&lt;script&gt;" in text

    def test_license_tables(self, make_change):
        denied = [make_change(name="gpl-lib", license="GPL-3.0")]
        unknown = [make_change(name="mystery", license=None)]
        policy = LicensePolicy(allow=["MIT"], deny=["GPL-3.0"])
        text = add_licenses_to_summary(StepSummary(env={}), denied, unknown, policy).stringify()
        assert "<strong>Allowed Licenses</strong>: MIT" in text
        assert "<strong>Denied Licenses</strong>: GPL-3.0" in text
        assert "<td>gpl-lib</td><td>1.0.0</td><td>GPL-3.0</td>" in text
        assert "<tr><td>mystery</td><td>1.0.0</td></tr>" in text

    def test_license_tables_clean(self):
        text = add_licenses_to_summary(StepSummary(env={}), [], [], LicensePolicy()).stringify()
        assert NO_LICENSE_VIOLATIONS in text
        assert "<table>" not in text
