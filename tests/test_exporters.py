"""Tests for JSON and HTML report exports."""

import json

from adapters.json_exporter import export_report_json, report_to_json
from adapters.report_exporter import export_report_html, render_report_html
from core.domain.models import Finding, LintReport, Severity


def _report() -> LintReport:
    return LintReport(
        root="/guides",
        documents_checked=2,
        findings=[
            Finding(rule="LNK001", severity=Severity.ERROR, message="Link target 'x.md' does not exist",
                    path="01-a.md", line=4, context={"target": "x.md"}),
            Finding(rule="CODE003", severity=Severity.INFO, message="Code block has no <lang> tag",
                    path="01-a.md", line=9),
            Finding(rule="NAV002", severity=Severity.WARNING, message="No 'Next Step' link", path="02-b.md"),
        ],
    )


class TestJsonExport:
    def test_payload(self):
        payload = json.loads(report_to_json(_report()))

        assert payload["counts"] == {"error": 1, "warning": 1, "info": 1}
        assert payload["documents_checked"] == 2
        assert payload["findings"][0]["severity"] == "error"
        assert payload["findings"][0]["context"] == {"target": "x.md"}
        assert payload["findings"][2]["line"] is None

    def test_writes_file(self, tmp_path):
        out = export_report_json(report=_report(), output_path=tmp_path / "out" / "report.json")

        assert json.loads(out.read_text(encoding="utf-8"))["root"] == "/guides"


class TestHtmlExport:
    def test_groups_and_escapes(self):
        html = render_report_html(report=_report())

        assert "01-a.md" in html and "02-b.md" in html
        assert "&lt;lang&gt;" in html
        assert "<lang>" not in html
        assert "No findings." not in html

    def test_timestamp_matches_json_export(self):
        report = _report()

        stamp = report.generated_at.strftime("%Y-%m-%dT%H:%M:%S")

        assert stamp in render_report_html(report=report)
        assert json.loads(report_to_json(report))["generated_at"].startswith(stamp)

    def test_clean_report(self, tmp_path):
        out = export_report_html(report=LintReport(root="/guides", documents_checked=3), output_path=tmp_path / "r.html")

        text = out.read_text(encoding="utf-8")
        assert "No findings." in text
        assert "0 error" in text
