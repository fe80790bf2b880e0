"""Tests for domain model helpers."""

from core.domain.models import Finding, Link, LintReport, Severity


class TestLink:
    def test_classification(self):
        assert Link(target="https://example.com", line=1).is_external
        assert Link(target="02-next.md#setup", line=1).is_local
        assert not Link(target="#setup", line=1).is_local
        assert not Link(target="mailto:qa@example.com", line=1).is_local



class TestLintReport:
    def test_exit_codes(self):
        warning = Finding(rule="NAV002", severity=Severity.WARNING, message="m", path="a.md")
        error = Finding(rule="LNK001", severity=Severity.ERROR, message="m", path="a.md", line=3)

        assert LintReport(root=".").exit_code() == 0
        assert LintReport(root=".", findings=[warning]).exit_code() == 0
        assert LintReport(root=".", findings=[warning]).exit_code(strict=True) == 1
        assert LintReport(root=".", findings=[warning, error]).exit_code() == 1

    def test_by_path_and_counts(self):
        findings = [
            Finding(rule="HDG004", severity=Severity.INFO, message="m", path="b.md", line=2),
            Finding(rule="HDG001", severity=Severity.ERROR, message="m", path="a.md", line=5),
        ]
        report = LintReport(root=".", findings=findings)

        assert report.counts() == {"error": 1, "warning": 0, "info": 1}
        assert list(report.by_path()) == ["b.md", "a.md"]
        assert sorted(findings, key=Finding.sort_key)[0].path == "a.md"


def test_severity_rank_orders_by_seriousness():
    assert Severity.ERROR.rank() > Severity.WARNING.rank() > Severity.INFO.rank()
