"""CLI tests through Typer's CliRunner."""

import json

import pytest
from rich.console import Console
from typer.testing import CliRunner

from cli.main import app
from core.config import AppSettings, write_user_env_vars
from core.domain.errors import ExportError

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_cli(monkeypatch):
    """No .env files and wide consoles, so output does not wrap."""

    def settings_factory():
        return AppSettings(_env_file=None)

    monkeypatch.setattr("cli.main.AppSettings", settings_factory)
    monkeypatch.setattr("cli.doctor.AppSettings", settings_factory)
    monkeypatch.setattr("cli.main._console", Console(width=200))
    monkeypatch.setattr("cli.main._err_console", Console(width=200, stderr=True))
    monkeypatch.setattr("cli.doctor._console", Console(width=200))


@pytest.fixture
def broken_guides(write_tree):
    return write_tree(
        {
            "01-a.md": "# A\n\nSee [setup](setup.md).\n",
            "02-b.md": "# B\n",
        }
    )


class TestLintCommand:
    def test_clean_collection_passes(self, clean_guides):
        result = runner.invoke(app, ["lint", str(clean_guides)])

        assert result.exit_code == 0, result.output
        assert "PASSED" in result.output

    def test_findings_fail(self, broken_guides):
        result = runner.invoke(app, ["lint", str(broken_guides), "--no-banner"])

        assert result.exit_code == 1
        assert "LNK001" in result.output
        assert "NAV002" in result.output
        assert "FAILED" in result.output

    def test_ignore_option(self, broken_guides):
        result = runner.invoke(app, ["lint", str(broken_guides), "--ignore", "LNK001", "--no-banner"])

        assert result.exit_code == 0
        assert "LNK001" not in result.output

    def test_strict(self, write_tree):
        root = write_tree({"doc.md": "# A\n\n# B\n"})

        assert runner.invoke(app, ["lint", str(root)]).exit_code == 0
        assert runner.invoke(app, ["lint", str(root), "--strict"]).exit_code == 1

    def test_json_output(self, broken_guides):
        result = runner.invoke(app, ["lint", str(broken_guides), "--format", "json"])

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["counts"]["error"] == 1
        assert {f["rule"] for f in payload["findings"]} == {"LNK001", "NAV002"}

    def test_unknown_format(self, clean_guides):
        result = runner.invoke(app, ["lint", str(clean_guides), "--format", "xml"])

        assert result.exit_code == 2

    def test_missing_path(self, tmp_path):
        result = runner.invoke(app, ["lint", str(tmp_path / "missing")])

        assert result.exit_code == 2

    def test_exports(self, broken_guides, tmp_path):
        json_path = tmp_path / "out" / "report.json"
        html_path = tmp_path / "out" / "report.html"

        result = runner.invoke(
            app,
            ["lint", str(broken_guides), "--export-json", str(json_path), "--export-html", str(html_path)],
        )

        assert result.exit_code == 1
        assert json.loads(json_path.read_text(encoding="utf-8"))["documents_checked"] == 2
        assert "LNK001" in html_path.read_text(encoding="utf-8")

    def test_pdf_falls_back_to_html(self, clean_guides, tmp_path, monkeypatch):
        def failing_pdf(*, report, output_path):
            raise ExportError("pdf", "no native libraries")

        monkeypatch.setattr("cli.main.export_report_pdf", failing_pdf)

        result = runner.invoke(app, ["lint", str(clean_guides), "--export-pdf", str(tmp_path / "report.pdf")])

        assert result.exit_code == 0
        assert (tmp_path / "report.html").is_file()
        assert not (tmp_path / "report.pdf").exists()
        assert "PDF export failed" in result.output


def test_rules_command():
    result = runner.invoke(app, ["rules"])

    assert result.exit_code == 0
    for code in ("NAV001", "NAV002", "NAV003", "LNK001", "HDG001", "CODE001", "SEQ001"):
        assert code in result.output


def test_outline_command(clean_guides):
    result = runner.invoke(app, ["outline", str(clean_guides)])

    assert result.exit_code == 0
    assert result.output.index("Manual Testing") < result.output.index("Automation  02-automation.md")
    assert "→ 02-automation.md" in result.output


class TestDoctor:
    def test_run_offline(self, monkeypatch):
        monkeypatch.setattr("cli.doctor._check_pdf", lambda: (False, "no pango"))

        result = runner.invoke(app, ["doctor", "run", "--no-network"])

        assert result.exit_code == 0
        assert "SKIPPED" in result.output
        assert "no pango" in result.output
        assert "falls back to HTML" in result.output

    def test_configure_writes_env(self, tmp_path, monkeypatch):
        env_path = tmp_path / ".env"
        monkeypatch.setattr(
            "cli.doctor.write_user_env_vars",
            lambda values: write_user_env_vars(values, env_path=env_path),
        )

        result = runner.invoke(app, ["doctor", "configure"], input="\n2.5\n4\ncode003, seq\n")

        assert result.exit_code == 0, result.output
        lines = env_path.read_text(encoding="utf-8").splitlines()
        assert "GUIDELINT_HTTP_TIMEOUT_SECONDS=2.5" in lines
        assert "GUIDELINT_EXTERNAL_MAX_CONCURRENCY=4" in lines
        assert 'GUIDELINT_IGNORE_RULES=["CODE003","SEQ"]' in lines
        assert r"GUIDELINT_NEXT_STEP_PATTERN=next\s+step" in lines

    def test_configure_rejects_bad_concurrency(self, tmp_path, monkeypatch):
        monkeypatch.setattr("cli.doctor.write_user_env_vars", lambda values: pytest.fail("must not write"))

        result = runner.invoke(app, ["doctor", "configure"], input="\n2\n500\n\n")

        assert result.exit_code != 0
