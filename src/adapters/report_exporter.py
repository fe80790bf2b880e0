"""Report export (HTML/PDF).

Why this lives in adapters:
- PDF/HTML are infrastructure details (WeasyPrint/Jinja2).
- The core only knows the `LintReport` aggregate.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.domain.errors import ExportError
from core.domain.models import LintReport, Severity

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )


def template_path() -> Path:
    return _TEMPLATES_DIR / "report.html"


def render_report_html(*, report: LintReport) -> str:
    """Render a self-contained HTML report grouped by document."""

    generated_at = report.generated_at.isoformat(timespec="seconds")
    grouped = sorted(report.by_path().items())
    worst: dict[str, str] = {}
    for path, findings in grouped:
        top = max(findings, key=lambda f: f.severity.rank())
        worst[path] = top.severity.value

    template = _get_env().get_template("report.html")
    return template.render(
        report=report,
        generated_at=generated_at,
        counts=report.counts(),
        grouped=grouped,
        worst=worst,
        severities=[s.value for s in Severity],
    )


def export_report_html(*, report: LintReport, output_path: Path) -> Path:
    """Write the report as HTML.

    Also the fallback when the environment cannot render PDFs.
    """

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_report_html(report=report), encoding="utf-8")
    return output_path


def export_report_pdf(*, report: LintReport, output_path: Path) -> Path:
    """Render the HTML report to PDF through WeasyPrint.

    WeasyPrint needs native libraries (Pango); import and render failures
    surface as `ExportError` so the CLI can fall back to HTML.
    """

    try:
        from weasyprint import HTML  # noqa: PLC0415
    except OSError as exc:
        raise ExportError("pdf", f"WeasyPrint native libraries unavailable: {exc}") from exc

    output_path.parent.mkdir(parents=True, exist_ok=True)
    html = render_report_html(report=report)
    try:
        HTML(string=html, base_url=str(_TEMPLATES_DIR)).write_pdf(str(output_path))
    except Exception as exc:
        raise ExportError("pdf", str(exc)) from exc
    return output_path
