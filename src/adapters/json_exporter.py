"""JSON export of the lint report.

Why JSON:
- Interoperability with CI annotations, dashboards and other tooling.
- Persists findings without depending on the HTML/PDF render.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import LintReport


def report_to_json(report: LintReport) -> str:
    payload = report.model_dump(mode="json")
    payload["counts"] = report.counts()
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def export_report_json(*, report: LintReport, output_path: Path) -> Path:
    """Write the report as UTF-8 JSON with a stable layout."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(report_to_json(report), encoding="utf-8")
    return output_path
