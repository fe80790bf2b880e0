"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation and self-documenting fields (Field) without coupling the
  core to I/O libraries.
- Stable serialization for JSON/HTML exports of lint reports.

Note:
- These models describe *what* a guide collection looks like, not *how* it is
  read from disk.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Severity(str, Enum):
    """How serious a finding is."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    def rank(self) -> int:
        """Higher rank means more serious."""

        return {Severity.ERROR: 3, Severity.WARNING: 2, Severity.INFO: 1}[self]


class LinkKind(str, Enum):
    MARKDOWN = "markdown"
    REFERENCE = "reference"
    AUTOLINK = "autolink"
    HTML = "html"


class Heading(BaseModel):
    level: int = Field(..., ge=1, le=6)
    text: str
    line: int = Field(..., ge=1)
    slug: str = ""


class CodeBlock(BaseModel):
    """A fenced code block found in a document."""

    language: str = Field(default="", description="Normalized language tag (lowercase).")
    info: str = Field(default="", description="Raw info string after the opening fence.")
    content: str = ""
    start_line: int = Field(..., ge=1, description="Line of the opening fence.")
    end_line: int | None = Field(default=None, description="Line of the closing fence, None when unterminated.")
    fence: str = "```"
    skip: bool = Field(default=False, description="Marked with a guidelint skip directive.")

    @property
    def content_start_line(self) -> int:
        return self.start_line + 1

    @property
    def terminated(self) -> bool:
        return self.end_line is not None


class Link(BaseModel):
    target: str
    text: str = ""
    line: int = Field(..., ge=1)
    kind: LinkKind = LinkKind.MARKDOWN
    is_next_step: bool = False

    @property
    def is_external(self) -> bool:
        return self.target.lower().startswith(("http://", "https://"))

    @property
    def is_local(self) -> bool:
        lowered = self.target.lower()
        if not lowered or lowered.startswith("#"):
            return False
        if self.is_external:
            return False
        # mailto:, tel:, ftp:, data: ...
        scheme, sep, _ = lowered.partition(":")
        if sep and scheme.isalpha() and len(scheme) > 1:
            return False
        return True


class Document(BaseModel):
    """A parsed Markdown guide."""

    path: Path
    relative_path: str = Field(..., min_length=1, description="POSIX path relative to the lint root.")
    headings: list[Heading] = Field(default_factory=list)
    code_blocks: list[CodeBlock] = Field(default_factory=list)
    links: list[Link] = Field(default_factory=list)
    anchors: set[str] = Field(default_factory=set)
    sequence_number: int | None = Field(
        default=None,
        description="Leading number in the file name (07-api.md -> 7).",
    )

    @property
    def title(self) -> str | None:
        for heading in self.headings:
            if heading.level == 1:
                return heading.text
        return self.headings[0].text if self.headings else None

    @property
    def next_step_links(self) -> list[Link]:
        return [link for link in self.links if link.is_next_step]


class Finding(BaseModel):
    rule: str = Field(..., min_length=1, description="Rule code, e.g. HDG001.")
    severity: Severity
    message: str = Field(..., min_length=1)
    path: str = Field(..., description="Document path relative to the lint root.")
    line: int | None = Field(default=None, ge=1)
    context: dict[str, Any] = Field(default_factory=dict)

    def sort_key(self) -> tuple[str, int, str]:
        return (self.path, self.line or 0, self.rule)


class LintReport(BaseModel):
    """Aggregate result of one lint run."""

    root: str
    documents_checked: int = Field(default=0, ge=0)
    findings: list[Finding] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=_utcnow)

    def counts(self) -> dict[str, int]:
        out = {severity.value: 0 for severity in Severity}
        for finding in self.findings:
            out[finding.severity.value] += 1
        return out

    @property
    def has_errors(self) -> bool:
        return any(f.severity is Severity.ERROR for f in self.findings)

    @property
    def has_warnings(self) -> bool:
        return any(f.severity is Severity.WARNING for f in self.findings)

    def exit_code(self, *, strict: bool = False) -> int:
        if self.has_errors:
            return 1
        if strict and self.has_warnings:
            return 1
        return 0

    def by_path(self) -> dict[str, list[Finding]]:
        grouped: dict[str, list[Finding]] = {}
        for finding in self.findings:
            grouped.setdefault(finding.path, []).append(finding)
        return grouped
