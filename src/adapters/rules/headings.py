"""Heading structure rules (HDG*)."""

from __future__ import annotations

from adapters.rules.base import make_finding
from core.domain.models import Document, Finding, Severity
from core.interfaces.rule import DocumentRule, RuleContext


class SkippedHeadingLevelRule(DocumentRule):
    """Heading levels may only increase one step at a time (h2 -> h4 is a skip)."""

    code = "HDG001"
    name = "skipped-heading-level"
    severity = Severity.ERROR
    description = "Heading level jumps by more than one."

    def check(self, document: Document, context: RuleContext) -> list[Finding]:
        findings: list[Finding] = []
        max_jump = context.settings.max_heading_jump
        previous = None
        for heading in document.headings:
            if previous is not None and heading.level > previous.level + max_jump:
                findings.append(
                    make_finding(
                        self,
                        document,
                        f"Heading level jumps from h{previous.level} to h{heading.level}: '{heading.text}'",
                        line=heading.line,
                        previous_level=previous.level,
                        level=heading.level,
                        previous_line=previous.line,
                    )
                )
            previous = heading
        return findings


class FirstHeadingLevelRule(DocumentRule):
    code = "HDG002"
    name = "first-heading-not-h1"
    severity = Severity.WARNING
    description = "The first heading of a document is not level 1."

    def check(self, document: Document, context: RuleContext) -> list[Finding]:
        if not document.headings:
            return []
        first = document.headings[0]
        if first.level == 1:
            return []
        return [
            make_finding(
                self,
                document,
                f"First heading is h{first.level}, expected h1: '{first.text}'",
                line=first.line,
                level=first.level,
            )
        ]


class MultipleTitlesRule(DocumentRule):
    code = "HDG003"
    name = "multiple-h1"
    severity = Severity.WARNING
    description = "More than one level-1 heading in a document."

    def check(self, document: Document, context: RuleContext) -> list[Finding]:
        titles = [heading for heading in document.headings if heading.level == 1]
        return [
            make_finding(
                self,
                document,
                f"Additional h1 '{heading.text}' (first h1 on line {titles[0].line})",
                line=heading.line,
                first_line=titles[0].line,
            )
            for heading in titles[1:]
        ]


class EmptyHeadingRule(DocumentRule):
    code = "HDG004"
    name = "empty-heading"
    severity = Severity.INFO
    description = "Heading has no text."

    def check(self, document: Document, context: RuleContext) -> list[Finding]:
        return [
            make_finding(self, document, f"Empty h{heading.level} heading", line=heading.line)
            for heading in document.headings
            if not heading.text.strip()
        ]
