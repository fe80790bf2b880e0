"""Fenced code block rules (CODE*)."""

from __future__ import annotations

from adapters.rules.base import make_finding
from adapters.syntax import check_code_block
from core.domain.models import Document, Finding, Severity
from core.interfaces.rule import DocumentRule, RuleContext


class CodeBlockSyntaxRule(DocumentRule):
    """Every fenced block must parse in its stated language (best-effort)."""

    code = "CODE001"
    name = "code-block-syntax"
    severity = Severity.ERROR
    description = "A fenced block fails to parse in its stated language."

    def check(self, document: Document, context: RuleContext) -> list[Finding]:
        findings: list[Finding] = []
        for block in document.code_blocks:
            if not block.terminated:
                # CODE002 covers it; the body would run to end of file.
                continue
            problem = check_code_block(block)
            if problem is None:
                continue
            findings.append(
                make_finding(
                    self,
                    document,
                    f"{problem.message} ({block.language} block starting on line {block.start_line})",
                    line=block.content_start_line + problem.line - 1,
                    language=block.language,
                    block_line=block.start_line,
                )
            )
        return findings


class UnterminatedFenceRule(DocumentRule):
    code = "CODE002"
    name = "unterminated-fence"
    severity = Severity.ERROR
    description = "A fenced block is never closed."

    def check(self, document: Document, context: RuleContext) -> list[Finding]:
        return [
            make_finding(
                self,
                document,
                f"Code fence {block.fence} opened here is never closed",
                line=block.start_line,
                language=block.language or None,
            )
            for block in document.code_blocks
            if not block.terminated
        ]


class MissingLanguageRule(DocumentRule):
    code = "CODE003"
    name = "code-block-language"
    severity = Severity.INFO
    description = "A fenced block has no language tag."

    def check(self, document: Document, context: RuleContext) -> list[Finding]:
        return [
            make_finding(self, document, "Code block has no language tag", line=block.start_line)
            for block in document.code_blocks
            if not block.language
        ]
