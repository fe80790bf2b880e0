"""Navigation rules for "Next Step" links (NAV*).

Guides are read in numeric order (`01-...md`, `02-...md`, ...). Each guide but
the last ends with a "Next Step" link to the following one. Numbering is
scoped per directory.
"""

from __future__ import annotations

from typing import Sequence

from adapters.rules.base import link_path, make_finding
from core.domain.models import Document, Finding, Severity
from core.interfaces.rule import CollectionRule, DocumentRule, RuleContext


def numbered_by_directory(documents: Sequence[Document]) -> dict[str, list[Document]]:
    """Numbered documents grouped by parent directory, in reading order."""

    groups: dict[str, list[Document]] = {}
    for document in documents:
        if document.sequence_number is None:
            continue
        parent = document.relative_path.rpartition("/")[0]
        groups.setdefault(parent, []).append(document)
    for docs in groups.values():
        docs.sort(key=lambda d: (d.sequence_number, d.relative_path))
    return groups


def _following(docs: list[Document], document: Document) -> Document | None:
    for candidate in docs:
        if candidate.sequence_number > document.sequence_number:
            return candidate
    return None


class MissingNextStepTargetRule(DocumentRule):
    """Every file referenced by a "Next Step" link must exist."""

    code = "NAV001"
    name = "next-step-target-missing"
    severity = Severity.ERROR
    description = "A 'Next Step' link points at a file that does not exist."

    def check(self, document: Document, context: RuleContext) -> list[Finding]:
        findings: list[Finding] = []
        for link in document.next_step_links:
            if not link.is_local:
                continue
            path = link_path(link.target)
            if not path:
                continue
            resolved = context.resolve(document, path)
            if resolved.is_file():
                continue
            findings.append(
                make_finding(
                    self,
                    document,
                    f"'Next Step' link target '{link.target}' does not exist",
                    line=link.line,
                    target=link.target,
                    resolved=context.relative(resolved),
                )
            )
        return findings


class MissingNextStepRule(CollectionRule):
    code = "NAV002"
    name = "next-step-missing"
    severity = Severity.WARNING
    description = "A numbered guide (other than the last) has no 'Next Step' link."

    def check_collection(self, documents: Sequence[Document], context: RuleContext) -> list[Finding]:
        findings: list[Finding] = []
        for docs in numbered_by_directory(documents).values():
            for document in docs:
                following = _following(docs, document)
                if following is None or document.next_step_links:
                    continue
                findings.append(
                    make_finding(
                        self,
                        document,
                        f"No 'Next Step' link; the next guide is {following.relative_path}",
                        expected=following.relative_path,
                    )
                )
        return findings


class NextStepOrderRule(CollectionRule):
    code = "NAV003"
    name = "next-step-order"
    severity = Severity.WARNING
    description = "A 'Next Step' link does not point at the next guide in numeric order."

    def check_collection(self, documents: Sequence[Document], context: RuleContext) -> list[Finding]:
        findings: list[Finding] = []
        for docs in numbered_by_directory(documents).values():
            for document in docs:
                following = _following(docs, document)
                if following is None:
                    continue
                for link in document.next_step_links:
                    path = link_path(link.target)
                    if not link.is_local or not path:
                        continue
                    resolved = context.resolve(document, path)
                    if not resolved.is_file() or resolved == following.path:
                        # Missing targets are NAV001.
                        continue
                    findings.append(
                        make_finding(
                            self,
                            document,
                            f"'Next Step' points at {context.relative(resolved) or link.target}, "
                            f"expected {following.relative_path}",
                            line=link.line,
                            target=link.target,
                            expected=following.relative_path,
                        )
                    )
        return findings
