"""Numbering of the guide sequence (SEQ*)."""

from __future__ import annotations

from typing import Sequence

from adapters.rules.base import make_finding
from adapters.rules.navigation import numbered_by_directory
from core.domain.models import Document, Finding, Severity
from core.interfaces.rule import CollectionRule, RuleContext


class SequenceNumberingRule(CollectionRule):
    """Numbers within a directory are unique and contiguous."""

    code = "SEQ001"
    name = "sequence-numbering"
    severity = Severity.WARNING
    description = "Guide numbering has gaps or duplicate numbers."

    def check_collection(self, documents: Sequence[Document], context: RuleContext) -> list[Finding]:
        findings: list[Finding] = []
        for directory, docs in numbered_by_directory(documents).items():
            seen: dict[int, Document] = {}
            for document in docs:
                number = document.sequence_number
                if number in seen:
                    findings.append(
                        make_finding(
                            self,
                            document,
                            f"Sequence number {number} is also used by {seen[number].relative_path}",
                            number=number,
                            duplicate_of=seen[number].relative_path,
                        )
                    )
                else:
                    seen[number] = document

            numbers = sorted(seen)
            for previous, current in zip(numbers, numbers[1:]):
                if current - previous <= 1:
                    continue
                missing = list(range(previous + 1, current))
                label = str(missing[0]) if len(missing) == 1 else f"{missing[0]}-{missing[-1]}"
                findings.append(
                    make_finding(
                        self,
                        seen[current],
                        f"Gap in guide numbering{' under ' + directory if directory else ''}: "
                        f"no guide numbered {label}",
                        missing=missing,
                    )
                )
        return findings
