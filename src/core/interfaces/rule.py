"""Lint rule contracts.

Why Protocol:
- Structural contract (duck typing) without rigid inheritance.
- Rules stay interchangeable and testable without coupling the pipeline to
  concrete implementations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, Sequence, runtime_checkable

from core.config import AppSettings
from core.domain.models import Document, Finding, Severity


@dataclass
class RuleContext:
    """Read-only view of the run shared with every rule."""

    root: Path
    settings: AppSettings
    documents: dict[str, Document] = field(default_factory=dict)

    def resolve(self, document: Document, target: str) -> Path:
        """Resolve a link target relative to the linking document (or the root for `/x`)."""

        if target.startswith("/"):
            return (self.root / target.lstrip("/")).resolve()
        return (document.path.parent / target).resolve()

    def relative(self, path: Path) -> str | None:
        try:
            return path.relative_to(self.root.resolve()).as_posix()
        except ValueError:
            return None


@runtime_checkable
class DocumentRule(Protocol):
    """Minimal contract for a per-document rule.

    Design rules:
    - `check` is synchronous and side-effect free: it only reads the document.
    - Findings carry the rule's default severity; overrides happen later.
    """

    code: str
    name: str
    severity: Severity
    description: str

    def check(self, document: Document, context: RuleContext) -> list[Finding]:
        ...


@runtime_checkable
class CollectionRule(Protocol):
    """Contract for rules that look at the whole guide collection at once."""

    code: str
    name: str
    severity: Severity
    description: str

    def check_collection(self, documents: Sequence[Document], context: RuleContext) -> list[Finding]:
        ...
