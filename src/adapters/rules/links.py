"""Link rules (LNK*).

Local links are resolved against the linking document's directory (or the lint
root for `/absolute` targets). "Next Step" links are left to NAV001 so one
broken navigation link yields one finding.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from adapters.link_checker import LinkStatus
from adapters.rules.base import link_fragment, link_path, make_finding
from core.domain.models import Document, Finding, Severity
from core.interfaces.rule import DocumentRule, RuleContext


class BrokenLocalLinkRule(DocumentRule):
    code = "LNK001"
    name = "broken-local-link"
    severity = Severity.ERROR
    description = "A relative link points at a file that does not exist."

    def check(self, document: Document, context: RuleContext) -> list[Finding]:
        findings: list[Finding] = []
        for link in document.links:
            if link.is_next_step or not link.is_local:
                continue
            path = link_path(link.target)
            if not path:
                continue
            resolved = context.resolve(document, path)
            if resolved.exists():
                continue
            findings.append(
                make_finding(
                    self,
                    document,
                    f"Link target '{link.target}' does not exist",
                    line=link.line,
                    target=link.target,
                    resolved=context.relative(resolved),
                )
            )
        return findings


class MissingAnchorRule(DocumentRule):
    """`file.md#section` must name a heading slug or explicit anchor in `file.md`."""

    code = "LNK002"
    name = "missing-anchor"
    severity = Severity.WARNING
    description = "A link fragment does not match any heading or anchor in its target."

    def check(self, document: Document, context: RuleContext) -> list[Finding]:
        findings: list[Finding] = []
        for link in document.links:
            fragment = link_fragment(link.target)
            if fragment is None or link.is_external:
                continue
            if not (link.is_local or link.target.startswith("#")):
                continue

            path = link_path(link.target)
            if path:
                relative = context.relative(context.resolve(document, path))
                target_doc = context.documents.get(relative) if relative else None
            else:
                target_doc = document
            if target_doc is None:
                # Missing files are LNK001/NAV001; non-Markdown targets have no anchors.
                continue

            if fragment in target_doc.anchors or fragment.lower() in target_doc.anchors:
                continue
            findings.append(
                make_finding(
                    self,
                    document,
                    f"Anchor '#{fragment}' not found in {target_doc.relative_path}",
                    line=link.line,
                    target=link.target,
                    fragment=fragment,
                )
            )
        return findings


class ExternalLinkRule:
    """Reports unreachable http(s) links from a precomputed status map.

    Not a per-document `check`: statuses come from one concurrent network pass
    over the whole collection (see `adapters.link_checker`).
    """

    code = "LNK003"
    name = "unreachable-external-link"
    severity = Severity.WARNING
    description = "An external http(s) link is unreachable (opt-in, needs network)."

    def external_urls(self, documents: Sequence[Document]) -> set[str]:
        return {link.target for doc in documents for link in doc.links if link.is_external}

    def findings_for(
        self,
        documents: Sequence[Document],
        statuses: Mapping[str, LinkStatus],
    ) -> list[Finding]:
        findings: list[Finding] = []
        for document in documents:
            for link in document.links:
                if not link.is_external:
                    continue
                status = statuses.get(link.target.split("#", 1)[0])
                if status is None or status.ok:
                    continue
                findings.append(
                    make_finding(
                        self,
                        document,
                        f"External link {link.target} is unreachable ({status.describe()})",
                        line=link.line,
                        target=link.target,
                        status_code=status.status_code,
                        error=status.error,
                    )
                )
        return findings
