"""Lint orchestration.

The CLI delegates discovery, parsing, rule execution and report assembly to
these helpers. Side effects (printing, progress bars) stay in the CLI and
reach the pipeline only through `PipelineHooks`.
"""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Sequence

import httpx

from adapters.link_checker import LinkStatus, check_external_links
from adapters.markdown_parser import parse_document
from adapters.rules import COLLECTION_RULES, DOCUMENT_RULES, ExternalLinkRule
from core.config import AppSettings
from core.domain.errors import ConfigurationError, DocumentReadError
from core.domain.models import Document, Finding, LintReport, Severity
from core.interfaces.rule import RuleContext

logger = logging.getLogger(__name__)

UNREADABLE_DOCUMENT_CODE = "IO001"

_SKIPPED_DIRS = frozenset({"node_modules", "__pycache__", "site-packages"})


@dataclass
class LintRequest:
    """Parameters that control one lint run."""

    root: Path
    select: Sequence[str] = ()
    ignore: Sequence[str] = ()
    external: bool = False
    strict: bool = False
    include_globs: Sequence[str] | None = None
    exclude_globs: Sequence[str] | None = None


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, warnings)."""

    warning: Callable[[str], None] | None = None
    documents_found: Callable[[int], None] | None = None
    document_parsed: Callable[[str], None] | None = None
    external_start: Callable[[int], None] | None = None
    external_progress: Callable[[LinkStatus], None] | None = None


@dataclass
class LintResult:
    """Output of a pipeline invocation."""

    report: LintReport
    documents: list[Document]
    warnings: list[str] = field(default_factory=list)
    strict: bool = False

    @property
    def exit_code(self) -> int:
        return self.report.exit_code(strict=self.strict)


def _normalize_codes(codes: Iterable[str]) -> list[str]:
    out: list[str] = []
    for raw in codes:
        for part in raw.split(","):
            code = part.strip().upper()
            if code:
                out.append(code)
    return out


def rule_enabled(code: str, *, select: Sequence[str], ignore: Sequence[str]) -> bool:
    """Codes match by prefix: `HDG` selects every heading rule."""

    if select and not any(code.startswith(prefix) for prefix in select):
        return False
    return not any(code.startswith(prefix) for prefix in ignore)


def _is_hidden_or_vendored(relative: Path) -> bool:
    return any(part.startswith(".") or part in _SKIPPED_DIRS for part in relative.parts[:-1])


def discover_documents(
    root: Path,
    *,
    include_globs: Sequence[str] = ("**/*.md",),
    exclude_globs: Sequence[str] = (),
) -> list[Path]:
    """Markdown files under `root`, sorted. A file root yields just that file."""

    if root.is_file():
        return [root.resolve()]
    if not root.is_dir():
        raise ConfigurationError("path", f"{root} does not exist")

    found: set[Path] = set()
    for pattern in include_globs:
        for path in root.glob(pattern):
            if not path.is_file():
                continue
            relative = path.relative_to(root)
            if _is_hidden_or_vendored(relative):
                continue
            rel_posix = relative.as_posix()
            if any(fnmatch.fnmatch(rel_posix, excluded) for excluded in exclude_globs):
                logger.debug("Excluded %s", rel_posix)
                continue
            found.add(path.resolve())
    return sorted(found)


def _apply_overrides(findings: Iterable[Finding], overrides: dict[str, Severity]) -> list[Finding]:
    out: list[Finding] = []
    for finding in findings:
        severity = overrides.get(finding.rule)
        if severity is not None and severity is not finding.severity:
            finding = finding.model_copy(update={"severity": severity})
        out.append(finding)
    return out


async def lint(
    *,
    settings: AppSettings,
    request: LintRequest,
    hooks: PipelineHooks | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> LintResult:
    hooks = hooks or PipelineHooks()
    warnings: list[str] = []

    root = request.root.resolve()
    lint_root = root.parent if root.is_file() else root
    select = _normalize_codes(request.select)
    ignore = _normalize_codes([*settings.ignore_rules, *request.ignore])

    paths = discover_documents(
        root,
        include_globs=request.include_globs or settings.include_globs,
        exclude_globs=request.exclude_globs or settings.exclude_globs,
    )
    if not paths:
        message = f"No Markdown documents found under {root}."
        warnings.append(message)
        if hooks.warning:
            hooks.warning(message)
    if hooks.documents_found:
        hooks.documents_found(len(paths))

    next_step_re = settings.next_step_regex()
    findings: list[Finding] = []
    documents: list[Document] = []
    for path in paths:
        try:
            document = parse_document(path, root=lint_root, next_step_re=next_step_re)
        except DocumentReadError as exc:
            logger.warning("%s", exc.message)
            findings.append(
                Finding(
                    rule=UNREADABLE_DOCUMENT_CODE,
                    severity=Severity.ERROR,
                    message=exc.details.get("reason", exc.message),
                    path=path.relative_to(lint_root).as_posix(),
                )
            )
            continue
        documents.append(document)
        if hooks.document_parsed:
            hooks.document_parsed(document.relative_path)

    context = RuleContext(
        root=lint_root,
        settings=settings,
        documents={document.relative_path: document for document in documents},
    )

    document_rules = [rule() for rule in DOCUMENT_RULES if rule_enabled(rule.code, select=select, ignore=ignore)]
    for document in documents:
        for rule in document_rules:
            findings.extend(rule.check(document, context))

    for rule_cls in COLLECTION_RULES:
        if rule_enabled(rule_cls.code, select=select, ignore=ignore):
            findings.extend(rule_cls().check_collection(documents, context))

    external_rule = ExternalLinkRule()
    if request.external and rule_enabled(external_rule.code, select=select, ignore=ignore):
        urls = external_rule.external_urls(documents)
        if hooks.external_start:
            hooks.external_start(len({url.split("#", 1)[0] for url in urls}))
        statuses = await check_external_links(
            urls,
            settings=settings,
            transport=transport,
            progress_callback=hooks.external_progress,
        )
        findings.extend(external_rule.findings_for(documents, statuses))

    findings = _apply_overrides(findings, settings.severity_overrides)
    findings.sort(key=Finding.sort_key)

    report = LintReport(
        root=str(lint_root),
        documents_checked=len(documents),
        findings=findings,
    )
    logger.info(
        "Linted %d documents: %s",
        len(documents),
        ", ".join(f"{count} {name}" for name, count in report.counts().items()),
    )
    return LintResult(report=report, documents=documents, warnings=warnings, strict=request.strict)


def build_outline(documents: Sequence[Document]) -> list[tuple[Document, list[str]]]:
    """Reading order: numbered guides first (by number), then the rest by path.

    Each entry carries the local targets of the guide's "Next Step" links.
    """

    def order(document: Document) -> tuple[int, int, str]:
        if document.sequence_number is None:
            return (1, 0, document.relative_path)
        return (0, document.sequence_number, document.relative_path)

    outline: list[tuple[Document, list[str]]] = []
    for document in sorted(documents, key=order):
        targets = [link.target for link in document.next_step_links]
        outline.append((document, targets))
    return outline
