"""Shared helpers for rule implementations."""

from __future__ import annotations

from typing import Any
from urllib.parse import unquote

from core.domain.models import Document, Finding, Severity


def make_finding(
    rule: Any,
    document: Document | str,
    message: str,
    *,
    line: int | None = None,
    severity: Severity | None = None,
    **context: Any,
) -> Finding:
    path = document if isinstance(document, str) else document.relative_path
    return Finding(
        rule=rule.code,
        severity=severity or rule.severity,
        message=message,
        path=path,
        line=line,
        context={k: v for k, v in context.items() if v is not None},
    )


def link_path(target: str) -> str:
    """Path part of a link target, percent-decoded, without fragment or query."""

    path = target.split("#", 1)[0].split("?", 1)[0]
    return unquote(path)


def link_fragment(target: str) -> str | None:
    _, sep, fragment = target.partition("#")
    if not sep or not fragment:
        return None
    return unquote(fragment)
