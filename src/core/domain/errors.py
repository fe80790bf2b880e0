"""Domain exceptions.

These represent failures that abort a lint run (configuration, unreadable
input roots, export problems). Per-document problems are reported as findings
instead.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class GuideLintError(Exception):
    """Base exception for all guidelint errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class DocumentReadError(GuideLintError):
    """Raised when a Markdown file cannot be read or decoded."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(
            message=f"Cannot read {path}: {reason}",
            details={"path": str(path), "reason": reason},
        )


class ConfigurationError(GuideLintError):
    """Raised when settings or CLI options are invalid."""

    def __init__(self, setting: str, reason: str) -> None:
        super().__init__(
            message=f"Invalid configuration for '{setting}': {reason}",
            details={"setting": setting, "reason": reason},
        )


class ExportError(GuideLintError):
    """Raised when a report cannot be written in the requested format."""

    def __init__(self, fmt: str, reason: str) -> None:
        super().__init__(
            message=f"{fmt.upper()} export failed: {reason}",
            details={"format": fmt, "reason": reason},
        )
