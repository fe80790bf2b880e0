"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) without leaking into
  the CLI.
- Lets adapters (HTTP, rules) read configuration consistently.
"""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import Severity


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "guidelint"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "guidelint"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "guidelint"
    return Path.home() / ".config" / "guidelint"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], *, env_path: Path | None = None) -> Path:
    """Write/update variables in the user's global .env."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# guidelint user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings.

    Why pydantic-settings:
    - Typed and validated at the edge (env vars) without polluting the core.
    - One configuration contract shared by the CLI and the adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="GUIDELINT_",
        extra="ignore",
        case_sensitive=False,
        # Order: project first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout per external link request (seconds).",
    )
    user_agent: str = Field(
        default="guidelint/0.1 (+https://local)",
        min_length=1,
        description="User-Agent for external link checks.",
    )
    external_max_concurrency: int = Field(
        default=16,
        ge=1,
        le=200,
        description="Maximum concurrent requests when checking external links.",
    )

    next_step_pattern: str = Field(
        default=r"next\s+step",
        min_length=1,
        description="Case-insensitive regex identifying 'Next Step' navigation text.",
    )
    include_globs: list[str] = Field(
        default_factory=lambda: ["**/*.md"],
        description="Globs (relative to the lint root) selecting documents.",
    )
    exclude_globs: list[str] = Field(
        default_factory=list,
        description="Globs excluded from discovery.",
    )
    ignore_rules: list[str] = Field(
        default_factory=list,
        description="Rule codes or prefixes disabled by default.",
    )
    severity_overrides: dict[str, Severity] = Field(
        default_factory=dict,
        description="Per-rule severity overrides, e.g. {\"CODE003\": \"warning\"}.",
    )
    max_heading_jump: int = Field(
        default=1,
        ge=1,
        le=5,
        description="Largest allowed increase in heading level between consecutive headings.",
    )

    @field_validator("next_step_pattern")
    @classmethod
    def _pattern_compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"not a valid regular expression: {exc}") from exc
        return value

    @field_validator("ignore_rules")
    @classmethod
    def _normalize_codes(cls, value: list[str]) -> list[str]:
        return [code.strip().upper() for code in value if code.strip()]

    def next_step_regex(self) -> re.Pattern[str]:
        return re.compile(self.next_step_pattern, re.IGNORECASE)
