"""Shared fixtures: small guide collections written into tmp_path."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from adapters.markdown_parser import parse_document
from core.config import AppSettings
from core.domain.models import Document
from core.interfaces.rule import RuleContext

CLEAN_GUIDES: dict[str, str] = {
    "README.md": (
        "# Testing Guide\n"
        "\n"
        "1. [Manual](01-manual-testing.md)\n"
        "2. [Automation](02-automation.md)\n"
    ),
    "01-manual-testing.md": (
        "# Manual Testing\n"
        "\n"
        "## Overview\n"
        "\n"
        "Exploratory sessions, test charters and bug reports.\n"
        "\n"
        "```python\n"
        "def test_login():\n"
        "    assert True\n"
        "```\n"
        "\n"
        "---\n"
        "\n"
        "**Next Step:** [Automation](02-automation.md)\n"
    ),
    "02-automation.md": (
        "# Automation\n"
        "\n"
        "## Selenium\n"
        "\n"
        "```java\n"
        "public class LoginPage {\n"
        "    public void open() { driver.get(\"https://example.com/login\"); }\n"
        "}\n"
        "```\n"
        "\n"
        "```yaml\n"
        "on: push\n"
        "jobs:\n"
        "  test:\n"
        "    runs-on: ubuntu-latest\n"
        "```\n"
        "\n"
        "[Back to index](README.md#testing-guide)\n"
    ),
}


@pytest.fixture
def settings() -> AppSettings:
    """Settings isolated from any .env file."""

    return AppSettings(_env_file=None)


@pytest.fixture
def write_tree(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    def _write(files: dict[str, str]) -> Path:
        for name, content in files.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture
def clean_guides(write_tree) -> Path:
    return write_tree(CLEAN_GUIDES)


@pytest.fixture
def load_collection(settings: AppSettings) -> Callable[[Path], tuple[list[Document], RuleContext]]:
    def _load(root: Path) -> tuple[list[Document], RuleContext]:
        documents = [
            parse_document(path, root=root, next_step_re=settings.next_step_regex())
            for path in sorted(root.rglob("*.md"))
        ]
        context = RuleContext(
            root=root.resolve(),
            settings=settings,
            documents={doc.relative_path: doc for doc in documents},
        )
        return documents, context

    return _load
