"""Best-effort syntax checks for fenced code blocks.

Nothing here executes code: Python goes through `ast.parse`, data formats
through their parsers, and brace languages through a delimiter scanner that
skips strings and comments.

Guides are full of fragments, so the checks are narrow:
- a block whose body contains a placeholder (`...`, `// ...`, `# ...`) is
  "illustrative": unclosed delimiters at the end are tolerated, mismatched
  closers are still reported.
- templated YAML/JSON (`{{ ... }}`, `{% ... %}`) is not checked.
"""

from __future__ import annotations

import ast
import json
import re
import tomllib
from dataclasses import dataclass

import yaml

from core.domain.models import CodeBlock

PYTHON_LANGUAGES = frozenset({"python", "py", "python3", "pycon", "ipython"})
JSON_LANGUAGES = frozenset({"json"})
YAML_LANGUAGES = frozenset({"yaml", "yml"})
TOML_LANGUAGES = frozenset({"toml"})
BRACE_LANGUAGES = frozenset(
    {
        "javascript",
        "js",
        "jsx",
        "typescript",
        "ts",
        "tsx",
        "java",
        "groovy",
        "gradle",
        "jenkinsfile",
        "kotlin",
        "kt",
        "go",
        "golang",
        "c",
        "cpp",
        "c++",
        "csharp",
        "cs",
        "c#",
        "rust",
        "rs",
        "scala",
        "swift",
        "hcl",
        "terraform",
        "tf",
    }
)
# `#` starts a line comment in these as well as `//`.
_HASH_COMMENT_LANGUAGES = frozenset({"hcl", "terraform", "tf"})
# `'` is not a string delimiter (lifetimes, char literals spanning one rune only).
_NO_SINGLE_QUOTE_LANGUAGES = frozenset({"rust", "rs"})
_BACKTICK_LANGUAGES = frozenset({"javascript", "js", "jsx", "typescript", "ts", "tsx", "go", "golang"})
_TRIPLE_QUOTE_LANGUAGES = frozenset({"groovy", "gradle", "jenkinsfile", "kotlin", "kt", "java", "scala", "swift"})
# Groovy also has `'''` strings (`sh '''...'''` steps in Jenkinsfiles).
_GROOVY_LANGUAGES = frozenset({"groovy", "gradle", "jenkinsfile"})

_PAIRS = {")": "(", "]": "[", "}": "{"}
_OPENERS = frozenset(_PAIRS.values())

_PLACEHOLDER_RE = re.compile(r"^\s*(?:(?://|#|--)\s*)?(?:\.\.\.|…)\s*$", re.MULTILINE)
_TEMPLATE_RE = re.compile(r"\{\{.*?\}\}|\{%.*?%\}", re.DOTALL)
_TOML_POSITION_RE = re.compile(r"at line (\d+)")


@dataclass(frozen=True)
class SyntaxProblem:
    message: str
    line: int
    """1-based line relative to the block body."""


def is_illustrative(content: str) -> bool:
    return bool(_PLACEHOLDER_RE.search(content))


def _python_source(content: str) -> str:
    lines = content.splitlines()
    first = next((line for line in lines if line.strip()), "")
    if first.lstrip().startswith(">>>"):
        # Doctest/console session: keep only the source lines, output lines become blank.
        kept: list[str] = []
        for line in lines:
            stripped = line.lstrip()
            if stripped.startswith(">>> ") or stripped == ">>>":
                kept.append(stripped[4:])
            elif stripped.startswith("... ") or stripped == "...":
                kept.append(stripped[4:])
            else:
                kept.append("")
        return "\n".join(kept)

    # Notebook magics and shell escapes.
    return "\n".join("" if line.lstrip().startswith(("%", "!")) else line for line in lines)


def check_python(content: str) -> SyntaxProblem | None:
    try:
        compile(
            _python_source(content),
            "<code block>",
            "exec",
            flags=ast.PyCF_ONLY_AST | ast.PyCF_ALLOW_TOP_LEVEL_AWAIT,
            dont_inherit=True,
        )
    except SyntaxError as exc:
        return SyntaxProblem(message=f"Python: {exc.msg}", line=exc.lineno or 1)
    return None


def check_json(content: str) -> SyntaxProblem | None:
    if _TEMPLATE_RE.search(content):
        return None
    try:
        json.loads(content)
    except json.JSONDecodeError as exc:
        return SyntaxProblem(message=f"JSON: {exc.msg}", line=exc.lineno)
    return None


def check_yaml(content: str) -> SyntaxProblem | None:
    """Parse to the node graph only.

    Composing never runs constructors, so application tags (`!Ref`, `!Sub`)
    and values like `2024-02-30` that are valid YAML but not valid Python
    objects pass.
    """

    if _TEMPLATE_RE.search(content):
        return None
    try:
        for _ in yaml.compose_all(content, Loader=yaml.SafeLoader):
            pass
    except yaml.MarkedYAMLError as exc:
        mark = exc.problem_mark or exc.context_mark
        line = mark.line + 1 if mark is not None else 1
        problem = exc.problem or exc.context or "invalid document"
        return SyntaxProblem(message=f"YAML: {problem}", line=line)
    except yaml.YAMLError as exc:
        return SyntaxProblem(message=f"YAML: {exc}", line=1)
    return None


def check_toml(content: str) -> SyntaxProblem | None:
    try:
        tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        text = str(exc)
        match = _TOML_POSITION_RE.search(text)
        line = int(match.group(1)) if match else 1
        message = text.split(" (at ", 1)[0]
        return SyntaxProblem(message=f"TOML: {message}", line=line)
    return None


def check_delimiters(content: str, language: str) -> SyntaxProblem | None:
    """Verify `()[]{}` balance, skipping string literals and comments."""

    hash_comments = language in _HASH_COMMENT_LANGUAGES
    quotes = {'"'}
    if language not in _NO_SINGLE_QUOTE_LANGUAGES:
        quotes.add("'")
    if language in _BACKTICK_LANGUAGES:
        quotes.add("`")
    triple_quotes: tuple[str, ...] = ()
    if language in _TRIPLE_QUOTE_LANGUAGES:
        triple_quotes = ('"""', "'''") if language in _GROOVY_LANGUAGES else ('"""',)

    stack: list[tuple[str, int]] = []
    line = 1
    i = 0
    n = len(content)
    while i < n:
        ch = content[i]

        if ch == "\n":
            line += 1
            i += 1
            continue

        if content.startswith("//", i) or (hash_comments and ch == "#"):
            end = content.find("\n", i)
            i = n if end == -1 else end
            continue

        if content.startswith("/*", i):
            end = content.find("*/", i + 2)
            if end == -1:
                break
            line += content.count("\n", i, end)
            i = end + 2
            continue

        delimiter = next((d for d in triple_quotes if content.startswith(d, i)), None)
        if delimiter:
            end = content.find(delimiter, i + 3)
            if end == -1:
                return SyntaxProblem(message="Unterminated triple-quoted string", line=line)
            line += content.count("\n", i, end)
            i = end + 3
            continue

        if ch in quotes:
            multiline = ch == "`"
            j = i + 1
            while j < n:
                c = content[j]
                if c == "\\":
                    if not multiline and content.startswith("\n", j + 1):
                        line += 1
                    j += 2
                    continue
                if c == ch:
                    break
                if c == "\n" and not multiline:
                    # Unterminated single-line string; give up on it at end of line.
                    break
                j += 1
            if multiline:
                line += content.count("\n", i, min(j, n))
            i = j + 1 if j < n and content[j] == ch else j
            continue

        if ch in _OPENERS:
            stack.append((ch, line))
        elif ch in _PAIRS:
            expected = _PAIRS[ch]
            if not stack:
                return SyntaxProblem(message=f"Unexpected '{ch}' with no matching '{expected}'", line=line)
            opener, opened_at = stack.pop()
            if opener != expected:
                return SyntaxProblem(
                    message=f"Mismatched '{ch}': '{opener}' opened on line {opened_at} is still open",
                    line=line,
                )
        i += 1

    if stack and not is_illustrative(content):
        opener, opened_at = stack[-1]
        return SyntaxProblem(message=f"Unclosed '{opener}'", line=opened_at)
    return None


def check_code_block(block: CodeBlock) -> SyntaxProblem | None:
    """Dispatch on the block's language. Unknown languages are not checked."""

    language = block.language
    content = block.content
    if block.skip or not content.strip():
        return None
    if language in PYTHON_LANGUAGES:
        return check_python(content)
    if language in JSON_LANGUAGES:
        return check_json(content)
    if language in YAML_LANGUAGES:
        return check_yaml(content)
    if language in TOML_LANGUAGES:
        return check_toml(content)
    if language in BRACE_LANGUAGES:
        return check_delimiters(content, language)
    return None
