"""Line-oriented Markdown scanner.

Extracts the structure guidelint needs (headings, fenced code blocks, links,
anchors) from guide documents. It does not render Markdown; it only has to
agree with CommonMark on where fences and headings start and end.

Raw HTML fragments (`<a href>`, `id=` anchors) are handed to BeautifulSoup.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from bs4 import BeautifulSoup

from core.domain.errors import DocumentReadError
from core.domain.models import CodeBlock, Document, Heading, Link, LinkKind

logger = logging.getLogger(__name__)

DEFAULT_NEXT_STEP_RE = re.compile(r"next\s+step", re.IGNORECASE)

_FENCE_OPEN_RE = re.compile(r"^(?P<indent> *)(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
_ATX_RE = re.compile(r"^ {0,3}(?P<hashes>#{1,6})(?:[ \t]+(?P<text>.*?))?[ \t]*$")
_ATX_CLOSING_RE = re.compile(r"(?:^|[ \t]+)#+[ \t]*$")
_SETEXT_RE = re.compile(r"^ {0,3}(?P<underline>=+|-+)[ \t]*$")
_NON_PARAGRAPH_RE = re.compile(r"^\s*(?:[-*+]\s|\d+[.)]\s|>|\|)")
_REF_DEF_RE = re.compile(r"^ {0,3}\[(?P<label>[^\]]+)\]:[ \t]*<?(?P<target>[^\s>]*)>?(?:[ \t]+.*)?$")
_INLINE_LINK_RE = re.compile(
    r"(?P<bang>!?)\[(?P<text>(?:[^\[\]]|\[[^\[\]]*\])*)\]"
    r"\(\s*(?:<(?P<angle>[^<>\n]*)>|(?P<target>(?:[^()\s]|\([^()\s]*\))*))"
    r"(?:\s+(?:\"[^\"]*\"|'[^']*'|\([^)]*\)))?\s*\)"
)
_REF_LINK_RE = re.compile(r"(?P<bang>!?)\[(?P<text>[^\[\]]+)\]\[(?P<label>[^\[\]]*)\]")
_AUTOLINK_RE = re.compile(r"<(?P<target>https?://[^>\s]+)>", re.IGNORECASE)
_CODE_SPAN_RE = re.compile(r"(`+)(.+?)\1")
_HTML_HINT_RE = re.compile(r"<[a-zA-Z][^>]*(?:href|id|name)\s*=", re.IGNORECASE)
_HTML_COMMENT_RE = re.compile(r"<!--.*?-->")
_SKIP_DIRECTIVE_RE = re.compile(r"^\s*<!--\s*guidelint:\s*skip\s*-->\s*$", re.IGNORECASE)
_SEQUENCE_RE = re.compile(r"^(?P<number>\d+)(?:[-_. ]|$)")
_SLUG_STRIP_RE = re.compile(r"[^\w\- ]", re.UNICODE)
_INLINE_MARKUP_RE = re.compile(r"[*`]|<[^>]+>")


@dataclass
class ParsedMarkdown:
    headings: list[Heading] = field(default_factory=list)
    code_blocks: list[CodeBlock] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    anchors: set[str] = field(default_factory=set)


@dataclass
class _PendingReference:
    label: str
    text: str
    line: int
    is_next_step: bool


def normalize_language(info: str) -> str:
    """Reduce a fence info string to its language tag.

    Examples: `python title="x"` -> `python`, `{.yaml}` -> `yaml`, `JS,linenos` -> `js`.
    """

    value = info.strip()
    if not value:
        return ""
    if value.startswith("{"):
        value = value.strip("{}").strip().lstrip(".")
    token = re.split(r"[\s,{]", value, maxsplit=1)[0]
    return token.strip().lower()


def slugify(text: str) -> str:
    """GitHub-style heading anchor (without duplicate suffix)."""

    plain = _INLINE_LINK_RE.sub(lambda m: m.group("text"), text)
    plain = _INLINE_MARKUP_RE.sub("", plain)
    plain = _SLUG_STRIP_RE.sub("", plain.strip().lower())
    return plain.replace(" ", "-")


def sequence_number_for(path: Path) -> int | None:
    match = _SEQUENCE_RE.match(path.name)
    if not match:
        return None
    return int(match.group("number"))


def _mask_code_spans(line: str) -> str:
    return _CODE_SPAN_RE.sub(lambda m: " " * len(m.group(0)), line)


def _extract_html(fragment: str, *, line: int, is_next_step: bool) -> tuple[list[Link], set[str]]:
    soup = BeautifulSoup(fragment, "html.parser")
    links: list[Link] = []
    anchors: set[str] = set()
    for tag in soup.find_all(True):
        href = tag.get("href")
        if href and tag.name == "a":
            links.append(
                Link(
                    target=str(href).strip(),
                    text=tag.get_text(strip=True),
                    line=line,
                    kind=LinkKind.HTML,
                    is_next_step=is_next_step,
                )
            )
        anchor_id = tag.get("id")
        if anchor_id:
            anchors.add(str(anchor_id))
        if tag.name == "a" and tag.get("name"):
            anchors.add(str(tag.get("name")))
    return links, anchors


def parse_markdown(text: str, *, next_step_re: re.Pattern[str] | None = None) -> ParsedMarkdown:
    """Scan Markdown source into headings, code blocks, links and anchors."""

    next_step_re = next_step_re or DEFAULT_NEXT_STEP_RE
    result = ParsedMarkdown()
    lines = text.lstrip("\ufeff").splitlines()

    ref_defs: dict[str, str] = {}
    pending_refs: list[_PendingReference] = []
    slug_counts: dict[str, int] = {}

    fence_char: str | None = None
    fence_len = 0
    fence_indent = 0
    fence_start = 0
    fence_info = ""
    fence_lines: list[str] = []
    fence_skip = False

    pending_skip = False
    paragraph: tuple[int, list[str]] | None = None
    next_step_scope: int | None = None

    def add_heading(level: int, heading_text: str, line_no: int) -> None:
        nonlocal next_step_scope
        base = slugify(heading_text)
        count = slug_counts.get(base, 0)
        slug_counts[base] = count + 1
        slug = base if count == 0 else f"{base}-{count}"
        result.headings.append(Heading(level=level, text=heading_text, line=line_no, slug=slug))
        result.anchors.add(slug)

        if next_step_scope is not None and level <= next_step_scope:
            next_step_scope = None
        if next_step_re.search(heading_text):
            next_step_scope = level

    def scan_links(raw: str, line_no: int) -> None:
        visible = _mask_code_spans(raw)
        in_scope = next_step_scope is not None
        line_is_next = bool(next_step_re.search(visible))

        for match in _INLINE_LINK_RE.finditer(visible):
            if match.group("bang"):
                continue
            link_text = match.group("text")
            target = match.group("angle")
            result.links.append(
                Link(
                    target=match.group("target") if target is None else target.strip(),
                    text=link_text,
                    line=line_no,
                    kind=LinkKind.MARKDOWN,
                    is_next_step=in_scope or line_is_next,
                )
            )
        for match in _REF_LINK_RE.finditer(visible):
            if match.group("bang"):
                continue
            label = match.group("label") or match.group("text")
            pending_refs.append(
                _PendingReference(
                    label=label.strip().lower(),
                    text=match.group("text"),
                    line=line_no,
                    is_next_step=in_scope or line_is_next,
                )
            )
        # `[x](<https://...>)` is already an inline link.
        outside_inline = _INLINE_LINK_RE.sub(lambda m: " " * len(m.group(0)), visible)
        for match in _AUTOLINK_RE.finditer(outside_inline):
            result.links.append(
                Link(
                    target=match.group("target"),
                    text=match.group("target"),
                    line=line_no,
                    kind=LinkKind.AUTOLINK,
                    is_next_step=in_scope or line_is_next,
                )
            )
        without_comments = _HTML_COMMENT_RE.sub("", visible)
        if _HTML_HINT_RE.search(without_comments):
            html_links, html_anchors = _extract_html(
                without_comments, line=line_no, is_next_step=in_scope or line_is_next
            )
            result.links.extend(html_links)
            result.anchors.update(html_anchors)

    start = 0
    # YAML front matter.
    if lines and lines[0].strip() == "---":
        for idx in range(1, len(lines)):
            if lines[idx].strip() in ("---", "..."):
                start = idx + 1
                break

    for idx in range(start, len(lines)):
        line_no = idx + 1
        raw = lines[idx]

        if fence_char is not None:
            stripped = raw.strip()
            indent = len(raw) - len(raw.lstrip(" "))
            if (
                indent <= fence_indent + 3
                and stripped
                and set(stripped) == {fence_char}
                and len(stripped) >= fence_len
            ):
                result.code_blocks.append(
                    CodeBlock(
                        language=normalize_language(fence_info),
                        info=fence_info.strip(),
                        content="\n".join(fence_lines),
                        start_line=fence_start,
                        end_line=line_no,
                        fence=fence_char * fence_len,
                        skip=fence_skip,
                    )
                )
                fence_char = None
                fence_lines = []
            else:
                # Content is dedented by the fence's own indentation.
                dedent = min(fence_indent, len(raw) - len(raw.lstrip(" ")))
                fence_lines.append(raw[dedent:])
            continue

        if not raw.strip():
            paragraph = None
            continue

        if _SKIP_DIRECTIVE_RE.match(raw):
            pending_skip = True
            paragraph = None
            continue

        fence_match = _FENCE_OPEN_RE.match(raw)
        if fence_match:
            fence = fence_match.group("fence")
            info = fence_match.group("info")
            if not (fence[0] == "`" and "`" in info):
                fence_char = fence[0]
                fence_len = len(fence)
                fence_indent = len(fence_match.group("indent"))
                fence_start = line_no
                fence_info = info
                fence_lines = []
                fence_skip = pending_skip
                pending_skip = False
                paragraph = None
                continue

        pending_skip = False

        atx = _ATX_RE.match(raw)
        if atx:
            heading_text = atx.group("text") or ""
            heading_text = _ATX_CLOSING_RE.sub("", heading_text).strip()
            add_heading(len(atx.group("hashes")), heading_text, line_no)
            scan_links(raw, line_no)
            paragraph = None
            continue

        setext = _SETEXT_RE.match(raw)
        if setext:
            if paragraph is not None:
                level = 1 if setext.group("underline").startswith("=") else 2
                para_no, para_lines = paragraph
                add_heading(level, " ".join(part.strip() for part in para_lines), para_no)
            # Otherwise a thematic break.
            paragraph = None
            continue

        ref_def = _REF_DEF_RE.match(raw)
        if ref_def:
            ref_defs.setdefault(ref_def.group("label").strip().lower(), ref_def.group("target"))
            paragraph = None
            continue

        scan_links(raw, line_no)
        if _NON_PARAGRAPH_RE.match(raw):
            paragraph = None
        elif paragraph is None:
            paragraph = (line_no, [raw])
        else:
            paragraph[1].append(raw)

    if fence_char is not None:
        result.code_blocks.append(
            CodeBlock(
                language=normalize_language(fence_info),
                info=fence_info.strip(),
                content="\n".join(fence_lines),
                start_line=fence_start,
                end_line=None,
                fence=fence_char * fence_len,
                skip=fence_skip,
            )
        )

    for ref in pending_refs:
        target = ref_defs.get(ref.label)
        if target is None:
            logger.debug("Unresolved reference link [%s] on line %d", ref.label, ref.line)
            continue
        result.links.append(
            Link(
                target=target,
                text=ref.text,
                line=ref.line,
                kind=LinkKind.REFERENCE,
                is_next_step=ref.is_next_step,
            )
        )

    result.links.sort(key=lambda link: link.line)
    return result


def read_markdown(path: Path) -> str:
    try:
        return path.read_bytes().decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DocumentReadError(path, f"not valid UTF-8 ({exc.reason} at byte {exc.start})") from exc
    except OSError as exc:
        raise DocumentReadError(path, exc.strerror or str(exc)) from exc


def parse_document(
    path: Path,
    *,
    root: Path,
    next_step_re: re.Pattern[str] | None = None,
) -> Document:
    """Read and parse one guide. Raises `DocumentReadError` for unreadable files."""

    text = read_markdown(path)
    parsed = parse_markdown(text, next_step_re=next_step_re)
    resolved = path.resolve()
    relative = resolved.relative_to(root.resolve()).as_posix()
    logger.debug(
        "Parsed %s: %d headings, %d code blocks, %d links",
        relative,
        len(parsed.headings),
        len(parsed.code_blocks),
        len(parsed.links),
    )
    return Document(
        path=resolved,
        relative_path=relative,
        headings=parsed.headings,
        code_blocks=parsed.code_blocks,
        links=parsed.links,
        anchors=parsed.anchors,
        sequence_number=sequence_number_for(path),
    )
