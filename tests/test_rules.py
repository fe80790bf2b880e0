"""Tests for individual lint rules."""

from adapters.link_checker import LinkStatus
from adapters.rules import (
    BrokenLocalLinkRule,
    CodeBlockSyntaxRule,
    EmptyHeadingRule,
    ExternalLinkRule,
    FirstHeadingLevelRule,
    MissingAnchorRule,
    MissingLanguageRule,
    MissingNextStepRule,
    MissingNextStepTargetRule,
    MultipleTitlesRule,
    NextStepOrderRule,
    SequenceNumberingRule,
    SkippedHeadingLevelRule,
    UnterminatedFenceRule,
    rule_catalog,
)
from adapters.rules.base import link_fragment, link_path
from core.domain.models import Severity


def _single(write_tree, load_collection, content, name="doc.md"):
    root = write_tree({name: content})
    documents, context = load_collection(root)
    return documents[0], context


class TestHeadingRules:
    def test_skipped_level(self, write_tree, load_collection):
        document, context = _single(write_tree, load_collection, "# T\n\n### Skip\n")

        findings = SkippedHeadingLevelRule().check(document, context)

        assert len(findings) == 1
        assert findings[0].rule == "HDG001"
        assert findings[0].severity is Severity.ERROR
        assert findings[0].line == 3

    def test_well_formed_hierarchy(self, write_tree, load_collection):
        document, context = _single(write_tree, load_collection, "# T\n## A\n### B\n## C\n# D\n")

        assert SkippedHeadingLevelRule().check(document, context) == []

    def test_configured_jump(self, write_tree, load_collection):
        document, context = _single(write_tree, load_collection, "# T\n\n### Skip\n")
        context.settings = context.settings.model_copy(update={"max_heading_jump": 2})

        assert SkippedHeadingLevelRule().check(document, context) == []

    def test_first_heading_not_h1(self, write_tree, load_collection):
        document, context = _single(write_tree, load_collection, "## Start\n")

        findings = FirstHeadingLevelRule().check(document, context)

        assert [f.rule for f in findings] == ["HDG002"]

    def test_multiple_h1(self, write_tree, load_collection):
        document, context = _single(write_tree, load_collection, "# A\n\n# B\n")

        findings = MultipleTitlesRule().check(document, context)

        assert len(findings) == 1
        assert findings[0].line == 3

    def test_empty_heading(self, write_tree, load_collection):
        document, context = _single(write_tree, load_collection, "# A\n\n##\n")

        findings = EmptyHeadingRule().check(document, context)

        assert len(findings) == 1
        assert findings[0].severity is Severity.INFO


class TestCodeBlockRules:
    def test_syntax_error_points_at_source_line(self, write_tree, load_collection):
        document, context = _single(write_tree, load_collection, "# T\n\n```python\nx = (\n```\n")

        findings = CodeBlockSyntaxRule().check(document, context)

        assert len(findings) == 1
        assert findings[0].rule == "CODE001"
        assert findings[0].line == 4
        assert findings[0].context["language"] == "python"
        assert findings[0].context["block_line"] == 3

    def test_unterminated_fence_is_not_syntax_checked(self, write_tree, load_collection):
        document, context = _single(write_tree, load_collection, "# T\n```js\nfoo(\n")

        assert CodeBlockSyntaxRule().check(document, context) == []
        findings = UnterminatedFenceRule().check(document, context)
        assert [(f.rule, f.line) for f in findings] == [("CODE002", 2)]

    def test_missing_language(self, write_tree, load_collection):
        document, context = _single(write_tree, load_collection, "# T\n```\nplain\n```\n")

        findings = MissingLanguageRule().check(document, context)

        assert [(f.rule, f.line, f.severity) for f in findings] == [("CODE003", 2, Severity.INFO)]


class TestLinkRules:
    def test_broken_local_link(self, write_tree, load_collection):
        root = write_tree(
            {
                "doc.md": "# T\n[x](missing.md) [y](exists.md) [z](https://e.com) [a](#t) [m](mailto:a@b.c)\n",
                "exists.md": "# E\n",
            }
        )
        documents, context = load_collection(root)
        document = next(d for d in documents if d.relative_path == "doc.md")

        findings = BrokenLocalLinkRule().check(document, context)

        assert [f.context["target"] for f in findings] == ["missing.md"]

    def test_percent_encoded_paths(self, write_tree, load_collection):
        root = write_tree({"doc.md": "# T\n[s](My%20File.md)\n", "My File.md": "# M\n"})
        documents, context = load_collection(root)
        document = next(d for d in documents if d.relative_path == "doc.md")

        assert BrokenLocalLinkRule().check(document, context) == []

    def test_missing_anchor(self, write_tree, load_collection):
        root = write_tree(
            {
                "a.md": "# A\n[b](b.md#usage) [c](b.md#nope) [self](#a)\n",
                "b.md": "# B\n## Usage\n",
            }
        )
        documents, context = load_collection(root)
        document = next(d for d in documents if d.relative_path == "a.md")

        findings = MissingAnchorRule().check(document, context)

        assert len(findings) == 1
        assert findings[0].context["fragment"] == "nope"

    def test_external_findings_from_statuses(self, write_tree, load_collection):
        document, _ = _single(
            write_tree, load_collection, "# T\n[ok](https://ok.test/) [bad](https://bad.test/x#frag)\n"
        )
        statuses = {
            "https://ok.test/": LinkStatus(url="https://ok.test/", ok=True, status_code=200),
            "https://bad.test/x": LinkStatus(url="https://bad.test/x", ok=False, status_code=404),
        }

        rule = ExternalLinkRule()
        findings = rule.findings_for([document], statuses)

        assert rule.external_urls([document]) == {"https://ok.test/", "https://bad.test/x#frag"}
        assert len(findings) == 1
        assert findings[0].context["status_code"] == 404
        assert "HTTP 404" in findings[0].message


class TestNavigationRules:
    def test_next_step_target_missing(self, write_tree, load_collection):
        root = write_tree({"01-a.md": "# A\n\n**Next Step:** [B](02-b.md)\n"})
        documents, context = load_collection(root)

        findings = MissingNextStepTargetRule().check(documents[0], context)
        assert [(f.rule, f.line) for f in findings] == [("NAV001", 3)]
        # Reported once: the generic link rule leaves next-step links alone.
        assert BrokenLocalLinkRule().check(documents[0], context) == []

    def test_missing_next_step(self, write_tree, load_collection):
        root = write_tree({"01-a.md": "# A\n", "02-b.md": "# B\n"})
        documents, context = load_collection(root)

        findings = MissingNextStepRule().check_collection(documents, context)

        assert [(f.path, f.context["expected"]) for f in findings] == [("01-a.md", "02-b.md")]

    def test_next_step_out_of_order(self, write_tree, load_collection):
        root = write_tree(
            {
                "01-a.md": "# A\n\nNext step: [C](03-c.md)\n",
                "02-b.md": "# B\n\nNext step: [C](03-c.md)\n",
                "03-c.md": "# C\n",
            }
        )
        documents, context = load_collection(root)

        findings = NextStepOrderRule().check_collection(documents, context)

        assert len(findings) == 1
        assert findings[0].path == "01-a.md"
        assert findings[0].context["expected"] == "02-b.md"

    def test_sequences_are_scoped_per_directory(self, write_tree, load_collection):
        root = write_tree({"part1/01-a.md": "# A\n", "part2/02-b.md": "# B\n"})
        documents, context = load_collection(root)

        assert MissingNextStepRule().check_collection(documents, context) == []
        assert SequenceNumberingRule().check_collection(documents, context) == []


class TestSequenceRule:
    def test_duplicates_and_gaps(self, write_tree, load_collection):
        root = write_tree(
            {
                "01-a.md": "# A\n",
                "02-b.md": "# B\n",
                "02-c.md": "# C\n",
                "05-e.md": "# E\n",
            }
        )
        documents, context = load_collection(root)

        findings = SequenceNumberingRule().check_collection(documents, context)

        assert [(f.path, f.context.get("duplicate_of"), f.context.get("missing")) for f in findings] == [
            ("02-c.md", "02-b.md", None),
            ("05-e.md", None, [3, 4]),
        ]
        assert "3-4" in findings[1].message


def test_catalog_codes_are_unique_and_sorted():
    codes = [rule.code for rule in rule_catalog()]

    assert codes == sorted(codes)
    assert len(codes) == len(set(codes))
    assert {"NAV001", "HDG001", "CODE001", "LNK003", "SEQ001"} <= set(codes)


class TestLinkTargetHelpers:
    def test_path_drops_query_and_fragment(self):
        assert link_path("guide.md?raw=1#intro") == "guide.md"
        assert link_path("My%20File.md") == "My File.md"
        assert link_path("#intro") == ""

    def test_fragment(self):
        assert link_fragment("guide.md#Set%20up") == "Set up"
        assert link_fragment("guide.md") is None
        assert link_fragment("guide.md#") is None
