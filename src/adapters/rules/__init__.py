"""Lint rules.

Why a package:
- One module per concern (headings, code blocks, links, navigation, numbering).
- Each rule implements `core.interfaces.rule.DocumentRule` or `CollectionRule`.
"""

from adapters.rules.code_blocks import CodeBlockSyntaxRule, MissingLanguageRule, UnterminatedFenceRule
from adapters.rules.headings import (
    EmptyHeadingRule,
    FirstHeadingLevelRule,
    MultipleTitlesRule,
    SkippedHeadingLevelRule,
)
from adapters.rules.links import BrokenLocalLinkRule, ExternalLinkRule, MissingAnchorRule
from adapters.rules.navigation import MissingNextStepRule, MissingNextStepTargetRule, NextStepOrderRule
from adapters.rules.sequence import SequenceNumberingRule

DOCUMENT_RULES = (
    MissingNextStepTargetRule,
    BrokenLocalLinkRule,
    MissingAnchorRule,
    SkippedHeadingLevelRule,
    FirstHeadingLevelRule,
    MultipleTitlesRule,
    EmptyHeadingRule,
    CodeBlockSyntaxRule,
    UnterminatedFenceRule,
    MissingLanguageRule,
)

COLLECTION_RULES = (
    MissingNextStepRule,
    NextStepOrderRule,
    SequenceNumberingRule,
)


def rule_catalog() -> list:
    """One instance of every rule, ordered by code."""

    rules = [rule() for rule in (*DOCUMENT_RULES, *COLLECTION_RULES, ExternalLinkRule)]
    return sorted(rules, key=lambda rule: rule.code)


__all__ = [
    "COLLECTION_RULES",
    "DOCUMENT_RULES",
    "BrokenLocalLinkRule",
    "CodeBlockSyntaxRule",
    "EmptyHeadingRule",
    "ExternalLinkRule",
    "FirstHeadingLevelRule",
    "MissingAnchorRule",
    "MissingLanguageRule",
    "MissingNextStepRule",
    "MissingNextStepTargetRule",
    "MultipleTitlesRule",
    "NextStepOrderRule",
    "SequenceNumberingRule",
    "SkippedHeadingLevelRule",
    "UnterminatedFenceRule",
    "rule_catalog",
]
