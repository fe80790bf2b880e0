"""Rich UI components for the CLI.

Why separate components:
- Keeps command logic apart from presentation details.
- Tables and panels are reused by several commands.
"""

from __future__ import annotations

from typing import Sequence

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from core.domain.models import Document, LintReport, Severity

SEVERITY_STYLES = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


def print_banner(console: Console) -> None:
    """Print the welcome banner.

    Disabled in non-interactive modes (JSON/pipelines).
    """

    title = Text("guidelint", style="bold cyan")
    subtitle = Text("Next-step links • Headings • Code blocks", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_findings_table(report: LintReport) -> Table:
    table = Table(title="Findings", show_lines=False)
    table.add_column("File", style="magenta")
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Rule", style="bold", no_wrap=True)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Message", style="white")

    for finding in report.findings:
        table.add_row(
            finding.path,
            str(finding.line) if finding.line else "",
            finding.rule,
            Text(finding.severity.value, style=SEVERITY_STYLES[finding.severity]),
            finding.message,
        )
    return table


def build_summary_panel(report: LintReport, *, strict: bool = False) -> Panel:
    counts = report.counts()
    body = Text()
    body.append(f"Documents checked: {report.documents_checked}\n")
    for severity in Severity:
        body.append(f"{severity.value.capitalize()}: {counts[severity.value]}\n", style=SEVERITY_STYLES[severity])

    failed = report.exit_code(strict=strict) != 0
    status = Text("FAILED" if failed else "PASSED", style="bold red" if failed else "bold green")
    body.append("\nResult: ")
    body.append(status)
    return Panel(body, title=Text("Summary", style="bold"), border_style="red" if failed else "green")


def build_rules_table(rules: Sequence) -> Table:
    table = Table(title="Rules")
    table.add_column("Code", style="bold", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("Default", no_wrap=True)
    table.add_column("Description", style="white")
    for rule in rules:
        table.add_row(
            rule.code,
            rule.name,
            Text(rule.severity.value, style=SEVERITY_STYLES[rule.severity]),
            rule.description,
        )
    return table


def build_outline_tree(outline: Sequence[tuple[Document, list[str]]], *, root_label: str) -> Tree:
    """Reading order as a tree: one branch per guide, leaves for next-step targets."""

    tree = Tree(Text(root_label, style="bold"))
    for document, targets in outline:
        number = f"{document.sequence_number:02d} " if document.sequence_number is not None else ""
        label = Text.assemble(
            (number, "bold cyan"),
            (document.title or "(untitled)", "white"),
            ("  " + document.relative_path, "dim"),
        )
        branch = tree.add(label)
        for target in targets:
            branch.add(Text(f"→ {target}", style="green"))
    return tree
