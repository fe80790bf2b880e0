"""guidelint command-line interface (Typer)."""

from __future__ import annotations

import asyncio
import logging
from contextlib import nullcontext
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from adapters.json_exporter import export_report_json, report_to_json
from adapters.markdown_parser import parse_document
from adapters.report_exporter import export_report_html, export_report_pdf
from adapters.rules import rule_catalog
from cli import doctor
from cli.ui_components import (
    build_findings_table,
    build_outline_tree,
    build_rules_table,
    build_summary_panel,
    print_banner,
)
from core.config import AppSettings
from core.domain.errors import DocumentReadError, ExportError, GuideLintError
from core.logging_config import setup_logging
from core.services.lint_pipeline import LintRequest, PipelineHooks, build_outline, discover_documents, lint

logger = logging.getLogger(__name__)

app = typer.Typer(
    no_args_is_help=True,
    help="Lint numbered Markdown guide collections: next-step links, headings and code blocks.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
) -> None:
    setup_logging(verbose=verbose)


def _load_settings() -> AppSettings:
    try:
        return AppSettings()
    except ValueError as exc:
        # pydantic.ValidationError is a ValueError.
        _err_console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=2) from exc


def _export(report, *, json_path: Path | None, html_path: Path | None, pdf_path: Path | None, console: Console) -> None:
    if json_path:
        out = export_report_json(report=report, output_path=json_path)
        console.print(f"[green]JSON report:[/green] {out}")
    if html_path:
        out = export_report_html(report=report, output_path=html_path)
        console.print(f"[green]HTML report:[/green] {out}")
    if pdf_path:
        try:
            out = export_report_pdf(report=report, output_path=pdf_path)
            console.print(f"[green]PDF report:[/green] {out}")
        except ExportError as exc:
            fallback = pdf_path.with_suffix(".html")
            out = export_report_html(report=report, output_path=fallback)
            console.print(f"[yellow]{exc.message}[/yellow]")
            console.print(f"[yellow]Wrote HTML instead:[/yellow] {out}")


@app.command(name="lint")
def lint_command(
    path: Path = typer.Argument(Path("."), help="Directory (or single Markdown file) to lint."),
    select: Optional[list[str]] = typer.Option(
        None, "--select", "-s", help="Only run these rule codes or prefixes (repeatable, comma-separated)."
    ),
    ignore: Optional[list[str]] = typer.Option(
        None, "--ignore", "-i", help="Skip these rule codes or prefixes (repeatable, comma-separated)."
    ),
    external: bool = typer.Option(False, "--external", help="Also check http(s) links over the network."),
    strict: bool = typer.Option(False, "--strict", help="Warnings also fail the run."),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table or json."),
    export_json: Optional[Path] = typer.Option(None, "--export-json", help="Write the report as JSON."),
    export_html: Optional[Path] = typer.Option(None, "--export-html", help="Write the report as HTML."),
    export_pdf: Optional[Path] = typer.Option(None, "--export-pdf", help="Write the report as PDF (falls back to HTML)."),
    no_banner: bool = typer.Option(False, "--no-banner", help="Do not print the banner."),
) -> None:
    """Lint a guide collection and report findings."""

    output_format = output_format.strip().lower()
    if output_format not in ("table", "json"):
        raise typer.BadParameter("format must be 'table' or 'json'", param_hint="--format")

    settings = _load_settings()
    as_json = output_format == "json"
    # JSON keeps stdout clean: every human-oriented message goes to stderr.
    ui = _err_console if as_json else _console

    if not as_json and not no_banner:
        print_banner(_console)

    request = LintRequest(root=path, select=select or (), ignore=ignore or (), external=external, strict=strict)

    show_progress = not as_json and _err_console.is_terminal
    progress = Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=_err_console,
        transient=True,
    )
    task_ids: dict[str, int] = {}

    def on_documents(total: int) -> None:
        task_ids["docs"] = progress.add_task("Parsing documents", total=total)

    def on_parsed(_: str) -> None:
        progress.advance(task_ids["docs"])

    def on_external_start(total: int) -> None:
        task_ids["external"] = progress.add_task("Checking external links", total=total)

    def on_external_progress(_status) -> None:
        progress.advance(task_ids["external"])

    hooks = PipelineHooks(warning=lambda message: ui.print(f"[yellow]{message}[/yellow]"))
    if show_progress:
        hooks.documents_found = on_documents
        hooks.document_parsed = on_parsed
        hooks.external_start = on_external_start
        hooks.external_progress = on_external_progress

    try:
        with progress if show_progress else nullcontext():
            result = asyncio.run(lint(settings=settings, request=request, hooks=hooks))
    except GuideLintError as exc:
        _err_console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(code=2) from exc

    report = result.report
    if as_json:
        typer.echo(report_to_json(report), nl=False)
    else:
        if report.findings:
            _console.print(build_findings_table(report))
        _console.print(build_summary_panel(report, strict=strict))

    try:
        _export(report, json_path=export_json, html_path=export_html, pdf_path=export_pdf, console=ui)
    except (OSError, GuideLintError) as exc:
        _err_console.print(f"[red]Export failed:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    raise typer.Exit(code=result.exit_code)


@app.command(name="rules")
def rules_command() -> None:
    """List every rule with its code and default severity."""

    _console.print(build_rules_table(rule_catalog()))


@app.command(name="outline")
def outline_command(
    path: Path = typer.Argument(Path("."), help="Directory containing the guides."),
) -> None:
    """Show the reading order and each guide's 'Next Step' targets."""

    settings = _load_settings()
    root = path.resolve()
    try:
        paths = discover_documents(root, include_globs=settings.include_globs, exclude_globs=settings.exclude_globs)
    except GuideLintError as exc:
        _err_console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(code=2) from exc

    lint_root = root.parent if root.is_file() else root
    documents = []
    for doc_path in paths:
        try:
            documents.append(parse_document(doc_path, root=lint_root, next_step_re=settings.next_step_regex()))
        except DocumentReadError as exc:
            _err_console.print(f"[yellow]Skipping:[/yellow] {exc.message}")

    if not documents:
        _console.print(f"[yellow]No Markdown documents found under {root}.[/yellow]")
        return
    _console.print(build_outline_tree(build_outline(documents), root_label=str(lint_root)))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
