"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import tempfile
from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from adapters.report_exporter import export_report_pdf, template_path
from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.domain.errors import ExportError
from core.domain.models import LintReport

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.head(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc) or exc.__class__.__name__


def _check_pdf() -> tuple[bool, str]:
    """Render a minimal PDF to detect WeasyPrint issues."""

    with tempfile.TemporaryDirectory() as tmp:
        try:
            export_report_pdf(report=LintReport(root="doctor"), output_path=Path(tmp) / "doctor.pdf")
        except ExportError as exc:
            return False, exc.details.get("reason", exc.message)
    return True, "OK"


@app.command()
def run(
    network: bool = typer.Option(True, "--network/--no-network", help="Probe HTTP connectivity."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="guidelint doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("User config", "OK" if get_user_env_file().exists() else "OPTIONAL", str(get_user_env_file()))
    table.add_row("Next-step pattern", "OK", settings.next_step_pattern)
    table.add_row("Include globs", "OK", ", ".join(settings.include_globs))
    if settings.ignore_rules:
        table.add_row("Ignored rules", "OK", ", ".join(settings.ignore_rules))

    # Parsers
    yaml_detail = "LibYAML (C)" if getattr(yaml, "__with_libyaml__", False) else "pure Python"
    table.add_row("PyYAML", "OK", f"{yaml.__version__} ({yaml_detail})")

    template = template_path()
    table.add_row("HTML template", "OK" if template.is_file() else "FAIL", str(template))

    # Connectivity (best-effort)
    if network:
        ok_http, detail_http = asyncio.run(_check_http("https://github.com", settings))
        table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)
    else:
        table.add_row("HTTP connectivity", "SKIPPED", "--no-network")

    # PDF
    ok_pdf, detail_pdf = _check_pdf()
    table.add_row("WeasyPrint PDF", "OK" if ok_pdf else "FAIL", detail_pdf)

    _console.print(table)

    if not ok_pdf:
        _console.print(
            "\n[yellow]Note:[/yellow] When PDF export fails, `--export-pdf` automatically falls back to HTML."
        )


@app.command(name="configure")
def configure() -> None:
    """Interactive setup (stores settings in the user config .env)."""

    current = AppSettings()

    pattern = typer.prompt(
        "'Next Step' pattern (regex)",
        default=current.next_step_pattern,
        show_default=True,
    ).strip()
    timeout = typer.prompt(
        "External link timeout (seconds)",
        default=current.http_timeout_seconds,
        type=float,
        show_default=True,
    )
    concurrency = typer.prompt(
        "External link concurrency",
        default=current.external_max_concurrency,
        type=int,
        show_default=True,
    )
    ignore = typer.prompt(
        "Rules to ignore by default (comma-separated, empty for none)",
        default=",".join(current.ignore_rules),
        show_default=False,
    ).strip()

    if not pattern:
        raise typer.BadParameter("the next-step pattern is required")
    if timeout <= 0:
        raise typer.BadParameter("timeout must be positive")
    if not 1 <= concurrency <= 200:
        raise typer.BadParameter("concurrency must be between 1 and 200")

    codes = [code.strip().upper() for code in ignore.split(",") if code.strip()]
    env_path = write_user_env_vars(
        {
            "GUIDELINT_NEXT_STEP_PATTERN": pattern,
            "GUIDELINT_HTTP_TIMEOUT_SECONDS": str(timeout),
            "GUIDELINT_EXTERNAL_MAX_CONCURRENCY": str(concurrency),
            "GUIDELINT_IGNORE_RULES": "[" + ",".join(f'"{code}"' for code in codes) + "]",
        }
    )

    _console.print(f"[green]Saved configuration to:[/green] {env_path}")
