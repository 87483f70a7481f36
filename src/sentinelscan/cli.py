"""SentinelScan CLI - single-target web security scanner."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from sentinelscan.ai.llm import LLMClient
from sentinelscan.config import (
    get_llm_config,
    get_output_dir,
    is_verbose,
    load_detector_settings,
)
from sentinelscan.errors import InvalidTargetError, ReportError, UnknownCheckError
from sentinelscan.modules.detectors import ALL_CHECKS, create_default_registry, resolve_checks
from sentinelscan.modules.report import FORMATS, AISummarizer, ReportGenerator
from sentinelscan.modules.scan import DetectorError, ScanOrchestrator, ScanReport, parse_target

app = typer.Typer(
    name="sentinelscan",
    help="Single-target web application security scanner",
    no_args_is_help=True,
)
console = Console()


def configure_logging(verbose: bool) -> None:
    """Route log records through rich; DEBUG when verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.command()
def version() -> None:
    """Show the installed SentinelScan version."""
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as pkg_version

    try:
        current_version = pkg_version("sentinelscan")
    except PackageNotFoundError:
        current_version = "0.0.0+unknown"

    console.print(f"SentinelScan {current_version}")


@app.command()
def checks() -> None:
    """List the available checks in execution order."""
    registry = create_default_registry()
    table = Table(title="Available checks")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Check", style="cyan")
    table.add_column("Description")
    for index, (check, description) in enumerate(registry.descriptions().items(), start=1):
        table.add_row(str(index), check, description)
    console.print(table)


def print_results(report: ScanReport) -> None:
    table = Table(title=f"Results for {report.target}")
    table.add_column("Check", style="cyan")
    table.add_column("Status")
    table.add_column("Issues", overflow="fold")
    for check, result in report.results.items():
        if isinstance(result, DetectorError):
            table.add_row(check, "[yellow]error[/yellow]", escape(result.error))
        elif result.vulnerable:
            table.add_row(check, "[red]vulnerable[/red]", escape("\n".join(result.issues)))
        else:
            table.add_row(check, "[green]ok[/green]", escape("\n".join(result.issues)))
    console.print(table)


@app.command()
def scan(
    url: str = typer.Argument(..., help="Target URL (http:// or https://)"),
    checks: str = typer.Option(
        ALL_CHECKS,
        "--checks",
        "-c",
        help="Comma-separated check ids, or 'all'",
    ),
    fmt: str = typer.Option("json", "--format", "-f", help=f"Report format: {', '.join(FORMATS)}"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Report output directory (default: ./reports)"
    ),
    no_ai: bool = typer.Option(False, "--no-ai", help="Skip the AI security assessment"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Scan one target and write a report."""
    configure_logging(verbose or is_verbose())

    fmt = fmt.lower()
    if fmt not in FORMATS:
        console.print(f"[red]Unsupported format: {fmt}. Choose from {', '.join(FORMATS)}[/red]")
        raise typer.Exit(1)
    try:
        target = parse_target(url)
        selected = resolve_checks(checks)
    except (InvalidTargetError, UnknownCheckError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        Panel(
            f"[bold]Target:[/bold] {target.url}\n[bold]Checks:[/bold] {len(selected)}",
            title="SentinelScan",
        )
    )

    orchestrator = ScanOrchestrator(create_default_registry(load_detector_settings()))
    report = asyncio.run(
        orchestrator.run(
            target, selected, progress=lambda msg: console.print(f"[dim]{escape(msg)}[/dim]")
        )
    )
    print_results(report)

    llm: LLMClient | None = None
    summarizer = None
    if not no_ai:
        try:
            llm = LLMClient(get_llm_config())
            summarizer = AISummarizer(llm)
        except ValueError as e:
            console.print(f"[yellow]AI assessment disabled: {e}[/yellow]")

    try:
        report_file = ReportGenerator(output or get_output_dir(), summarizer).generate(report, fmt)
    except ReportError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    finally:
        if llm is not None:
            llm.close()

    if report.ai_summary is not None:
        summary = report.ai_summary
        console.print(
            Panel(
                f"[bold]Rating:[/bold] {summary.rating}  "
                f"[bold]Risk:[/bold] {summary.overall_risk}  "
                f"[bold]Score:[/bold] {summary.severity_score}\n\n{summary.summary}",
                title="AI Security Assessment",
            )
        )
    console.print(f"[green]Report written to {report_file}[/green]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
