# src/cli/runner.py

"""Headless CLI runner around the async scrape orchestrator."""

import json
import sys

from rich.console import Console
from rich.table import Table

from src.config.logging_config import get_logger
from src.config.source_specs import SourceSpec, select_source_specs
from src.models.errors import RequestValidationError, ScrapeFailedError
from src.models.product import ProductListing
from src.models.scrape_request import ScrapeRequest
from src.services.scrape_orchestrator import ScrapeOrchestrator

logger = get_logger("cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

EXIT_OK = 0
EXIT_INTERNAL_ERROR = 1
EXIT_BAD_REQUEST = 2


def resolve_sources(source_csv: str | None) -> list[SourceSpec]:
    """Map a comma-separated list of source IDs to their specs.

    Returns all sources when *source_csv* is ``None``.
    Raises ``SystemExit`` on unknown IDs.
    """
    if source_csv is None:
        return select_source_specs()

    requested = [s.strip() for s in source_csv.split(",") if s.strip()]
    try:
        return select_source_specs(requested)
    except KeyError as exc:
        valid = ", ".join(spec.id for spec in select_source_specs())
        _err.print(f"[red]Unknown source(s): {exc.args[0]}[/red]")
        _err.print(f"[dim]Available: {valid}[/dim]")
        raise SystemExit(EXIT_BAD_REQUEST) from exc


def _print_table(listings: list[ProductListing]) -> None:
    """Render a Rich table of listings to stdout."""
    table = Table(
        title="Search Results",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Platform", style="magenta")
    table.add_column("Product", max_width=60)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Rating", justify="center")
    table.add_column("Discount", style="yellow")
    table.add_column("Link", overflow="fold", style="dim")

    for idx, item in enumerate(listings, 1):
        table.add_row(
            str(idx),
            f"{item.platform_logo} {item.platform}",
            item.title[:60],
            item.price,
            item.rating,
            item.discount or "—",
            item.link,
        )

    Console().print(table)


async def cli_scrape(
    term: str | None,
    page: int,
    source_csv: str | None,
    output_format: str,
) -> int:
    """Run a headless scrape and return an exit code."""
    specs = resolve_sources(source_csv)

    try:
        request = ScrapeRequest.create(term, page)
    except RequestValidationError as exc:
        _err.print(f"[red]{exc}[/red]")
        return EXIT_BAD_REQUEST

    orchestrator = ScrapeOrchestrator(specs)
    _err.print(
        f"[bold]Searching:[/bold] {request.term}  [dim]page={request.page} "
        f"sources={', '.join(spec.label for spec in specs)}[/dim]"
    )

    try:
        result = await orchestrator.scrape(request.term, request.page)
    except RequestValidationError as exc:
        _err.print(f"[red]{exc}[/red]")
        return EXIT_BAD_REQUEST
    except ScrapeFailedError as exc:
        json.dump(
            {"error": "Internal server error", "details": str(exc)},
            sys.stdout,
        )
        sys.stdout.write("\n")
        return EXIT_INTERNAL_ERROR

    for source_id, reason in result.errors.items():
        _err.print(f"[yellow]{source_id}: {reason}[/yellow]")

    counts = ", ".join(f"{k}: {v}" for k, v in result.counts.items())
    _err.print(
        f"[green]✓ {result.total} results in {result.duration_ms}ms "
        f"({counts})[/green]"
    )

    if output_format == "table":
        _print_table(result.listings)
    else:
        json.dump(result.to_dict(), sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")

    return EXIT_OK


async def run_health_check() -> int:
    """Run connectivity health check on all sources."""
    from src.services.health_checker import HealthChecker, browser_available

    _err.print("[bold]Running source health check...[/bold]")
    checker = HealthChecker()
    results = await checker.check_all()

    table = Table(
        title="Source Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Source", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]OK[/green]"
        elif r.status == "slow":
            status = "[yellow]SLOW[/yellow]"
        else:
            status = "[red]DOWN[/red]"
            any_down = True

        latency = f"{r.latency_ms:.0f}ms" if r.latency_ms > 0 else "—"
        table.add_row(r.source_id, status, latency, r.message)

    Console().print(table)

    if browser_available():
        _err.print("[green]Browser automation: available[/green]")
    else:
        _err.print("[red]Browser automation: playwright not installed[/red]")
        any_down = True

    return EXIT_INTERNAL_ERROR if any_down else EXIT_OK
