"""card-search CLI - free-text sports card search from the command line."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from card_search.config import get_settings
from card_search.data.database import initialize_catalog
from card_search.data.models import EntityType, SearchResponse, SearchResult
from card_search.exceptions import CardSearchError, SearchFailedError
from card_search.search import CATEGORIES, create_search_service

console = Console()

cli = typer.Typer(
    name="card-search",
    help="card-search - find sports cards, players, teams and sets from free text.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@cli.callback()
def main() -> None:
    """Configure logging from settings."""
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run_async(coro: Any) -> Any:
    """Run async coroutine in sync context."""
    return asyncio.run(coro)


def output_json(data: Any) -> None:
    """Output data as JSON (plain text, no Rich formatting)."""
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")
    # Use regular print, not rprint, to avoid ANSI codes in JSON output
    print(json.dumps(data, indent=2, default=str))


def _describe(result: SearchResult) -> tuple[str, str]:
    """Title and detail columns for one result."""
    fields = result.display_fields
    if result.entity_type is EntityType.CARD:
        title = f"#{fields.get('card_number')} {fields.get('player_names') or ''}".strip()
        flags = [
            label
            for key, label in (
                ("is_rookie", "RC"),
                ("is_autograph", "AUTO"),
                ("is_short_print", "SP"),
                ("is_relic", "RELIC"),
            )
            if fields.get(key)
        ]
        if fields.get("print_run"):
            flags.append(f"/{fields['print_run']}")
        parts = (fields.get("series_name"), fields.get("color_name"), *flags)
        detail = " ".join(str(part) for part in parts if part)
        return title, detail
    if result.entity_type is EntityType.PLAYER:
        teams = ", ".join(t["name"] for t in fields.get("teams", []))
        return fields.get("full_name", ""), f"{fields.get('card_count', 0)} cards {teams}".strip()
    if result.entity_type is EntityType.TEAM:
        return fields.get("name", ""), f"{fields.get('card_count') or 0} cards"
    return fields.get("series_name", ""), str(fields.get("year") or "")


def _print_response(response: SearchResponse) -> None:
    if response.message:
        style = "yellow" if response.relaxed else "dim"
        console.print(f"[{style}]{response.message}[/{style}]")

    for suggestion in response.suggestions:
        console.print(f"[cyan]{suggestion.reason}[/cyan]")

    if not response.results:
        return

    title = f"{response.total_results} result(s) for '{response.query}'"
    if response.pattern:
        title += f" ({response.pattern.strategy.value})"
    table = Table(title=title)
    table.add_column("Type", style="magenta")
    table.add_column("Result", style="cyan")
    table.add_column("Details", style="green")
    table.add_column("Score", justify="right")

    for result in response.results:
        name, detail = _describe(result)
        table.add_row(result.entity_type.value, name, detail, str(result.relevance_score))

    console.print(table)
    console.print(f"[dim]{response.search_time_ms:.1f} ms[/dim]")


@cli.command()
def search(
    query: Annotated[str, typer.Argument(help="Free-text query, e.g. 'trout 2011 update rc'")],
    limit: Annotated[int | None, typer.Option("-l", "--limit", help="Maximum results")] = None,
    category: Annotated[
        str, typer.Option("-c", "--category", help=f"One of: {', '.join(CATEGORIES)}")
    ] = "all",
    as_json: Annotated[bool, typer.Option("--json", help="Output JSON")] = False,
) -> None:
    """Search the card catalog."""

    async def _run() -> SearchResponse:
        async with create_search_service() as service:
            return await service.search(query, limit=limit, category=category)

    try:
        response = run_async(_run())
    except SearchFailedError as e:
        console.print(f"[red]{e.message.lower()}[/red]")
        raise typer.Exit(1) from e
    except CardSearchError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    if as_json:
        output_json(response)
    else:
        _print_response(response)


@cli.command("cache-stats")
def cache_stats(
    queries: Annotated[
        list[str] | None, typer.Argument(help="Queries to run before reporting")
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Output JSON")] = False,
) -> None:
    """Run searches and report lookup cache statistics."""

    async def _run() -> dict[str, Any]:
        async with create_search_service() as service:
            for query in queries or []:
                await service.search(query)
            return service.caches.stats()

    try:
        stats = run_async(_run())
    except CardSearchError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    if as_json:
        output_json(stats)
        return

    table = Table(title=f"Lookup caches (hit rate {stats['hit_rate']})")
    table.add_column("Cache", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Hits", justify="right")
    table.add_column("Misses", justify="right")
    table.add_column("Used", justify="right")
    for name, cache in stats["caches"].items():
        table.add_row(
            name,
            str(cache["size"]),
            str(cache["max_size"]),
            str(cache["hits"]),
            str(cache["misses"]),
            f"{cache['utilization_percent']}%",
        )
    console.print(table)


@cli.command("init-db")
def init_db(
    path: Annotated[
        Path | None, typer.Option("--path", help="Catalog file (default from settings)")
    ] = None,
) -> None:
    """Create an empty card catalog."""
    target = path or get_settings().catalog_db_path
    run_async(initialize_catalog(target))
    console.print(f"[green]Catalog ready at {target}[/green]")


if __name__ == "__main__":
    cli()
