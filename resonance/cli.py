"""Command-line interface for Resonance."""

import json
import logging
import sys
from enum import Enum
from typing import List, Optional

# Configure logging before importing resonance - default to WARNING for normal runs
logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("resonance")

# Suppress noisy third-party loggers
logging.getLogger("urllib3").setLevel(logging.WARNING)
logging.getLogger("requests").setLevel(logging.WARNING)

import typer
from rich.console import Console
from rich.table import Table

from resonance import Resonance, __version__
from resonance.models import MediaKind, MediaResponse, SearchResponse

app = typer.Typer(help="Resonance - music catalog cache and discovery")
console = Console()


class SearchKind(str, Enum):
    albums = "albums"
    artists = "artists"
    tracks = "tracks"


class ItemKind(str, Enum):
    album = "album"
    artist = "artist"
    track = "track"


def debug_callback(value: bool):
    """Enable debug mode."""
    if value:
        logging.getLogger("resonance").setLevel(logging.DEBUG)
        logging.getLogger("urllib3").setLevel(logging.INFO)
        console.print("[dim]Debug mode enabled[/dim]")


@app.callback()
def common_options(
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug logging",
        callback=debug_callback,
        is_eager=True,
    ),
):
    """Resonance - music catalog cache and discovery."""
    pass


def _open(config_path: Optional[str]) -> Resonance:
    return Resonance(config_path)


def _print_media_table(title: str, items: List[MediaResponse]) -> None:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Kind")
    table.add_column("Artist")
    table.add_column("Title", style="bold")
    table.add_column("Genre")
    table.add_column("Preview", justify="center")

    for item in items:
        table.add_row(
            item.id,
            item.kind.value,
            item.artist_name,
            item.title,
            item.genre or "",
            "✓" if item.preview_url else "",
        )
    console.print(table)


def _print_page(title: str, page: SearchResponse, as_json: bool) -> None:
    if as_json:
        console.print_json(json.dumps(page.to_dict()))
        return
    if not page.content:
        console.print("[yellow]No results found[/yellow]")
        return
    _print_media_table(title, page.content)
    console.print(
        f"[dim]page {page.page} · {page.size} item(s) · "
        f"{page.total_elements} total · {page.total_pages} page(s)[/dim]"
    )


def _print_item(item: Optional[MediaResponse], media_id: str, as_json: bool) -> None:
    if item is None:
        console.print(f"[yellow]Nothing found for {media_id}[/yellow]")
        raise typer.Exit(code=1)
    if as_json:
        console.print_json(item.model_dump_json(by_alias=True))
        return
    _print_media_table(item.title, [item])
    if item.external_url:
        console.print(f"[dim]{item.external_url}[/dim]")


CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to config file (defaults apply when omitted)",
)
JSON_OPTION = typer.Option(False, "--json", help="Print raw JSON")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]Resonance[/bold] v{__version__}")
    console.print("Music catalog cache and discovery")


@app.command()
def search(
    kind: SearchKind = typer.Argument(..., help="What to search for"),
    query: str = typer.Argument(..., help="Search query"),
    config_path: Optional[str] = CONFIG_OPTION,
    as_json: bool = JSON_OPTION,
) -> None:
    """Search the catalog (results are cached locally)."""
    try:
        with _open(config_path) as resonance:
            searches = {
                SearchKind.albums: resonance.search_albums,
                SearchKind.artists: resonance.search_artists,
                SearchKind.tracks: resonance.search_tracks,
            }
            page = searches[kind](query)
    except Exception as e:
        console.print(f"[red]✗[/red] Search failed: {e}")
        sys.exit(1)

    _print_page(f"{kind.value.capitalize()} matching '{query}'", page, as_json)


@app.command()
def get(
    kind: ItemKind = typer.Argument(..., help="Kind of record"),
    media_id: str = typer.Argument(..., help="Catalog id"),
    config_path: Optional[str] = CONFIG_OPTION,
    as_json: bool = JSON_OPTION,
) -> None:
    """Show an album, artist or track by id."""
    try:
        with _open(config_path) as resonance:
            item = resonance.catalog.resolve_kind(MediaKind(kind.value.upper()), media_id)
    except Exception as e:
        console.print(f"[red]✗[/red] Lookup failed: {e}")
        sys.exit(1)

    _print_item(item, media_id, as_json)


@app.command()
def resolve(
    media_id: str = typer.Argument(..., help="Catalog id of any kind"),
    config_path: Optional[str] = CONFIG_OPTION,
    as_json: bool = JSON_OPTION,
) -> None:
    """Resolve an id, detecting its kind from the catalog."""
    try:
        with _open(config_path) as resonance:
            item = resonance.resolve(media_id)
    except Exception as e:
        console.print(f"[red]✗[/red] Lookup failed: {e}")
        sys.exit(1)

    _print_item(item, media_id, as_json)


@app.command()
def feed(
    page: int = typer.Option(0, "--page", "-p", min=0, help="Page number"),
    size: int = typer.Option(20, "--size", "-s", min=1, max=100, help="Page size"),
    config_path: Optional[str] = CONFIG_OPTION,
    as_json: bool = JSON_OPTION,
) -> None:
    """Show a page of the randomized discovery feed."""
    try:
        with _open(config_path) as resonance:
            result = resonance.discovery_feed(page, size)
    except Exception as e:
        console.print(f"[red]✗[/red] Feed failed: {e}")
        sys.exit(1)

    _print_page("Discovery feed", result, as_json)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
