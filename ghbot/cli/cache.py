"""CLI commands for the search response cache."""

import typer
from rich.console import Console
from rich.table import Table

from ..storage.manager import SearchCache
from .options import CACHE_DIR_OPTION

console = Console()
app = typer.Typer(help="Inspect or clear the search response cache")


@app.command()
def status(cache_dir: str = CACHE_DIR_OPTION) -> None:
    """Show cache statistics."""
    stats = SearchCache(cache_dir).get_cache_stats()

    stats_table = Table(title="Search Cache")
    stats_table.add_column("Metric", style="cyan")
    stats_table.add_column("Value", style="green")
    stats_table.add_row("Cached Pages", str(stats["total_pages"]))
    stats_table.add_row("Cache Size", f"{stats['total_size_mb']} MB")
    stats_table.add_row("Cache Path", stats["cache_path"])

    console.print(stats_table)


@app.command()
def clear(cache_dir: str = CACHE_DIR_OPTION) -> None:
    """Delete all cached search pages."""
    removed = SearchCache(cache_dir).clear()
    console.print(f"🗑️  Removed {removed} cached page(s)")
