"""Main CLI entry point."""

import typer
from dotenv import load_dotenv
from rich.console import Console

from . import cache
from .check import check
from .run import run

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="ghbot",
    help="A GitHub bot to search all GitHub repos for the old "
    "github.com/golang/lint/golint import and fix it",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()


app.command(name="run", context_settings={"help_option_names": ["-h", "--help"]})(run)
app.command(name="check", context_settings={"help_option_names": ["-h", "--help"]})(
    check
)
app.add_typer(cache.app, name="cache")


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def version() -> None:
    """Show version information."""
    from ghbot import __version__

    console.print(f"ghbot v{__version__}")


if __name__ == "__main__":
    app()
