"""Standardized CLI option definitions shared by the bot's commands."""

import typer

from ..config import DEFAULT_CACHE_DIR

# Connection options
TOKEN_OPTION = typer.Option(
    None,
    "--token",
    "-t",
    envvar="GITHUB_TOKEN",
    show_envvar=False,
    help="GitHub API token (or env var GITHUB_TOKEN)",
)

URL_OPTION = typer.Option(
    None,
    "--url",
    "-u",
    envvar="GITHUB_URL",
    show_envvar=False,
    help="Connect to a specific GitHub server, provide full API URL "
    "(ex. https://github.example.com/api/v3/)",
)

# Polling options
INTERVAL_OPTION = typer.Option(
    "30s", "--interval", "-i", help="Check interval (ex. 5ms, 10s, 1m, 3h)"
)

ONCE_OPTION = typer.Option(False, "--once", help="Run a single pass and exit")

# Behavior options
DEBUG_OPTION = typer.Option(False, "--debug", "-d", help="Enable debug logging")

DRY_RUN_OPTION = typer.Option(
    False, "--dry-run", help="Report qualifying repositories without forking"
)

LIMIT_OPTION = typer.Option(
    10, "--limit", help="Maximum number of repositories handled per pass"
)

MAX_PAGES_OPTION = typer.Option(
    1, "--max-pages", help="Number of search result pages fetched per pass"
)

MIN_GO_VERSION_OPTION = typer.Option(
    "1.9", "--min-go-version", help="Oldest Go release the new import path supports"
)

# Cache options
CACHE_OPTION = typer.Option(
    True, "--cache/--no-cache", help="Enable search response caching"
)

CACHE_DIR_OPTION = typer.Option(
    DEFAULT_CACHE_DIR, "--cache-dir", help="Directory for cached search responses"
)
