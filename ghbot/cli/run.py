"""CLI command running the bot."""

import logging

import typer
from rich.console import Console
from rich.table import Table

from ..config import BotConfig
from ..errors import RateLimitHit
from ..github_client.client import GitHubClient
from ..github_client.search import CodeSearcher
from ..pipeline.models import OutcomeStatus, PassSummary
from ..pipeline.poller import Poller
from ..pipeline.runner import make_pass_runner
from ..storage.manager import SearchCache
from ..utils.duration_parser import parse_duration
from ..utils.logging_setup import setup_logging
from .options import (
    CACHE_DIR_OPTION,
    CACHE_OPTION,
    DEBUG_OPTION,
    DRY_RUN_OPTION,
    INTERVAL_OPTION,
    LIMIT_OPTION,
    MAX_PAGES_OPTION,
    MIN_GO_VERSION_OPTION,
    ONCE_OPTION,
    TOKEN_OPTION,
    URL_OPTION,
)

console = Console()
logger = logging.getLogger(__name__)

STATUS_STYLES = {
    OutcomeStatus.PULL_REQUEST_OPENED: "green",
    OutcomeStatus.QUALIFIED: "cyan",
    OutcomeStatus.SKIPPED: "dim",
    OutcomeStatus.FAILED: "red",
}


def print_summary(summary: PassSummary) -> None:
    """Show the outcomes of one pass."""
    if not summary.outcomes:
        console.print("No matching repositories found")
        return

    table = Table(title="Pass Results")
    table.add_column("Repository", style="cyan")
    table.add_column("Status")
    table.add_column("Details", style="white")

    for outcome in summary.outcomes:
        if outcome.pull_request is not None and outcome.pull_request.html_url:
            details = outcome.pull_request.html_url
            if outcome.reason:
                details = f"{outcome.reason} ({details})"
        else:
            details = outcome.reason or ""
        style = STATUS_STYLES[outcome.status]
        table.add_row(
            outcome.repository.full_name,
            f"[{style}]{outcome.status.value}[/{style}]",
            details,
        )

    console.print(table)
    console.print(
        f"Opened {summary.count(OutcomeStatus.PULL_REQUEST_OPENED)} pull request(s), "
        f"{summary.count(OutcomeStatus.QUALIFIED)} qualified, "
        f"{summary.count(OutcomeStatus.SKIPPED)} skipped, "
        f"{summary.count(OutcomeStatus.FAILED)} failed "
        f"in {summary.duration_seconds:.1f}s"
    )


def run(
    token: str | None = TOKEN_OPTION,
    interval: str = INTERVAL_OPTION,
    url: str | None = URL_OPTION,
    debug: bool = DEBUG_OPTION,
    cache: bool = CACHE_OPTION,
    cache_dir: str = CACHE_DIR_OPTION,
    limit: int = LIMIT_OPTION,
    max_pages: int = MAX_PAGES_OPTION,
    min_go_version: str = MIN_GO_VERSION_OPTION,
    once: bool = ONCE_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Search GitHub for the old golint import path and open fix pull requests.

    Each pass searches code for .travis.yml files that still install golint
    from github.com/golang/lint/golint. Repositories building only with Go 1.9
    or newer are forked, the import path is rewritten to
    golang.org/x/lint/golint and a pull request is opened upstream.

    Examples:
        ghbot run --once --dry-run
        ghbot run --interval 10m --limit 5
        ghbot run --url https://github.example.com/api/v3/ --no-cache
    """
    setup_logging(debug)

    try:
        interval_delta = parse_duration(interval)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="'--interval'")

    try:
        config = BotConfig.from_env(
            token=token,
            base_url=url,
            interval=interval_delta,
            debug=debug,
            cache=cache,
            cache_dir=cache_dir,
            limit=limit,
            max_pages=max_pages,
            min_go_version=min_go_version,
            once=once,
            dry_run=dry_run,
        )
        config.validate_settings()
    except ValueError as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    try:
        client = GitHubClient(token=config.token, base_url=config.base_url)
        login = client.get_authenticated_login()
        logger.info(f"Bot started for user {login}.")

        search_cache = SearchCache(config.cache_dir) if config.cache else None
        searcher = CodeSearcher(
            client,
            cache=search_cache,
            cache_ttl=config.cache_ttl,
            page_delay=config.page_delay,
        )

        poller = Poller(
            make_pass_runner(client, searcher, config, login),
            interval=config.interval,
            once=config.once,
            max_consecutive_failures=config.max_consecutive_failures,
            on_summary=print_summary,
        )
        poller.run()

    except RateLimitHit:
        console.print("❌ hit rate limit")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"❌ Unexpected error: {e}")
        console.print("Please check your GitHub token and network connection.")
        raise typer.Exit(1)
