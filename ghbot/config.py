"""Configuration for the golint import path bot."""

import os
from datetime import timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .ci.travis import parse_version_tolerant
from .github_client.search import build_code_search_query

OLD_IMPORT_PATH = "github.com/golang/lint/golint"
NEW_IMPORT_PATH = "golang.org/x/lint/golint"
CI_FILE = ".travis.yml"
DEFAULT_QUERY = build_code_search_query(OLD_IMPORT_PATH, filename=CI_FILE)
DEFAULT_CACHE_DIR = ".search-cache"
COMMIT_MESSAGE = "Fix golint import path"

PR_BODY = (
    "golint moved from `github.com/golang/lint/golint` to "
    "`golang.org/x/lint/golint`, and `go get` of the old path no longer works.\n\n"
    "This updates the import path in `.travis.yml` so CI keeps installing golint."
)


class BotConfig(BaseModel):
    """Settings for one bot run."""

    model_config = ConfigDict(frozen=True)

    token: str = Field("", description="GitHub API token")
    base_url: str | None = Field(
        None, description="GitHub Enterprise API URL, None for github.com"
    )
    interval: timedelta = Field(timedelta(seconds=30), description="Check interval")
    debug: bool = Field(False, description="Enable debug logging")
    cache: bool = Field(True, description="Cache code search responses on disk")
    cache_dir: str = Field(DEFAULT_CACHE_DIR, description="Search cache directory")
    cache_ttl: timedelta = Field(
        timedelta(hours=1), description="How long cached search pages stay valid"
    )

    query: str = Field(DEFAULT_QUERY, description="Code search query")
    ci_file: str = Field(CI_FILE, description="CI file to inspect and rewrite")
    old_import: str = Field(OLD_IMPORT_PATH, description="Import path to replace")
    new_import: str = Field(NEW_IMPORT_PATH, description="Replacement import path")
    min_go_version: str = Field(
        "1.9", description="Oldest Go release the new import path supports"
    )
    commit_message: str = Field(COMMIT_MESSAGE)
    pr_title: str = Field(COMMIT_MESSAGE)
    pr_body: str = Field(PR_BODY)

    max_pages: int = Field(1, description="Search result pages fetched per pass")
    limit: int = Field(10, description="Repositories handled per pass")
    fork_workers: int = Field(4, description="Concurrent fork requests")
    fork_attempts: int = Field(4, description="Lookups before a fork counts as failed")
    fork_retry_delay: timedelta = Field(timedelta(seconds=30))
    page_delay: timedelta = Field(timedelta(milliseconds=2050))
    max_consecutive_failures: int = Field(
        3, description="Failed passes in a row before the poller gives up"
    )

    dry_run: bool = Field(False, description="Report qualifying repos without forking")
    once: bool = Field(False, description="Run a single pass and exit")

    @classmethod
    def from_env(cls, **overrides: Any) -> "BotConfig":
        """Build configuration from environment variables.

        GITHUB_TOKEN and GITHUB_URL are read from the environment; explicit
        overrides that are not None take precedence.
        """
        values: dict[str, Any] = {
            "token": os.getenv("GITHUB_TOKEN", ""),
            "base_url": os.getenv("GITHUB_URL") or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def validate_settings(self) -> None:
        """Validate configuration and raise error if invalid."""
        if not self.token:
            raise ValueError("GitHub token cannot be empty")

        if self.interval <= timedelta(0):
            raise ValueError("Interval must be positive")

        for name in ("max_pages", "limit", "fork_workers", "fork_attempts"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name.replace('_', '-')} must be at least 1")

        if not self.query.strip():
            raise ValueError("Search query cannot be empty")

        try:
            parse_version_tolerant(self.min_go_version)
        except ValueError:
            raise ValueError(f"Invalid minimum Go version '{self.min_go_version}'")
