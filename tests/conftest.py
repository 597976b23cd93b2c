"""Test configuration and fixtures."""

import logging
from datetime import timedelta
from pathlib import Path

import pytest

from ghbot.config import BotConfig
from ghbot.github_client.models import RepositoryRef

QUALIFYING_TRAVIS = """language: go
go:
  - "1.10"
  - 1.11
install:
  - go get -u github.com/golang/lint/golint
script:
  - golint ./...
"""


@pytest.fixture
def temp_cache_dir(tmp_path: Path) -> Path:
    """Create temporary search cache directory."""
    cache_dir = tmp_path / "search-cache"
    cache_dir.mkdir(parents=True)
    return cache_dir


@pytest.fixture
def qualifying_travis() -> str:
    """A .travis.yml that should receive a pull request."""
    return QUALIFYING_TRAVIS


@pytest.fixture
def upstream_repo() -> RepositoryRef:
    """Fully loaded upstream repository."""
    return RepositoryRef(
        owner="someone",
        name="project",
        full_name="someone/project",
        default_branch="master",
        html_url="https://github.com/someone/project",
    )


@pytest.fixture
def fork_repo(upstream_repo: RepositoryRef) -> RepositoryRef:
    """The bot's fork of upstream_repo."""
    return RepositoryRef(
        owner="ghbot",
        name="project",
        full_name="ghbot/project",
        default_branch="master",
        fork=True,
        parent=upstream_repo,
    )


@pytest.fixture
def bot_config() -> BotConfig:
    """Configuration with delays removed."""
    return BotConfig(
        token="test_token",
        fork_retry_delay=timedelta(0),
        page_delay=timedelta(0),
        interval=timedelta(seconds=1),
    )


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """Remove root logging handlers added during a test (e.g. by CLI runs)."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
