"""Tests for the cache commands."""

from pathlib import Path

from typer.testing import CliRunner

from ghbot.cli.main import app
from ghbot.github_client.models import SearchPage
from ghbot.storage.manager import SearchCache

runner = CliRunner(env={"NO_COLOR": "1", "TERM": "dumb"})


def test_status(temp_cache_dir: Path) -> None:
    """Test cache statistics output."""
    SearchCache(str(temp_cache_dir)).save_page(SearchPage(query="golint", page=0))

    result = runner.invoke(app, ["cache", "status", "--cache-dir", str(temp_cache_dir)])

    assert result.exit_code == 0
    assert "Cached Pages" in result.stdout


def test_clear(temp_cache_dir: Path) -> None:
    """Test deleting cached pages."""
    cache = SearchCache(str(temp_cache_dir))
    cache.save_page(SearchPage(query="golint", page=0))
    cache.save_page(SearchPage(query="golint", page=1))

    result = runner.invoke(app, ["cache", "clear", "--cache-dir", str(temp_cache_dir)])

    assert result.exit_code == 0
    assert "Removed 2 cached page(s)" in result.stdout
    assert cache.get_cache_stats()["total_pages"] == 0
