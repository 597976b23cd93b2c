"""On-disk cache for code search result pages."""

import hashlib
import json
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..github_client.models import SearchPage

logger = logging.getLogger(__name__)


class SearchCache:
    """Stores code search pages as JSON files so repeated passes spare the search API."""

    def __init__(self, base_path: str = ".search-cache"):
        """Initialize the cache.

        Args:
            base_path: Directory holding the cached pages
        """
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _generate_filename(self, query: str, page: int) -> str:
        """Generate the filename for a query page.

        Args:
            query: Search query
            page: Page index

        Returns:
            Filename string
        """
        digest = hashlib.sha256(f"{query}\n{page}".encode()).hexdigest()[:32]
        return f"search_{digest}_page_{page}.json"

    def _get_file_path(self, query: str, page: int) -> Path:
        return self.base_path / self._generate_filename(query, page)

    def save_page(self, page: SearchPage) -> Path:
        """Save a search page to a JSON file.

        Returns:
            Path to the saved file
        """
        file_path = self._get_file_path(page.query, page.page)

        try:
            with open(file_path, "w", encoding="utf-8") as f:
                json.dump(
                    page.model_dump(mode="json"),
                    f,
                    indent=2,
                    ensure_ascii=False,
                )
        except OSError as e:
            logger.error(f"Error caching search page {page.page}: {e}")
            raise

        logger.debug(f"Cached search page {page.page} to {file_path}")
        return file_path

    def load_page(
        self, query: str, page: int, max_age: timedelta | None = None
    ) -> SearchPage | None:
        """Load a cached search page.

        Args:
            query: Search query
            page: Page index
            max_age: Ignore entries fetched longer ago than this

        Returns:
            SearchPage, or None when missing, stale or unreadable
        """
        file_path = self._get_file_path(query, page)

        if not file_path.exists():
            return None

        try:
            with open(file_path, encoding="utf-8") as f:
                cached = SearchPage.model_validate(json.load(f))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable cache file {file_path}: {e}")
            return None

        if cached.query != query:
            return None

        if max_age is not None:
            fetched_at = cached.fetched_at
            now = datetime.now(fetched_at.tzinfo) if fetched_at.tzinfo else datetime.now()
            if now - fetched_at > max_age:
                logger.debug(f"Cached search page {page} is stale")
                return None

        return cached

    def clear(self) -> int:
        """Delete all cached pages.

        Returns:
            Number of files removed
        """
        removed = 0
        for file_path in self.base_path.glob("search_*_page_*.json"):
            file_path.unlink()
            removed += 1
        return removed

    def get_cache_stats(self) -> dict[str, Any]:
        """Get statistics about cached pages.

        Returns:
            Dictionary with cache statistics
        """
        all_files = list(self.base_path.glob("search_*_page_*.json"))
        total_size = sum(f.stat().st_size for f in all_files)

        return {
            "total_pages": len(all_files),
            "total_size_bytes": total_size,
            "total_size_mb": round(total_size / (1024 * 1024), 2),
            "cache_path": str(self.base_path.absolute()),
        }
