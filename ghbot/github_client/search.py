"""GitHub code search functionality and query building."""

import logging
import time
from collections.abc import Iterator
from datetime import timedelta
from typing import TYPE_CHECKING

from .models import RepositoryRef, SearchPage

if TYPE_CHECKING:
    from ..storage.manager import SearchCache
    from .client import GitHubClient

logger = logging.getLogger(__name__)

# GitHub returns at most 30 code results per page by default
PAGE_SIZE = 30

# The code search API allows 30 requests per minute
DEFAULT_PAGE_DELAY = timedelta(milliseconds=2050)


def build_code_search_query(
    terms: str,
    filename: str | None = None,
    extra_qualifiers: list[str] | None = None,
    excluded_users: list[str] | None = None,
) -> str:
    """Build a GitHub code search query string.

    Args:
        terms: Text to search for
        filename: Restrict matches to files with this name
        extra_qualifiers: Additional qualifiers such as 'language:yaml'
        excluded_users: Users or organizations whose repositories to skip

    Returns:
        GitHub search query string

    Example:
        >>> build_code_search_query(
        ...     "github.com/golang/lint/golint", ".travis.yml", excluded_users=["bot"]
        ... )
        "github.com/golang/lint/golint filename:.travis.yml -user:bot"
    """
    query_parts = [terms.strip()]

    if filename and f"filename:{filename}" not in terms:
        query_parts.append(f"filename:{filename}")

    if extra_qualifiers:
        query_parts.extend(q.strip() for q in extra_qualifiers if q.strip())

    if excluded_users:
        for user in excluded_users:
            query_parts.append(f"-user:{user}")

    return " ".join(part for part in query_parts if part)


class CodeSearcher:
    """High-level interface for paging through GitHub code search."""

    def __init__(
        self,
        client: "GitHubClient",
        cache: "SearchCache | None" = None,
        cache_ttl: timedelta | None = None,
        page_delay: timedelta = DEFAULT_PAGE_DELAY,
    ):
        """Initialize searcher with GitHub client.

        Args:
            client: Authenticated GitHubClient instance
            cache: Optional on-disk cache for result pages
            cache_ttl: Maximum age of cached pages that may be reused
            page_delay: Pause between two live page fetches
        """
        self.client = client
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.page_delay = page_delay

    def _fetch_page(self, query: str, page: int) -> tuple[SearchPage, bool]:
        """Return a page and whether it came from the API."""
        if self.cache is not None:
            cached = self.cache.load_page(query, page, max_age=self.cache_ttl)
            if cached is not None:
                logger.debug(f"Using cached search page {page}")
                return cached, False

        result = self.client.search_code_page(query, page)
        if self.cache is not None:
            self.cache.save_page(result)
        return result, True

    def iter_pages(self, query: str, max_pages: int = 1) -> Iterator[SearchPage]:
        """Yield search result pages, sorted by index date ascending.

        Stops at an empty or short page, or after max_pages pages.

        Args:
            query: GitHub code search query
            max_pages: Maximum number of pages to fetch

        Yields:
            SearchPage objects in page order
        """
        for page in range(max_pages):
            result, live = self._fetch_page(query, page)
            logger.info(
                f"Search page {page}: {len(result.hits)} results "
                f"({result.total_count} total)"
            )
            yield result

            if len(result.hits) < PAGE_SIZE:
                break
            if page + 1 < max_pages and live:
                time.sleep(self.page_delay.total_seconds())

    def iter_repositories(
        self, query: str, max_pages: int = 1
    ) -> Iterator[RepositoryRef]:
        """Yield each repository with a matching file once, in result order."""
        seen: set[str] = set()
        for result in self.iter_pages(query, max_pages):
            for hit in result.hits:
                key = hit.repository.full_name.lower()
                if key in seen:
                    continue
                seen.add(key)
                yield hit.repository
