"""GitHub client package for API interaction."""

from .client import GitHubClient
from .models import CIFile, CodeSearchHit, PullRequestRef, RepositoryRef, SearchPage
from .search import CodeSearcher, build_code_search_query

__all__ = [
    "GitHubClient",
    "CodeSearcher",
    "RepositoryRef",
    "CodeSearchHit",
    "SearchPage",
    "CIFile",
    "PullRequestRef",
    "build_code_search_query",
]
