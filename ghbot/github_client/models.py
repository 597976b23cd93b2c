"""Pydantic models for GitHub data structures.

These models hold the subset of GitHub's REST API v3 responses the bot works
with: repositories, code search results, file contents and pull requests.
API Reference: https://docs.github.com/en/rest
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class RepositoryRef(BaseModel):
    """GitHub repository reference.

    Maps to GitHub REST API Repository object.
    API Reference: https://docs.github.com/en/rest/repos/repos
    """

    owner: str = Field(..., description="Login of the owning user or organization")
    name: str = Field(..., description="Repository name without the owner")
    full_name: str = Field(..., description="owner/name")
    default_branch: str = Field(
        "master", description="Branch pull requests target by default"
    )
    fork: bool = Field(False, description="Whether the repository is itself a fork")
    html_url: str | None = Field(None, description="Web URL of the repository")
    parent: RepositoryRef | None = Field(
        None, description="Repository this one was forked from, if any"
    )


class CodeSearchHit(BaseModel):
    """A single code search result.

    Maps to GitHub REST API Code Search result item.
    API Reference: https://docs.github.com/en/rest/search/search#search-code
    """

    repository: RepositoryRef = Field(..., description="Repository containing the match")
    path: str = Field(..., description="Path of the matching file")
    sha: str | None = Field(None, description="Blob SHA of the matching file")


class SearchPage(BaseModel):
    """One page of code search results, as fetched or as cached on disk."""

    query: str = Field(..., description="Search query that produced this page")
    page: int = Field(..., description="Zero-based page index")
    hits: list[CodeSearchHit] = Field(default_factory=list)
    total_count: int = Field(0, description="Total matches reported by GitHub")
    fetched_at: datetime = Field(
        default_factory=datetime.now, description="When the page was fetched"
    )


class CIFile(BaseModel):
    """Decoded contents of a repository file.

    Maps to GitHub REST API Content object.
    API Reference: https://docs.github.com/en/rest/repos/contents
    """

    repository: RepositoryRef = Field(..., description="Repository holding the file")
    path: str = Field(..., description="Path of the file in the repository")
    content: str = Field(..., description="UTF-8 decoded file content")
    sha: str = Field(..., description="Blob SHA, required when updating the file")


class PullRequestRef(BaseModel):
    """GitHub pull request reference.

    API Reference: https://docs.github.com/en/rest/pulls/pulls
    """

    number: int = Field(..., description="Pull request number in the base repository")
    title: str = Field(..., description="Pull request title")
    html_url: str | None = Field(None, description="Web URL of the pull request")
    head: str = Field(..., description="Head reference as owner:branch")
    base: str = Field(..., description="Base branch name")
    state: str = Field("open", description="'open' or 'closed'")
