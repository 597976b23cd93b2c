"""GitHub API client using PyGitHub."""

import logging
import os
import time
from datetime import datetime, timedelta

from github import Auth, Github
from github.ContentFile import ContentFile
from github.GithubException import (
    GithubException,
    RateLimitExceededException,
    UnknownObjectException,
)
from github.PullRequest import PullRequest
from github.Repository import Repository

from ..errors import CIFileNotFound, ForkNotReadyError, RateLimitHit
from .models import CIFile, CodeSearchHit, PullRequestRef, RepositoryRef, SearchPage

logger = logging.getLogger(__name__)

RATE_LIMIT_FLOOR = 10


class GitHubClient:
    """GitHub API client with rate limiting and authentication."""

    def __init__(self, token: str | None = None, base_url: str | None = None):
        """Initialize GitHub client with authentication.

        Args:
            token: GitHub personal access token. If None, reads from
                GITHUB_TOKEN env var.
            base_url: API URL of a GitHub Enterprise server, e.g.
                https://github.example.com/api/v3/. Defaults to github.com.
        """
        self.token = token or os.getenv("GITHUB_TOKEN")
        if not self.token:
            raise ValueError(
                "GitHub token is required. Set GITHUB_TOKEN environment variable."
            )

        self.base_url = base_url
        # PyGithub's default retry sleeps through rate limits; they must surface
        # as RateLimitExceededException instead
        if base_url:
            self.github = Github(
                auth=Auth.Token(self.token), base_url=base_url, retry=None
            )
        else:
            self.github = Github(auth=Auth.Token(self.token), retry=None)
        self._login: str | None = None

    def _check_rate_limit(self, resource: str = "core") -> None:
        """Check rate limit and sleep if necessary."""
        try:
            overview = self.github.get_rate_limit()
            resources = getattr(overview, "resources", overview)
            rate = getattr(resources, resource)
            remaining = rate.remaining
            logger.debug(f"GitHub API {resource} rate limit: {remaining} remaining")

            if remaining < RATE_LIMIT_FLOOR:
                sleep_time = seconds_until(rate.reset) + 1
                logger.warning(f"Rate limit low, sleeping for {sleep_time:.1f} seconds...")
                time.sleep(sleep_time)

        except RateLimitExceededException:
            raise RateLimitHit()
        except Exception as e:
            logger.warning(f"Could not check rate limit: {e}")

    def _convert_repository(
        self, github_repo: Repository, partial: bool = False
    ) -> RepositoryRef:
        """Convert PyGitHub repository to our model.

        Search results only carry a partial repository; reading the default
        branch or parent of one costs an extra request, so ``partial`` skips them.
        """
        parent = None
        default_branch = "master"
        if not partial:
            default_branch = github_repo.default_branch or "master"
            if github_repo.fork and github_repo.parent is not None:
                parent = self._convert_repository(github_repo.parent)

        return RepositoryRef(
            owner=github_repo.owner.login,
            name=github_repo.name,
            full_name=github_repo.full_name,
            default_branch=default_branch,
            fork=bool(github_repo.fork),
            html_url=github_repo.html_url,
            parent=parent,
        )

    def _convert_hit(self, content_file: ContentFile) -> CodeSearchHit:
        """Convert a code search result to our model."""
        return CodeSearchHit(
            repository=self._convert_repository(content_file.repository, partial=True),
            path=content_file.path,
            sha=content_file.sha,
        )

    def _convert_pull_request(self, github_pull: PullRequest) -> PullRequestRef:
        """Convert PyGitHub pull request to our model."""
        return PullRequestRef(
            number=github_pull.number,
            title=github_pull.title,
            html_url=github_pull.html_url,
            head=github_pull.head.label,
            base=github_pull.base.ref,
            state=github_pull.state,
        )

    def _get_github_repo(self, full_name: str) -> Repository:
        try:
            return self.github.get_repo(full_name)
        except UnknownObjectException:
            raise ValueError(f"Repository {full_name} not found")
        except RateLimitExceededException:
            raise RateLimitHit()

    def get_authenticated_login(self) -> str:
        """Get the login of the user the token belongs to."""
        if self._login is None:
            try:
                self._login = self.github.get_user().login
            except RateLimitExceededException:
                raise RateLimitHit()
        return self._login

    def get_repository(self, owner: str, name: str) -> RepositoryRef:
        """Get repository details."""
        return self._convert_repository(self._get_github_repo(f"{owner}/{name}"))

    def search_code_page(
        self, query: str, page: int, sort: str = "indexed", order: str = "asc"
    ) -> SearchPage:
        """Fetch one page of code search results.

        Args:
            query: GitHub code search query
            page: Zero-based page index
            sort: Sort field; GitHub only supports 'indexed'
            order: 'asc' or 'desc'

        Returns:
            SearchPage with the hits of that page
        """
        self._check_rate_limit("search")
        logger.debug(f"Searching code with query: {query} (page {page})")

        try:
            results = self.github.search_code(query, sort=sort, order=order)
            hits = [self._convert_hit(item) for item in results.get_page(page)]
            return SearchPage(
                query=query, page=page, hits=hits, total_count=results.totalCount
            )
        except RateLimitExceededException:
            raise RateLimitHit()
        except GithubException as e:
            logger.error(f"Error searching code: {e}")
            raise

    def get_file(
        self, repository: RepositoryRef, path: str, ref: str | None = None
    ) -> CIFile:
        """Get and decode a file from a repository.

        Raises:
            CIFileNotFound: If the path does not exist or is a directory
        """
        self._check_rate_limit()

        github_repo = self._get_github_repo(repository.full_name)
        try:
            if ref:
                contents = github_repo.get_contents(path, ref=ref)
            else:
                contents = github_repo.get_contents(path)
        except UnknownObjectException:
            raise CIFileNotFound(f"{path} not found in {repository.full_name}")
        except RateLimitExceededException:
            raise RateLimitHit()

        if isinstance(contents, list):
            raise CIFileNotFound(f"{path} is a directory in {repository.full_name}")

        try:
            content = contents.decoded_content.decode("utf-8")
        except (AssertionError, UnicodeDecodeError) as e:
            logger.warning(
                f"Unable to get file content of {path} in {repository.full_name}: {e}"
            )
            content = ""

        return CIFile(repository=repository, path=path, content=content, sha=contents.sha)

    def create_fork(self, repository: RepositoryRef) -> RepositoryRef:
        """Fork a repository into the authenticated account.

        GitHub creates forks asynchronously and answers 202 Accepted; the
        returned fork may not be usable yet, see wait_for_fork.
        """
        self._check_rate_limit()

        github_repo = self._get_github_repo(repository.full_name)
        try:
            fork = github_repo.create_fork()
        except RateLimitExceededException:
            raise RateLimitHit()

        logger.info(f"Requested fork of {repository.full_name} as {fork.full_name}")
        ref = self._convert_repository(fork, partial=True)
        return ref.model_copy(update={"fork": True, "parent": repository})

    def wait_for_fork(
        self,
        fork: RepositoryRef,
        attempts: int = 4,
        delay: timedelta = timedelta(seconds=30),
    ) -> RepositoryRef:
        """Poll until a newly created fork and its default branch are retrievable.

        Args:
            fork: Fork returned by create_fork
            attempts: Number of lookups before giving up
            delay: Pause after each failed lookup

        Returns:
            Fully populated fork repository

        Raises:
            ForkNotReadyError: If the fork is still missing after all attempts
        """
        last_error: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                github_repo = self.github.get_repo(fork.full_name)
                github_repo.get_branch(github_repo.default_branch)
                ready = self._convert_repository(github_repo)
                if ready.parent is None:
                    ready = ready.model_copy(update={"parent": fork.parent})
                logger.debug(f"Fork {fork.full_name} ready after {attempt} attempt(s)")
                return ready
            except RateLimitExceededException:
                raise RateLimitHit()
            except GithubException as e:
                last_error = e
                logger.debug(
                    f"Fork {fork.full_name} not ready "
                    f"(attempt {attempt}/{attempts}): {e.status}"
                )

            if attempt < attempts:
                time.sleep(delay.total_seconds())

        raise ForkNotReadyError(
            f"Fork {fork.full_name} not available after {attempts} attempts: "
            f"{last_error}"
        )

    def update_file(
        self,
        ci_file: CIFile,
        content: str,
        message: str,
        branch: str | None = None,
    ) -> str:
        """Commit new content for an existing file.

        Returns:
            SHA of the created commit
        """
        self._check_rate_limit()

        github_repo = self._get_github_repo(ci_file.repository.full_name)
        try:
            if branch:
                result = github_repo.update_file(
                    ci_file.path, message, content, ci_file.sha, branch=branch
                )
            else:
                result = github_repo.update_file(
                    ci_file.path, message, content, ci_file.sha
                )
        except RateLimitExceededException:
            raise RateLimitHit()

        commit_sha = result["commit"].sha
        logger.info(
            f"Committed {ci_file.path} to {ci_file.repository.full_name} ({commit_sha[:7]})"
        )
        return commit_sha

    def find_open_pull_request(
        self, upstream: RepositoryRef, head: str
    ) -> PullRequestRef | None:
        """Find an open pull request in upstream coming from head (owner:branch)."""
        self._check_rate_limit()

        github_repo = self._get_github_repo(upstream.full_name)
        try:
            for github_pull in github_repo.get_pulls(state="open", head=head):
                return self._convert_pull_request(github_pull)
        except RateLimitExceededException:
            raise RateLimitHit()
        return None

    def create_pull_request(
        self,
        upstream: RepositoryRef,
        head: str,
        base: str,
        title: str,
        body: str,
        maintainer_can_modify: bool = True,
    ) -> PullRequestRef:
        """Open a pull request against upstream.

        Args:
            upstream: Repository receiving the pull request
            head: Source as owner:branch
            base: Target branch in upstream
            title: Pull request title
            body: Pull request description
            maintainer_can_modify: Let upstream maintainers push to the branch

        Returns:
            The created pull request
        """
        self._check_rate_limit()

        github_repo = self._get_github_repo(upstream.full_name)
        try:
            github_pull = github_repo.create_pull(
                base=base,
                head=head,
                title=title,
                body=body,
                maintainer_can_modify=maintainer_can_modify,
            )
        except RateLimitExceededException:
            raise RateLimitHit()

        pull = self._convert_pull_request(github_pull)
        logger.info(f"Opened pull request #{pull.number} on {upstream.full_name}")
        return pull


def seconds_until(reset: datetime) -> float:
    """Seconds from now until a rate limit reset time."""
    return max(reset.timestamp() - time.time(), 0.0)
