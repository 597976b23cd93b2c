"""Tests for GitHub client."""

import os
from datetime import datetime, timedelta
from unittest.mock import Mock, patch

import pytest
from github.GithubException import (
    GithubException,
    RateLimitExceededException,
    UnknownObjectException,
)

from ghbot.errors import CIFileNotFound, ForkNotReadyError, RateLimitHit
from ghbot.github_client.client import GitHubClient
from ghbot.github_client.models import CIFile, RepositoryRef, SearchPage


def make_github_repo(
    owner: str = "someone",
    name: str = "project",
    default_branch: str = "master",
    fork: bool = False,
    parent: Mock | None = None,
) -> Mock:
    """Build a PyGitHub-like repository mock."""
    github_repo = Mock()
    github_repo.owner.login = owner
    github_repo.name = name
    github_repo.full_name = f"{owner}/{name}"
    github_repo.default_branch = default_branch
    github_repo.fork = fork
    github_repo.html_url = f"https://github.com/{owner}/{name}"
    github_repo.parent = parent
    return github_repo


def rate_limit_error() -> RateLimitExceededException:
    return RateLimitExceededException(403, {"message": "API rate limit exceeded"}, None)


@pytest.fixture
def mock_github() -> Mock:
    with patch("ghbot.github_client.client.Github") as mock_github_class:
        mock_github = Mock()
        mock_github_class.return_value = mock_github
        yield mock_github


@pytest.fixture
def client(mock_github: Mock) -> GitHubClient:
    github_client = GitHubClient(token="test_token")
    with patch.object(github_client, "_check_rate_limit"):
        yield github_client


class TestGitHubClientInit:
    """Test GitHubClient construction."""

    @patch.dict(os.environ, {"GITHUB_TOKEN": "env_token"})
    def test_init_with_env_token(self) -> None:
        """Test initialization with environment token."""
        with patch("ghbot.github_client.client.Github") as mock_github:
            GitHubClient()
            auth = mock_github.call_args.kwargs["auth"]
            assert auth.token == "env_token"

    def test_init_with_explicit_token(self) -> None:
        """Test initialization with explicit token."""
        with patch("ghbot.github_client.client.Github") as mock_github:
            GitHubClient(token="explicit_token")
            mock_github.assert_called_once()
            assert mock_github.call_args.kwargs["auth"].token == "explicit_token"
            assert "base_url" not in mock_github.call_args.kwargs

    def test_init_with_enterprise_url(self) -> None:
        """Test that an enterprise API URL is passed through."""
        with patch("ghbot.github_client.client.Github") as mock_github:
            GitHubClient(
                token="test_token", base_url="https://github.example.com/api/v3/"
            )
            assert (
                mock_github.call_args.kwargs["base_url"]
                == "https://github.example.com/api/v3/"
            )

    def test_init_disables_automatic_retries(self) -> None:
        """Test that PyGitHub does not sleep through rate limits on its own."""
        with patch("ghbot.github_client.client.Github") as mock_github:
            GitHubClient(token="test_token")
            assert mock_github.call_args.kwargs["retry"] is None

        with patch("ghbot.github_client.client.Github") as mock_github:
            GitHubClient(
                token="test_token", base_url="https://github.example.com/api/v3/"
            )
            assert mock_github.call_args.kwargs["retry"] is None

    @patch.dict(os.environ, {}, clear=True)
    def test_init_without_token(self) -> None:
        """Test initialization without token raises error."""
        with pytest.raises(ValueError, match="GitHub token is required"):
            GitHubClient()


class TestRateLimit:
    """Test rate limit handling."""

    def test_check_rate_limit_plenty_left(self, mock_github: Mock) -> None:
        """Test that nothing sleeps when enough requests remain."""
        mock_rate = Mock()
        mock_rate.core.remaining = 50
        mock_github.get_rate_limit.return_value = Mock(resources=mock_rate)

        client = GitHubClient(token="test_token")
        with patch("ghbot.github_client.client.time.sleep") as mock_sleep:
            client._check_rate_limit()

        mock_sleep.assert_not_called()

    def test_check_rate_limit_sleeps_when_low(self, mock_github: Mock) -> None:
        """Test sleeping until the reset time when nearly exhausted."""
        mock_rate = Mock()
        mock_rate.search.remaining = 2
        mock_rate.search.reset = datetime.now() + timedelta(seconds=20)
        mock_github.get_rate_limit.return_value = Mock(resources=mock_rate)

        client = GitHubClient(token="test_token")
        with patch("ghbot.github_client.client.time.sleep") as mock_sleep:
            client._check_rate_limit("search")

        mock_sleep.assert_called_once()
        assert 15 < mock_sleep.call_args.args[0] <= 22

    def test_check_rate_limit_errors_are_not_fatal(self, mock_github: Mock) -> None:
        """Test that failing to read the limit only logs."""
        mock_github.get_rate_limit.side_effect = GithubException(500, "boom", None)

        client = GitHubClient(token="test_token")
        client._check_rate_limit()

    def test_rate_limit_becomes_fatal_error(
        self, client: GitHubClient, mock_github: Mock
    ) -> None:
        """Test that PyGitHub's rate limit exception is translated."""
        mock_github.get_repo.side_effect = rate_limit_error()

        with pytest.raises(RateLimitHit, match="hit rate limit"):
            client.get_repository("someone", "project")


class TestRepositories:
    """Test repository lookups and conversion."""

    def test_get_authenticated_login_is_cached(
        self, client: GitHubClient, mock_github: Mock
    ) -> None:
        """Test that the login is fetched once."""
        mock_github.get_user.return_value.login = "ghbot"

        assert client.get_authenticated_login() == "ghbot"
        assert client.get_authenticated_login() == "ghbot"
        mock_github.get_user.assert_called_once_with()

    def test_get_repository_success(
        self, client: GitHubClient, mock_github: Mock
    ) -> None:
        """Test successful repository retrieval."""
        mock_github.get_repo.return_value = make_github_repo(default_branch="main")

        result = client.get_repository("someone", "project")

        assert result.full_name == "someone/project"
        assert result.default_branch == "main"
        assert result.parent is None
        mock_github.get_repo.assert_called_once_with("someone/project")

    def test_get_repository_not_found(
        self, client: GitHubClient, mock_github: Mock
    ) -> None:
        """Test repository not found error."""
        mock_github.get_repo.side_effect = UnknownObjectException(
            404, "Not Found", None
        )

        with pytest.raises(ValueError, match="Repository someone/project not found"):
            client.get_repository("someone", "project")

    def test_convert_fork_includes_parent(self, client: GitHubClient) -> None:
        """Test that forks carry their parent."""
        parent = make_github_repo()
        fork = make_github_repo(owner="ghbot", fork=True, parent=parent)

        result = client._convert_repository(fork)

        assert result.fork is True
        assert result.parent is not None
        assert result.parent.full_name == "someone/project"


class TestSearchCode:
    """Test code search."""

    def test_search_code_page(self, client: GitHubClient, mock_github: Mock) -> None:
        """Test fetching and converting a search page."""
        item = Mock()
        item.repository = make_github_repo()
        item.path = ".travis.yml"
        item.sha = "abc123"

        results = Mock()
        results.get_page.return_value = [item]
        results.totalCount = 1
        mock_github.search_code.return_value = results

        page = client.search_code_page("golint filename:.travis.yml", 0)

        assert isinstance(page, SearchPage)
        assert page.total_count == 1
        assert page.hits[0].repository.full_name == "someone/project"
        assert page.hits[0].path == ".travis.yml"
        mock_github.search_code.assert_called_once_with(
            "golint filename:.travis.yml", sort="indexed", order="asc"
        )
        results.get_page.assert_called_once_with(0)

    def test_search_code_rate_limited(
        self, client: GitHubClient, mock_github: Mock
    ) -> None:
        """Test that a rate limited search is fatal."""
        mock_github.search_code.side_effect = rate_limit_error()

        with pytest.raises(RateLimitHit):
            client.search_code_page("golint", 0)


class TestFiles:
    """Test reading and updating files."""

    def test_get_file(
        self, client: GitHubClient, mock_github: Mock, upstream_repo: RepositoryRef
    ) -> None:
        """Test decoding a file."""
        contents = Mock()
        contents.decoded_content = b"language: go\n"
        contents.sha = "filesha"
        mock_github.get_repo.return_value.get_contents.return_value = contents

        result = client.get_file(upstream_repo, ".travis.yml")

        assert result.content == "language: go\n"
        assert result.sha == "filesha"
        assert result.repository == upstream_repo
        mock_github.get_repo.return_value.get_contents.assert_called_once_with(
            ".travis.yml"
        )

    def test_get_file_with_ref(
        self, client: GitHubClient, mock_github: Mock, upstream_repo: RepositoryRef
    ) -> None:
        """Test reading from a specific branch."""
        contents = Mock(decoded_content=b"", sha="filesha")
        mock_github.get_repo.return_value.get_contents.return_value = contents

        client.get_file(upstream_repo, ".travis.yml", ref="develop")

        mock_github.get_repo.return_value.get_contents.assert_called_once_with(
            ".travis.yml", ref="develop"
        )

    def test_get_file_missing(
        self, client: GitHubClient, mock_github: Mock, upstream_repo: RepositoryRef
    ) -> None:
        """Test that a 404 becomes CIFileNotFound."""
        mock_github.get_repo.return_value.get_contents.side_effect = (
            UnknownObjectException(404, "Not Found", None)
        )

        with pytest.raises(CIFileNotFound):
            client.get_file(upstream_repo, ".travis.yml")

    def test_get_file_directory(
        self, client: GitHubClient, mock_github: Mock, upstream_repo: RepositoryRef
    ) -> None:
        """Test that a directory path is treated as missing."""
        mock_github.get_repo.return_value.get_contents.return_value = [Mock(), Mock()]

        with pytest.raises(CIFileNotFound, match="is a directory"):
            client.get_file(upstream_repo, ".travis.yml")

    def test_update_file(
        self, client: GitHubClient, mock_github: Mock, fork_repo: RepositoryRef
    ) -> None:
        """Test committing new content."""
        mock_github.get_repo.return_value.update_file.return_value = {
            "content": Mock(),
            "commit": Mock(sha="commitsha123"),
        }
        ci_file = CIFile(
            repository=fork_repo, path=".travis.yml", content="old", sha="filesha"
        )

        result = client.update_file(ci_file, "new", "Fix golint import path", "master")

        assert result == "commitsha123"
        mock_github.get_repo.assert_called_with("ghbot/project")
        mock_github.get_repo.return_value.update_file.assert_called_once_with(
            ".travis.yml", "Fix golint import path", "new", "filesha", branch="master"
        )


class TestForks:
    """Test fork creation and readiness polling."""

    def test_create_fork(
        self, client: GitHubClient, mock_github: Mock, upstream_repo: RepositoryRef
    ) -> None:
        """Test requesting a fork."""
        upstream = make_github_repo()
        upstream.create_fork.return_value = make_github_repo(owner="ghbot", fork=True)
        mock_github.get_repo.return_value = upstream

        fork = client.create_fork(upstream_repo)

        assert fork.full_name == "ghbot/project"
        assert fork.fork is True
        assert fork.parent == upstream_repo
        upstream.create_fork.assert_called_once_with()

    def test_wait_for_fork_ready_first_time(
        self, client: GitHubClient, mock_github: Mock, fork_repo: RepositoryRef
    ) -> None:
        """Test a fork that is immediately available."""
        mock_github.get_repo.return_value = make_github_repo(owner="ghbot", fork=True)

        with patch("ghbot.github_client.client.time.sleep") as mock_sleep:
            ready = client.wait_for_fork(fork_repo, attempts=4)

        assert ready.full_name == "ghbot/project"
        assert ready.parent is not None
        assert ready.parent.full_name == "someone/project"
        mock_sleep.assert_not_called()

    def test_wait_for_fork_retries(
        self, client: GitHubClient, mock_github: Mock, fork_repo: RepositoryRef
    ) -> None:
        """Test polling until the fork appears."""
        mock_github.get_repo.side_effect = [
            UnknownObjectException(404, "Not Found", None),
            UnknownObjectException(404, "Not Found", None),
            make_github_repo(owner="ghbot", fork=True),
        ]

        with patch("ghbot.github_client.client.time.sleep") as mock_sleep:
            ready = client.wait_for_fork(
                fork_repo, attempts=4, delay=timedelta(seconds=30)
            )

        assert ready.full_name == "ghbot/project"
        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(30.0)

    def test_wait_for_fork_gives_up(
        self, client: GitHubClient, mock_github: Mock, fork_repo: RepositoryRef
    ) -> None:
        """Test that a fork missing after every attempt raises."""
        mock_github.get_repo.side_effect = UnknownObjectException(
            404, "Not Found", None
        )

        with patch("ghbot.github_client.client.time.sleep") as mock_sleep:
            with pytest.raises(ForkNotReadyError, match="after 4 attempts"):
                client.wait_for_fork(fork_repo, attempts=4)

        assert mock_github.get_repo.call_count == 4
        assert mock_sleep.call_count == 3

    def test_wait_for_fork_rate_limited(
        self, client: GitHubClient, mock_github: Mock, fork_repo: RepositoryRef
    ) -> None:
        """Test that rate limits are not retried."""
        mock_github.get_repo.side_effect = rate_limit_error()

        with pytest.raises(RateLimitHit):
            client.wait_for_fork(fork_repo)


class TestPullRequests:
    """Test pull request lookups and creation."""

    def test_find_open_pull_request(
        self, client: GitHubClient, mock_github: Mock, upstream_repo: RepositoryRef
    ) -> None:
        """Test finding an existing pull request."""
        github_pull = Mock()
        github_pull.number = 7
        github_pull.title = "Fix golint import path"
        github_pull.html_url = "https://github.com/someone/project/pull/7"
        github_pull.head.label = "ghbot:master"
        github_pull.base.ref = "master"
        github_pull.state = "open"
        mock_github.get_repo.return_value.get_pulls.return_value = [github_pull]

        result = client.find_open_pull_request(upstream_repo, "ghbot:master")

        assert result is not None
        assert result.number == 7
        assert result.head == "ghbot:master"
        mock_github.get_repo.return_value.get_pulls.assert_called_once_with(
            state="open", head="ghbot:master"
        )

    def test_find_open_pull_request_none(
        self, client: GitHubClient, mock_github: Mock, upstream_repo: RepositoryRef
    ) -> None:
        """Test that no match returns None."""
        mock_github.get_repo.return_value.get_pulls.return_value = []

        assert client.find_open_pull_request(upstream_repo, "ghbot:master") is None

    def test_create_pull_request(
        self, client: GitHubClient, mock_github: Mock, upstream_repo: RepositoryRef
    ) -> None:
        """Test opening a pull request."""
        github_pull = Mock()
        github_pull.number = 12
        github_pull.title = "Fix golint import path"
        github_pull.html_url = "https://github.com/someone/project/pull/12"
        github_pull.head.label = "ghbot:master"
        github_pull.base.ref = "master"
        github_pull.state = "open"
        mock_github.get_repo.return_value.create_pull.return_value = github_pull

        result = client.create_pull_request(
            upstream_repo,
            head="ghbot:master",
            base="master",
            title="Fix golint import path",
            body="body",
        )

        assert result.number == 12
        mock_github.get_repo.return_value.create_pull.assert_called_once_with(
            base="master",
            head="ghbot:master",
            title="Fix golint import path",
            body="body",
            maintainer_can_modify=True,
        )
