"""Per-repository work done by each pipeline stage."""

import logging

from github.GithubException import GithubException

from ..ci.travis import check_valid_go_version, contains_import, fix_import_path
from ..config import BotConfig
from ..errors import CIFileNotFound
from ..github_client.client import GitHubClient
from ..github_client.models import RepositoryRef
from .models import OutcomeStatus, RepoOutcome

logger = logging.getLogger(__name__)


def _skipped(repository: RepositoryRef, reason: str, **extra) -> RepoOutcome:
    logger.debug(f"Skipping {repository.full_name}: {reason}")
    return RepoOutcome(
        repository=repository, status=OutcomeStatus.SKIPPED, reason=reason, **extra
    )


def qualify_repository(
    client: GitHubClient, config: BotConfig, login: str, repository: RepositoryRef
) -> RepoOutcome:
    """Decide whether a search result should get a pull request.

    A repository qualifies when it is not the bot's own or a fork, its CI file
    still uses the old import path, every Go version it builds with supports
    the new path, and no pull request from the bot is already open.

    Returns:
        RepoOutcome with status QUALIFIED (carrying the fully loaded upstream
        repository) or SKIPPED with a reason.

    Raises:
        RateLimitHit: Propagated untouched
    """
    if repository.owner.lower() == login.lower():
        return _skipped(repository, "owned by the bot account")
    if repository.fork:
        return _skipped(repository, "repository is a fork")

    try:
        upstream = client.get_repository(repository.owner, repository.name)
        ci_file = client.get_file(upstream, config.ci_file)
    except CIFileNotFound:
        return _skipped(repository, f"no {config.ci_file}")
    except (GithubException, ValueError) as e:
        return _skipped(repository, f"could not read {config.ci_file}: {e}")

    if not contains_import(ci_file.content, config.old_import):
        return _skipped(upstream, f"{config.ci_file} no longer uses {config.old_import}")

    if not check_valid_go_version(ci_file.content, config.min_go_version):
        return _skipped(
            upstream, f"builds with Go older than {config.min_go_version} or unpinned"
        )

    head = f"{login}:{upstream.default_branch}"
    try:
        existing = client.find_open_pull_request(upstream, head)
    except GithubException as e:
        return _skipped(upstream, f"could not list pull requests: {e}")
    if existing is not None:
        return _skipped(
            upstream,
            f"pull request #{existing.number} already open",
            pull_request=existing,
        )

    logger.info(f"{upstream.full_name} qualifies for a fix")
    return RepoOutcome(repository=upstream, status=OutcomeStatus.QUALIFIED)


def fork_repository(
    client: GitHubClient, config: BotConfig, upstream: RepositoryRef
) -> RepositoryRef:
    """Fork upstream and wait until the fork can be used."""
    fork = client.create_fork(upstream)
    return client.wait_for_fork(
        fork, attempts=config.fork_attempts, delay=config.fork_retry_delay
    )


def submit_fix(
    client: GitHubClient,
    config: BotConfig,
    login: str,
    upstream: RepositoryRef,
    fork: RepositoryRef,
) -> RepoOutcome:
    """Rewrite the CI file in the fork, commit it and open the pull request.

    A fork that already carries the fix from an earlier run gets no new
    commit; the pull request is still opened.
    """
    ci_file = client.get_file(fork, config.ci_file, ref=fork.default_branch)
    fixed = fix_import_path(ci_file.content, config.old_import, config.new_import)

    commit_sha = None
    if fixed != ci_file.content:
        commit_sha = client.update_file(
            ci_file, fixed, config.commit_message, branch=fork.default_branch
        )
    else:
        logger.info(f"{fork.full_name} already contains the fix")

    pull_request = client.create_pull_request(
        upstream,
        head=f"{login}:{fork.default_branch}",
        base=upstream.default_branch,
        title=config.pr_title,
        body=config.pr_body,
    )

    return RepoOutcome(
        repository=upstream,
        status=OutcomeStatus.PULL_REQUEST_OPENED,
        fork=fork,
        commit_sha=commit_sha,
        pull_request=pull_request,
    )
