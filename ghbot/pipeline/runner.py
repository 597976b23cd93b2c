"""Three-stage search → fork → pull request pipeline.

The search stage runs in its own thread and hands qualifying repositories to
the fork stage one at a time. The fork stage runs forks on a worker pool and
only signals the end of its output once every worker has finished. The pull
request stage consumes forks in the calling thread.
"""

import logging
import queue
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from github.GithubException import GithubException

from ..config import BotConfig
from ..errors import BotError, RateLimitHit
from ..github_client.client import GitHubClient
from ..github_client.models import RepositoryRef
from ..github_client.search import CodeSearcher
from .models import OutcomeStatus, PassSummary, RepoOutcome
from .stages import fork_repository, qualify_repository, submit_fix

logger = logging.getLogger(__name__)

# Marks the end of a stage's output
_CLOSED = object()

FORK_QUEUE_SIZE = 10


class Pipeline:
    """Runs one pass of the bot."""

    def __init__(
        self,
        client: GitHubClient,
        searcher: CodeSearcher,
        config: BotConfig,
        login: str,
        shutdown: threading.Event | None = None,
    ):
        """Initialize a pass.

        Args:
            client: Authenticated GitHubClient
            searcher: CodeSearcher used by the search stage
            config: Bot configuration
            login: Login of the bot account, owner of the forks
            shutdown: Set to stop producing new work; work in flight finishes
        """
        self.client = client
        self.searcher = searcher
        self.config = config
        self.login = login
        self.shutdown = shutdown or threading.Event()

        self._abort = threading.Event()
        self._lock = threading.Lock()
        self._error: BaseException | None = None
        self._summary = PassSummary()

    def _record(self, outcome: RepoOutcome) -> None:
        with self._lock:
            self._summary.outcomes.append(outcome)

    def _fail(self, error: BaseException) -> None:
        """Stop the whole pass; the first error wins."""
        with self._lock:
            if self._error is None:
                self._error = error
        self._abort.set()

    def _search_stage(self, candidates: queue.Queue) -> None:
        forwarded = 0
        try:
            for repository in self.searcher.iter_repositories(
                self.config.query, self.config.max_pages
            ):
                if self._abort.is_set() or self.shutdown.is_set():
                    logger.info("Search stage stopping early")
                    break

                outcome = qualify_repository(
                    self.client, self.config, self.login, repository
                )
                if outcome.status != OutcomeStatus.QUALIFIED:
                    self._record(outcome)
                    continue

                if self.config.dry_run:
                    self._record(outcome)
                else:
                    candidates.put(outcome.repository)

                forwarded += 1
                if forwarded >= self.config.limit:
                    logger.info(f"Reached limit of {self.config.limit} repositories")
                    break
        except Exception as e:
            if not isinstance(e, RateLimitHit):
                logger.error(f"Search stage failed: {e}")
            self._fail(e)
        finally:
            candidates.put(_CLOSED)

    def _fork_one(self, upstream: RepositoryRef, forks: queue.Queue) -> None:
        if self._abort.is_set():
            return
        try:
            fork = fork_repository(self.client, self.config, upstream)
        except RateLimitHit as e:
            self._fail(e)
            return
        except (BotError, GithubException, ValueError) as e:
            logger.error(f"Failed to fork {upstream.full_name}: {e}")
            self._record(
                RepoOutcome(
                    repository=upstream,
                    status=OutcomeStatus.FAILED,
                    reason=f"fork failed: {e}",
                )
            )
            return
        except Exception as e:
            self._fail(e)
            return
        forks.put((upstream, fork))

    def _fork_stage(self, candidates: queue.Queue, forks: queue.Queue) -> None:
        input_closed = False
        try:
            with ThreadPoolExecutor(
                max_workers=self.config.fork_workers, thread_name_prefix="fork"
            ) as executor:
                while True:
                    upstream = candidates.get()
                    if upstream is _CLOSED:
                        input_closed = True
                        break
                    if self._abort.is_set():
                        continue
                    executor.submit(self._fork_one, upstream, forks)
        except Exception as e:
            logger.error(f"Fork stage failed: {e}")
            self._fail(e)
        finally:
            # The search stage blocks on the hand-off until its sentinel is taken
            while not input_closed:
                input_closed = candidates.get() is _CLOSED
            forks.put(_CLOSED)

    def _pull_request_stage(self, forks: queue.Queue) -> None:
        while True:
            item = forks.get()
            if item is _CLOSED:
                break
            if self._abort.is_set():
                continue

            upstream, fork = item
            try:
                outcome = submit_fix(
                    self.client, self.config, self.login, upstream, fork
                )
            except RateLimitHit as e:
                self._fail(e)
                continue
            except (BotError, GithubException, ValueError) as e:
                logger.error(f"Failed to open pull request for {upstream.full_name}: {e}")
                outcome = RepoOutcome(
                    repository=upstream,
                    status=OutcomeStatus.FAILED,
                    reason=f"commit or pull request failed: {e}",
                    fork=fork,
                )
            except Exception as e:
                self._fail(e)
                continue
            self._record(outcome)

    def run(self) -> PassSummary:
        """Run the pass to completion.

        Returns:
            PassSummary with one outcome per inspected repository

        Raises:
            RateLimitHit: If any stage hit a rate limit
            GithubException: If the code search itself failed
        """
        candidates: queue.Queue = queue.Queue(maxsize=1)
        forks: queue.Queue = queue.Queue(maxsize=FORK_QUEUE_SIZE)

        searcher_thread = threading.Thread(
            target=self._search_stage, args=(candidates,), name="search", daemon=True
        )
        fork_thread = threading.Thread(
            target=self._fork_stage, args=(candidates, forks), name="forks", daemon=True
        )
        searcher_thread.start()
        fork_thread.start()

        self._pull_request_stage(forks)

        searcher_thread.join()
        fork_thread.join()
        self._summary.finished_at = datetime.now()

        if self._error is not None:
            raise self._error
        return self._summary


def make_pass_runner(
    client: GitHubClient, searcher: CodeSearcher, config: BotConfig, login: str
) -> Callable[[threading.Event], PassSummary]:
    """Bind everything a pass needs, leaving the shutdown event to the poller."""

    def run_pass(shutdown: threading.Event) -> PassSummary:
        return Pipeline(client, searcher, config, login, shutdown).run()

    return run_pass
