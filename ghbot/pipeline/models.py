"""Pydantic models describing what a bot pass did."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from ..github_client.models import PullRequestRef, RepositoryRef


class OutcomeStatus(str, Enum):
    """What happened to a repository during a pass."""

    QUALIFIED = "qualified"
    PULL_REQUEST_OPENED = "pull_request_opened"
    SKIPPED = "skipped"
    FAILED = "failed"


class RepoOutcome(BaseModel):
    """Result of handling one repository."""

    repository: RepositoryRef = Field(..., description="Upstream repository")
    status: OutcomeStatus
    reason: str | None = Field(None, description="Why it was skipped or failed")
    fork: RepositoryRef | None = Field(None, description="Fork used for the fix")
    commit_sha: str | None = Field(None, description="Commit made in the fork")
    pull_request: PullRequestRef | None = Field(
        None, description="Opened or already existing pull request"
    )


class PassSummary(BaseModel):
    """All outcomes of one search/fork/pull request pass."""

    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: datetime | None = None
    outcomes: list[RepoOutcome] = Field(default_factory=list)

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    def by_status(self, status: OutcomeStatus) -> list[RepoOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == status]

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()
