"""Search, fork and pull request pipeline."""

from .models import OutcomeStatus, PassSummary, RepoOutcome
from .poller import Poller
from .runner import Pipeline, make_pass_runner

__all__ = [
    "OutcomeStatus",
    "PassSummary",
    "Pipeline",
    "Poller",
    "RepoOutcome",
    "make_pass_runner",
]
