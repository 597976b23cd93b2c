"""Exceptions raised by the bot."""


class BotError(Exception):
    """Base class for bot errors."""


class RateLimitHit(BotError):
    """GitHub refused a request because a rate limit was exhausted.

    Always fatal: the running pass stops and the CLI exits.
    """

    def __init__(self, message: str = "hit rate limit"):
        super().__init__(message)


class ForkNotReadyError(BotError):
    """A freshly created fork never became retrievable."""


class CIFileNotFound(BotError):
    """The CI configuration file does not exist in a repository."""
