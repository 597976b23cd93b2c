"""Logging configuration for the bot."""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# PyGithub logs every request at DEBUG
_NOISY_LOGGERS = ("github", "urllib3")


def setup_logging(debug: bool = False, log_file: str | Path | None = None) -> None:
    """
    Configure root logging for a bot run.

    Level is DEBUG when ``debug`` is set, INFO otherwise. Calling this more than
    once adjusts the level without stacking handlers.
    """
    level = logging.DEBUG if debug else logging.INFO
    root = logging.getLogger()
    root.setLevel(level)

    if not any(getattr(h, "_ghbot", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._ghbot = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        if not any(
            isinstance(h, logging.FileHandler)
            and getattr(h, "baseFilename", "") == str(log_path.absolute())
            for h in root.handlers
        ):
            fh = logging.FileHandler(log_path)
            fh.setLevel(logging.DEBUG)
            fh.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(fh)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)
