"""Polling loop running bot passes on an interval."""

import logging
import signal
import threading
from collections.abc import Callable
from datetime import datetime, timedelta

from ..errors import RateLimitHit
from ..utils.duration_parser import format_duration
from .models import PassSummary

logger = logging.getLogger(__name__)


class Poller:
    """Runs a pass immediately and then once per interval until shutdown.

    A pass that fails for any reason other than a rate limit is logged and the
    loop carries on; after ``max_consecutive_failures`` failed passes in a row
    the loop gives up. In ``once`` mode errors propagate.
    """

    def __init__(
        self,
        run_pass: Callable[[threading.Event], PassSummary],
        interval: timedelta,
        once: bool = False,
        max_consecutive_failures: int = 3,
        on_summary: Callable[[PassSummary], None] | None = None,
    ):
        self.run_pass = run_pass
        self.interval = interval
        self.once = once
        self.max_consecutive_failures = max_consecutive_failures
        self.on_summary = on_summary

        self.shutdown = threading.Event()
        self.last_checked: datetime | None = None
        self.passes = 0

    def request_shutdown(self, signum: int | None = None, frame=None) -> None:
        """Handle shutdown signals gracefully."""
        if signum is not None:
            logger.info(f"Received {signal.Signals(signum).name}, exiting.")
        self.shutdown.set()

    def _install_signal_handlers(self) -> dict[int, object]:
        if threading.current_thread() is not threading.main_thread():
            return {}
        previous = {}
        for signum in (signal.SIGINT, signal.SIGTERM):
            previous[signum] = signal.getsignal(signum)
            signal.signal(signum, self.request_shutdown)
        return previous

    def run(self) -> int:
        """Run passes until shutdown.

        Returns:
            Number of passes executed

        Raises:
            RateLimitHit: When GitHub rate limited the bot
        """
        previous_handlers = self._install_signal_handlers()
        consecutive_failures = 0

        try:
            while not self.shutdown.is_set():
                self.passes += 1
                logger.debug(f"Starting pass #{self.passes}")
                try:
                    summary = self.run_pass(self.shutdown)
                except RateLimitHit:
                    logger.error("hit rate limit")
                    raise
                except Exception as e:
                    if self.once:
                        raise
                    consecutive_failures += 1
                    logger.error(f"Pass #{self.passes} failed: {e}", exc_info=True)
                    if consecutive_failures >= self.max_consecutive_failures:
                        logger.error(
                            f"Too many consecutive failures ({consecutive_failures}). "
                            "Stopping."
                        )
                        raise
                else:
                    consecutive_failures = 0
                    self.last_checked = summary.finished_at or datetime.now()
                    if self.on_summary is not None:
                        self.on_summary(summary)

                if self.once:
                    break

                logger.info(f"Next check in {format_duration(self.interval)}")
                # Event.wait returns early when a shutdown is requested
                self.shutdown.wait(self.interval.total_seconds())
        finally:
            for signum, handler in previous_handlers.items():
                signal.signal(signum, handler)

        return self.passes
