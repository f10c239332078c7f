import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from kbcrawl.domain.crawl_result import CrawlStatus
from kbcrawl.domain.source import StatusUpdate
from kbcrawl.services.protocols import StatusSink

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProgressReporter:
    """Throttled push of in-progress snapshots to a status sink.

    A snapshot is offered after every processed page but only sent on the
    first page and every `batch_size`-th page, and never more often than once
    per `interval_seconds`. Sink failures are logged and swallowed; after
    `max_failures` consecutive failures reporting is disabled for the run.
    """

    def __init__(
        self,
        sink: StatusSink,
        source_id: int,
        actor: Optional[str] = None,
        *,
        interval_seconds: float = 10.0,
        batch_size: int = 3,
        max_failures: int = 3,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.sink = sink
        self.source_id = source_id
        self.actor = actor or "system"
        self.interval_seconds = float(interval_seconds)
        self.batch_size = max(1, int(batch_size))
        self.max_failures = int(max_failures)
        self._clock = clock
        self._now = now
        self._last_report_at: Optional[float] = None
        self._consecutive_failures = 0
        self._enabled = True

    @property
    def enabled(self) -> bool:
        return self._enabled

    def maybe_report(self, pages_processed: int) -> bool:
        """Offer a snapshot; return True if one was delivered to the sink."""
        if not self._enabled:
            return False
        if pages_processed != 1 and pages_processed % self.batch_size != 0:
            return False
        t = self._clock()
        if self._last_report_at is not None and t - self._last_report_at < self.interval_seconds:
            return False
        self._last_report_at = t

        update = StatusUpdate(
            crawl_status=CrawlStatus.IN_PROGRESS,
            last_crawled=self._now(),
            pages_indexed=pages_processed,
        )
        try:
            self.sink.update_status(self.source_id, update, self.actor)
        except Exception as e:
            self._consecutive_failures += 1
            logger.warning("Failed to report crawl progress for source %s: %s", self.source_id, e)
            if self.max_failures > 0 and self._consecutive_failures >= self.max_failures:
                self._enabled = False
                logger.warning(
                    "Disabling progress reporting for source %s after %s consecutive failures",
                    self.source_id,
                    self._consecutive_failures,
                )
            return False

        self._consecutive_failures = 0
        logger.debug("Reported progress for source %s: %s pages", self.source_id, pages_processed)
        return True
