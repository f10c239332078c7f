import logging
import threading
import time
from typing import Callable, List, Optional

from kbcrawl.domain.cancellation import CancellationToken
from kbcrawl.domain.crawl_job import CrawlJob
from kbcrawl.domain.crawl_result import CrawlProgress, CrawlResult, PageResult, build_crawl_stats
from kbcrawl.domain.frontier import Frontier, SeenSet
from kbcrawl.exceptions import CrawlCancelledError
from kbcrawl.services.fetch_retrier import FetchRetrier
from kbcrawl.services.html_text_extractor import HtmlTextExtractor, TextExtractor
from kbcrawl.services.link_extractor import LinkExtractor
from kbcrawl.services.link_policy import CrawlPolicy, LinkPolicy
from kbcrawl.services.progress_reporter import ProgressReporter

logger = logging.getLogger(__name__)


class Crawler:
    """Breadth-first crawl of one `CrawlJob`.

    This class owns the crawl control-flow (frontier, dedup, budgets,
    cancellation checks, failure bookkeeping) and delegates fetching, text
    extraction and link extraction to injected collaborators. An instance is
    single-use: one job, one `crawl()`, one `CrawlResult`.
    """

    def __init__(
        self,
        job: CrawlJob,
        *,
        fetch_retrier: FetchRetrier,
        link_extractor: Optional[LinkExtractor] = None,
        text_extractor: Optional[TextExtractor] = None,
        link_policy: Optional[LinkPolicy] = None,
        stop_event: Optional[threading.Event] = None,
        progress_interval_seconds: float = 10.0,
        progress_batch_size: int = 3,
        progress_max_failures: int = 3,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.job = job
        self.fetch_retrier = fetch_retrier
        self.link_extractor = link_extractor or LinkExtractor()
        self.text_extractor = text_extractor or HtmlTextExtractor()
        self.crawl_policy = CrawlPolicy(job.max_depth, link_policy)
        self.stop_event = stop_event
        self._clock = clock

        self.progress_reporter: Optional[ProgressReporter] = None
        if job.status_sink is not None:
            self.progress_reporter = ProgressReporter(
                job.status_sink,
                job.source_id,
                job.actor,
                interval_seconds=progress_interval_seconds,
                batch_size=progress_batch_size,
                max_failures=progress_max_failures,
                clock=clock,
            )

        self.frontier = Frontier()
        self.seen = SeenSet()
        self.pages: List[PageResult] = []
        self.failed_pages: List[str] = []
        self.errors: List[str] = []
        self._started = False

        logger.info(
            "Crawler initialized: max_depth=%s, max_pages=%s, timeout=%ss",
            job.max_depth,
            job.max_pages,
            round(job.overall_timeout),
        )

    def crawl(self) -> CrawlResult:
        """Run the crawl to completion, budget exhaustion or cancellation.

        Per-page failures and early stops are folded into the returned
        result rather than raised.
        """
        if self._started:
            raise RuntimeError("Crawler instances are single-use; create a new Crawler per crawl")
        self._started = True

        started_at = self._clock()
        # The overall deadline starts counting here, not at construction.
        token = CancellationToken(self.stop_event, self.job.overall_timeout, clock=self._clock)
        self.frontier.push(self.job.start_url, 0)

        stop_reason: Optional[str] = None
        try:
            stop_reason = self._traverse(token)
        except Exception as e:
            logger.exception("Crawl operation failed for %s", self.job.start_url)
            self.errors.append(f"Crawl operation failed: {e}")

        if stop_reason is not None:
            self.errors.append(f"Crawl aborted: {stop_reason}")

        stats = build_crawl_stats(
            seen_count=len(self.seen),
            pages=self.pages,
            failed_pages=self.failed_pages,
            errors=self.errors,
            started_at=started_at,
            finished_at=self._clock(),
        )
        logger.info(
            "Crawl of %s finished: %s pages, %s failures, %sms%s",
            self.job.start_url,
            stats.pages_processed,
            len(stats.failed_pages),
            stats.crawl_duration,
            f" (stopped: {stop_reason})" if stop_reason else "",
        )
        return CrawlResult(
            pages=list(self.pages),
            stats=stats,
            stopped=stop_reason is not None,
            stop_reason=stop_reason,
        )

    def progress(self) -> CrawlProgress:
        head = self.frontier.peek()
        return CrawlProgress(
            processed=len(self.pages),
            total=min(len(self.seen) + len(self.frontier), self.job.max_pages),
            current_url=head.url if head else None,
        )

    def _should_continue(self) -> bool:
        return bool(self.frontier) and len(self.pages) < self.job.max_pages

    def _traverse(self, token: CancellationToken) -> Optional[str]:
        """Drain the frontier; return the stop reason if cancelled, else None."""
        while self._should_continue():
            if token.is_cancelled():
                reason = token.reason()
                logger.warning("Crawl of %s aborted: %s", self.job.start_url, reason)
                return reason

            url, depth = self.frontier.pop()

            if self.crawl_policy.should_skip_due_to_depth(depth):
                continue
            if self.seen.is_seen(url):
                logger.debug("Skipping (seen) %s", url)
                continue
            if self.crawl_policy.should_skip_due_to_policy(url):
                continue

            self.seen.mark(url)
            try:
                self._process(url, depth, token)
            except CrawlCancelledError as e:
                logger.warning("Fetch of %s interrupted: %s", url, e.reason)
                self._record_failure(url, f"Error crawling {url}: interrupted")
                return e.reason
        return None

    def _process(self, url: str, depth: int, token: CancellationToken) -> None:
        try:
            html = self.fetch_retrier.fetch(url, token)
            content = self.text_extractor.extract(html)
        except CrawlCancelledError:
            raise
        except Exception as e:
            logger.warning("Failed to crawl %s: %s", url, e)
            self._record_failure(url, f"Error crawling {url}: {e}")
            return

        if not content:
            logger.warning("No text content extracted from %s", url)
        self.pages.append(PageResult(url=url, content=content))
        logger.info("Fetched %s (depth %s, %s chars)", url, depth, len(content))

        if self.crawl_policy.should_expand(depth):
            self._enqueue_links(html, url, depth)

        if self.progress_reporter is not None:
            self.progress_reporter.maybe_report(len(self.pages))

    def _enqueue_links(self, html: str, url: str, depth: int) -> None:
        try:
            links = self.link_extractor.extract_links(html, url, self.job.origin_host)
        except Exception as e:
            logger.warning("Link extraction failed for %s: %s", url, e)
            return

        enqueued = 0
        for link in links:
            if self.seen.is_seen(link):
                continue
            self.frontier.push(link, depth + 1)
            enqueued += 1
        logger.debug("Enqueued %s links from %s at depth %s", enqueued, url, depth + 1)

    def _record_failure(self, url: str, message: str) -> None:
        self.failed_pages.append(url)
        self.errors.append(message)
