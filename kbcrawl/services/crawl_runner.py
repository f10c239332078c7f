import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Mapping, NamedTuple, Optional, Tuple

from kbcrawl.domain.crawl_job import CrawlJob
from kbcrawl.domain.crawl_result import CrawlResult, CrawlStatus, derive_crawl_status
from kbcrawl.domain.source import CrawlSettings, KnowledgeSource, StatusUpdate
from kbcrawl.exceptions import CrawlInProgressError, InactiveSourceError, SourceNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_ACTOR = "system"


class CrawlOutcome(NamedTuple):
    source_id: int
    result: CrawlResult
    status: CrawlStatus
    error_message: Optional[str] = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def final_error_message(result: CrawlResult, status: CrawlStatus) -> Optional[str]:
    stats = result.stats
    if status == CrawlStatus.SUCCESS:
        return None
    if status == CrawlStatus.PARTIAL_SUCCESS:
        if stats.failed_pages:
            return f"Partial success: {len(stats.failed_pages)} pages failed"
        return "Partial success: " + "; ".join(stats.errors)
    if stats.errors:
        return f"Failed to crawl any pages. Errors: {'; '.join(stats.errors)}"
    return "Failed to crawl any pages from the specified URL."


class CrawlRunner:
    """Runs a crawl for a stored knowledge source and records its status.

    `start()` does the pre-flight checks and claims the source by moving it
    to in progress; configuration problems surface there as
    `ConfigurationError`s before any work begins. `execute()` runs the crawl
    and writes the final status. Final status writes are best-effort:
    failures are logged, never raised.
    """

    def __init__(
        self,
        *,
        sources_repo,
        crawler_factory: Callable,
        mode_timeouts: Optional[Mapping[str, float]] = None,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.sources_repo = sources_repo
        self.crawler_factory = crawler_factory
        self.mode_timeouts = dict(mode_timeouts) if mode_timeouts else None
        self._now = now

    def prepare(self, source_id: int) -> Tuple[KnowledgeSource, CrawlSettings]:
        source = self.sources_repo.get_source(source_id)
        if source is None:
            raise SourceNotFoundError(source_id)
        if not source.is_active:
            raise InactiveSourceError(source_id)
        if source.crawl_status == CrawlStatus.IN_PROGRESS:
            raise CrawlInProgressError(source_id)
        return source, source.settings()

    def build_job(self, source: KnowledgeSource, settings: CrawlSettings, actor: str) -> CrawlJob:
        budgets = settings.budgets(self.mode_timeouts)
        return CrawlJob(
            start_url=source.url,
            max_depth=budgets.max_depth,
            max_pages=budgets.max_pages,
            overall_timeout=budgets.overall_timeout,
            status_sink=self.sources_repo,
            source_id=source.source_id,
            actor=actor,
        )

    def start(self, source_id: int, actor: str = DEFAULT_ACTOR) -> CrawlJob:
        source, settings = self.prepare(source_id)
        job = self.build_job(source, settings, actor)
        # prepare() is only a fast path; the claim is the authoritative check
        if not self.sources_repo.claim_for_crawl(source_id, actor):
            raise CrawlInProgressError(source_id)
        logger.info(
            "Starting %s crawl of %s (source=%s, depth=%s, pages=%s)",
            settings.mode,
            source.url,
            source_id,
            job.max_depth,
            job.max_pages,
        )
        return job

    def execute(self, job: CrawlJob, stop_event: Optional[threading.Event] = None) -> CrawlOutcome:
        try:
            crawler = self.crawler_factory(job=job, stop_event=stop_event)
            result = crawler.crawl()
        except Exception as e:
            # Crawler.crawl() absorbs page errors; this is a wiring/construction failure.
            logger.exception("Crawl of source %s could not run", job.source_id)
            self._write_status(
                job.source_id,
                StatusUpdate(CrawlStatus.FAILED, error_message=f"Crawl operation failed: {e}"),
                job.actor or DEFAULT_ACTOR,
            )
            raise

        status = derive_crawl_status(result.stats)
        error_message = final_error_message(result, status)
        if status == CrawlStatus.FAILED:
            update = StatusUpdate(status, error_message=error_message)
        else:
            update = StatusUpdate(
                status,
                last_crawled=self._now(),
                pages_indexed=result.stats.pages_processed,
                error_message=error_message,
                clear_error=error_message is None,
            )
        self._write_status(job.source_id, update, job.actor or DEFAULT_ACTOR)

        logger.info("Crawl of source %s finished with status %s", job.source_id, status.value)
        return CrawlOutcome(source_id=job.source_id, result=result, status=status, error_message=error_message)

    def run(self, source_id: int, actor: str = DEFAULT_ACTOR, stop_event: Optional[threading.Event] = None) -> CrawlOutcome:
        job = self.start(source_id, actor)
        return self.execute(job, stop_event=stop_event)

    def _write_status(self, source_id: int, update: StatusUpdate, actor: str) -> None:
        try:
            self.sources_repo.update_status(source_id, update, actor)
        except Exception:
            logger.exception("Could not write %s status for source %s", update.crawl_status.value, source_id)
