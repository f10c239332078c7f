import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Header, HTTPException
from pydantic import BaseModel

from kbcrawl.domain.source import KnowledgeSource
from kbcrawl.exceptions import ConfigurationError, SourceNotFoundError
from kbcrawl.services.crawl_registry import InMemoryCrawlRegistry
from kbcrawl.services.crawl_runner import DEFAULT_ACTOR, CrawlRunner
from kbcrawl.services.protocols import SourceProvider

logger = logging.getLogger(__name__)


class SourceResponse(BaseModel):
    id: int
    url: str
    namespace: str
    crawl_config: dict
    is_active: bool
    crawl_status: str
    last_crawled: Optional[datetime] = None
    pages_indexed: int = 0
    error_message: Optional[str] = None


class CrawlStartedResponse(BaseModel):
    crawl_id: str
    source_id: int
    url: str
    max_depth: int
    max_pages: int


def source_to_response(source: KnowledgeSource) -> SourceResponse:
    return SourceResponse(
        id=source.source_id,
        url=source.url,
        namespace=source.namespace,
        crawl_config=source.crawl_config,
        is_active=source.is_active,
        crawl_status=source.crawl_status.value,
        last_crawled=source.last_crawled,
        pages_indexed=source.pages_indexed,
        error_message=source.error_message,
    )


def create_sources_router(sources_repo: SourceProvider, crawl_runner: CrawlRunner, crawl_registry: InMemoryCrawlRegistry):
    router = APIRouter(prefix="/sources", tags=["Sources"])

    def _run_and_track(job, handle):
        try:
            outcome = crawl_runner.execute(job, stop_event=handle.stop_event)
        except Exception as e:
            crawl_registry.finish(handle.crawl_id, status="failed", error=str(e))
            return
        crawl_registry.update(
            handle.crawl_id,
            pages_fetched=outcome.result.stats.pages_processed,
            failed_pages=len(outcome.result.stats.failed_pages),
        )
        crawl_registry.finish(handle.crawl_id, status=outcome.status.value, error=outcome.error_message)

    @router.get("", response_model=List[SourceResponse])
    def list_sources():
        return [source_to_response(s) for s in sources_repo.list_sources()]

    @router.post("/{source_id}/crawl", status_code=202, response_model=CrawlStartedResponse)
    def crawl(source_id: int, background_tasks: BackgroundTasks, x_actor: Optional[str] = Header(default=None)):
        actor = x_actor or DEFAULT_ACTOR
        try:
            job = crawl_runner.start(source_id, actor)
        except SourceNotFoundError:
            raise HTTPException(status_code=404, detail="knowledge source not found")
        except ConfigurationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception:
            logger.exception("Could not start crawl for source %s", source_id)
            raise HTTPException(status_code=500, detail="could not start crawl")

        handle = crawl_registry.start(url=job.start_url, source_id=source_id)
        background_tasks.add_task(_run_and_track, job, handle)
        return CrawlStartedResponse(
            crawl_id=handle.crawl_id,
            source_id=source_id,
            url=job.start_url,
            max_depth=job.max_depth,
            max_pages=job.max_pages,
        )

    return router
