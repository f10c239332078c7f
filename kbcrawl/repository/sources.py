import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy import update as sql_update
from sqlalchemy.orm import Session

from kbcrawl.db.models import RagUrl as DBRagUrl
from kbcrawl.domain.crawl_result import CrawlStatus
from kbcrawl.domain.source import KnowledgeSource, StatusUpdate
from kbcrawl.exceptions import SourceNotFoundError

logger = logging.getLogger(__name__)


class SourcesRepository:
    """Repository for knowledge-source records; also serves as the crawl status sink.

    Requires an explicit `session_factory` (callable returning a `Session`).
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def get_session(self) -> Session:
        return self.session_factory()

    def _to_domain(self, row: DBRagUrl) -> KnowledgeSource:
        return KnowledgeSource(
            source_id=row.id,
            url=row.url,
            namespace=row.namespace or "default",
            crawl_config=dict(row.crawl_config or {}),
            is_active=bool(row.is_active),
            crawl_status=CrawlStatus(row.crawl_status or CrawlStatus.PENDING.value),
            last_crawled=row.last_crawled,
            pages_indexed=row.pages_indexed or 0,
            error_message=row.error_message,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def add_source(self, source: KnowledgeSource) -> int:
        with self.get_session() as session:
            row = DBRagUrl(
                url=source.url,
                namespace=source.namespace,
                crawl_config=dict(source.crawl_config),
                is_active=source.is_active,
                crawl_status=CrawlStatus(source.crawl_status).value,
                pages_indexed=source.pages_indexed,
                error_message=source.error_message,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return row.id

    def get_source(self, source_id: int) -> Optional[KnowledgeSource]:
        with self.get_session() as session:
            q = select(DBRagUrl).where(DBRagUrl.id == source_id)
            row = session.execute(q).scalars().first()
            if not row:
                return None
            return self._to_domain(row)

    def list_sources(self) -> List[KnowledgeSource]:
        with self.get_session() as session:
            q = select(DBRagUrl).order_by(DBRagUrl.created_at.desc(), DBRagUrl.id.desc())
            rows = session.execute(q).scalars().all()
            return [self._to_domain(r) for r in rows]

    def update_status(self, source_id: int, update: StatusUpdate, actor: str) -> None:
        """Apply a crawl status update; fields left as None are not touched."""
        with self.get_session() as session:
            q = select(DBRagUrl).where(DBRagUrl.id == source_id)
            row = session.execute(q).scalars().first()
            if not row:
                raise SourceNotFoundError(source_id)
            row.crawl_status = CrawlStatus(update.crawl_status).value
            if update.last_crawled is not None:
                row.last_crawled = update.last_crawled
            if update.pages_indexed is not None:
                row.pages_indexed = update.pages_indexed
            if update.clear_error:
                row.error_message = None
            elif update.error_message is not None:
                row.error_message = update.error_message
            session.add(row)
            session.commit()
        logger.info("Source %s status -> %s (by %s)", source_id, CrawlStatus(update.crawl_status).value, actor)

    def claim_for_crawl(self, source_id: int, actor: str) -> bool:
        """Atomically move a source to `in_progress`, clearing its error message.

        Returns False when the source is missing or already in progress, so two
        concurrent starts cannot both claim it.
        """
        with self.get_session() as session:
            stmt = (
                sql_update(DBRagUrl)
                .where(DBRagUrl.id == source_id, DBRagUrl.crawl_status != CrawlStatus.IN_PROGRESS.value)
                .values(crawl_status=CrawlStatus.IN_PROGRESS.value, error_message=None)
            )
            result = session.execute(stmt)
            session.commit()
            claimed = result.rowcount == 1
        if claimed:
            logger.info("Source %s status -> %s (by %s)", source_id, CrawlStatus.IN_PROGRESS.value, actor)
        return claimed

    def mark_incomplete_crawls(self, message: str) -> List[int]:
        """Mark every `in_progress` source as failed with `message`.

        Returns the ids of the sources that were marked.
        """
        with self.get_session() as session:
            q = select(DBRagUrl).where(DBRagUrl.crawl_status == CrawlStatus.IN_PROGRESS.value)
            rows = session.execute(q).scalars().all()
            marked = []
            for r in rows:
                r.crawl_status = CrawlStatus.FAILED.value
                r.error_message = message
                session.add(r)
                marked.append(r.id)
            if marked:
                session.commit()
            else:
                session.rollback()
        return marked
