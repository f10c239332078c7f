from __future__ import annotations


from sqlalchemy import JSON, Boolean, CheckConstraint, Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import declarative_base


Base = declarative_base()


class RagUrl(Base):
    """A knowledge source: a URL whose crawled pages feed the vector index."""

    __tablename__ = "rag_urls"
    __table_args__ = (
        CheckConstraint(
            "crawl_status IN ('pending', 'success', 'failed', 'in_progress', 'partial_success')",
            name="rag_urls_crawl_status_check",
        ),
    )

    id = Column(Integer, primary_key=True)
    url = Column(Text, nullable=False)
    namespace = Column(String(100), default="default")
    crawl_config = Column(JSON, nullable=False, default=dict)
    is_active = Column(Boolean, default=True)
    last_crawled = Column(DateTime(timezone=True), nullable=True)
    crawl_status = Column(String(20), default="pending")
    pages_indexed = Column(Integer, default=0)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
