"""Crawl result data model."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, NamedTuple, Optional


class CrawlStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    FAILED = "failed"


class PageResult(NamedTuple):
    url: str
    content: str


@dataclass(frozen=True)
class CrawlStats:
    pages_found: int
    """Number of distinct URLs dequeued for processing"""

    pages_processed: int
    """Number of pages successfully fetched and transformed"""

    total_tokens: int
    """Sum of content lengths; a size proxy, not a tokenizer count"""

    crawl_duration: int
    """Wall-clock milliseconds between crawl start and result construction"""

    failed_pages: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class CrawlResult:
    """Result of a crawl operation.

    Always produced, whether the crawl finished normally, hit a budget or
    was cancelled. `stopped` is True when the loop ended early because the
    deadline passed or an operator cancelled it.
    """

    pages: List[PageResult]
    stats: CrawlStats
    stopped: bool = False
    stop_reason: Optional[str] = None


class CrawlProgress(NamedTuple):
    processed: int
    total: int
    current_url: Optional[str] = None


def build_crawl_stats(
    *,
    seen_count: int,
    pages: Iterable[PageResult],
    failed_pages: Iterable[str],
    errors: Iterable[str],
    started_at: float,
    finished_at: float,
) -> CrawlStats:
    pages = list(pages)
    return CrawlStats(
        pages_found=seen_count,
        pages_processed=len(pages),
        total_tokens=sum(len(p.content) for p in pages),
        crawl_duration=max(0, int(round((finished_at - started_at) * 1000))),
        failed_pages=list(failed_pages),
        errors=list(errors),
    )


def derive_crawl_status(stats: CrawlStats) -> CrawlStatus:
    if stats.pages_processed == 0:
        return CrawlStatus.FAILED
    if stats.errors or stats.failed_pages:
        return CrawlStatus.PARTIAL_SUCCESS
    return CrawlStatus.SUCCESS
