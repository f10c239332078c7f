"""Domain objects for KBCrawl - explicit re-exports to satisfy linters."""
from .crawl_job import CrawlJob as CrawlJob
from .crawl_result import CrawlResult as CrawlResult
from .crawl_result import CrawlStats as CrawlStats
from .crawl_result import CrawlStatus as CrawlStatus
from .crawl_result import PageResult as PageResult
from .source import CrawlSettings as CrawlSettings
from .source import KnowledgeSource as KnowledgeSource
from .source import StatusUpdate as StatusUpdate

__all__ = [
    "CrawlJob",
    "CrawlResult",
    "CrawlStats",
    "CrawlStatus",
    "PageResult",
    "CrawlSettings",
    "KnowledgeSource",
    "StatusUpdate",
]
