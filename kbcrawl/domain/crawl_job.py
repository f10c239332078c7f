from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from kbcrawl.exceptions import InvalidCrawlJobError


@dataclass(frozen=True)
class CrawlJob:
    """Immutable input for a single crawl.

    `status_sink`, `source_id` and `actor` are only needed when progress
    should be pushed to a persistence collaborator while crawling.
    """

    start_url: str
    max_depth: int
    max_pages: int
    overall_timeout: float
    status_sink: Optional[object] = None
    source_id: Optional[int] = None
    actor: Optional[str] = None

    def __post_init__(self):
        try:
            parsed = urlparse(self.start_url or "")
            hostname = parsed.hostname
        except ValueError as e:
            raise InvalidCrawlJobError(f"start_url is not a valid URL: {self.start_url!r} ({e})") from e
        if parsed.scheme not in ("http", "https") or not hostname:
            raise InvalidCrawlJobError(f"start_url must be an absolute http(s) URL: {self.start_url!r}")
        if not isinstance(self.max_depth, int) or self.max_depth < 1:
            raise InvalidCrawlJobError(f"max_depth must be >= 1, got {self.max_depth!r}")
        if not isinstance(self.max_pages, int) or self.max_pages < 1:
            raise InvalidCrawlJobError(f"max_pages must be >= 1, got {self.max_pages!r}")
        if self.overall_timeout is None or self.overall_timeout <= 0:
            raise InvalidCrawlJobError(f"overall_timeout must be positive, got {self.overall_timeout!r}")
        if self.status_sink is not None and self.source_id is None:
            raise InvalidCrawlJobError("source_id is required when a status_sink is given")

    @property
    def origin_host(self) -> str:
        return urlparse(self.start_url).hostname
