"""Custom exceptions for KBCrawl services."""
from typing import Optional


class HttpFetchError(Exception):
    """Raised when an HTTP fetch fails due to network/transport errors."""

    def __init__(self, url: str, original: Exception, retryable: bool = False):
        self.url = url
        self.original = original
        self.retryable = retryable
        super().__init__(f"HTTP fetch failed for {url}: {original}")


class HttpStatusError(Exception):
    """Raised when a fetch completes with a non-2xx status code."""

    def __init__(self, url: str, status_code: int, reason: Optional[str] = None):
        self.url = url
        self.status_code = status_code
        self.reason = reason
        detail = f"HTTP {status_code}: {reason}" if reason else f"HTTP {status_code}"
        super().__init__(f"{detail} for {url}")

    @property
    def retryable(self) -> bool:
        # 429 is a rate limit, not a permanent client error
        return self.status_code >= 500 or self.status_code == 429


class EmptyResponseError(Exception):
    """Raised when a fetch succeeds but the body is empty."""

    retryable = True

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Empty response body from {url}")


class CrawlCancelledError(Exception):
    """Raised out of a fetch when the crawl's cancellation token fires."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Crawl aborted: {reason}")


class ConfigurationError(Exception):
    """Base class for errors detected before a crawl starts."""


class InvalidCrawlJobError(ConfigurationError):
    pass


class InvalidCrawlConfigError(ConfigurationError):
    pass


class SourceNotFoundError(ConfigurationError):
    def __init__(self, source_id: int):
        self.source_id = source_id
        super().__init__(f"Knowledge source {source_id} not found")


class InactiveSourceError(ConfigurationError):
    def __init__(self, source_id: int):
        self.source_id = source_id
        super().__init__(f"Cannot crawl inactive knowledge source {source_id}")


class CrawlInProgressError(ConfigurationError):
    def __init__(self, source_id: int):
        self.source_id = source_id
        super().__init__(f"Crawl already in progress for knowledge source {source_id}")
