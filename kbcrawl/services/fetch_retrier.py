import logging
import time
from typing import Callable, Optional

from kbcrawl.domain.cancellation import CancellationToken
from kbcrawl.exceptions import CrawlCancelledError, EmptyResponseError, HttpFetchError, HttpStatusError
from kbcrawl.services.http_service import HttpService

logger = logging.getLogger(__name__)

FETCH_ERRORS = (HttpFetchError, HttpStatusError, EmptyResponseError)

# Floor for the per-request timeout when the crawl deadline is close.
MIN_REQUEST_TIMEOUT_SECONDS = 0.1


class FetchRetrier:
    """GET a page with bounded retries and exponential backoff.

    Transient failures (transport errors, 5xx, 429, empty bodies) are retried
    up to `max_retries` more times, waiting `backoff_base_seconds * 2**attempt`
    between attempts. Other client errors fail on the first attempt. Waits go
    through the crawl's cancellation token so a timeout or operator cancel
    ends the retry loop promptly.
    """

    def __init__(
        self,
        http_service: HttpService,
        max_retries: int = 3,
        backoff_base_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.http_service = http_service
        self.max_retries = int(max_retries)
        self.backoff_base_seconds = float(backoff_base_seconds)
        self._sleep = sleep

    def backoff_delay(self, attempt: int) -> float:
        return self.backoff_base_seconds * (2 ** attempt)

    def fetch(self, url: str, token: Optional[CancellationToken] = None) -> str:
        """Return the body of `url` or raise the last fetch error."""
        last_error: Optional[Exception] = None
        for attempt in range(self.max_retries + 1):
            self._raise_if_cancelled(token)
            try:
                return self._attempt(url, token)
            except FETCH_ERRORS as e:
                last_error = e
                logger.warning("Attempt %s failed for %s: %s", attempt + 1, url, e)
                if not e.retryable:
                    logger.warning("Non-retryable error for %s, skipping retries", url)
                    raise
                if attempt >= self.max_retries:
                    break
                delay = self.backoff_delay(attempt)
                logger.warning("Retrying %s in %.1fs", url, delay)
                self._wait(delay, token)

        logger.error("All %s attempts failed for %s: %s", self.max_retries + 1, url, last_error)
        raise last_error

    def _attempt(self, url: str, token: Optional[CancellationToken]) -> str:
        timeout = None
        if token is not None:
            remaining = token.remaining()
            if remaining is not None:
                timeout = max(remaining, MIN_REQUEST_TIMEOUT_SECONDS)

        response = self.http_service.fetch(url, timeout=timeout)
        if not response.ok:
            raise HttpStatusError(url, response.status_code, response.reason)
        if not response.text:
            raise EmptyResponseError(url)
        return response.text

    def _wait(self, delay: float, token: Optional[CancellationToken]) -> None:
        if token is None:
            self._sleep(delay)
            return
        if token.wait(delay):
            raise CrawlCancelledError(token.reason() or "cancelled")

    def _raise_if_cancelled(self, token: Optional[CancellationToken]) -> None:
        if token is not None and token.is_cancelled():
            raise CrawlCancelledError(token.reason() or "cancelled")
