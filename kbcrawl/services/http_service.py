import requests
from typing import Callable, Optional

from kbcrawl.domain.http_response import HttpResponse
from kbcrawl.exceptions import HttpFetchError

# Transport failures worth another attempt: resets, refusals, timeouts, truncated bodies.
RETRYABLE_TRANSPORT_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    requests.exceptions.ChunkedEncodingError,
)


class HttpService:
    """
    HTTP client wrapper for fetching web pages.

    Requires http_client callable for dependency injection.
    This enables easy testing without patching and allows swapping HTTP libraries.
    """

    def __init__(self, user_agent: str, http_client: Callable, timeout: float = 10):
        self.user_agent = user_agent
        self.timeout = timeout
        self.http_client = http_client

    def fetch(self, url: str, timeout: Optional[float] = None) -> HttpResponse:
        """Fetch URL and return response with status code, body text, and Content-Type.

        `timeout` caps the request below the service default, e.g. to honour
        a crawl deadline.
        """
        headers = {"User-Agent": self.user_agent}
        effective_timeout = self.timeout if timeout is None else min(self.timeout, timeout)
        try:
            resp = self.http_client(url, headers=headers, timeout=effective_timeout)
        except requests.exceptions.RequestException as e:
            raise HttpFetchError(url, e, retryable=isinstance(e, RETRYABLE_TRANSPORT_ERRORS)) from e

        # Extract Content-Type if response has headers; let real exceptions bubble up.
        ct = None
        if hasattr(resp, 'headers'):
            ct = resp.headers.get('Content-Type')

        return HttpResponse(resp.status_code, resp.text, ct, getattr(resp, 'reason', None))
