import logging
from typing import Callable, List, Optional
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

SKIPPED_PREFIXES = ("#", "mailto:", "tel:")
FETCHABLE_SCHEMES = ("http", "https")


class LinkExtractor:
    """Pull crawlable same-origin links out of an HTML page.

    No network and no state; deduplication against already-seen URLs is left
    to the traversal loop.
    """

    def __init__(self, soup_factory: Optional[Callable[[str], BeautifulSoup]] = None):
        self._soup_factory = soup_factory or (lambda html: BeautifulSoup(html, "html.parser"))

    def extract_links(self, html: str, base_url: str, origin_host: Optional[str] = None) -> List[str]:
        """Return absolute http(s) links from `html` whose host is `origin_host`.

        Relative hrefs resolve against `base_url` (the page's own URL), but the
        host filter is anchored to the crawl's start host so scope does not
        drift as the crawl moves between pages. `origin_host` defaults to the
        host of `base_url`.
        """
        if not html:
            return []
        if origin_host is None:
            origin_host = urlparse(base_url).hostname

        soup = self._soup_factory(html)
        links: List[str] = []
        for a in soup.find_all("a", href=True):
            href = (a.get("href") or "").strip()
            if not href or href.startswith(SKIPPED_PREFIXES):
                continue
            try:
                resolved = urldefrag(urljoin(base_url, href))[0]
                parsed = urlparse(resolved)
                host = parsed.hostname
            except ValueError as e:
                logger.warning("Invalid URL found: %s (%s)", href, e)
                continue
            if parsed.scheme not in FETCHABLE_SCHEMES:
                logger.debug("Skipping (scheme) %s", resolved)
                continue
            if host != origin_host:
                logger.debug("Skipping (external) %s -> not same host as %s", resolved, origin_host)
                continue
            links.append(resolved)
        return links
