import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class LinkPolicy(Protocol):
    """Decides whether a URL may be fetched at all (robots.txt, politeness, ...)."""

    def allows(self, url: str) -> bool: ...


class AllowAllLinkPolicy:
    """Permits every URL.

    Stands in until robots.txt handling exists; swap in a policy that parses
    robots.txt or applies per-host delays without touching the crawler.
    """

    def allows(self, url: str) -> bool:
        return True


class CrawlPolicy:
    """Encapsulates crawl decision rules: depth limits and link-policy compliance.

    Pages are fetched while `depth < max_depth` but only expanded while
    `depth < max_depth - 1`, so the deepest fetched layer is a leaf.
    """

    def __init__(self, max_depth: int, link_policy: Optional[LinkPolicy] = None):
        self.max_depth = max_depth
        self.link_policy = link_policy if link_policy is not None else AllowAllLinkPolicy()

    def should_skip_due_to_depth(self, depth: int) -> bool:
        """Check if URL should be skipped due to max depth reached."""
        if depth >= self.max_depth:
            logger.debug("Skipping (max depth reached) at depth %s", depth)
            return True
        return False

    def should_expand(self, depth: int) -> bool:
        """Check if links found on a page at `depth` should be enqueued."""
        return depth < self.max_depth - 1

    def should_skip_due_to_policy(self, url: str) -> bool:
        if not self.link_policy.allows(url):
            logger.info("Skipping %s due to link policy (robots.txt) restrictions", url)
            return True
        return False
