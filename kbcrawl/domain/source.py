from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, NamedTuple, Optional

from kbcrawl.domain.crawl_result import CrawlStatus
from kbcrawl.exceptions import InvalidCrawlConfigError

CRAWL_MODES = ("single", "limited", "deep")

DEFAULT_LIMITED_MAX_PAGES = 10
DEFAULT_DEEP_MAX_PAGES = 100
DEFAULT_DEEP_MAX_DEPTH = 2
MAX_LIMITED_PAGES = 50
ALLOWED_DEEP_DEPTHS = (2, 3)

DEFAULT_MODE_TIMEOUTS = {"single": 30.0, "limited": 300.0, "deep": 600.0}


class CrawlBudgets(NamedTuple):
    max_depth: int
    max_pages: int
    overall_timeout: float


def _require_int(name: str, value: Any) -> int:
    # bool is an int subclass but never a valid limit
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidCrawlConfigError(f"{name} must be an integer")
    return value


@dataclass(frozen=True)
class CrawlSettings:
    """Crawl-behavior fields of a knowledge source (`crawl_config`)."""

    mode: str
    max_pages: Optional[int] = None
    max_depth: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "CrawlSettings":
        """Validate a stored/posted crawl config. Absent limits fall back to mode defaults."""
        if not isinstance(data, Mapping):
            raise InvalidCrawlConfigError("Crawl config must be an object")

        mode = data.get("mode")
        if not mode:
            raise InvalidCrawlConfigError("Crawl mode is required")
        if mode not in CRAWL_MODES:
            raise InvalidCrawlConfigError("Invalid crawl mode. Must be 'single', 'limited', or 'deep'")

        max_pages = data.get("maxPages")
        max_depth = data.get("maxDepth")

        if mode == "single":
            if max_pages is not None:
                raise InvalidCrawlConfigError("Single crawl mode should not specify maxPages")
            if max_depth is not None:
                raise InvalidCrawlConfigError("Single crawl mode should not specify maxDepth")
        elif mode == "limited":
            if max_depth is not None:
                raise InvalidCrawlConfigError("Limited crawl mode should not specify maxDepth")
            if max_pages is not None:
                max_pages = _require_int("maxPages", max_pages)
                if not 1 <= max_pages <= MAX_LIMITED_PAGES:
                    raise InvalidCrawlConfigError(
                        f"For limited crawl mode, maxPages must be between 1 and {MAX_LIMITED_PAGES}"
                    )
        else:
            if max_pages is not None:
                raise InvalidCrawlConfigError("Deep crawl mode should not specify maxPages")
            if max_depth is not None:
                max_depth = _require_int("maxDepth", max_depth)
                if max_depth not in ALLOWED_DEEP_DEPTHS:
                    raise InvalidCrawlConfigError("For deep crawl mode, maxDepth must be 2 or 3")

        return cls(mode=mode, max_pages=max_pages, max_depth=max_depth)

    def to_dict(self) -> dict:
        out: dict = {"mode": self.mode}
        if self.max_pages is not None:
            out["maxPages"] = self.max_pages
        if self.max_depth is not None:
            out["maxDepth"] = self.max_depth
        return out

    def budgets(self, timeouts: Optional[Mapping[str, float]] = None) -> CrawlBudgets:
        timeouts = timeouts or DEFAULT_MODE_TIMEOUTS
        timeout = float(timeouts.get(self.mode, DEFAULT_MODE_TIMEOUTS[self.mode]))
        if self.mode == "single":
            return CrawlBudgets(max_depth=1, max_pages=1, overall_timeout=timeout)
        if self.mode == "limited":
            return CrawlBudgets(
                max_depth=2,
                max_pages=self.max_pages or DEFAULT_LIMITED_MAX_PAGES,
                overall_timeout=timeout,
            )
        return CrawlBudgets(
            max_depth=self.max_depth or DEFAULT_DEEP_MAX_DEPTH,
            max_pages=DEFAULT_DEEP_MAX_PAGES,
            overall_timeout=timeout,
        )


@dataclass(frozen=True)
class KnowledgeSource:
    """A configured URL whose pages feed the knowledge base."""

    source_id: Optional[int]
    url: str
    namespace: str = "default"
    crawl_config: dict = field(default_factory=lambda: {"mode": "single"})
    is_active: bool = True
    crawl_status: CrawlStatus = CrawlStatus.PENDING
    last_crawled: Optional[datetime] = None
    pages_indexed: int = 0
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def settings(self) -> CrawlSettings:
        return CrawlSettings.from_dict(self.crawl_config)


@dataclass(frozen=True)
class StatusUpdate:
    """Fields written to a knowledge source by the status sink.

    `None` leaves a field untouched; set `clear_error` to null the stored
    error message.
    """

    crawl_status: CrawlStatus
    last_crawled: Optional[datetime] = None
    pages_indexed: Optional[int] = None
    error_message: Optional[str] = None
    clear_error: bool = False
