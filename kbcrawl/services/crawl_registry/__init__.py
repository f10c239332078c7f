from .models import CrawlRecord, CrawlHandle
from .registry import InMemoryCrawlRegistry

__all__ = ["CrawlRecord", "CrawlHandle", "InMemoryCrawlRegistry"]
