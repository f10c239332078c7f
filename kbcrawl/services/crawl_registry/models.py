from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class CrawlRecord:
    id: str
    source_id: Optional[int]
    url: str
    status: str
    started_at: datetime
    last_seen: datetime
    finished_at: Optional[datetime] = None
    pages_fetched: int = 0
    failed_pages: int = 0
    error: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == "running"


@dataclass(frozen=True)
class CrawlHandle:
    crawl_id: str
    stop_event: threading.Event
