from __future__ import annotations

import threading
import uuid
from collections import deque
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Deque, Dict, List, Optional

from .models import CrawlHandle, CrawlRecord


class InMemoryCrawlRegistry:
    """Thread-safe in-memory registry for active and recent crawls.

    Each running crawl gets a `threading.Event` that the crawler watches;
    `cancel()` sets it. Completed records are kept up to
    `max_completed_records`, oldest evicted first. Single-process only.
    """

    def __init__(self, *, max_completed_records: int = 1000):
        if max_completed_records < 0:
            raise ValueError("max_completed_records must be >= 0")
        self._lock = threading.Lock()
        self._records: Dict[str, CrawlRecord] = {}
        self._stop_events: Dict[str, threading.Event] = {}
        self._completed_order: Deque[str] = deque()
        self._max_completed_records = max_completed_records

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def start(self, *, url: str, source_id: Optional[int] = None) -> CrawlHandle:
        with self._lock:
            cid = str(uuid.uuid4())
            now = self._now()
            self._records[cid] = CrawlRecord(
                id=cid,
                source_id=source_id,
                url=url,
                status="running",
                started_at=now,
                last_seen=now,
            )
            stop_event = threading.Event()
            self._stop_events[cid] = stop_event
            return CrawlHandle(crawl_id=cid, stop_event=stop_event)

    def update(self, crawl_id: str, *, pages_fetched: Optional[int] = None, failed_pages: Optional[int] = None) -> bool:
        with self._lock:
            rec = self._records.get(crawl_id)
            if not rec:
                return False
            if pages_fetched is not None:
                rec.pages_fetched = pages_fetched
            if failed_pages is not None:
                rec.failed_pages = failed_pages
            rec.last_seen = self._now()
            return True

    def finish(self, crawl_id: str, *, status: str = "finished", error: Optional[str] = None) -> bool:
        with self._lock:
            rec = self._records.get(crawl_id)
            if not rec:
                return False
            now = self._now()
            # a cancelled record keeps its status; the crawl still reports its outcome
            if rec.is_active:
                rec.status = status
                rec.finished_at = now
                self._completed_order.append(crawl_id)
            rec.last_seen = now
            if error:
                rec.error = error
            self._drop_stop_event(crawl_id)
            self._evict_completed_overflow()
            return True

    def cancel(self, crawl_id: str) -> bool:
        """Request cancellation for a running crawl.

        Sets the crawl's stop event and marks the record cancelled. Returns
        False when the crawl is unknown or already finished.
        """
        with self._lock:
            rec = self._records.get(crawl_id)
            if not rec or not rec.is_active:
                return False
            ev = self._stop_events.get(crawl_id)
            if ev is not None:
                # Set the stop signal first so anyone holding the event observes it.
                ev.set()
            now = self._now()
            rec.status = "cancelled"
            rec.finished_at = now
            rec.last_seen = now
            self._completed_order.append(crawl_id)
            # Callers that already hold the event still have it.
            self._drop_stop_event(crawl_id)
            self._evict_completed_overflow()
            return True

    def get(self, crawl_id: str) -> Optional[Dict]:
        with self._lock:
            rec = self._records.get(crawl_id)
            return asdict(rec) if rec else None

    def list_active(self) -> List[Dict]:
        with self._lock:
            return [asdict(r) for r in self._records.values() if r.is_active]

    def _drop_stop_event(self, crawl_id: str) -> None:
        self._stop_events.pop(crawl_id, None)

    def _evict_completed_overflow(self) -> None:
        while len(self._completed_order) > self._max_completed_records:
            oldest = self._completed_order.popleft()
            self._records.pop(oldest, None)
            self._stop_events.pop(oldest, None)
