from collections import deque
from typing import Deque, NamedTuple, Optional, Set
from urllib.parse import urldefrag


def normalize_url(url: str) -> str:
    """Canonical form used for deduplication: the URL without its fragment."""
    return urldefrag(url.strip())[0]


class FrontierEntry(NamedTuple):
    url: str
    depth: int


class SeenSet:
    """
    Tracks which URLs have been dequeued for processing during a crawl.

    A URL is marked at dequeue time, never at enqueue time, so duplicates may
    sit in the frontier until the first of them is processed. Unbounded: the
    crawl's page budget already limits how many URLs can be marked.
    """

    def __init__(self):
        self._seen: Set[str] = set()

    def mark(self, url: str) -> None:
        self._seen.add(normalize_url(url))

    def is_seen(self, url: str) -> bool:
        return normalize_url(url) in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, url: str) -> bool:
        return self.is_seen(url)


class Frontier:
    """FIFO queue of (url, depth) pairs; FIFO order gives breadth-first traversal."""

    def __init__(self):
        self._queue: Deque[FrontierEntry] = deque()

    def push(self, url: str, depth: int) -> None:
        self._queue.append(FrontierEntry(normalize_url(url), depth))

    def pop(self) -> FrontierEntry:
        return self._queue.popleft()

    def peek(self) -> Optional[FrontierEntry]:
        return self._queue[0] if self._queue else None

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)
