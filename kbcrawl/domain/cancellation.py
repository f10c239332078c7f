from __future__ import annotations

import threading
import time
from typing import Callable, Optional


class CancellationToken:
    """Shared stop signal for one crawl.

    Combines an operator-controlled `threading.Event` with an optional
    overall deadline measured on a monotonic clock. The deadline is armed
    when the token is created, so create it when the crawl starts.
    """

    def __init__(
        self,
        stop_event: Optional[threading.Event] = None,
        timeout_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._stop_event = stop_event if stop_event is not None else threading.Event()
        self._clock = clock
        self._timeout_seconds = timeout_seconds
        self._deadline = None if timeout_seconds is None else clock() + float(timeout_seconds)

    @property
    def stop_event(self) -> threading.Event:
        return self._stop_event

    def cancel(self) -> None:
        self._stop_event.set()

    def timed_out(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline

    def is_cancelled(self) -> bool:
        return self._stop_event.is_set() or self.timed_out()

    def reason(self) -> Optional[str]:
        if self._stop_event.is_set():
            return "cancelled"
        if self.timed_out():
            return f"timed out after {self._timeout_seconds:g}s"
        return None

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when there is no deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def wait(self, seconds: float) -> bool:
        """Block for up to `seconds`; return True if the crawl was cancelled meanwhile."""
        if self.is_cancelled():
            return True
        remaining = self.remaining()
        if remaining is not None and remaining <= seconds:
            self._stop_event.wait(remaining)
            return True
        if self._stop_event.wait(seconds):
            return True
        return self.is_cancelled()
