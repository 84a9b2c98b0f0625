"""
Sliding-window rate limiting for the chat passthrough.
"""
import logging
import time
from typing import Callable, Dict, List, Protocol

logger = logging.getLogger(__name__)


class RateLimitStore(Protocol):
    def get(self, key: str) -> List[float]: ...

    def set(self, key: str, timestamps: List[float]) -> None: ...


class InMemoryRateLimitStore:
    """Per-process store. Multi-process deployments need a shared store instead."""

    def __init__(self):
        self._windows: Dict[str, List[float]] = {}

    def get(self, key: str) -> List[float]:
        return list(self._windows.get(key, []))

    def set(self, key: str, timestamps: List[float]) -> None:
        self._windows[key] = list(timestamps)


class SlidingWindowRateLimiter:
    """Allow at most `max_requests` per caller in any trailing `window_seconds`."""

    def __init__(
        self,
        store: RateLimitStore,
        max_requests: int = 10,
        window_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock

    def is_limited(self, caller_id: str) -> bool:
        """Check the caller's window and, when allowed, record this request."""
        now = self.clock()
        recent = [t for t in self.store.get(caller_id) if now - t < self.window_seconds]

        if len(recent) >= self.max_requests:
            self.store.set(caller_id, recent)
            logger.info(f"Rate limit reached for caller {caller_id}")
            return True

        recent.append(now)
        self.store.set(caller_id, recent)
        return False
