"""Thread-safe frontier queue and visited set."""

from __future__ import annotations

import threading
from collections import deque


class Frontier:
    """URLs waiting to be fetched plus every URL ever claimed.

    - `claim` is the only way a URL enters the crawl: one lock covers the
      visited check, the visited insert, and the queue append.
    - `take` pops in FIFO order (breadth-first over discovery order).
    - Visited URLs are never removed, so each URL is handed out at most once.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._queue: deque[str] = deque()
        self._visited: set[str] = set()

        self._claimed_count = 0
        self._taken_count = 0
        self._rejected_count = 0

    def claim(self, url: str) -> bool:
        """Mark `url` as owned by the crawl and queue it.

        Returns False if it was already claimed; for any URL exactly one call
        returns True.
        """

        with self._lock:
            if url in self._visited:
                self._rejected_count += 1
                return False
            self._visited.add(url)
            self._queue.append(url)
            self._claimed_count += 1
            return True

    def take(self) -> str | None:
        """Pop the oldest queued URL, or None if the queue is empty right now."""

        with self._lock:
            if not self._queue:
                return None
            self._taken_count += 1
            return self._queue.popleft()

    def empty(self) -> bool:
        with self._lock:
            return not self._queue

    def pending(self) -> int:
        with self._lock:
            return len(self._queue)

    def is_visited(self, url: str) -> bool:
        with self._lock:
            return url in self._visited

    def visited(self) -> frozenset[str]:
        """Return snapshot of every URL claimed so far."""

        with self._lock:
            return frozenset(self._visited)

    def snapshot(self) -> dict[str, int]:
        """Return frontier counters for logs/stats reporting."""

        with self._lock:
            return {
                "queue_size": len(self._queue),
                "visited": len(self._visited),
                "claimed": self._claimed_count,
                "taken": self._taken_count,
                "rejected_duplicates": self._rejected_count,
            }


__all__ = ["Frontier"]
