"""Page-to-links adjacency map filled in by crawl workers."""

from __future__ import annotations

import threading
from typing import Iterable

from .types import FetchFailure


class LinkGraph:
    """Out-edges per visited page, plus failure markers for pages that failed.

    Each URL is written once by the worker that fetched it. Readers should only
    rely on the contents after the crawl has finished.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._edges: dict[str, frozenset[str]] = {}
        self._failures: dict[str, FetchFailure] = {}

    def record(self, url: str, edges: Iterable[str]) -> None:
        """Insert or overwrite the edge set for `url`."""

        frozen = frozenset(edges)
        with self._lock:
            self._failures.pop(url, None)
            self._edges[url] = frozen

    def record_failure(self, url: str, failure: FetchFailure) -> None:
        with self._lock:
            self._edges.pop(url, None)
            self._failures[url] = failure

    def edges(self) -> dict[str, frozenset[str]]:
        with self._lock:
            return dict(self._edges)

    def failures(self) -> dict[str, FetchFailure]:
        with self._lock:
            return dict(self._failures)

    def links_from(self, url: str) -> frozenset[str] | None:
        with self._lock:
            return self._edges.get(url)

    def as_dict(self) -> dict[str, list[str]]:
        """Successful pages only, with sorted link lists (stable output)."""

        with self._lock:
            return {url: sorted(links) for url, links in sorted(self._edges.items())}

    def keys(self) -> set[str]:
        """Every URL with an entry, successful or failed."""

        with self._lock:
            return set(self._edges) | set(self._failures)

    def edge_count(self) -> int:
        with self._lock:
            return sum(len(links) for links in self._edges.values())

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._edges or url in self._failures

    def __len__(self) -> int:
        with self._lock:
            return len(self._edges) + len(self._failures)


__all__ = ["LinkGraph"]
