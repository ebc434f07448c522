"""Thread-safe crawl statistics aggregation utilities."""

from __future__ import annotations

from collections import defaultdict
import threading
from typing import Any, Mapping

from .types import CrawlStats, PageResult


class StatsCollector:
    """Collect and summarize crawler runtime statistics.

    The collector is thread-safe and intended for use across concurrent
    fetch workers.
    """

    def __init__(self, base: CrawlStats | None = None) -> None:
        self._lock = threading.Lock()
        self._core = base or CrawlStats()

        self._frontier_snapshot: dict[str, int] = {}
        self._failure_kind_counts: dict[str, int] = defaultdict(int)
        self._status_code_counts: dict[str, int] = defaultdict(int)
        self._elapsed_ms_total = 0
        self._elapsed_samples = 0
        self._hrefs_total = 0

    def record_claim(self, accepted: bool) -> None:
        with self._lock:
            if accepted:
                self._core.claimed += 1
            else:
                self._core.skipped_visited += 1

    def record_out_of_scope(self, count: int = 1) -> None:
        with self._lock:
            self._core.skipped_out_of_scope += count

    def record_rejected_hrefs(self, count: int = 1) -> None:
        with self._lock:
            self._core.rejected_hrefs += count

    def record_retry(self) -> None:
        with self._lock:
            self._core.retries += 1

    def record_page(self, result: PageResult, *, edges: int = 0) -> None:
        """Record the final outcome of one page fetch."""

        with self._lock:
            if result.ok:
                self._core.fetched_ok += 1
                self._core.edges_recorded += edges
                self._hrefs_total += len(result.hrefs)
            else:
                self._core.fetched_error += 1
                self._failure_kind_counts[result.failure.reason] += 1

            if result.status_code is not None:
                self._status_code_counts[str(result.status_code)] += 1

            if result.elapsed_ms is not None:
                self._elapsed_ms_total += int(result.elapsed_ms)
                self._elapsed_samples += 1

    def record_frontier_snapshot(self, snapshot: Mapping[str, int]) -> None:
        """Attach latest frontier snapshot for diagnostics."""

        with self._lock:
            self._frontier_snapshot = dict(snapshot)

    def finish(self) -> None:
        with self._lock:
            self._core.finish()

    @property
    def core(self) -> CrawlStats:
        return self._core

    def to_json(self) -> dict[str, Any]:
        with self._lock:
            payload: dict[str, Any] = dict(self._core.to_json())
            payload["failures_by_reason"] = dict(sorted(self._failure_kind_counts.items()))
            payload["status_codes"] = dict(sorted(self._status_code_counts.items()))
            payload["hrefs_seen"] = self._hrefs_total
            payload["avg_fetch_ms"] = (
                round(self._elapsed_ms_total / self._elapsed_samples, 1)
                if self._elapsed_samples
                else None
            )
            payload["frontier"] = dict(self._frontier_snapshot)
            return payload


__all__ = ["StatsCollector"]
