"""Crawl engine: bounded worker pool over a shared frontier with fixpoint termination."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import logging
import threading
import time
from typing import Any

from .config import CrawlConfig
from .constants import NOT_READY_STATUS_CODES
from .fetcher import PageFetcher
from .frontier import Frontier
from .graph import LinkGraph
from .stats import StatsCollector
from .types import CrawlState, FailureKind, FetchFailure, PageResult
from .url import host_of, is_in_scope, resolve_href, root_url

logger = logging.getLogger(__name__)


class RateLimiter:
    """Minimum spacing between request starts, shared by all workers."""

    def __init__(self, interval_seconds: float) -> None:
        self.interval_seconds = max(0.0, interval_seconds)
        self._lock = threading.Lock()
        self._next_allowed = 0.0

    def wait(self) -> None:
        if self.interval_seconds <= 0:
            return

        while True:
            with self._lock:
                now = time.monotonic()
                if now >= self._next_allowed:
                    self._next_allowed = now + self.interval_seconds
                    return
                sleep_for = self._next_allowed - now

            if sleep_for > 0:
                time.sleep(sleep_for)


@dataclass(slots=True)
class CrawlResult:
    """Everything a finished crawl produced. Read-only once returned."""

    root: str
    graph: LinkGraph
    visited: frozenset[str]
    stats: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    root_accepted: bool = False

    @property
    def pages(self) -> dict[str, list[str]]:
        return self.graph.as_dict()

    @property
    def failures(self) -> dict[str, FetchFailure]:
        return self.graph.failures()

    @property
    def complete(self) -> bool:
        return not self.graph.failures()


class CrawlEngine:
    """Crawl every page reachable from `root` on the root's host.

    The scheduler thread owns the in-flight counter and a condition variable.
    Workers run one fetch-and-process unit each and talk to the shared state
    only through `Frontier.claim`, `LinkGraph.record*` and the stats collector;
    the network call happens with no lock held.

    A unit claims the URLs it discovered before it reports completion, so the
    scheduler stops only when the frontier is empty and nothing is in flight.
    """

    def __init__(
        self,
        root: str,
        config: CrawlConfig | None = None,
        *,
        fetcher: PageFetcher | None = None,
        stats: StatsCollector | None = None,
    ) -> None:
        self.root = root_url(root)
        self.root_host = host_of(self.root)
        self.config = config or CrawlConfig()

        self.fetcher = fetcher or PageFetcher(self.config)
        self._owns_fetcher = fetcher is None

        self.frontier = Frontier()
        self.graph = LinkGraph()
        self.stats = stats or StatsCollector()
        self.rate_limiter = RateLimiter(self.config.rate_limit_seconds)

        self._cond = threading.Condition()
        self._in_flight = 0
        self._state = CrawlState.RUNNING
        self._started = False

    @property
    def state(self) -> CrawlState:
        with self._cond:
            return self._state

    @property
    def in_flight(self) -> int:
        with self._cond:
            return self._in_flight

    def run(self) -> CrawlResult:
        """Crawl until the fixpoint is reached and return the result."""

        if self._started:
            raise RuntimeError("CrawlEngine instances are single-use")
        self._started = True

        logger.info(
            "Starting crawl: root=%s, host=%s, max_concurrency=%d",
            self.root,
            self.root_host,
            self.config.max_concurrency,
        )

        self.stats.record_claim(self.frontier.claim(self.root))

        executor = ThreadPoolExecutor(
            max_workers=self.config.max_concurrency,
            thread_name_prefix="sitegraph-worker",
        )
        try:
            self._schedule(executor)
        finally:
            executor.shutdown(wait=True, cancel_futures=True)
            if self._owns_fetcher:
                self.fetcher.close()

        self.stats.record_frontier_snapshot(self.frontier.snapshot())
        self.stats.finish()

        result = CrawlResult(
            root=self.root,
            graph=self.graph,
            visited=self.frontier.visited(),
            stats=self.stats.to_json(),
        )
        self._check_root_outcome(result)

        logger.info(
            "Crawl finished: pages=%d, failed=%d, edges=%d",
            len(result.graph.edges()),
            len(result.graph.failures()),
            result.graph.edge_count(),
        )
        return result

    def _schedule(self, executor: ThreadPoolExecutor) -> None:
        limit = self.config.max_concurrency

        with self._cond:
            while True:
                while self._in_flight < limit:
                    url = self.frontier.take()
                    if url is None:
                        break
                    self._in_flight += 1
                    executor.submit(self._process, url)

                if self._in_flight == 0 and self.frontier.empty():
                    self._set_state(CrawlState.DONE)
                    return

                if self.frontier.empty():
                    self._set_state(CrawlState.DRAINING)
                else:
                    self._set_state(CrawlState.RUNNING)

                self._cond.wait()

    def _set_state(self, state: CrawlState) -> None:
        if state != self._state:
            logger.debug("Crawl state %s -> %s (in_flight=%d)", self._state.value, state.value, self._in_flight)
            self._state = state

    def _process(self, url: str) -> None:
        try:
            result = self._fetch_page(url)
            if result.ok:
                result = self._check_redirect(url, result)
            if result.ok:
                edges = self._claim_links(result.final_url or url, result.hrefs)
                self.graph.record(url, edges)
                self.stats.record_page(result, edges=len(edges))
                logger.debug("Fetched %s: %d hrefs, %d in-scope links", url, len(result.hrefs), len(edges))
            else:
                self._record_failure(url, result)
        except Exception as exc:
            logger.exception("Unexpected error while processing %s", url)
            failed = PageResult(
                url=url,
                failure=FetchFailure(
                    kind=FailureKind.UNEXPECTED_ERROR,
                    url=url,
                    message=f"{exc.__class__.__name__}: {exc}",
                ),
            )
            self._record_failure(url, failed)
        finally:
            with self._cond:
                self._in_flight -= 1
                self._cond.notify()

    def _fetch_page(self, url: str) -> PageResult:
        attempts = self.config.retries + 1
        attempt = 1

        while True:
            self.rate_limiter.wait()
            result = self.fetcher.fetch(url)

            if result.ok or not result.failure.transient or attempt >= attempts:
                return result

            self.stats.record_retry()
            logger.debug("Retrying %s after %s (attempt %d/%d)", url, result.failure.reason, attempt, attempts)
            if self.config.retry_backoff_seconds > 0:
                time.sleep(self.config.retry_backoff_seconds * attempt)
            attempt += 1

    def _check_redirect(self, url: str, result: PageResult) -> PageResult:
        """Turn a page that redirected off the root host into a failure."""

        final_url = result.final_url or url
        if is_in_scope(final_url, self.root_host):
            return result

        return PageResult(
            url=url,
            failure=FetchFailure(
                kind=FailureKind.HTTP_ERROR,
                url=url,
                status_code=result.status_code,
                message=f"Redirected off host to {final_url}",
            ),
            status_code=result.status_code,
            elapsed_ms=result.elapsed_ms,
            final_url=final_url,
        )

    def _claim_links(self, url: str, hrefs: list[str]) -> list[str]:
        """Resolve, scope-filter and dedupe one page's hrefs, claiming new ones."""

        edges: dict[str, None] = {}
        rejected = 0
        out_of_scope = 0

        for href in hrefs:
            target = resolve_href(url, href)
            if target is None:
                rejected += 1
                continue
            if not is_in_scope(target, self.root_host):
                out_of_scope += 1
                continue
            edges[target] = None

        for target in edges:
            self.stats.record_claim(self.frontier.claim(target))

        if rejected:
            self.stats.record_rejected_hrefs(rejected)
        if out_of_scope:
            self.stats.record_out_of_scope(out_of_scope)

        return list(edges)

    def _record_failure(self, url: str, result: PageResult) -> None:
        failure = result.failure
        if failure is None:
            raise RuntimeError(f"No failure recorded on result for {url}")

        self.graph.record_failure(url, failure)
        self.stats.record_page(result)

        level = logging.WARNING if url == self.root else logging.INFO
        logger.log(level, "Fetch failed for %s: %s (%s)", url, failure.reason, failure.message or "no details")

    def _check_root_outcome(self, result: CrawlResult) -> None:
        root_failure = result.graph.failures().get(self.root)
        if root_failure is None:
            return

        if (
            root_failure.kind == FailureKind.HTTP_ERROR
            and root_failure.status_code in NOT_READY_STATUS_CODES
        ):
            message = (
                f"Root URL {self.root} answered HTTP {root_failure.status_code} "
                "(accepted, content not ready); the result is empty. Retry the crawl later."
            )
            result.root_accepted = True
        else:
            message = f"Root URL {self.root} could not be crawled ({root_failure.reason}); the result is empty."

        result.warnings.append(message)
        logger.warning(message)


def crawl(
    root: str,
    config: CrawlConfig | None = None,
    *,
    fetcher: PageFetcher | None = None,
) -> CrawlResult:
    """Crawl `root` and return its link graph. Raises `InvalidInputError` on a bad root."""

    return CrawlEngine(root, config, fetcher=fetcher).run()


__all__ = [
    "CrawlEngine",
    "CrawlResult",
    "RateLimiter",
    "crawl",
]
