from __future__ import annotations

import threading
import time
from typing import Mapping

import pytest

from sitegraph import CrawlConfig, HttpResponse, PageFetcher


def html_page(*hrefs: str) -> str:
    links = "".join(f'<a href="{href}">link</a>' for href in hrefs)
    return f"<html><head><title>t</title></head><body>{links}</body></html>"


class FakeSite:
    """In-memory HTTP client keyed by canonical URL.

    A value may be an HTML string (served with 200), a `(status, html)` tuple,
    a list of those (served in order, last one repeated), or an exception
    instance to raise. `redirects` maps a requested URL to the final URL the
    response reports, with the body still taken from `pages`.
    """

    def __init__(
        self,
        pages: Mapping[str, object],
        *,
        delay: float = 0.0,
        redirects: Mapping[str, str] | None = None,
    ) -> None:
        self.pages = dict(pages)
        self.delay = delay
        self.redirects = dict(redirects or {})
        self.requests: list[str] = []
        self.started_at: list[float] = []
        self.headers_seen: list[dict[str, str]] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()
        self._served: dict[str, int] = {}

    def get(self, url: str, headers: Mapping[str, str]) -> HttpResponse:
        with self._lock:
            self.requests.append(url)
            self.started_at.append(time.monotonic())
            self.headers_seen.append(dict(headers))
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            index = self._served.get(url, 0)
            self._served[url] = index + 1

        try:
            if self.delay:
                time.sleep(self.delay)

            entry = self.pages.get(url)
            if isinstance(entry, list):
                entry = entry[min(index, len(entry) - 1)]
            if entry is None:
                return HttpResponse(url=url, status_code=404, body=b"not found", content_type="text/html")
            if isinstance(entry, BaseException):
                raise entry
            if isinstance(entry, tuple):
                status, body = entry
            else:
                status, body = 200, entry
            return HttpResponse(
                url=url,
                status_code=status,
                body=str(body).encode("utf-8"),
                content_type="text/html; charset=utf-8",
                final_url=self.redirects.get(url, url),
            )
        finally:
            with self._lock:
                self.active -= 1

    def request_count(self, url: str) -> int:
        with self._lock:
            return self.requests.count(url)


@pytest.fixture
def make_fetcher():
    def _make(
        pages: Mapping[str, object],
        *,
        config: CrawlConfig | None = None,
        delay: float = 0.0,
        redirects: Mapping[str, str] | None = None,
    ):
        site = FakeSite(pages, delay=delay, redirects=redirects)
        fetcher = PageFetcher(config or CrawlConfig(), client=site)
        return fetcher, site

    return _make
