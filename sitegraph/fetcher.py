"""Page fetching: a requests-backed HTTP client plus the href-extracting wrapper."""

from __future__ import annotations

import threading
import time
from typing import Mapping, Protocol

import requests

from .config import CrawlConfig
from .constants import NOT_READY_STATUS_CODES
from .errors import HttpError, NetworkError, ParseError
from .parsers import HTMLParser, is_html_content_type
from .types import FailureKind, FetchFailure, HttpResponse, PageResult


class HttpClient(Protocol):
    def get(self, url: str, headers: Mapping[str, str]) -> HttpResponse:
        ...


class RequestsClient:
    """HTTP client collaborator backed by `requests`.

    Sessions are not shared across threads, so each worker thread lazily gets
    its own `requests.Session`.
    """

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        self._thread_local = threading.local()
        self._sessions_lock = threading.Lock()
        self._sessions: list[requests.Session] = []

    def get(self, url: str, headers: Mapping[str, str]) -> HttpResponse:
        """Issue one GET. Raises `NetworkError` on transport failures.

        The body is read only for 2xx HTML responses. Any other response comes
        back with an empty body.
        """

        session = self._thread_local_session()
        try:
            response = session.get(
                url,
                headers=dict(headers),
                timeout=self.timeout_seconds,
                allow_redirects=True,
                stream=True,
            )
        except requests.RequestException as exc:
            raise NetworkError(f"{exc.__class__.__name__}: {exc}") from exc

        try:
            content_type = response.headers.get("Content-Type")
            body = b""
            if 200 <= response.status_code < 300 and is_html_content_type(content_type):
                body = response.content or b""
        except requests.RequestException as exc:
            raise NetworkError(f"{exc.__class__.__name__}: {exc}") from exc
        finally:
            response.close()

        return HttpResponse(
            url=url,
            status_code=response.status_code,
            body=body,
            content_type=content_type,
            final_url=response.url or url,
        )

    def close(self) -> None:
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()

    def _thread_local_session(self) -> requests.Session:
        session = getattr(self._thread_local, "session", None)
        if session is None:
            session = requests.Session()
            self._thread_local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session


class PageFetcher:
    """Fetch one URL and return its raw hrefs, or a typed failure.

    Performs exactly one request per call: retries and pacing belong to the
    crawl engine.
    """

    def __init__(
        self,
        config: CrawlConfig | None = None,
        *,
        client: HttpClient | None = None,
        html_parser: HTMLParser | None = None,
    ) -> None:
        self.config = config or CrawlConfig()
        self.client = client or RequestsClient(self.config.timeout_seconds)
        self.html_parser = html_parser or HTMLParser()
        self._owns_client = client is None

    def fetch(self, url: str) -> PageResult:
        started = time.perf_counter()

        try:
            response = self.client.get(url, self.config.headers())
            self._raise_for_status(response)
            hrefs = self.html_parser.extract_hrefs(
                response.body,
                content_type=response.content_type,
            )
        except NetworkError as exc:
            return self._failure(url, FailureKind.NETWORK_ERROR, started, message=str(exc))
        except HttpError as exc:
            return self._failure(
                url,
                FailureKind.HTTP_ERROR,
                started,
                status_code=exc.status_code,
                message=str(exc),
            )
        except ParseError as exc:
            return self._failure(
                url,
                FailureKind.PARSE_ERROR,
                started,
                status_code=response.status_code,
                message=str(exc),
            )

        return PageResult(
            url=url,
            hrefs=hrefs,
            status_code=response.status_code,
            elapsed_ms=self._elapsed_ms(started),
            final_url=response.final_url or url,
        )

    def close(self) -> None:
        if self._owns_client and isinstance(self.client, RequestsClient):
            self.client.close()

    def __enter__(self) -> "PageFetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @staticmethod
    def _raise_for_status(response: HttpResponse) -> None:
        if response.status_code in NOT_READY_STATUS_CODES:
            raise HttpError(
                response.status_code,
                f"HTTP status {response.status_code}: content not available yet",
            )
        if not response.ok:
            raise HttpError(response.status_code)

    @classmethod
    def _failure(
        cls,
        url: str,
        kind: FailureKind,
        started: float,
        *,
        status_code: int | None = None,
        message: str | None = None,
    ) -> PageResult:
        return PageResult(
            url=url,
            failure=FetchFailure(kind=kind, url=url, status_code=status_code, message=message),
            status_code=status_code,
            elapsed_ms=cls._elapsed_ms(started),
        )

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int((time.perf_counter() - started) * 1000)


__all__ = [
    "HttpClient",
    "PageFetcher",
    "RequestsClient",
]
