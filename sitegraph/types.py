"""Records passed between fetcher, link graph, stats, and engine.

Imports nothing from the rest of the package except constants.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from .constants import RETRYABLE_STATUS_CODES


JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]
JSONDict = dict[str, JSONValue]


def utc_now_iso() -> str:
    """Return an RFC3339-like UTC timestamp string for summaries."""

    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class FailureKind(str, Enum):
    """Why a page produced no links."""

    NETWORK_ERROR = "network_error"
    HTTP_ERROR = "http_error"
    PARSE_ERROR = "parse_error"
    UNEXPECTED_ERROR = "unexpected_error"


class CrawlState(str, Enum):
    """Global crawl lifecycle."""

    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Minimal response view returned by the HTTP client collaborator."""

    url: str
    status_code: int
    body: bytes
    content_type: str | None = None
    final_url: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True, slots=True)
class FetchFailure:
    """Failure marker stored in the link graph for a page that failed."""

    kind: FailureKind
    url: str
    status_code: int | None = None
    message: str | None = None
    failed_at: str = field(default_factory=utc_now_iso)

    @property
    def reason(self) -> str:
        if self.kind == FailureKind.HTTP_ERROR and self.status_code is not None:
            return f"{self.kind.value}({self.status_code})"
        return self.kind.value

    @property
    def transient(self) -> bool:
        """Whether a later attempt could plausibly succeed."""

        if self.kind == FailureKind.NETWORK_ERROR:
            return True
        if self.kind != FailureKind.HTTP_ERROR or self.status_code is None:
            return False
        return self.status_code in RETRYABLE_STATUS_CODES or self.status_code >= 500

    def to_json(self) -> JSONDict:
        return {
            "kind": self.kind.value,
            "reason": self.reason,
            "url": self.url,
            "status_code": self.status_code,
            "message": self.message,
            "failed_at": self.failed_at,
        }


@dataclass(slots=True)
class PageResult:
    """Outcome of fetching one page: raw hrefs or a typed failure."""

    url: str
    hrefs: list[str] = field(default_factory=list)
    failure: FetchFailure | None = None
    status_code: int | None = None
    elapsed_ms: int | None = None
    final_url: str | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(slots=True)
class CrawlStats:
    """Simple mutable counters used for crawl summary reporting."""

    claimed: int = 0
    skipped_visited: int = 0
    skipped_out_of_scope: int = 0
    rejected_hrefs: int = 0

    fetched_ok: int = 0
    fetched_error: int = 0
    retries: int = 0
    edges_recorded: int = 0

    started_at: str = field(default_factory=utc_now_iso)
    finished_at: str | None = None

    def finish(self) -> None:
        self.finished_at = utc_now_iso()

    def to_json(self) -> JSONDict:
        return {
            "claimed": self.claimed,
            "skipped_visited": self.skipped_visited,
            "skipped_out_of_scope": self.skipped_out_of_scope,
            "rejected_hrefs": self.rejected_hrefs,
            "fetched_ok": self.fetched_ok,
            "fetched_error": self.fetched_error,
            "retries": self.retries,
            "edges_recorded": self.edges_recorded,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
        }


__all__ = [
    "CrawlState",
    "CrawlStats",
    "FailureKind",
    "FetchFailure",
    "HttpResponse",
    "JSONDict",
    "JSONPrimitive",
    "JSONValue",
    "PageResult",
    "utc_now_iso",
]
