"""Exception taxonomy for the crawler.

Only `InvalidInputError` is fatal. The others are raised by the HTTP/HTML
collaborators and converted into `FetchFailure` records by the page fetcher, so
they never escape a single URL's fetch.
"""

from __future__ import annotations


class SitegraphError(Exception):
    """Base class for crawler errors."""


class InvalidInputError(SitegraphError, ValueError):
    """Root URL is malformed or not an absolute http(s) URL."""


class NetworkError(SitegraphError):
    """Connection, DNS, TLS, or timeout failure while requesting a URL."""


class HttpError(SitegraphError):
    """Response status that does not yield a crawlable page."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(message or f"HTTP status {status_code}")


class ParseError(SitegraphError):
    """Response body could not be parsed as HTML."""


__all__ = [
    "HttpError",
    "InvalidInputError",
    "NetworkError",
    "ParseError",
    "SitegraphError",
]
