"""Static crawler defaults shared by config, fetcher, and engine."""

from __future__ import annotations


DEFAULT_MAX_CONCURRENCY = 100
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_RETRIES = 0
DEFAULT_RETRY_BACKOFF_SECONDS = 0.5
DEFAULT_RATE_LIMIT_SECONDS = 0.0

# Sites behind bot protection answer 403 to obvious crawler agents.
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (iPad; CPU OS 12_2 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Mobile/15E148"
)
DEFAULT_HTTP_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.8",
}

# 2xx answers whose body is not the page yet.
NOT_READY_STATUS_CODES = frozenset({202})
RETRYABLE_STATUS_CODES = frozenset({408, 429})

JSON_INDENT = 2
SUPPORTED_CONFIG_SUFFIXES = (".json", ".yaml", ".yml")
