"""sitegraph: crawl one host and map every page to the same-host pages it links to."""

from .config import CrawlConfig, load_config
from .engine import CrawlEngine, CrawlResult, RateLimiter, crawl
from .errors import HttpError, InvalidInputError, NetworkError, ParseError, SitegraphError
from .fetcher import HttpClient, PageFetcher, RequestsClient
from .frontier import Frontier
from .graph import LinkGraph
from .parsers import HTMLParser, HTMLParserConfig, extract_hrefs
from .stats import StatsCollector
from .storage import result_to_json, save_result
from .types import (
    CrawlState,
    CrawlStats,
    FailureKind,
    FetchFailure,
    HttpResponse,
    PageResult,
    utc_now_iso,
)
from .url import host_of, is_in_scope, normalize_url, resolve_href, root_url

__version__ = "0.1.0"

__all__ = [
    "CrawlConfig",
    "CrawlEngine",
    "CrawlResult",
    "CrawlState",
    "CrawlStats",
    "FailureKind",
    "FetchFailure",
    "Frontier",
    "HTMLParser",
    "HTMLParserConfig",
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "InvalidInputError",
    "LinkGraph",
    "NetworkError",
    "PageFetcher",
    "PageResult",
    "ParseError",
    "RateLimiter",
    "RequestsClient",
    "SitegraphError",
    "StatsCollector",
    "crawl",
    "extract_hrefs",
    "host_of",
    "is_in_scope",
    "load_config",
    "normalize_url",
    "resolve_href",
    "result_to_json",
    "root_url",
    "save_result",
    "utc_now_iso",
]
