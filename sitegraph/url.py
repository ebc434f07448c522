"""URL normalization, href resolution, and same-host scope filtering."""

from __future__ import annotations

import posixpath
import re
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .errors import InvalidInputError


DEFAULT_ALLOWED_SCHEMES = ("http", "https")
SKIP_HREF_PREFIXES = ("javascript:", "mailto:", "tel:", "data:")
TRACKING_QUERY_PARAM_PREFIXES = ("utm_",)
TRACKING_QUERY_PARAMS = {
    "fbclid",
    "gclid",
    "mc_cid",
    "mc_eid",
    "mkt_tok",
    "igshid",
    "ref_src",
}

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")


def host_of(url: str) -> str:
    """Return the lower-cased hostname of a URL (no port, no `www.` stripping)."""

    return (urlsplit(url).hostname or "").strip().lower().rstrip(".")


def _has_default_port(scheme: str, port: int | None) -> bool:
    if port is None:
        return False
    return (scheme == "http" and port == 80) or (scheme == "https" and port == 443)


def _normalize_netloc(parsed_url) -> str:  # urllib.parse.SplitResult
    host = (parsed_url.hostname or "").lower().rstrip(".")
    if not host:
        return ""
    if ":" in host:
        host = f"[{host}]"

    try:
        port = parsed_url.port
    except ValueError:
        return ""

    if port is not None and not _has_default_port(parsed_url.scheme.lower(), port):
        return f"{host}:{port}"
    return host


def _normalize_path(path: str) -> str:
    if not path:
        return ""

    collapsed = re.sub(r"/{2,}", "/", path)
    normalized = posixpath.normpath(collapsed)

    if collapsed.startswith("/") and not normalized.startswith("/"):
        normalized = "/" + normalized

    # The site root is spelled without a slash: https://example.com
    return normalized.rstrip("/")


def _is_tracking_query_key(key: str) -> bool:
    normalized = key.strip().lower()
    if not normalized:
        return False
    if normalized in TRACKING_QUERY_PARAMS:
        return True
    return any(normalized.startswith(prefix) for prefix in TRACKING_QUERY_PARAM_PREFIXES)


def _normalize_query(query: str) -> str:
    if not query:
        return ""

    pairs = parse_qsl(query, keep_blank_values=True)
    pairs = [(key, value) for key, value in pairs if not _is_tracking_query_key(key)]
    pairs.sort(key=lambda item: (item[0], item[1]))
    return urlencode(pairs, doseq=True)


def normalize_url(url: str | None) -> str | None:
    """Canonicalize an absolute http(s) URL for dedup and frontier identity.

    Lower-cases scheme and host, drops default ports, fragments, tracking
    parameters and trailing slashes, and sorts the query. Returns `None` for
    anything that is not an absolute URL with an allowed scheme.
    Applying it to its own output returns the same string.
    """

    if not url:
        return None

    raw = url.strip()
    if not raw:
        return None

    parsed = urlsplit(raw)
    scheme = parsed.scheme.lower()
    if scheme not in DEFAULT_ALLOWED_SCHEMES or not parsed.netloc:
        return None

    netloc = _normalize_netloc(parsed)
    if not netloc:
        return None

    path = _normalize_path(parsed.path)
    query = _normalize_query(parsed.query)
    return urlunsplit((scheme, netloc, path, query, ""))


def resolve_href(base_url: str, href: str | None) -> str | None:
    """Resolve one raw href found on `base_url` into a canonical absolute URL.

    Only root-relative (`/path`), network-path (`//host/path`) and absolute
    hrefs are crawlable. Document-relative forms such as `about` or `../x` are
    rejected, as are empty and fragment-only hrefs and non-http schemes.
    """

    if href is None:
        return None

    candidate = href.strip()
    if not candidate or candidate.startswith("#"):
        return None

    lowered = candidate.lower()
    if any(lowered.startswith(prefix) for prefix in SKIP_HREF_PREFIXES):
        return None

    base = urlsplit(base_url)
    if candidate.startswith("//"):
        return normalize_url(f"{base.scheme}:{candidate}")

    if candidate.startswith("/"):
        if not base.scheme or not base.netloc:
            return None
        return normalize_url(f"{base.scheme}://{base.netloc}{candidate}")

    if _SCHEME_RE.match(candidate):
        return normalize_url(candidate)

    return None


def root_url(url: str) -> str:
    """Validate and canonicalize the crawl root.

    Raises `InvalidInputError` when the value is not an absolute http(s) URL
    with a host.
    """

    raw = (url or "").strip()
    if not raw:
        raise InvalidInputError("Root URL is empty")

    parsed = urlsplit(raw)
    if parsed.scheme.lower() not in DEFAULT_ALLOWED_SCHEMES:
        raise InvalidInputError(
            f"Root URL must look like scheme://host with scheme http or https, got {url!r}"
        )
    if not parsed.hostname:
        raise InvalidInputError(f"Root URL has no host: {url!r}")

    normalized = normalize_url(raw)
    if normalized is None:
        raise InvalidInputError(f"Root URL could not be normalized: {url!r}")
    return normalized


def is_in_scope(url: str, root_host: str) -> bool:
    """Return True iff the URL's host is exactly the crawl root host.

    Subdomains (including `www.`) are different hosts.
    """

    host = host_of(url)
    return bool(host) and host == root_host.strip().lower().rstrip(".")


__all__ = [
    "DEFAULT_ALLOWED_SCHEMES",
    "SKIP_HREF_PREFIXES",
    "TRACKING_QUERY_PARAM_PREFIXES",
    "TRACKING_QUERY_PARAMS",
    "host_of",
    "is_in_scope",
    "normalize_url",
    "resolve_href",
    "root_url",
]
