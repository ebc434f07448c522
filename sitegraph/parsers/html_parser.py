"""HTML href extraction with BeautifulSoup + lxml."""

from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup, ParserRejectedMarkup

from ..errors import ParseError


HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")


def is_html_content_type(content_type: str | None) -> bool:
    # Servers that omit the header are given the benefit of the doubt.
    normalized = (content_type or "").split(";", maxsplit=1)[0].strip().lower()
    if not normalized:
        return True
    return normalized in HTML_CONTENT_TYPES


@dataclass(slots=True)
class HTMLParserConfig:
    """Config for href extraction."""

    link_tags: tuple[str, ...] = ("a", "area")
    include_nofollow_links: bool = True
    features: str = "lxml"


class HTMLParser:
    """Turn an HTML body into the raw href strings it contains."""

    def __init__(self, config: HTMLParserConfig | None = None) -> None:
        self.config = config or HTMLParserConfig()

    def extract_hrefs(self, body: str | bytes, *, content_type: str | None = None) -> list[str]:
        """Return raw `href` values in document order.

        Raises `ParseError` when the declared content type is not HTML or the
        markup is rejected by the parser.
        """

        if not is_html_content_type(content_type):
            raise ParseError(f"Not an HTML document: {content_type}")

        try:
            soup = BeautifulSoup(body, self.config.features)
        except ParserRejectedMarkup as exc:
            raise ParseError(f"{exc.__class__.__name__}: {exc}") from exc

        hrefs: list[str] = []
        for element in soup.find_all(list(self.config.link_tags)):
            href = element.get("href")
            if href is None:
                continue

            if not self.config.include_nofollow_links:
                rel_values = {value.lower() for value in (element.get("rel") or [])}
                if "nofollow" in rel_values:
                    continue

            hrefs.append(str(href))

        return hrefs


_default_parser = HTMLParser()


def extract_hrefs(body: str | bytes, *, content_type: str | None = None) -> list[str]:
    """Extract raw hrefs with the default parser configuration."""

    return _default_parser.extract_hrefs(body, content_type=content_type)


__all__ = [
    "HTML_CONTENT_TYPES",
    "HTMLParser",
    "HTMLParserConfig",
    "extract_hrefs",
    "is_html_content_type",
]
