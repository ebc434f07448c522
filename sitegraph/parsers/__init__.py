"""Parser package exports."""

from .html_parser import HTMLParser, HTMLParserConfig, extract_hrefs, is_html_content_type

__all__ = [
    "HTMLParser",
    "HTMLParserConfig",
    "extract_hrefs",
    "is_html_content_type",
]
