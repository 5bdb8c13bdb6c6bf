"""
Content classification and hyperlink discovery.
"""

import re
import logging
from typing import List, Mapping, Optional

from bs4 import BeautifulSoup

HTML_CONTENT_TYPE = re.compile(r'^text/\w*html$')


def get_header(headers: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    """Look up a header case-insensitively."""
    if not headers:
        return None
    name = name.lower()
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def is_html(headers: Optional[Mapping[str, str]]) -> bool:
    """
    Check whether a response carries HTML, judging by its Content-Type.

    Parameters after ``;`` are ignored, so ``text/html; charset=utf-8`` and
    ``text/xhtml`` both count as HTML while ``text/plain`` does not.
    """
    content_type = get_header(headers, 'content-type') or ''
    media_type = content_type.split(';', 1)[0].strip().lower()
    return bool(HTML_CONTENT_TYPE.match(media_type))


class LinkExtractor:
    """
    Collects `href` attribute values from HTML in document order.

    Values are returned as written in the markup: relative links are not
    resolved and duplicates are kept.
    """

    def __init__(self, features: str = 'lxml'):
        self.features = features
        self.logger = logging.getLogger(__name__)

    def extract(self, html: Optional[str]) -> List[str]:
        if not html:
            return []

        soup = BeautifulSoup(html, self.features)
        hrefs = [element['href'] for element in soup.find_all(href=True)]

        self.logger.debug(f"Extracted {len(hrefs)} links")
        return hrefs

    __call__ = extract


_default_extractor = LinkExtractor()


def extract_links(html: Optional[str]) -> List[str]:
    """Extract hyperlinks with the default lxml-backed extractor."""
    return _default_extractor.extract(html)
