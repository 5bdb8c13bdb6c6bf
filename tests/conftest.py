"""
Shared fixtures: an in-memory transport serving canned pages.
"""

from typing import Dict, List, Optional, Union

import pytest

from pullcrawl.crawler.errors import FetchError, HTTPStatusError, TransportError
from pullcrawl.crawler.fetcher import FetchResponse


def html_page(status_code: int = 200, body: str = '', content_type: str = 'text/html; charset=utf-8',
              status_message: Optional[str] = None) -> FetchResponse:
    return FetchResponse(
        url='',
        status_code=status_code,
        status_message=status_message or ('OK' if status_code == 200 else 'Error'),
        body=body,
        headers={'content-type': content_type} if content_type else {}
    )


class FakeFetcher:
    """Serves FetchResponses by URL; unknown URLs fail with ECONNREFUSED."""

    def __init__(self, pages: Optional[Dict[str, Union[FetchResponse, Exception]]] = None):
        self.pages = dict(pages or {})
        self.requested: List[str] = []
        self.closed = False

    def add(self, url: str, page: Union[FetchResponse, Exception]):
        self.pages[url] = page

    async def fetch(self, url: str) -> FetchResponse:
        self.requested.append(url)
        page = self.pages.get(url)
        if page is None:
            raise TransportError(url, '127.0.0.1', code='ECONNREFUSED')
        if isinstance(page, Exception):
            raise page
        if not 200 <= page.status_code < 300:
            raise HTTPStatusError(url, page)
        return page

    async def close(self):
        self.closed = True


@pytest.fixture
def fetcher():
    return FakeFetcher()


async def collect(crawler) -> list:
    return [result async for result in crawler]
