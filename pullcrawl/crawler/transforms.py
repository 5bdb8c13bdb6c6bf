"""
Ready-made HTML transforms.

A transform is called as ``transform(body, url, response)`` and returns the
HTML links should be discovered in, either directly or as an awaitable.
"""

from typing import Any, Callable, Optional
from urllib.parse import urldefrag, urljoin

from bs4 import BeautifulSoup

from .awaitables import resolve

Transform = Callable[[str, str, Any], Any]


def identity(body: str, url: str = None, response: Any = None) -> str:
    return body


def select_html(selector: str, features: str = 'lxml') -> Transform:
    """
    Build a transform that keeps only the first element matching `selector`.

    The whole body is kept when nothing matches, like `main` on a page that
    has no <main> element.
    """
    def transform(body: str, url: str = None, response: Any = None) -> str:
        soup = BeautifulSoup(body, features)
        element = soup.select_one(selector)
        if element is None:
            return body
        return element.decode_contents()

    return transform


def resolve_links(body: str, url: str, response: Any = None, features: str = 'lxml') -> str:
    """
    Rewrite every `href` as an absolute URL without fragment.

    Links are resolved against the page URL, or against <base href> when the
    document declares one. Fragment-only links are dropped.
    """
    soup = BeautifulSoup(body, features)

    base_url = url
    base = soup.find('base', href=True)
    if base is not None:
        base_url = urljoin(url, base['href'])
        base.decompose()

    for element in soup.find_all(href=True):
        href = element['href'].strip()
        if not href or href.startswith('#'):
            del element['href']
            continue
        element['href'], _ = urldefrag(urljoin(base_url, href))

    return str(soup)


def compose(*transforms: Optional[Transform]) -> Transform:
    """Chain transforms left to right; sync and async transforms can be mixed."""
    steps = [t for t in transforms if t is not None]

    async def transform(body: str, url: str, response: Any = None) -> Optional[str]:
        for step in steps:
            if not body:
                break
            body = await resolve(step(body, url, response))
        return body

    return transform
