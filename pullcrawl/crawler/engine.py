"""
Crawl step engine.

A Crawler is an async iterator: every pull pops one URL from the frontier,
fetches it, discovers its links, pushes them back to the frontier and yields
one result. The sequence ends when the frontier runs dry.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Sequence

from .errors import FetchError, InvalidUrlError
from .fetcher import FetchResponse, WebFetcher
from .frontier import make_frontier
from .parser import extract_links, is_html
from .results import CrawlResult, ErrorResult
from .transforms import Transform, identity
from .awaitables import call


class CrawlPhase(Enum):
    """Where the crawler is within a step."""
    IDLE = 'idle'
    AWAITING_POP = 'awaiting_pop'
    FETCHING = 'fetching'
    TRANSFORMING = 'transforming'
    EXTRACTING_LINKS = 'extracting_links'
    ENQUEUEING = 'enqueueing'
    EMITTING = 'emitting'
    EXHAUSTED = 'exhausted'
    FAILED = 'failed'

    @property
    def terminal(self) -> bool:
        return self in (CrawlPhase.EXHAUSTED, CrawlPhase.FAILED)


@dataclass(frozen=True)
class CrawlOptions:
    """Options for one crawl."""
    transport: Dict[str, Any] = field(default_factory=dict)
    transform_html: Optional[Transform] = None
    link_extractor: Callable[[str], Sequence[str]] = extract_links


@dataclass
class CrawlState:
    """Mutable state owned by a Crawler."""
    phase: CrawlPhase = CrawlPhase.IDLE
    last_url: Optional[str] = None
    steps: int = 0


class Crawler:
    """
    Lazily crawls a frontier, one fetch per pull.

    Use it with ``async for``. Leaving an ``async with`` block (or calling
    ``aclose()``) releases the HTTP session when the crawler created it.
    """

    def __init__(self, frontier: Any, options: Optional[CrawlOptions] = None,
                 fetcher: Optional[Any] = None):
        self.frontier = frontier
        self.options = options or CrawlOptions()
        self.transform_html = self.options.transform_html or identity
        self.link_extractor = self.options.link_extractor

        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher if fetcher is not None else WebFetcher.from_options(self.options.transport)

        self.state = CrawlState()
        self.logger = logging.getLogger(__name__)
        self._lock = asyncio.Lock()

    def __aiter__(self):
        return self

    async def __anext__(self) -> CrawlResult:
        async with self._lock:
            if self.state.phase.terminal:
                raise StopAsyncIteration

            try:
                result = await self._step()
            except Exception as e:
                self.state.phase = CrawlPhase.FAILED
                self.logger.error(f"Crawl failed after {self.state.steps} steps: {e!r}")
                await self._release()
                raise

            if result is None:
                self.state.phase = CrawlPhase.EXHAUSTED
                self.logger.info(f"Frontier exhausted after {self.state.steps} steps")
                await self._release()
                raise StopAsyncIteration

            self.state.steps += 1
            self.state.phase = CrawlPhase.IDLE
            return result

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self):
        """Stop the crawl; later pulls end the sequence."""
        async with self._lock:
            if not self.state.phase.terminal:
                self.state.phase = CrawlPhase.EXHAUSTED
            await self._release()

    async def _release(self):
        if self._owns_fetcher:
            await self.fetcher.close()

    async def _step(self) -> Optional[CrawlResult]:
        """Run one request cycle. Returns None when the frontier is empty."""
        self.state.phase = CrawlPhase.AWAITING_POP
        url = await call(self.frontier.pop_url, self.state.last_url)

        if not url:
            return None
        if not isinstance(url, str):
            raise InvalidUrlError(url)

        self.state.last_url = url
        self.state.phase = CrawlPhase.FETCHING
        self.logger.debug(f"Fetching {url}")

        try:
            response = await self.fetcher.fetch(url)
        except FetchError as e:
            self.state.phase = CrawlPhase.EMITTING
            if e.response is None:
                self.logger.warning(f"Could not fetch {url}: {e.code} {e.message}")
                return ErrorResult.from_error(url, e)
            self.logger.info(f"{url} answered {e.status_code}, not following its links")
            return CrawlResult.from_response(url, e.response)

        transformed_html = await self._transform(url, response)

        self.state.phase = CrawlPhase.EXTRACTING_LINKS
        hrefs = tuple(self.link_extractor(transformed_html)) if transformed_html else ()

        self.state.phase = CrawlPhase.ENQUEUEING
        for href in hrefs:
            await call(self.frontier.push_url, href, url)

        self.state.phase = CrawlPhase.EMITTING
        self.logger.debug(f"Visited {url}: {response.status_code} in {response.fetch_time:.2f}s, "
                          f"{len(hrefs)} links")
        return CrawlResult.from_response(url, response, hrefs=hrefs,
                                         transformed_html=transformed_html)

    async def _transform(self, url: str, response: FetchResponse) -> Optional[str]:
        if not is_html(response.headers):
            return None
        self.state.phase = CrawlPhase.TRANSFORMING
        return await call(self.transform_html, response.body, url, response)


def crawl(urls_or_frontier: Any, options: Optional[CrawlOptions] = None, *,
          fetcher: Optional[Any] = None, order: str = 'lifo') -> Crawler:
    """
    Start a crawl.

    Args:
        urls_or_frontier: A URL, a list or tuple of URLs, None for an empty
            crawl, or an object implementing `pop_url(last_url)` and
            `push_url(url, referrer)`. Non-string scalars are seeded as
            given and fail with InvalidUrlError when pulled.
        options: Transport options and the HTML transform
        fetcher: Object with an async `fetch(url)`; defaults to a WebFetcher
            built from `options.transport`
        order: 'lifo' or 'fifo', for the in-memory frontier built from URLs

    Raises:
        MissingQueueCapabilityError: the frontier object lacks a required method
    """
    frontier = make_frontier(urls_or_frontier, order=order)
    return Crawler(frontier, options, fetcher=fetcher)
