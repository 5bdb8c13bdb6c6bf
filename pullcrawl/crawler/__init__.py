"""
Web crawler core components.
"""

from .engine import Crawler, CrawlOptions, CrawlPhase, CrawlState, crawl
from .errors import (
    CrawlerError, FetchError, HTTPStatusError, InvalidUrlError,
    MissingQueueCapabilityError, TransportError
)
from .fetcher import WebFetcher, FetchResponse
from .frontier import Frontier, StackFrontier, QueueFrontier, make_frontier
from .parser import LinkExtractor, extract_links, is_html
from .results import CrawlResult, ErrorResult

__all__ = [
    'Crawler', 'CrawlOptions', 'CrawlPhase', 'CrawlState', 'crawl',
    'CrawlerError', 'FetchError', 'HTTPStatusError', 'InvalidUrlError',
    'MissingQueueCapabilityError', 'TransportError',
    'WebFetcher', 'FetchResponse',
    'Frontier', 'StackFrontier', 'QueueFrontier', 'make_frontier',
    'LinkExtractor', 'extract_links', 'is_html',
    'CrawlResult', 'ErrorResult'
]
