"""
pullcrawl

A pull-driven web crawler: each step of an async iterator fetches one page,
discovers its links and hands them to a pluggable frontier.
"""

__version__ = "1.0.0"
__description__ = "A minimal pull-based web crawler exposed as an async iterator"

from .crawler import (
    Crawler, CrawlOptions, CrawlResult, ErrorResult, Frontier, StackFrontier,
    QueueFrontier, crawl
)
from .crawler.errors import (
    CrawlerError, FetchError, HTTPStatusError, InvalidUrlError,
    MissingQueueCapabilityError, TransportError
)

__all__ = [
    'Crawler', 'CrawlOptions', 'CrawlResult', 'ErrorResult', 'Frontier',
    'StackFrontier', 'QueueFrontier', 'crawl',
    'CrawlerError', 'FetchError', 'HTTPStatusError', 'InvalidUrlError',
    'MissingQueueCapabilityError', 'TransportError'
]
