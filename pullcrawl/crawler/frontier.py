"""
Frontier implementations: the pluggable pending-URL collection that drives
crawl order.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Deque, Iterable, List, Optional, Sequence, Union

from .errors import MissingQueueCapabilityError
from .awaitables import MaybeAwaitable

logger = logging.getLogger(__name__)


class Frontier(ABC):
    """
    Contract between the crawler and its URL queue.

    Both methods may return plain values or awaitables. Subclassing is
    optional: any object with callable `pop_url` and `push_url` is accepted.
    """

    @abstractmethod
    def pop_url(self, last_url: Optional[str]) -> MaybeAwaitable[Optional[str]]:
        """
        Return the next URL to visit, or a falsy value when the crawl is over.

        Args:
            last_url: The URL visited in the previous step (None on the first call)
        """

    @abstractmethod
    def push_url(self, url: str, referrer: str) -> MaybeAwaitable[Any]:
        """Queue a URL discovered on `referrer`."""


class StackFrontier(Frontier):
    """In-memory LIFO frontier. This is the default."""

    def __init__(self, initial_urls: Iterable[Any] = ()):
        self._urls: List[Any] = list(initial_urls)

    def pop_url(self, last_url: Optional[str] = None) -> Optional[Any]:
        if not self._urls:
            return None
        return self._urls.pop()

    def push_url(self, url: str, referrer: Optional[str] = None) -> None:
        self._urls.append(url)

    def __len__(self) -> int:
        return len(self._urls)


class QueueFrontier(Frontier):
    """In-memory FIFO frontier, visits pages breadth-first."""

    def __init__(self, initial_urls: Iterable[Any] = ()):
        self._urls: Deque[Any] = deque(initial_urls)

    def pop_url(self, last_url: Optional[str] = None) -> Optional[Any]:
        if not self._urls:
            return None
        return self._urls.popleft()

    def push_url(self, url: str, referrer: Optional[str] = None) -> None:
        self._urls.append(url)

    def __len__(self) -> int:
        return len(self._urls)


FRONTIER_TYPES = {
    'lifo': StackFrontier,
    'fifo': QueueFrontier,
}


def is_frontier(obj: Any) -> bool:
    """Check that `obj` has callable `pop_url` and `push_url`."""
    return (
        callable(getattr(obj, 'pop_url', None)) and
        callable(getattr(obj, 'push_url', None))
    )


def validate_frontier(obj: Any) -> Any:
    """Return `obj` unchanged, raising MissingQueueCapabilityError if it is not a frontier."""
    if not is_frontier(obj):
        raise MissingQueueCapabilityError()
    return obj


# Values wrapped as a single seed; a bad one fails on the first pull
SCALAR_TYPES = (str, bytes, int, float)


def make_frontier(urls_or_frontier: Union[str, Sequence[Any], Any],
                  order: str = 'lifo') -> Any:
    """
    Build the frontier for a crawl.

    A list or tuple of URLs, or a single scalar, is wrapped in an in-memory
    frontier (`order` picks LIFO or FIFO). `None` gives an empty frontier.
    Scalars that are not strings are accepted here and rejected with
    InvalidUrlError when popped. Any other object, generators included, must
    implement the frontier contract.
    """
    if urls_or_frontier is None:
        urls = []
    elif isinstance(urls_or_frontier, SCALAR_TYPES):
        urls = [urls_or_frontier]
    elif isinstance(urls_or_frontier, (list, tuple)):
        urls = list(urls_or_frontier)
    else:
        return validate_frontier(urls_or_frontier)

    try:
        frontier_class = FRONTIER_TYPES[order]
    except KeyError:
        raise ValueError(f"Unknown frontier order: {order!r}") from None

    logger.debug(f"Seeding {order} frontier with {len(urls)} URLs")
    return frontier_class(urls)
