"""
Exception hierarchy for the crawler.

Only ``FetchError`` subclasses are recovered by the crawl loop; every other
exception ends the crawl and reaches the consumer.
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .fetcher import FetchResponse


class CrawlerError(Exception):
    """Base class for crawler errors."""


class MissingQueueCapabilityError(CrawlerError, TypeError):
    """Raised when a frontier does not implement both `pop_url` and `push_url`."""

    def __init__(self, message: str = "A frontier must implement `push_url` and `pop_url`"):
        super().__init__(message)


class InvalidUrlError(CrawlerError, TypeError):
    """Raised when a frontier hands out something that is not a URL string."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"A url must be a string, got {type(value).__name__}: {value!r}")


class FetchError(CrawlerError):
    """A fetch that did not produce a 2xx response."""

    def __init__(self, url: str, message: str, code: Optional[str] = None,
                 response: Optional['FetchResponse'] = None):
        super().__init__(message)
        self.url = url
        self.message = message
        self.code = code
        self.response = response

    @property
    def status_code(self) -> Optional[int]:
        return self.response.status_code if self.response is not None else None

    @property
    def status_message(self) -> Optional[str]:
        return self.response.status_message if self.response is not None else None


class TransportError(FetchError):
    """Connection-level failure: no HTTP response was received."""


class HTTPStatusError(FetchError):
    """The server answered with a non-2xx status."""

    def __init__(self, url: str, response: 'FetchResponse'):
        message = f"Response code {response.status_code} ({response.status_message})"
        super().__init__(url, message, code=f"HTTP{response.status_code}", response=response)
