"""
HTTP fetcher built on aiohttp.

Performs one GET per call. Responses outside the 2xx range are raised as
HTTPStatusError, connection-level failures as TransportError.
"""

import asyncio
import errno
import logging
import socket
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import (
    ClientConnectionError, ClientError, ClientPayloadError, ClientSession, ClientTimeout, InvalidURL
)

from .errors import HTTPStatusError, TransportError

DEFAULT_USER_AGENT = 'pullcrawl/1.0 (+https://github.com/pullcrawl/pullcrawl)'

# Failures worth another attempt
TRANSIENT_ERRORS = (ClientConnectionError, ClientPayloadError, asyncio.TimeoutError)


@dataclass
class FetchResponse:
    """Response data handed to transforms and stored in results."""
    url: str
    status_code: int
    status_message: Optional[str]
    body: str
    headers: Dict[str, str] = field(default_factory=dict)
    content_length: int = 0
    fetch_time: float = 0.0


def error_code(exc: BaseException) -> str:
    """
    Map a transport exception to a short error code.

    OS-level failures use their errno symbol (``ECONNREFUSED``, ``ENOTFOUND``
    style), timeouts become ``ETIMEDOUT`` and anything else falls back to the
    exception class name.
    """
    if isinstance(exc, asyncio.TimeoutError):
        return 'ETIMEDOUT'

    if isinstance(exc, InvalidURL):
        return 'EINVALIDURL'

    os_error = getattr(exc, 'os_error', None)
    if os_error is None and isinstance(exc, OSError):
        os_error = exc

    if isinstance(os_error, socket.gaierror):
        return 'ENOTFOUND'

    code = getattr(os_error, 'errno', None)
    if code is not None and code in errno.errorcode:
        return errno.errorcode[code]

    return type(exc).__name__


def collapse_headers(raw_headers) -> Dict[str, str]:
    """Flatten a multi-dict into a plain dict with lower-cased names."""
    headers: Dict[str, str] = {}
    for name, value in raw_headers.items():
        key = name.lower()
        if key in headers:
            headers[key] = f"{headers[key]}, {value}"
        else:
            headers[key] = value
    return headers


def decode_body(content: bytes, charset: Optional[str]) -> str:
    encoding = charset or 'utf-8'
    try:
        return content.decode(encoding)
    except (UnicodeDecodeError, LookupError):
        for fallback_encoding in ['utf-8', 'latin-1', 'cp1252']:
            try:
                return content.decode(fallback_encoding)
            except UnicodeDecodeError:
                continue

        return content.decode('utf-8', errors='ignore')


class WebFetcher:
    """
    Fetches web pages over a single aiohttp session.

    Extra keyword arguments are forwarded verbatim to
    ``ClientSession.get`` (``ssl``, ``allow_redirects``, ``proxy``...).
    """

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, request_timeout: float = 30,
                 retry_attempts: int = 2, retry_backoff: float = 0.5,
                 headers: Optional[Dict[str, str]] = None, **request_options: Any):
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.retry_attempts = retry_attempts
        self.retry_backoff = retry_backoff
        self.headers = dict(headers or {})
        self.request_options = request_options

        self.logger = logging.getLogger(__name__)
        self.session: Optional[ClientSession] = None

        # Statistics
        self.stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'retried_requests': 0,
            'total_bytes_downloaded': 0
        }

    @classmethod
    def from_options(cls, transport: Optional[Dict[str, Any]] = None) -> 'WebFetcher':
        """Build a fetcher from a crawl's `transport` options."""
        return cls(**dict(transport or {}))

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self):
        """Initialize the fetcher session."""
        if self.session is None:
            timeout = ClientTimeout(total=self.request_timeout)
            headers = {'User-Agent': self.user_agent}
            headers.update(self.headers)

            self.session = aiohttp.ClientSession(timeout=timeout, headers=headers)
            self.logger.debug("WebFetcher session started")

    async def close(self):
        """Close the fetcher session."""
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("WebFetcher session closed")

    async def fetch(self, url: str) -> FetchResponse:
        """
        Fetch a single URL.

        Args:
            url: The URL to fetch

        Returns:
            FetchResponse for a 2xx answer

        Raises:
            HTTPStatusError: the server answered outside the 2xx range
            TransportError: no response could be obtained; connection
                failures and timeouts are retried first, invalid URLs are not
        """
        await self.start()

        attempt = 0
        while True:
            try:
                self.stats['total_requests'] += 1
                response = await self._get(url)
                break
            except TRANSIENT_ERRORS as e:
                if attempt < self.retry_attempts:
                    attempt += 1
                    self.stats['retried_requests'] += 1
                    self.logger.info(f"Retrying {url} ({attempt}/{self.retry_attempts}) after: {e!r}")
                    await asyncio.sleep(self.retry_backoff * attempt)
                    continue
                raise self._transport_error(url, e) from e
            except ClientError as e:
                # Invalid or non-HTTP URLs, redirect loops: retrying cannot help
                raise self._transport_error(url, e) from e

        self.stats['total_bytes_downloaded'] += response.content_length

        if not 200 <= response.status_code < 300:
            self.stats['failed_requests'] += 1
            self.logger.debug(f"HTTP {response.status_code} from {url}")
            raise HTTPStatusError(url, response)

        self.stats['successful_requests'] += 1
        self.logger.debug(f"Fetched {url}: {response.status_code} ({len(response.body)} chars)")
        return response

    def _transport_error(self, url: str, exc: BaseException) -> TransportError:
        self.stats['failed_requests'] += 1
        code = error_code(exc)
        self.logger.warning(f"Transport error fetching {url}: {code} {exc}")
        return TransportError(url, str(exc) or code, code=code)

    async def _get(self, url: str) -> FetchResponse:
        loop = asyncio.get_running_loop()
        start_time = loop.time()

        async with self.session.get(url, **self.request_options) as response:
            content = await response.read()
            return FetchResponse(
                url=str(response.url),
                status_code=response.status,
                status_message=response.reason,
                body=decode_body(content, response.charset),
                headers=collapse_headers(response.headers),
                content_length=len(content),
                fetch_time=loop.time() - start_time
            )

    def get_stats(self) -> Dict[str, int]:
        """Get fetcher statistics."""
        return self.stats.copy()
