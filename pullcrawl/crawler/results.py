"""
Records emitted by the crawler, one per visited URL.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .errors import FetchError
    from .fetcher import FetchResponse


@dataclass(frozen=True)
class CrawlResult:
    """A visit that produced an HTTP response (any status)."""
    url: str
    status_code: Optional[int]
    status_message: Optional[str]
    body: Optional[str]
    headers: Optional[Dict[str, str]]
    hrefs: Tuple[str, ...] = ()
    transformed_html: Optional[str] = None

    is_error = False

    @classmethod
    def from_response(cls, url: str, response: 'FetchResponse',
                      hrefs: Tuple[str, ...] = (),
                      transformed_html: Optional[str] = None) -> 'CrawlResult':
        return cls(
            url=url,
            status_code=response.status_code,
            status_message=response.status_message,
            body=response.body,
            headers=dict(response.headers),
            hrefs=tuple(hrefs),
            transformed_html=transformed_html
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'url': self.url,
            'status_code': self.status_code,
            'status_message': self.status_message,
            'body': self.body,
            'headers': self.headers,
            'hrefs': list(self.hrefs),
            'transformed_html': self.transformed_html
        }


@dataclass(frozen=True)
class ErrorResult(CrawlResult):
    """A visit that failed below the HTTP layer."""
    code: Optional[str] = None
    message: Optional[str] = field(default=None)

    is_error = True

    @classmethod
    def from_error(cls, url: str, error: 'FetchError') -> 'ErrorResult':
        response = error.response
        return cls(
            url=url,
            status_code=error.status_code,
            status_message=error.status_message,
            body=response.body if response is not None else None,
            headers=dict(response.headers) if response is not None else None,
            code=error.code,
            message=error.message
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['code'] = self.code
        data['message'] = self.message
        return data
