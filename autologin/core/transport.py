"""
HTTP Transport

A single request attempt: no retries, no cookie handling. The session
client owns both of those concerns, so the requests.Session used here is
configured to never store cookies itself.
"""

import logging
from dataclasses import dataclass, field
from http.cookiejar import DefaultCookiePolicy
from typing import Any, Dict, List, Optional, Protocol

import requests
from requests.structures import CaseInsensitiveDict

from ..config import DEFAULT_HEADERS

logger = logging.getLogger(__name__)


RequestOptions = Dict[str, Any]


@dataclass
class Response:
    """HTTP response data as seen by the session client"""
    url: str
    status_code: int
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    content: bytes = b''
    encoding: Optional[str] = None

    @property
    def text(self) -> str:
        """Decode the response content using the detected or fallback encoding"""
        if not self.content:
            return ""
        try:
            return self.content.decode(self.encoding or 'utf-8')
        except (UnicodeDecodeError, LookupError):
            return self.content.decode('utf-8', errors='replace')

    def set_cookies(self) -> List[str]:
        """All Set-Cookie values, whether the header holds one value or a list"""
        values = self.headers.get('Set-Cookie')
        if not values:
            return []
        if isinstance(values, str):
            return [values]
        return list(values)


class TransportError(Exception):
    """Network-level failure with no usable response"""
    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        super().__init__(message)


class HttpStatusError(TransportError):
    """The server answered with an error status"""
    def __init__(self, response: Response):
        self.response = response
        self.status_code = response.status_code
        super().__init__(f"HTTP {response.status_code} for {response.url}", url=response.url)


class Transport(Protocol):
    def perform(self, url: str, options: RequestOptions) -> Response:
        ...


class RequestsTransport:
    """
    Transport backed by requests.

    Recognized options: method, payload, headers, follow_redirects,
    mute_http_exceptions, timeout, content_type.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(DEFAULT_HEADERS if headers is None else headers)
        # The client manages cookies; block requests' own jar
        self.session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))

    def perform(self, url: str, options: RequestOptions) -> Response:
        method = (options.get('method') or 'get').upper()
        headers = dict(options.get('headers') or {})
        payload = options.get('payload')

        if options.get('content_type'):
            headers['Content-Type'] = options['content_type']

        kwargs: Dict[str, Any] = {
            'headers': headers,
            'allow_redirects': options.get('follow_redirects', True),
            'timeout': options.get('timeout', self.timeout),
        }
        if payload is not None:
            if method in ('GET', 'HEAD') and isinstance(payload, dict):
                kwargs['params'] = payload
            else:
                kwargs['data'] = payload

        try:
            raw = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}", url=url) from e

        response = self._to_response(raw)
        if response.status_code >= 400 and not options.get('mute_http_exceptions'):
            raise HttpStatusError(response)
        return response

    def _to_response(self, raw: requests.Response) -> Response:
        headers = CaseInsensitiveDict(raw.headers)

        # requests folds repeated Set-Cookie headers into one comma-joined
        # string; the urllib3 headers still hold them separately
        raw_headers = getattr(raw.raw, 'headers', None)
        if raw_headers is not None and hasattr(raw_headers, 'getlist'):
            set_cookies = raw_headers.getlist('Set-Cookie')
            if set_cookies:
                headers['Set-Cookie'] = set_cookies if len(set_cookies) > 1 else set_cookies[0]

        return Response(
            url=raw.url or '',
            status_code=raw.status_code,
            headers=headers,
            content=raw.content or b'',
            encoding=raw.encoding,
        )

    def close(self):
        self.session.close()

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(self, *args: object):
        self.close()
