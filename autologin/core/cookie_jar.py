"""
Cookie Jar with Domain/Path Scoping

Features:
- Set-Cookie parsing into typed Cookie records
- Domain, path and secure matching per RFC 6265
- Expiry filtering (optionally retaining expired cookies)
- JSON serialization for persistence in an external cache
- Persistence TTL derived from the shortest-lived cookie
"""

import ipaddress
import json
import logging
import math
import re
import time
from dataclasses import dataclass, asdict
from http.cookiejar import http2time
from typing import Callable, Dict, Iterator, List, Optional, Tuple
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)


JAR_FORMAT_VERSION = "autologin.cookiejar/1"

_MAX_AGE_RE = re.compile(r'^-?\d+$')


@dataclass
class Cookie:
    """A single cookie as received from a Set-Cookie header"""
    name: str
    value: str
    domain: str
    path: str = "/"
    secure: bool = False
    http_only: bool = False
    host_only: bool = True
    expires: Optional[float] = None   # absolute epoch seconds
    max_age: Optional[int] = None     # seconds from creation
    creation: float = 0.0

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.domain, self.path, self.name)

    def expiry_time(self) -> Optional[float]:
        """Earliest of Expires and creation + Max-Age, or None for session cookies"""
        candidates = []
        if self.expires is not None:
            candidates.append(self.expires)
        if self.max_age is not None:
            candidates.append(self.creation + self.max_age)
        return min(candidates) if candidates else None

    def is_expired(self, now: float) -> bool:
        expiry = self.expiry_time()
        return expiry is not None and expiry <= now

    def matches(self, url: str) -> bool:
        """Check domain, path and secure scoping against a URL"""
        parts = urlsplit(url)
        host = (parts.hostname or "").lower()

        if self.host_only:
            if host != self.domain:
                return False
        elif not domain_match(host, self.domain):
            return False

        if not path_match(parts.path or "/", self.path):
            return False

        if self.secure and parts.scheme.lower() != "https":
            return False

        return True

    def to_dict(self) -> Dict:
        return asdict(self)


def _is_ip_address(host: str) -> bool:
    try:
        ipaddress.ip_address(host.strip('[]'))
    except ValueError:
        return False
    return True


def domain_match(host: str, domain: str) -> bool:
    """RFC 6265 domain-match: exact, or host is a subdomain of domain"""
    if host == domain:
        return True
    return host.endswith("." + domain) and not _is_ip_address(host)


def path_match(request_path: str, cookie_path: str) -> bool:
    """RFC 6265 path-match: prefix match on a '/' boundary"""
    if request_path == cookie_path:
        return True
    if not request_path.startswith(cookie_path):
        return False
    return cookie_path.endswith("/") or request_path[len(cookie_path)] == "/"


def default_path(url: str) -> str:
    """Directory of the request path, used when Set-Cookie has no Path"""
    path = urlsplit(url).path
    if not path.startswith("/") or path.count("/") == 1:
        return "/"
    return path[:path.rindex("/")]


def parse_set_cookie(raw: str, url: str, now: float) -> Optional[Cookie]:
    """
    Parse a single Set-Cookie header value.

    Returns None for values that cannot produce a cookie (no name/value pair,
    empty name, or a Domain attribute the request host cannot set).
    """
    pair, *attributes = raw.split(";")
    if "=" not in pair:
        return None
    name, _, value = pair.partition("=")
    name = name.strip()
    if not name:
        return None

    host = (urlsplit(url).hostname or "").lower()
    domain = None
    path = None
    secure = False
    http_only = False
    expires = None
    max_age = None

    for attribute in attributes:
        attr_name, _, attr_value = attribute.partition("=")
        attr_name = attr_name.strip().lower()
        attr_value = attr_value.strip()

        if attr_name == "expires":
            parsed = http2time(attr_value)
            if parsed is not None:
                expires = float(parsed)
        elif attr_name == "max-age":
            if _MAX_AGE_RE.match(attr_value):
                max_age = int(attr_value)
        elif attr_name == "domain":
            if attr_value:
                domain = attr_value.lstrip(".").lower()
        elif attr_name == "path":
            if attr_value.startswith("/"):
                path = attr_value
        elif attr_name == "secure":
            secure = True
        elif attr_name == "httponly":
            http_only = True

    if domain is not None:
        if not domain_match(host, domain):
            logger.debug(f"Rejecting cookie {name!r}: domain {domain!r} does not match host {host!r}")
            return None
        if "." not in domain and domain != host:
            # Single-label domains (e.g. "com") would scope the cookie to a whole TLD
            logger.debug(f"Rejecting cookie {name!r}: domain {domain!r} is a top-level domain")
            return None
        host_only = False
    else:
        domain = host
        host_only = True

    return Cookie(
        name=name,
        value=value.strip(),
        domain=domain,
        path=path or default_path(url),
        secure=secure,
        http_only=http_only,
        host_only=host_only,
        expires=expires,
        max_age=max_age,
        creation=now,
    )


class CookieJar:
    """
    Ordered in-memory cookie store for one session.

    Cookies are unique by (domain, path, name); a later Set-Cookie for the
    same key replaces the earlier one in place.
    """

    def __init__(
        self,
        retain_expired: bool = False,
        clock: Callable[[], float] = time.time,
    ):
        self.retain_expired = retain_expired
        self._clock = clock
        self._cookies: List[Cookie] = []

    def __len__(self) -> int:
        return len(self._cookies)

    def __iter__(self) -> Iterator[Cookie]:
        return iter(list(self._cookies))

    def _live(self, now: float) -> List[Cookie]:
        if self.retain_expired:
            return list(self._cookies)
        return [c for c in self._cookies if not c.is_expired(now)]

    def add(self, cookie: Cookie):
        """Insert or replace a cookie by key"""
        for idx, existing in enumerate(self._cookies):
            if existing.key == cookie.key:
                if cookie.is_expired(self._clock()) and not self.retain_expired:
                    # An already-expired Set-Cookie is a deletion
                    del self._cookies[idx]
                else:
                    self._cookies[idx] = cookie
                return

        if cookie.is_expired(self._clock()) and not self.retain_expired:
            return
        self._cookies.append(cookie)

    def set_from_header(self, raw: str, url: str) -> Optional[Cookie]:
        """Parse one Set-Cookie value scoped to url and upsert it"""
        cookie = parse_set_cookie(raw, url, self._clock())
        if cookie is None:
            logger.warning(f"Ignoring unusable Set-Cookie for {url}")
            return None
        self.add(cookie)
        logger.debug(f"Stored cookie {cookie.name} for {cookie.domain}{cookie.path}")
        return cookie

    def cookies_for(self, url: str) -> List[Cookie]:
        """Cookies to send to url, longest path first"""
        matching = [c for c in self._live(self._clock()) if c.matches(url)]
        return sorted(matching, key=lambda c: -len(c.path))

    def cookie_header(self, url: str) -> str:
        return "; ".join(f"{c.name}={c.value}" for c in self.cookies_for(url))

    def minimum_remaining_ttl(self, url: str, cap_seconds: int) -> int:
        """
        Seconds until the shortest-lived cookie matching url expires.

        Cookies without Expires/Max-Age contribute the cap, and the result
        never exceeds the cap. Cookies already expired (kept only by
        retain_expired) have no remaining lifetime to bound and are skipped,
        so a jar holding nothing else yields the cap.
        """
        now = self._clock()
        ttl = cap_seconds
        for cookie in self.cookies_for(url):
            expiry = cookie.expiry_time()
            if expiry is not None and expiry > now:
                ttl = min(ttl, math.floor(expiry - now))
        return int(ttl)

    def clear(self):
        self._cookies = []

    def serialize(self) -> str:
        """JSON record of the jar for the external cache"""
        return json.dumps({
            'version': JAR_FORMAT_VERSION,
            'cookies': [c.to_dict() for c in self._live(self._clock())],
        })

    @classmethod
    def deserialize(
        cls,
        payload: str,
        retain_expired: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> "CookieJar":
        """Rebuild a jar from serialize() output; raises ValueError if malformed"""
        try:
            data = json.loads(payload)
        except (TypeError, json.JSONDecodeError) as e:
            raise ValueError(f"Cookie jar payload is not valid JSON: {e}")

        if not isinstance(data, dict) or data.get('version') != JAR_FORMAT_VERSION:
            raise ValueError("Unsupported cookie jar format")

        jar = cls(retain_expired=retain_expired, clock=clock)
        for record in data.get('cookies') or []:
            try:
                jar.add(Cookie(**record))
            except TypeError as e:
                raise ValueError(f"Malformed cookie record: {e}")
        return jar
