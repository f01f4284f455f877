"""
Session Client

Coordinates one authenticated session against one site:
- Cookie jar rehydrated from and persisted to an external cache
- Form-based login on demand when no cookies match the target URL
- Minimum-interval rate limiting
- Retry with exponential backoff
"""

import time
import logging
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Union

from ..config import CACHE_KEY_MAX_LENGTH, ClientConfig
from .cache import KeyValueCache, MemoryCache
from .cookie_jar import CookieJar
from .login_form import FieldValue, LoginFormExtractor
from .rate_limiter import RateLimiter
from .retry_handler import RetryConfig, RetryHandler
from .transport import RequestOptions, RequestsTransport, Response, Transport
from .url_resolver import resolve_action_url

logger = logging.getLogger(__name__)


class SessionState(Enum):
    NO_SESSION = "no_session"        # No usable cookies
    LOGGING_IN = "logging_in"        # Fetching login page / submitting credentials
    AUTHENTICATED = "authenticated"  # Cookies present
    REQUESTING = "requesting"        # Request in flight


class LoginError(Exception):
    """Raised when the login submission yields no cookies"""
    def __init__(self, login_url: str, action_url: str, status_code: int):
        self.login_url = login_url
        self.action_url = action_url
        self.status_code = status_code
        super().__init__(
            f"Login at {action_url} returned no Set-Cookie header (HTTP {status_code})"
        )


class SessionClient:
    """
    HTTP client that logs in automatically and replays session cookies.

    Cookies are stored in `cache` under "<ClassName>.<login_url>" so that
    later processes reuse the session until its shortest-lived cookie
    expires. To keep separate sessions for several users of the same login
    page, add a fragment to login_url (e.g. "https://site/login#alice").
    """

    def __init__(
        self,
        login_url: str,
        auth_fields: Mapping[str, FieldValue],
        config: Union[ClientConfig, Mapping[str, Any], None] = None,
        cache: Optional[KeyValueCache] = None,
        transport: Optional[Transport] = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.login_url = login_url
        self.auth_fields = dict(auth_fields)
        if isinstance(config, ClientConfig):
            self.config = config
        else:
            self.config = ClientConfig.from_options(config)

        self._clock = clock
        self.cache = cache if cache is not None else MemoryCache(clock=clock)
        self._owns_transport = transport is None
        self.transport = transport if transport is not None else RequestsTransport()

        self.cache_key = f"{type(self).__name__}.{login_url}"[:CACHE_KEY_MAX_LENGTH]
        self.cookie_jar = self._load_cookie_jar()

        self.form_extractor = LoginFormExtractor.from_config(self.config)
        self.rate_limiter = RateLimiter(self.config.least_interval_millis, clock=clock, sleep=sleep)
        self.retry_handler = RetryHandler(
            RetryConfig(
                max_attempts=self.config.max_retry_count,
                base_delay=self.config.backoff_base_seconds,
            ),
            sleep=sleep,
        )

        self.state = SessionState.AUTHENTICATED if len(self.cookie_jar) else SessionState.NO_SESSION

    def fetch(
        self,
        url: str,
        request_options: Optional[RequestOptions] = None,
        should_attempt_login: bool = True,
    ) -> Response:
        """
        Fetch url, logging in first if no cookie matches it.

        Raises:
            LoginError: the login submission returned no Set-Cookie
            RetryExhausted: every attempt failed
        """
        has_cookies = bool(self.cookie_jar.cookies_for(url))
        if should_attempt_login and not has_cookies:
            self._login()
            has_cookies = bool(self.cookie_jar.cookies_for(url))

        options = self._build_options(url, request_options, has_cookies)

        self.state = SessionState.REQUESTING
        try:
            response = self.retry_handler.execute(self._attempt, url, options)
            self._save_cookies(response, url)
        finally:
            self._settle_state(url)

        return response

    def _login(self):
        self.state = SessionState.LOGGING_IN
        logger.info(f"No session cookies, logging in at {self.login_url}")

        login_page = self.fetch(self.login_url, should_attempt_login=False)
        form = self.form_extractor.extract(login_page.text)
        action_url = resolve_action_url(self.login_url, form.action)
        self.state = SessionState.LOGGING_IN

        request: RequestOptions = {
            'method': form.method,
            'payload': {**form.fields, **self.auth_fields},
            # Logins usually answer with a 302; following it would lose the Set-Cookie
            'follow_redirects': False,
        }
        response = self.fetch(action_url, request, should_attempt_login=False)

        if not response.set_cookies():
            raise LoginError(self.login_url, action_url, response.status_code)
        logger.info(f"Logged in at {action_url} (HTTP {response.status_code})")

    def _build_options(
        self,
        url: str,
        request_options: Optional[RequestOptions],
        has_cookies: bool,
    ) -> RequestOptions:
        overrides = self.config.request_option_overrides
        request_options = request_options or {}

        options = {**overrides, **request_options}
        headers = {**(overrides.get('headers') or {}), **(request_options.get('headers') or {})}
        if has_cookies:
            headers['Cookie'] = self.cookie_jar.cookie_header(url)
        if headers:
            options['headers'] = headers
        return options

    def _attempt(self, url: str, options: RequestOptions) -> Response:
        if self.config.logging_enabled:
            logger.info(f"url: {url}, options: {self._redact(options)}")

        self.rate_limiter.wait()
        try:
            response = self.transport.perform(url, options)
        finally:
            self.rate_limiter.mark()

        if self.config.logging_enabled:
            logger.info(f"status: {response.status_code}, headers: {dict(response.headers)}")
        return response

    def _redact(self, options: RequestOptions) -> Dict[str, Any]:
        redacted = dict(options)
        headers = redacted.get('headers')
        if headers and 'Cookie' in headers:
            redacted['headers'] = {**headers, 'Cookie': '<redacted>'}
        payload = redacted.get('payload')
        if isinstance(payload, dict):
            redacted['payload'] = {
                k: '<redacted>' if k in self.auth_fields else v for k, v in payload.items()
            }
        return redacted

    def _save_cookies(self, response: Response, url: str):
        set_cookies = response.set_cookies()
        if not set_cookies:
            return

        for raw in set_cookies:
            self.cookie_jar.set_from_header(raw, url)

        ttl = self.cookie_jar.minimum_remaining_ttl(url, self.config.cache_ttl_cap_seconds)
        if ttl <= 0:
            self.cache.remove(self.cache_key)
            logger.debug(f"Cookies for {url} already expired, removed cached session")
            return

        self.cache.put(self.cache_key, self.cookie_jar.serialize(), ttl)
        logger.debug(f"Persisted {len(self.cookie_jar)} cookies for {ttl}s")

    def _load_cookie_jar(self) -> CookieJar:
        cached = self.cache.get(self.cache_key)
        if cached:
            try:
                jar = CookieJar.deserialize(
                    cached,
                    retain_expired=self.config.reuses_expired_cookies,
                    clock=self._clock,
                )
                logger.debug(f"Loaded {len(jar)} cached cookies for {self.login_url}")
                return jar
            except ValueError as e:
                logger.warning(f"Ignoring unreadable cached session for {self.login_url}: {e}")

        return CookieJar(retain_expired=self.config.reuses_expired_cookies, clock=self._clock)

    def _settle_state(self, url: str):
        if self.cookie_jar.cookies_for(url):
            self.state = SessionState.AUTHENTICATED
        else:
            self.state = SessionState.NO_SESSION

    def clear_session(self):
        """Forget all cookies so the next fetch logs in again"""
        self.cookie_jar.clear()
        self.cache.remove(self.cache_key)
        self.state = SessionState.NO_SESSION
        logger.info(f"Cleared session for {self.login_url}")

    @property
    def status(self) -> Dict:
        return {
            'state': self.state.value,
            'cookies': len(self.cookie_jar),
            'rate_limiter': self.rate_limiter.status,
        }

    def close(self):
        if self._owns_transport and hasattr(self.transport, 'close'):
            self.transport.close()

    def __enter__(self) -> "SessionClient":
        return self

    def __exit__(self, *args: object):
        self.close()
