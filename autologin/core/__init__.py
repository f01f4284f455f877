# Core session infrastructure
from .cookie_jar import Cookie, CookieJar
from .login_form import LoginForm, LoginFormExtractor
from .url_resolver import resolve_action_url
from .rate_limiter import RateLimiter
from .retry_handler import RetryConfig, RetryExhausted, RetryHandler, calculate_backoff
from .transport import HttpStatusError, RequestsTransport, Response, Transport, TransportError
from .cache import FileCache, KeyValueCache, MemoryCache
from .session_client import LoginError, SessionClient, SessionState

__all__ = [
    'Cookie',
    'CookieJar',
    'LoginForm',
    'LoginFormExtractor',
    'resolve_action_url',
    'RateLimiter',
    'RetryConfig',
    'RetryExhausted',
    'RetryHandler',
    'calculate_backoff',
    'HttpStatusError',
    'RequestsTransport',
    'Response',
    'Transport',
    'TransportError',
    'FileCache',
    'KeyValueCache',
    'MemoryCache',
    'LoginError',
    'SessionClient',
    'SessionState',
]
