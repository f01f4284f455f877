"""
autologin - HTTP client with automatic form login

Usage:
    from autologin import SessionClient, FileCache

    client = SessionClient(
        "https://example.com/login",
        {"username": "me", "password": "secret"},
        config={"leastIntervalMillis": 3000},
        cache=FileCache("./data/sessions"),
    )
    response = client.fetch("https://example.com/mypage")
"""

from .config import ClientConfig, default_config
from .core import (
    Cookie,
    CookieJar,
    FileCache,
    HttpStatusError,
    KeyValueCache,
    LoginError,
    LoginForm,
    LoginFormExtractor,
    MemoryCache,
    RateLimiter,
    RequestsTransport,
    Response,
    RetryExhausted,
    RetryHandler,
    SessionClient,
    SessionState,
    Transport,
    TransportError,
    resolve_action_url,
)

__version__ = "0.1.0"

__all__ = [
    'ClientConfig',
    'default_config',
    'Cookie',
    'CookieJar',
    'FileCache',
    'HttpStatusError',
    'KeyValueCache',
    'LoginError',
    'LoginForm',
    'LoginFormExtractor',
    'MemoryCache',
    'RateLimiter',
    'RequestsTransport',
    'Response',
    'RetryExhausted',
    'RetryHandler',
    'SessionClient',
    'SessionState',
    'Transport',
    'TransportError',
    'resolve_action_url',
]
