"""
Client Configuration

Central configuration for the auto-login session client.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional


# External caches commonly cap key length at 250 characters
CACHE_KEY_MAX_LENGTH = 250

# 6 hours
DEFAULT_CACHE_TTL_CAP = 21600

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

# camelCase option names accepted by ClientConfig.from_options
OPTION_ALIASES = {
    'maxRetryCount': 'max_retry_count',
    'leastIntervalMillis': 'least_interval_millis',
    'loginFormSelector': 'login_form_selector',
    'loginFormInputSelector': 'login_form_input_selector',
    'requestOptionOverrides': 'request_option_overrides',
    'loggingEnabled': 'logging_enabled',
    'cacheTtlCapSeconds': 'cache_ttl_cap_seconds',
    'reusesExpiredCookies': 'reuses_expired_cookies',
    'backoffBaseSeconds': 'backoff_base_seconds',
}


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for a SessionClient"""
    max_retry_count: int = 5               # Attempts before giving up
    least_interval_millis: int = 5000      # Minimum spacing between requests
    login_form_selector: str = "form"
    login_form_input_selector: Optional[str] = None  # Defaults to "<form selector> input"

    # Merged into every outgoing request; per-call options win
    request_option_overrides: Dict[str, Any] = field(default_factory=dict)

    logging_enabled: bool = False
    cache_ttl_cap_seconds: int = DEFAULT_CACHE_TTL_CAP
    reuses_expired_cookies: bool = False
    backoff_base_seconds: float = 1.0

    def __post_init__(self):
        if self.max_retry_count < 1:
            raise ValueError(f"max_retry_count must be >= 1, got {self.max_retry_count}")
        if self.least_interval_millis < 0:
            raise ValueError(f"least_interval_millis must be >= 0, got {self.least_interval_millis}")
        if self.cache_ttl_cap_seconds < 1:
            raise ValueError(f"cache_ttl_cap_seconds must be >= 1, got {self.cache_ttl_cap_seconds}")
        if self.backoff_base_seconds < 0:
            raise ValueError(f"backoff_base_seconds must be >= 0, got {self.backoff_base_seconds}")

        if not self.login_form_input_selector:
            # frozen dataclass, so go through object.__setattr__
            object.__setattr__(
                self, 'login_form_input_selector', f"{self.login_form_selector} input"
            )
        object.__setattr__(
            self, 'request_option_overrides', dict(self.request_option_overrides or {})
        )

    @property
    def least_interval(self) -> float:
        """Minimum request spacing in seconds"""
        return self.least_interval_millis / 1000.0

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "ClientConfig":
        """
        Build a config from a loosely-typed options mapping.

        Accepts both field names (``max_retry_count``) and camelCase option
        names (``maxRetryCount``). Unknown names raise ValueError.
        """
        if not options:
            return cls()

        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in options.items():
            name = OPTION_ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown client option: {key}")
            kwargs[name] = value

        return cls(**kwargs)


# Default configuration instance
default_config = ClientConfig()
