"""
Key-Value Caches for Session Persistence

The session client persists its cookie jar through any object with
get/put/remove. Two implementations:
- MemoryCache: per-process, for tests and short-lived scripts
- FileCache: one JSON file per key, survives process restarts
"""

import json
import time
import hashlib
import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


class KeyValueCache(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryCache:
    """In-process cache with per-entry expiry"""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}

    def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    def put(self, key: str, value: str, ttl_seconds: int):
        self._entries[key] = (value, self._clock() + ttl_seconds)

    def remove(self, key: str):
        self._entries.pop(key, None)


class FileCache:
    """
    Stores each entry as a JSON file in a directory.

    Entries are written with their absolute expiry time and treated as
    missing once it has passed.
    """

    def __init__(
        self,
        cache_dir: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.cache_dir = Path(cache_dir) if cache_dir else Path("./data/sessions")
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self._clock = clock

    def _entry_path(self, key: str) -> Path:
        """Get file path for key (keys are URLs, so hash them)"""
        digest = hashlib.md5(key.encode('utf-8')).hexdigest()
        return self.cache_dir / f"{digest}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._entry_path(key)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                entry = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to read cache entry {key}: {e}")
            return None

        if entry.get('key') != key or entry.get('expires_at', 0) <= self._clock():
            return None
        return entry.get('value')

    def put(self, key: str, value: str, ttl_seconds: int):
        entry = {
            'key': key,
            'value': value,
            'expires_at': self._clock() + ttl_seconds,
        }
        try:
            with open(self._entry_path(key), 'w', encoding='utf-8') as f:
                json.dump(entry, f)
            logger.debug(f"Saved cache entry {key} (ttl {ttl_seconds}s)")
        except OSError as e:
            logger.warning(f"Failed to save cache entry {key}: {e}")

    def remove(self, key: str):
        try:
            self._entry_path(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove cache entry {key}: {e}")
