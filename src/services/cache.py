"""In-process TTL cache for schedule and activity reads."""

import time
from typing import Any, Optional

DEFAULT_TTL_MS = 5 * 60 * 1000


class MemoryCache:
    """Key/value cache whose entries expire ``ttl_ms`` after being set.

    Lives as long as the process that creates it; pass it to the services that
    need it rather than importing a module-level instance.
    """

    def __init__(self, default_ttl_ms: int = DEFAULT_TTL_MS):
        self.default_ttl_ms = default_ttl_ms
        self._entries: dict[str, tuple[Any, float]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if time.time() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl_ms: Optional[int] = None) -> None:
        ttl = self.default_ttl_ms if ttl_ms is None else ttl_ms
        self._entries[key] = (value, time.time() + ttl / 1000)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def delete_prefix(self, prefix: str) -> int:
        """Drop every key starting with ``prefix``; returns how many were removed."""
        keys = [key for key in self._entries if key.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def cleanup(self) -> None:
        now = time.time()
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
