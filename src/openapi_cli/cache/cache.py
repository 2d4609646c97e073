"""Disk-based cache for remote OpenAPI documents.

Uses :mod:`diskcache` to persist fetched spec content on the filesystem
with a per-entry time-to-live (TTL).  Keys are SHA-256 hashes of the spec
URL, so the same URL always resolves to the same entry.

When caching is disabled for a registration no :class:`SpecCache` is
created at all and every load re-fetches the document.

See Also:
    :class:`~openapi_cli.models.CacheSettings` -- the model that controls
    ``enabled``, ``ttl_seconds``, and ``directory``.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any, Optional

import diskcache

_KEY_PREFIX = "openapi-cli-spec:"


class SpecCache:
    """Disk-backed cache for fetched spec content.

    Stores ``{"content": str, "format": "json" | "yaml"}`` entries in a
    :class:`diskcache.Cache` directory.

    Args:
        cache_dir: Root directory for the cache.  A ``specs/``
            subdirectory is created inside it.

    Example::

        cache = SpecCache("/tmp/openapi-cli-cache")
        key = SpecCache.key_for("https://api.example.com/openapi.yaml")
        cache.put(key, {"content": "...", "format": "yaml"}, ttl_seconds=60)
        hit = cache.get(key)
    """

    def __init__(self, cache_dir: str | Path) -> None:
        self._cache_dir = Path(cache_dir) / "specs"
        self._cache = diskcache.Cache(str(self._cache_dir))

    @staticmethod
    def key_for(url: str) -> str:
        """Return the cache key of a spec URL."""
        return _KEY_PREFIX + hashlib.sha256(url.encode("utf-8")).hexdigest()

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or ``None`` on a miss or after expiry."""
        return self._cache.get(key)

    def put(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store *value* under *key* for *ttl_seconds* seconds."""
        self._cache.set(key, value, expire=ttl_seconds)

    def clear(self) -> None:
        """Remove all entries from the cache."""
        self._cache.clear()

    @property
    def directory(self) -> Path:
        """The directory backing this cache."""
        return self._cache_dir

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        self._cache.close()
