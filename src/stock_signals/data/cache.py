"""Disk cache for upstream financial data responses."""

import hashlib
import json
import os
from typing import Any

import diskcache

KEY_PREFIX = "financial-datasets"


def normalize_cache_params(params: Any) -> Any:
    """Sort mapping keys and list values recursively so equivalent requests share a key."""
    if isinstance(params, dict):
        return {key: normalize_cache_params(params[key]) for key in sorted(params)}
    if isinstance(params, (list, tuple)):
        return sorted((normalize_cache_params(v) for v in params), key=lambda v: json.dumps(v, sort_keys=True))
    return params


def compose_cache_key(method: str, params: dict[str, Any]) -> str:
    """
    Build a deterministic cache key for one client call.

    Format: financial-datasets:{method}:{sha256 of normalized params JSON}
    """
    normalized = json.dumps(normalize_cache_params(params), separators=(",", ":"))
    digest = hashlib.sha256(normalized.encode("utf-8")).hexdigest()
    return f"{KEY_PREFIX}:{method}:{digest}"


class ResponseCache:
    """
    Cache of decoded JSON responses keyed by request.

    Entries expire after CACHE_TTL seconds. Failed requests are never stored.
    """

    def __init__(self, cache_dir: str | None = None, ttl: int | None = None):
        if cache_dir is None:
            cache_dir = os.environ.get("CACHE_DIR", ".cache/financial-datasets")
        self.cache: diskcache.Cache = diskcache.Cache(cache_dir)
        self._default_ttl = ttl if ttl is not None else int(os.environ.get("CACHE_TTL", "3600"))

    def store(self, key: str, payload: Any, ttl: int | None = None) -> None:
        """
        Store a response payload.

        Args:
            key: Cache key from compose_cache_key
            payload: Decoded JSON body
            ttl: Cache TTL in seconds (default: CACHE_TTL)
        """
        expire = ttl if ttl is not None else self._default_ttl
        self.cache.set(key, payload, expire=expire)

    def get(self, key: str) -> Any | None:
        """Get a cached payload, None if absent or expired."""
        return self.cache.get(key)

    def clear(self) -> None:
        """Clear all cached data."""
        self.cache.clear()

    def close(self) -> None:
        self.cache.close()
