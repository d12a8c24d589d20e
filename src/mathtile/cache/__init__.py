"""Cache subsystem — bounded in-memory LRU with lazy TTL expiry."""

from mathtile.cache.keys import render_cache_key
from mathtile.cache.memory import RenderCache
from mathtile.cache.stats import CacheEntry, CacheStats

__all__ = [
    "RenderCache",
    "CacheEntry",
    "CacheStats",
    "render_cache_key",
]
