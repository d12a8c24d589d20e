"""Cache entry and statistics models."""

from __future__ import annotations

from pydantic import BaseModel

from mathtile.types import RenderResult


class CacheEntry(BaseModel):
    """A cached render, stamped with the clock reading at insertion."""

    key: str
    value: RenderResult
    inserted_at: float
    ttl_seconds: float = 3600.0

    def is_expired(self, now: float) -> bool:
        return now >= self.inserted_at + self.ttl_seconds

    @property
    def size_bytes(self) -> int:
        return self.value.size_bytes


class CacheStats(BaseModel):
    """Aggregate cache statistics."""

    entries: int = 0
    capacity: int = 0
    size_mb: float = 0.0
    hits: int = 0
    misses: int = 0
    expirations: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0
