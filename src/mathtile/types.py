"""Shared Pydantic models for mathtile."""

from __future__ import annotations

import base64
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

BYTES_PER_PIXEL = 4
CHANNEL_ORDER = "RGBA"

# ── Enums ──


class RetryStrategy(StrEnum):
    EXPONENTIAL = "exponential"
    LINEAR = "linear"
    FIXED = "fixed"


# ── Config models ──


class RetryConfig(BaseModel):
    max_attempts: int = Field(default=3, ge=1)
    strategy: RetryStrategy = RetryStrategy.LINEAR
    base_delay: float = Field(default=0.25, ge=0.0)
    attempt_timeout: float | None = Field(default=10.0, gt=0)
    min_density: float = 1.0


class ServiceConfig(BaseModel):
    """Resolved service settings, built from the merged config hierarchy."""

    host: str = "127.0.0.1"
    port: int = 3000
    cache_capacity: int = 256
    cache_ttl_seconds: float = 3600.0
    max_tile_size: int = Field(default=1024, ge=1)
    max_attempts: int = Field(default=3, ge=1)
    retry_base_delay: float = Field(default=0.25, ge=0.0)
    attempt_timeout: float | None = Field(default=10.0, gt=0)
    default_font_size: float = 32.0
    default_pixel_density: float = 2.0
    max_font_size: float = 512.0
    max_pixel_density: float = 8.0
    max_pixels: int = 64_000_000
    text_color: str = "black"
    max_body_bytes: int = 10 * 1024 * 1024
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    max_concurrent_renders: int = Field(default=4, ge=1)
    log_level: str = "WARNING"

    def retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_attempts=self.max_attempts,
            base_delay=self.retry_base_delay,
            attempt_timeout=self.attempt_timeout,
        )


# ── Runtime models ──


class RenderKey(BaseModel):
    """Fingerprint of a cacheable render. Compared field-by-field, never normalized."""

    model_config = {"frozen": True}

    markup: str
    font_size: float
    pixel_density: float

    @property
    def cache_key(self) -> str:
        from mathtile.cache.keys import render_cache_key

        return render_cache_key(self.markup, self.font_size, self.pixel_density)


class RasterImage(BaseModel):
    """Raw RGBA pixel buffer returned by a rasterizer."""

    pixels: bytes
    width: int
    height: int


class TileRecord(BaseModel):
    model_config = {"frozen": True}

    data: bytes
    width: int
    height: int
    origin_x: int = 0
    origin_y: int = 0


class RenderResult(BaseModel):
    """A complete tiled render. Never mutated once built."""

    model_config = {"frozen": True}

    tiles: tuple[TileRecord, ...]
    width: int
    height: int
    bytes_per_pixel: int = BYTES_PER_PIXEL
    channel_order: str = CHANNEL_ORDER
    pixel_density: float

    @property
    def tile_widths(self) -> list[int]:
        return [t.width for t in self.tiles]

    @property
    def tile_heights(self) -> list[int]:
        return [t.height for t in self.tiles]

    @property
    def size_bytes(self) -> int:
        return sum(len(t.data) for t in self.tiles)

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready payload: base64 tiles plus per-tile dimensions."""
        return {
            "tiles": [base64.b64encode(t.data).decode("ascii") for t in self.tiles],
            "tileWidths": self.tile_widths,
            "tileHeights": self.tile_heights,
            "width": self.width,
            "height": self.height,
            "bytesPerPixel": self.bytes_per_pixel,
            "channelOrder": self.channel_order,
            "pixelDensity": self.pixel_density,
        }


class RenderOutcome(BaseModel):
    """Discriminated success/failure of a pipeline run."""

    ok: bool
    result: RenderResult | None = None
    error: str | None = None
    attempts: int = 0
    cached: bool = False

    @classmethod
    def success(cls, result: RenderResult, attempts: int, cached: bool = False) -> RenderOutcome:
        return cls(ok=True, result=result, attempts=attempts, cached=cached)

    @classmethod
    def failure(cls, error: str, attempts: int) -> RenderOutcome:
        return cls(ok=False, error=error, attempts=attempts)
