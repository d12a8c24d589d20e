"""Package-level default configuration values."""

from __future__ import annotations

from typing import Any

# Default server settings
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_MAX_BODY_BYTES = 10 * 1024 * 1024
DEFAULT_CORS_ORIGINS = ["*"]

# Default cache settings
DEFAULT_CACHE_CAPACITY = 256
DEFAULT_CACHE_TTL_SECONDS = 3600.0

# Default render settings
DEFAULT_FONT_SIZE = 32.0
DEFAULT_PIXEL_DENSITY = 2.0
DEFAULT_MAX_FONT_SIZE = 512.0
DEFAULT_MAX_PIXEL_DENSITY = 8.0
DEFAULT_MAX_PIXELS = 64_000_000
DEFAULT_MAX_TILE_SIZE = 1024
DEFAULT_TEXT_COLOR = "black"
DEFAULT_MAX_CONCURRENT_RENDERS = 4

# Default retry settings
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY = 0.25
DEFAULT_ATTEMPT_TIMEOUT = 10.0

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "host": DEFAULT_HOST,
        "port": DEFAULT_PORT,
        "max_body_bytes": DEFAULT_MAX_BODY_BYTES,
        "cors_origins": list(DEFAULT_CORS_ORIGINS),
        "cache_capacity": DEFAULT_CACHE_CAPACITY,
        "cache_ttl_seconds": DEFAULT_CACHE_TTL_SECONDS,
        "default_font_size": DEFAULT_FONT_SIZE,
        "default_pixel_density": DEFAULT_PIXEL_DENSITY,
        "max_font_size": DEFAULT_MAX_FONT_SIZE,
        "max_pixel_density": DEFAULT_MAX_PIXEL_DENSITY,
        "max_pixels": DEFAULT_MAX_PIXELS,
        "max_tile_size": DEFAULT_MAX_TILE_SIZE,
        "text_color": DEFAULT_TEXT_COLOR,
        "max_concurrent_renders": DEFAULT_MAX_CONCURRENT_RENDERS,
        "max_attempts": DEFAULT_MAX_ATTEMPTS,
        "retry_base_delay": DEFAULT_RETRY_BASE_DELAY,
        "attempt_timeout": DEFAULT_ATTEMPT_TIMEOUT,
        "log_level": DEFAULT_LOG_LEVEL,
    }
