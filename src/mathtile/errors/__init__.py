"""Error handling — exceptions and retry helpers."""

from mathtile.errors.exceptions import (
    CapacityConfigurationError,
    DegenerateImageError,
    InvalidRequestError,
    MathTileError,
    RasterizationError,
    RenderTimeoutError,
)

__all__ = [
    "MathTileError",
    "RasterizationError",
    "DegenerateImageError",
    "RenderTimeoutError",
    "CapacityConfigurationError",
    "InvalidRequestError",
]
