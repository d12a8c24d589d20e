"""Custom exception hierarchy for mathtile."""

from __future__ import annotations

from typing import Any


class MathTileError(Exception):
    """Base exception for all mathtile errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class RasterizationError(MathTileError):
    """The rasterizer rejected the input or failed internally. Retryable.

    Examples: unparseable markup, oversized raster, out-of-memory in the backend.
    """

    def __init__(
        self,
        message: str = "",
        error_type: str = "rasterizer_failure",
        pixel_density: float | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.pixel_density = pixel_density
        self.original = original


class DegenerateImageError(RasterizationError):
    """Rasterization succeeded but produced an empty (zero width/height) image."""

    def __init__(self, message: str = "", width: int = 0, height: int = 0) -> None:
        super().__init__(message, error_type="degenerate_image")
        self.width = width
        self.height = height


class RenderTimeoutError(RasterizationError):
    """A single render attempt exceeded its deadline."""

    def __init__(self, message: str = "", timeout: float | None = None) -> None:
        super().__init__(message, error_type="timeout")
        self.timeout = timeout


class CapacityConfigurationError(MathTileError, ValueError):
    """Cache constructed with a capacity below 1; raised at startup."""

    def __init__(self, message: str = "", capacity: int = 0) -> None:
        super().__init__(message)
        self.capacity = capacity


class InvalidRequestError(MathTileError):
    """Malformed render request payload."""

    def __init__(self, message: str = "", field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
