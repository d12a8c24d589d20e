"""Render pipeline — rasterize with bounded retries, then tile."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from mathtile.errors.exceptions import (
    DegenerateImageError,
    RasterizationError,
    RenderTimeoutError,
)
from mathtile.errors.retry import compute_wait, degrade_density
from mathtile.pipeline.tiler import DEFAULT_MAX_TILE_SIZE, tile_pixels
from mathtile.raster.rasterizer import Rasterizer
from mathtile.types import RenderOutcome, RenderResult, RetryConfig

logger = logging.getLogger(__name__)


class RenderPipeline:
    """Turns markup into a tiled RenderResult, degrading density on failure.

    Stateless per call: it can be shared between concurrent requests. It
    never reads or writes a cache; callers decide what to keep.
    """

    def __init__(
        self,
        rasterizer: Rasterizer,
        retry_config: RetryConfig | None = None,
        max_tile_size: int = DEFAULT_MAX_TILE_SIZE,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._rasterizer = rasterizer
        self._retry = retry_config or RetryConfig()
        self._max_tile_size = max_tile_size
        self._sleep = sleep

    @property
    def retry_config(self) -> RetryConfig:
        return self._retry

    async def render(self, markup: str, font_size: float, pixel_density: float) -> RenderOutcome:
        """Render ``markup``; always returns an outcome, never partial tiles.

        Each failed attempt waits ``base_delay * attempt`` (linear by default)
        and halves the density, down to ``min_density``, before retrying.
        """
        max_attempts = self._retry.max_attempts
        density = pixel_density
        last_error: RasterizationError | None = None

        for attempt in range(1, max_attempts + 1):
            try:
                result = await self._attempt(markup, font_size, density)
            except RasterizationError as exc:
                last_error = exc
            except Exception as exc:
                last_error = RasterizationError(
                    f"{type(exc).__name__}: {exc}",
                    error_type="unexpected",
                    pixel_density=density,
                    original=exc,
                )
            else:
                if attempt > 1:
                    logger.info(
                        "Render succeeded on attempt %d/%d at density %s",
                        attempt,
                        max_attempts,
                        density,
                    )
                return RenderOutcome.success(result, attempts=attempt)

            if attempt == max_attempts:
                break

            wait = compute_wait(attempt, self._retry.strategy, self._retry.base_delay)
            next_density = degrade_density(density, self._retry.min_density)
            logger.warning(
                "Render attempt %d/%d failed (%s): %s. Retrying in %.2fs at density %s",
                attempt,
                max_attempts,
                last_error.error_type,
                last_error,
                wait,
                next_density,
            )
            await self._sleep(wait)
            density = next_density

        message = str(last_error) if last_error else "Render failed"
        logger.error("Render failed after %d attempts: %s", max_attempts, message)
        return RenderOutcome.failure(message, attempts=max_attempts)

    async def _attempt(self, markup: str, font_size: float, density: float) -> RenderResult:
        call = asyncio.to_thread(self._rasterizer.rasterize, markup, font_size, density)
        timeout = self._retry.attempt_timeout
        try:
            image = await asyncio.wait_for(call, timeout) if timeout is not None else await call
        except TimeoutError as e:
            raise RenderTimeoutError(
                f"Render attempt exceeded {timeout}s deadline", timeout=timeout
            ) from e

        if image.width <= 0 or image.height <= 0:
            raise DegenerateImageError(
                f"Rasterizer produced an empty {image.width}x{image.height} image",
                width=image.width,
                height=image.height,
            )

        try:
            tiles = tile_pixels(image.pixels, image.width, image.height, self._max_tile_size)
        except ValueError as e:
            raise RasterizationError(
                str(e), error_type="invalid_dimensions", pixel_density=density
            ) from e
        if not tiles:
            raise DegenerateImageError("Tiling produced no tiles", image.width, image.height)

        return RenderResult(
            tiles=tuple(tiles),
            width=image.width,
            height=image.height,
            pixel_density=density,
        )
