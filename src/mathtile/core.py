"""Top-level entry point: RenderService, the cache-then-pipeline boundary."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from mathtile.cache.memory import RenderCache
from mathtile.errors.exceptions import InvalidRequestError
from mathtile.pipeline.engine import RenderPipeline
from mathtile.raster.rasterizer import MathTextRasterizer, Rasterizer
from mathtile.types import RenderKey, RenderOutcome, ServiceConfig

logger = logging.getLogger(__name__)

INVALID_MARKUP_MESSAGE = "Missing or invalid LaTeX string"


class RenderService:
    """Owns one cache and one pipeline for the lifetime of a server or CLI run.

    Lookups go to the cache first; a miss runs the pipeline and only
    successful results are stored. Two concurrent misses for the same key
    both render and the later ``set`` wins.
    """

    def __init__(
        self,
        config: ServiceConfig | None = None,
        rasterizer: Rasterizer | None = None,
        cache: RenderCache | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config or ServiceConfig()
        self._cache = cache if cache is not None else RenderCache(
            capacity=self._config.cache_capacity,
            ttl_seconds=self._config.cache_ttl_seconds,
        )
        self._pipeline = RenderPipeline(
            rasterizer
            if rasterizer is not None
            else MathTextRasterizer(
                color=self._config.text_color,
                max_pixels=self._config.max_pixels,
            ),
            retry_config=self._config.retry_config(),
            max_tile_size=self._config.max_tile_size,
            sleep=sleep,
        )
        self._render_slots = asyncio.Semaphore(self._config.max_concurrent_renders)

    @property
    def config(self) -> ServiceConfig:
        return self._config

    @property
    def cache(self) -> RenderCache:
        return self._cache

    @property
    def pipeline(self) -> RenderPipeline:
        return self._pipeline

    def build_key(
        self,
        markup: Any,
        font_size: Any = None,
        pixel_density: Any = None,
    ) -> RenderKey:
        """Validate raw request values and apply configured defaults.

        Raises InvalidRequestError for anything a client must fix.
        """
        if not isinstance(markup, str) or not markup.strip():
            raise InvalidRequestError(INVALID_MARKUP_MESSAGE, field="latex")

        font_size = self._config.default_font_size if font_size is None else font_size
        pixel_density = (
            self._config.default_pixel_density if pixel_density is None else pixel_density
        )
        _check_range("fontSize", font_size, self._config.max_font_size)
        _check_range("pixelDensity", pixel_density, self._config.max_pixel_density)

        return RenderKey(markup=markup, font_size=font_size, pixel_density=pixel_density)

    async def render(
        self,
        markup: Any,
        font_size: Any = None,
        pixel_density: Any = None,
    ) -> RenderOutcome:
        """Serve a render from cache, or run the pipeline and cache a success."""
        key = self.build_key(markup, font_size, pixel_density)
        cache_key = key.cache_key

        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit for %r", cache_key)
            return RenderOutcome.success(cached, attempts=0, cached=True)

        logger.info(
            "Rendering %r (font %s, density %s)", key.markup, key.font_size, key.pixel_density
        )
        async with self._render_slots:
            outcome = await self._pipeline.render(key.markup, key.font_size, key.pixel_density)

        if outcome.ok and outcome.result is not None:
            self._cache.set(cache_key, outcome.result)
        return outcome

    def close(self) -> None:
        """Drop all cached renders."""
        self._cache.clear()


def _check_range(field: str, value: Any, maximum: float) -> None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise InvalidRequestError(f"{field} must be a number", field=field)
    if not 0 < value <= maximum:
        raise InvalidRequestError(f"{field} must be in (0, {maximum:g}], got {value}", field=field)
