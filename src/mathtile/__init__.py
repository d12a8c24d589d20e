"""mathtile — render math markup into size-bounded RGBA tiles."""

from mathtile.cache.memory import RenderCache
from mathtile.core import RenderService
from mathtile.pipeline.engine import RenderPipeline
from mathtile.pipeline.tiler import reassemble_tiles, tile_pixels
from mathtile.types import RenderKey, RenderOutcome, RenderResult, TileRecord

__all__ = [
    "RenderCache",
    "RenderKey",
    "RenderOutcome",
    "RenderPipeline",
    "RenderResult",
    "RenderService",
    "TileRecord",
    "reassemble_tiles",
    "tile_pixels",
]
