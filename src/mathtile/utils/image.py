"""Image encoding utilities for rendered results."""

from __future__ import annotations

import io
from pathlib import Path

from PIL import Image

from mathtile.pipeline.tiler import reassemble_tiles
from mathtile.types import RenderResult


def result_to_image(result: RenderResult) -> Image.Image:
    """Reassemble a tiled result into a single RGBA Pillow image."""
    pixels = reassemble_tiles(result.tiles, result.width, result.height)
    return Image.frombytes("RGBA", (result.width, result.height), pixels)


def result_to_png_bytes(result: RenderResult) -> bytes:
    buf = io.BytesIO()
    result_to_image(result).save(buf, format="PNG", compress_level=9)
    return buf.getvalue()


def save_png(result: RenderResult, path: str | Path) -> Path:
    """Write the reassembled render to ``path`` as PNG, creating parent dirs."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(result_to_png_bytes(result))
    return path
