"""Partition an RGBA buffer into bounded tiles, and put it back together.

Tiles are emitted row-major: every column slice of the top band left to
right, then the next band down. Because of that order, a consumer only
needs each tile's width and height to recover the origins: a row ends
once the accumulated widths reach the image width.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from mathtile.types import BYTES_PER_PIXEL, TileRecord

DEFAULT_MAX_TILE_SIZE = 1024


def tile_pixels(
    pixels: bytes,
    width: int,
    height: int,
    max_tile_size: int = DEFAULT_MAX_TILE_SIZE,
) -> list[TileRecord]:
    """Split ``pixels`` into tiles no larger than ``max_tile_size`` on either edge.

    Returns an empty list for a zero-area image. Remainder tiles on the right
    and bottom edges are smaller than ``max_tile_size`` and never padded.
    """
    if max_tile_size < 1:
        raise ValueError(f"max_tile_size must be at least 1, got {max_tile_size}")
    if width < 0 or height < 0:
        raise ValueError(f"Negative image dimensions: {width}x{height}")
    expected = width * height * BYTES_PER_PIXEL
    if len(pixels) != expected:
        raise ValueError(
            f"Pixel buffer is {len(pixels)} bytes, expected {expected} for {width}x{height} RGBA"
        )
    if width == 0 or height == 0:
        return []

    image = np.frombuffer(pixels, dtype=np.uint8).reshape(height, width, BYTES_PER_PIXEL)

    tiles: list[TileRecord] = []
    for top in range(0, height, max_tile_size):
        band_height = min(max_tile_size, height - top)
        for left in range(0, width, max_tile_size):
            tile_width = min(max_tile_size, width - left)
            region = image[top : top + band_height, left : left + tile_width]
            tiles.append(
                TileRecord(
                    data=np.ascontiguousarray(region).tobytes(),
                    width=tile_width,
                    height=band_height,
                    origin_x=left,
                    origin_y=top,
                )
            )
    return tiles


def reassemble_tiles(tiles: Sequence[TileRecord], width: int, height: int) -> bytes:
    """Rebuild the full RGBA buffer from row-major tiles.

    Origins are recomputed from the tile widths and heights alone, the same
    way a remote client would; the ``origin_*`` fields are not consulted.
    """
    canvas = np.zeros((height, width, BYTES_PER_PIXEL), dtype=np.uint8)
    x = y = 0
    row_height = 0
    for tile in tiles:
        if x + tile.width > width or y + tile.height > height:
            raise ValueError(f"Tile {tile.width}x{tile.height} at ({x}, {y}) overflows the image")
        block = np.frombuffer(tile.data, dtype=np.uint8).reshape(
            tile.height, tile.width, BYTES_PER_PIXEL
        )
        canvas[y : y + tile.height, x : x + tile.width] = block
        row_height = max(row_height, tile.height)
        x += tile.width
        if x >= width:
            x = 0
            y += row_height
            row_height = 0
    return canvas.tobytes()
