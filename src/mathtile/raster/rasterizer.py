"""Markup → RGBA rasterization backed by matplotlib's mathtext engine."""

from __future__ import annotations

import io
import logging
import threading
from typing import Protocol

from matplotlib import mathtext
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.font_manager import FontProperties
from PIL import Image

from mathtile.errors.exceptions import DegenerateImageError, RasterizationError
from mathtile.raster.markup import normalize_markup
from mathtile.types import RasterImage

logger = logging.getLogger(__name__)

_POINTS_PER_INCH = 72
_DEFAULT_MAX_PIXELS = 64_000_000

# mathtext parsing and Agg drawing touch process-wide matplotlib state.
_MATPLOTLIB_LOCK = threading.Lock()


class Rasterizer(Protocol):
    """Anything that can turn markup into an RGBA buffer."""

    def rasterize(self, markup: str, font_size: float, pixel_density: float) -> RasterImage: ...


class MathTextRasterizer:
    """Renders TeX-style math with matplotlib, no TeX installation required.

    ``pixel_density`` scales the output: density 1 renders at 72 dpi, so a
    32pt font is roughly 32px tall; density 2 doubles both edges.
    """

    def __init__(self, color: str = "black", max_pixels: int = _DEFAULT_MAX_PIXELS) -> None:
        self._color = color
        self._max_pixels = max_pixels
        self._parser = mathtext.MathTextParser("path")

    def rasterize(self, markup: str, font_size: float, pixel_density: float) -> RasterImage:
        if font_size <= 0 or pixel_density <= 0:
            raise RasterizationError(
                f"Invalid render parameters: font_size={font_size}, pixel_density={pixel_density}",
                error_type="invalid_dimensions",
                pixel_density=pixel_density,
            )
        try:
            expression = normalize_markup(markup)
        except ValueError as e:
            raise RasterizationError(str(e), error_type="invalid_markup") from e

        prop = FontProperties(size=font_size)
        with _MATPLOTLIB_LOCK:
            png = self._render_png(markup, expression, prop, pixel_density)

        with Image.open(io.BytesIO(png)) as img:
            rgba = img.convert("RGBA")
        width, height = rgba.size
        logger.debug("Rasterized %r at density %s -> %dx%d", markup, pixel_density, width, height)
        return RasterImage(pixels=rgba.tobytes(), width=width, height=height)

    def _render_png(
        self, markup: str, expression: str, prop: FontProperties, pixel_density: float
    ) -> bytes:
        """Parse, lay out and draw ``expression``. Callers hold ``_MATPLOTLIB_LOCK``."""
        try:
            layout = self._parser.parse(expression, dpi=_POINTS_PER_INCH, prop=prop)
        except ValueError as e:
            raise RasterizationError(
                f"Invalid markup: {e}", error_type="invalid_markup", original=e
            ) from e

        if layout.width <= 0 or layout.height <= 0:
            raise DegenerateImageError(
                f"Markup {markup!r} has no visible extent", int(layout.width), int(layout.height)
            )

        estimated = (layout.width * pixel_density) * (layout.height * pixel_density)
        if estimated > self._max_pixels:
            raise RasterizationError(
                f"Render of ~{int(estimated)} pixels exceeds limit of {self._max_pixels}",
                error_type="resource_exhausted",
                pixel_density=pixel_density,
            )

        # Figure sized to the parsed layout in inches; dpi decides the pixel size.
        fig = Figure(
            figsize=(layout.width / _POINTS_PER_INCH, layout.height / _POINTS_PER_INCH)
        )
        FigureCanvasAgg(fig)
        fig.patch.set_alpha(0)
        fig.text(
            0, layout.depth / layout.height, expression, fontproperties=prop, color=self._color
        )

        buf = io.BytesIO()
        try:
            fig.savefig(buf, dpi=_POINTS_PER_INCH * pixel_density, format="png", transparent=True)
        except ValueError as e:
            raise RasterizationError(
                f"Invalid markup: {e}", error_type="invalid_markup", original=e
            ) from e
        except MemoryError as e:
            raise RasterizationError(
                "Out of memory while rasterizing",
                error_type="resource_exhausted",
                pixel_density=pixel_density,
                original=e,
            ) from e
        return buf.getvalue()
