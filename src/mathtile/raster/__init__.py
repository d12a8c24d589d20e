"""Rasterization — markup normalization and the matplotlib mathtext backend."""

from mathtile.raster.markup import normalize_markup
from mathtile.raster.rasterizer import MathTextRasterizer, Rasterizer

__all__ = ["MathTextRasterizer", "Rasterizer", "normalize_markup"]
