"""Cache key generation — exact-match render fingerprints."""

from __future__ import annotations

_SEPARATOR = "|"


def render_cache_key(markup: str, font_size: float, pixel_density: float) -> str:
    """Build the lookup key ``markup|fontSize|pixelDensity``.

    The markup is used verbatim: keys are case- and whitespace-sensitive.
    Integral floats are written without a fractional part so ``32`` and
    ``32.0`` address the same entry.
    """
    return _SEPARATOR.join([markup, _format_number(font_size), _format_number(pixel_density)])


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
