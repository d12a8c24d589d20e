"""Markup normalization applied before rasterization."""

from __future__ import annotations

import re

# Outer delimiter pairs accepted from clients, checked in order.
_DELIMITERS: list[tuple[str, str]] = [
    ("$$", "$$"),
    ("\\[", "\\]"),
    ("\\(", "\\)"),
    ("$", "$"),
]

_WHITESPACE_RUN = re.compile(r"\s*\n\s*")
# Unescaped $, or one of \( \) \[ \].
_MATH_DELIMITER = re.compile(r"(?<!\\)\$|\\[()\[\]]")


def _strip_outer(body: str) -> str | None:
    """Remove wrapping delimiter pairs, or return None if ``body`` is not one math span.

    A pair only counts as outer when nothing between its ends is a delimiter,
    apart from further whole wrappers (``$$ $a$ $$`` unwraps to ``a``).
    """
    for opening, closing in _DELIMITERS:
        fits = len(body) >= len(opening) + len(closing)
        if fits and body.startswith(opening) and body.endswith(closing):
            inner = body[len(opening) : len(body) - len(closing)].strip()
            if not _MATH_DELIMITER.search(inner):
                return inner
            return _strip_outer(inner)
    return None


def normalize_markup(markup: str) -> str:
    """Turn client markup into a mathtext expression.

    Contract:
      - surrounding whitespace is trimmed
      - an outer delimiter pair ($$..$$, \\[..\\], \\(..\\), $..$) is removed
        when the whole input is one math span; the body is wrapped as ``$<body>$``
      - markup with no delimiters is wrapped as ``$<body>$``
      - markup mixing text and several math spans keeps its spans, with
        \\(..\\) and \\[..\\] rewritten to $..$
      - line breaks (with their surrounding indentation) become single spaces

    Raises ValueError when nothing renderable remains.
    """
    body = markup.strip()
    inner = _strip_outer(body)
    if inner is not None:
        body = inner
    elif _MATH_DELIMITER.search(body):
        body = _WHITESPACE_RUN.sub(" ", body)
        return re.sub(r"\\[()\[\]]", "$", body)

    body = _WHITESPACE_RUN.sub(" ", body)
    if not body:
        raise ValueError("Markup is empty")
    return f"${body}$"
