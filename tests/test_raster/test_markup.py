"""Tests for markup normalization."""

import pytest

from mathtile.raster.markup import normalize_markup


class TestNormalizeMarkup:
    def test_wraps_bare_expression(self):
        assert normalize_markup("x^2") == "$x^2$"

    @pytest.mark.parametrize(
        "markup",
        ["$x^2$", "$$x^2$$", "\\[x^2\\]", "\\(x^2\\)", "  $ x^2 $  "],
    )
    def test_strips_outer_delimiters(self, markup):
        assert normalize_markup(markup) == "$x^2$"

    @pytest.mark.parametrize("markup", ["$$ $a$ $$", "\\[ \\(a\\) \\]", "$ $$a$$ $"])
    def test_nested_wrappers_unwrapped(self, markup):
        assert normalize_markup(markup) == "$a$"

    def test_separate_spans_kept(self):
        assert normalize_markup("$a$ + $b$") == "$a$ + $b$"

    def test_paren_spans_rewritten(self):
        assert normalize_markup("\\(a\\) + \\(b\\)") == "$a$ + $b$"

    def test_escaped_dollar_is_not_a_delimiter(self):
        assert normalize_markup("\\$5 + x") == "$\\$5 + x$"

    def test_newlines_collapsed(self):
        assert normalize_markup("a +\n    b\n= c") == "$a + b = c$"

    def test_newlines_collapsed_between_spans(self):
        assert normalize_markup("$a$\n  + $b$") == "$a$ + $b$"

    def test_inner_spacing_preserved(self):
        assert normalize_markup("a  +  b") == "$a  +  b$"

    @pytest.mark.parametrize("markup", ["", "   ", "$$", "$ $", "\\[ \\]", "\n"])
    def test_empty_rejected(self, markup):
        with pytest.raises(ValueError, match="empty"):
            normalize_markup(markup)
