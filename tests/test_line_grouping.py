"""Unit tests for token-to-line grouping."""

import pytest

from conftest import words
from fakturex.models.token import TextToken
from fakturex.pipeline.line_grouping import group_tokens_to_lines, share_line, vertical_overlap


def _group(tokens, overlap_ratio=0.5):
    return group_tokens_to_lines(
        tokens,
        list(range(len(tokens))),
        region_index=0,
        region_kind="text",
        page=0,
        overlap_ratio=overlap_ratio,
    )


class TestShareLine:
    def test_overlap_above_threshold(self):
        a = TextToken.from_box("a", 0, 0, 10, 10)
        b = TextToken.from_box("b", 20, 4, 10, 10)
        assert vertical_overlap(a, b) == 6
        assert share_line(a, b)

    def test_overlap_below_threshold(self):
        a = TextToken.from_box("a", 0, 0, 10, 10)
        b = TextToken.from_box("b", 20, 6, 10, 10)
        assert not share_line(a, b)

    def test_exactly_half_is_not_enough(self):
        a = TextToken.from_box("a", 0, 0, 10, 10)
        b = TextToken.from_box("b", 20, 5, 10, 10)
        assert not share_line(a, b)

    def test_ratio_uses_shorter_token(self):
        tall = TextToken.from_box("A", 0, 0, 10, 30)
        short = TextToken.from_box("b", 20, 20, 10, 6)
        assert share_line(tall, short)

    def test_zero_height_token(self):
        thin = TextToken.from_box("-", 0, 5, 10, 0)
        other = TextToken.from_box("b", 20, 0, 10, 10)
        assert share_line(thin, other)
        assert not share_line(thin, TextToken.from_box("c", 20, 6, 10, 10))


class TestGroupTokensToLines:
    def test_orders_tokens_left_to_right(self):
        tokens = list(reversed(words("Data wystawienia: 2024-01-15", 40, 85)))
        lines = _group(tokens)
        assert len(lines) == 1
        assert lines[0].text == "Data wystawienia: 2024-01-15"
        assert lines[0].token_indices == [2, 1, 0]

    def test_orders_lines_top_to_bottom(self):
        tokens = words("Do zapłaty: 100,00", 40, 120) + words("Razem", 40, 100)
        lines = _group(tokens)
        assert [line.text for line in lines] == ["Razem", "Do zapłaty: 100,00"]

    def test_slightly_skewed_tokens_stay_on_one_line(self):
        tokens = [
            TextToken.from_box("Nr", 0, 100, 12, 10),
            TextToken.from_box("FV/1", 16, 102, 24, 10),
            TextToken.from_box("2024", 44, 103, 24, 10),
        ]
        assert len(_group(tokens)) == 1

    def test_line_metadata(self):
        tokens = words("Razem", 40, 100)
        line = group_tokens_to_lines(tokens, [7], region_index=3, region_kind="table", page=1)[0]
        assert (line.region_index, line.region_kind, line.page) == (3, "table", 1)
        assert line.token_indices == [7]

    def test_empty(self):
        assert _group([]) == []

    def test_mismatched_indices(self):
        with pytest.raises(ValueError):
            group_tokens_to_lines(words("a b", 0, 0), [0], 0, "text", 0)
