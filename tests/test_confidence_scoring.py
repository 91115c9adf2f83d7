"""Tests for token-based field confidence and matchers."""

import re

import pytest

from conftest import words
from fakturex.pipeline.confidence_scoring import geometric_mean, rule_factor, score_tokens
from fakturex.pipeline.line_grouping import group_tokens_to_lines
from fakturex.pipeline.locale_parsers import parse_amount
from fakturex.pipeline.matchers import first_match, label_matcher, positional_matcher, regex_finder


def test_geometric_mean():
    assert geometric_mean([]) == 1.0
    assert geometric_mean([0.9, 0.0]) == 0.0
    assert geometric_mean([0.5, 0.8]) == pytest.approx(0.632455532)


def test_rule_factor(profile):
    assert rule_factor("label", profile) == 1.0
    assert rule_factor("positional", profile) == 0.7
    assert rule_factor("computed", profile) == 0.7


def test_score_tokens(profile):
    tokens = words("1 230,00", 0, 0, confidence=0.9)
    assert score_tokens(tokens, "label", profile) == pytest.approx(0.9)
    assert score_tokens(tokens, "positional", profile) == pytest.approx(0.63)


class TestMatchers:
    @pytest.fixture
    def lines(self):
        tokens = words("Razem do zapłaty:", 40, 100) + words("1 230,00 zł", 40, 115) + words("99,00", 40, 130)
        return group_tokens_to_lines(tokens, list(range(len(tokens))), 0, "text", 0)

    @staticmethod
    def _amount(text):
        hit = re.search(r"\d[\d ]*,\d{2}", text)
        if hit is None:
            return None
        return parse_amount(hit.group(0)), hit.start(), hit.end()

    def test_label_looks_below(self, lines):
        found = label_matcher(re.compile(r"(?i)do zapłaty:"), self._amount)(lines)
        assert found.rule == "label"
        assert str(found.result.value) == "1230.00"
        assert found.provenance.token_indices == (3, 4)

    def test_positional(self, lines):
        found = positional_matcher(self._amount)(lines)
        assert found.rule == "positional"
        assert found.line.text == "1 230,00 zł"

    def test_first_match_collects_rejected(self, lines):
        bad = regex_finder(re.compile(r"zł"), parse=parse_amount)
        rejected = []
        found = first_match([positional_matcher(bad), positional_matcher(self._amount)], lines, rejected)
        assert found.ok
        assert len(rejected) == 1
        assert rejected[0].result.error == "UnrecognizedFormat"
