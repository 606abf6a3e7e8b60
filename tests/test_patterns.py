"""Tests for the pattern helpers and the spacing-tolerant literal compiler."""

import re

import pytest

from invoice_extraction.extraction.patterns import (
    first_group,
    format_price,
    join_groups,
    parse_amount,
    spaced,
    whole_match,
)


class TestSpacedLiteral:
    """Whitespace between characters of a literal is optional and unbounded."""

    @pytest.mark.parametrize("text", ["Total", "T o t a l", "To  tal", "T\no\tt a  l"])
    def test_matches_any_spacing(self, text):
        assert re.fullmatch(spaced("Total"), text)

    def test_requires_every_character(self):
        assert re.fullmatch(spaced("Total"), "Totl") is None

    def test_whitespace_inside_literal_is_dropped(self):
        pattern = spaced("West Bengal")
        assert re.fullmatch(pattern, "WestBengal")
        assert re.fullmatch(pattern, "W e s t B e n g a l")
        assert re.fullmatch(pattern, "West Bengal")

    def test_special_characters_are_escaped(self):
        assert re.fullmatch(spaced("IN-"), "I N -")
        assert re.fullmatch(spaced("Name:"), "N a m e :")
        assert re.fullmatch(spaced("a.b"), "a x b") is None


class TestPrices:
    """Price parsing and formatting."""

    def test_format_adds_currency_and_drops_commas(self):
        assert format_price("1,499.00") == "₹1499.00"

    def test_format_spaced_amount(self):
        assert format_price("₹ 1 , 4 9 9 . 0 0") == "₹1499.00"

    def test_parse_amount(self):
        assert parse_amount("₹1,499.00") == 1499.0
        assert parse_amount("1 2 . 5 0") == 12.5
        assert parse_amount("abc") is None


class TestSelectionPolicies:
    """Capture-group selection."""

    def test_first_non_empty_group(self):
        match = re.search(r'(x)?(b+)', "abbc")
        assert first_group(match) == "bb"

    def test_whole_match_without_groups(self):
        match = re.search(r'b+', "abbc")
        assert first_group(match) == "bb"
        assert whole_match(match) == "bb"

    def test_join_groups_strips_segments(self):
        match = re.search(r'(\w+ ),( \w+),?(\w+)?', "John , Hojai")
        assert join_groups(', ')(match) == "John, Hojai"

    def test_join_groups_strip_inner(self):
        match = re.search(r'(\d\s*\d)-(\d\s*\d)', "1 2-0 1")
        assert join_groups('-', strip_inner=True)(match) == "12-01"
