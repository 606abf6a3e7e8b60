"""Tests for layout-mode price selection."""

import pytest

from invoice_extraction.extraction import PriceCandidateSelector
from invoice_extraction.extraction.price_selector import FALLBACK_RULE_NAME


@pytest.fixture
def selector():
    return PriceCandidateSelector()


class TestKeywordAnchored:
    """Step one: an amount shortly after a price keyword."""

    @pytest.mark.parametrize("keyword", ["Total", "T o t a l", "To  tal", "TOTAL"])
    def test_keyword_spacing_tolerance(self, selector, keyword):
        match = selector.select(f"{keyword} 2 4 9 . 0 0")
        assert match.value == "₹249.00"
        assert match.rule == "spaced_price_keyword"

    def test_comma_and_currency(self, selector, to_layout):
        match = selector.select(to_layout("Grand Total ₹ 1,499.00"))
        assert match.value == "₹1499.00"

    def test_amount_must_exceed_ten(self, selector, to_layout):
        assert selector.select(to_layout("Total 10.00")) is None

    def test_amount_must_stay_below_limit(self, selector, to_layout):
        assert selector.select(to_layout("Gross 600000.00")) is None

    def test_keyword_within_hundred_characters(self, selector, to_layout):
        text = to_layout("Payable") + " " + "x " * 60 + to_layout("350.00")
        match = selector.select(text)
        assert match.rule == FALLBACK_RULE_NAME
        assert match.value == "₹350.00"


class TestFallbackScan:
    """Step two: amounts examined from the last to the first."""

    def test_comma_beats_trailing_tracking_number(self, selector, to_layout):
        text = to_layout("Items 1,499.00 Shipment 98765432109876.00")
        match = selector.select(text)
        assert match.value == "₹1499.00"
        assert match.rule == FALLBACK_RULE_NAME

    def test_currency_marker_before_amount(self, selector, to_layout):
        text = to_layout("Ref 1234.56 Rs 750.00 Fee 12.50")
        assert selector.select(text).value == "₹750.00"

    def test_last_amount_accepted_without_signal(self, selector, to_layout):
        assert selector.select(to_layout("Ref 320.00")).value == "₹320.00"

    def test_unsupported_candidate_rejected(self, selector, to_layout):
        assert selector.select(to_layout("Ref 1234.56 Fee 12.50")) is None

    def test_fallback_lower_bound_is_fifty(self, selector, to_layout):
        assert selector.select(to_layout("Ref 45.00")) is None

    def test_no_amounts(self, selector):
        assert selector.select("O D 1 2 3") is None
