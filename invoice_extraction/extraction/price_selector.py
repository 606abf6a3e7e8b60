"""
Price Candidate Selector.

Layout-mode price extraction in two steps:

1. Keyword-anchored: the first "Total"/"Gross"/"GrandTotal"/"Payable"/
   "Amount"/"Net" keyword followed within 100 characters by an amount with a
   two-digit decimal fraction, accepted inside (10, 500000).
2. Fallback scan: every amount in the document, examined from the last to
   the first. A candidate inside (50, 500000) is accepted when it carries a
   thousands comma, sits within 20 characters after a currency marker
   (Rs, INR, ₹), or is the last amount in the document. Tracking numbers
   and phone numbers rarely satisfy any of the three.
"""

import re
from typing import Iterator, List, Optional, Sequence

from invoice_extraction.utils.logger import get_logger
from .field_extractor import FieldExtractor, FieldMatch, first_accepted
from .patterns import (
    LAYOUT_AMOUNT,
    LAYOUT_RULES,
    Rule,
    amount_between,
    format_price,
    spaced_any,
)

logger = get_logger(__name__)

FALLBACK_RULE_NAME = "last_amount_scan"


class PriceCandidateSelector:
    """
    Two-step price selector for character-spaced text.

    Args:
        keyword_rules: Step-one rules (default: layout price rules).
        fallback_low: Exclusive lower bound for fallback candidates.
        fallback_high: Exclusive upper bound for fallback candidates.
        marker_window: Characters before a candidate searched for a
            currency marker.

    Example:
        >>> selector = PriceCandidateSelector()
        >>> selector.select("T o t a l ₹ 1 , 4 9 9 . 0 0").value
        '₹1499.00'
    """

    CURRENCY_MARKERS = ["Rs", "INR", "₹"]

    def __init__(
        self,
        keyword_rules: Optional[Sequence[Rule]] = None,
        fallback_low: float = 50,
        fallback_high: float = 500000,
        marker_window: int = 20,
        field_extractor: Optional[FieldExtractor] = None
    ) -> None:
        self.keyword_rules = list(keyword_rules if keyword_rules is not None else LAYOUT_RULES.price)
        self.in_fallback_range = amount_between(fallback_low, fallback_high)
        self.marker_window = marker_window
        self.field_extractor = field_extractor or FieldExtractor()

        self._amount = re.compile(LAYOUT_AMOUNT)
        self._currency_marker = re.compile(spaced_any(self.CURRENCY_MARKERS), re.IGNORECASE)

    def select(self, text: str) -> Optional[FieldMatch]:
        """
        Select the invoice total from layout text.

        Args:
            text: Layout text (not whitespace-normalized).

        Returns:
            FieldMatch with a "₹"-prefixed value, or None.
        """
        match = self.field_extractor.extract(text, self.keyword_rules, "price")
        if match is not None:
            return match

        logger.debug("price: no keyword-anchored amount, scanning all amounts")
        return first_accepted(self._fallback_candidates(text))

    def _fallback_candidates(self, text: str) -> Iterator[Optional[FieldMatch]]:
        amounts: List[re.Match] = list(self._amount.finditer(text))
        last_index = len(amounts) - 1

        for index in range(last_index, -1, -1):
            amount = amounts[index]
            raw = amount.group(0)
            value = format_price(raw)

            if not self.in_fallback_range(value):
                logger.debug(f"price: fallback candidate '{value}' out of range")
                yield None
                continue

            if ',' in raw or self._has_currency_marker(text, amount.start()) or index == last_index:
                logger.debug(f"price: fallback accepted '{value}'")
                yield FieldMatch(value=value, raw=raw, rule=FALLBACK_RULE_NAME)
            else:
                logger.debug(f"price: fallback candidate '{value}' has no supporting signal")
                yield None

    def _has_currency_marker(self, text: str, start: int) -> bool:
        window = text[max(0, start - self.marker_window):start]
        return self._currency_marker.search(window) is not None
