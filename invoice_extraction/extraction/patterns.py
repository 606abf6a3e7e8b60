"""
Pattern Rule Sets.

Declarative extraction rules for every invoice field, one rule set per
source mode. A rule is a compiled pattern plus the policy that turns a
match into a candidate value (select, clean) and the predicate that decides
whether the candidate is admissible (accept). Within a field, list order is
priority order.

Layout rules are built with ``spaced()``, which compiles a literal into a
pattern that tolerates any amount of whitespace between consecutive
characters ("Total", "T o t a l" and "To  tal" all match).

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .invoice_record import CURRENCY_SYMBOL

_WHITESPACE = re.compile(r'\s+')


# =============================================================================
# PATTERN HELPERS
# =============================================================================

def spaced(literal: str) -> str:
    """
    Compile a literal into a whitespace-tolerant regex fragment.

    Whitespace inside the literal is dropped, every remaining character is
    escaped, and ``\\s*`` is placed between each pair of characters.

    Args:
        literal: Text to match, e.g. "Total" or "West Bengal".

    Returns:
        Regex source string (not compiled).

    Example:
        >>> re.fullmatch(spaced("Total"), "T o  tal") is not None
        True
    """
    return r'\s*'.join(re.escape(ch) for ch in literal if not ch.isspace())


def spaced_any(literals: List[str]) -> str:
    """Non-capturing alternation of spaced literals."""
    return '(?:' + '|'.join(spaced(literal) for literal in literals) + ')'


def strip_all_whitespace(value: str) -> str:
    return _WHITESPACE.sub('', value)


def collapse_whitespace(value: str) -> str:
    return _WHITESPACE.sub(' ', value).strip()


def parse_amount(value: str) -> Optional[float]:
    """
    Parse a price string, ignoring the currency symbol, commas and spaces.

    Returns:
        The numeric value, or None when the string is not a number.
    """
    cleaned = strip_all_whitespace(value).replace(',', '').replace(CURRENCY_SYMBOL, '')
    try:
        return float(cleaned)
    except ValueError:
        return None


def format_price(value: str) -> str:
    """Drop whitespace and commas and ensure the currency prefix."""
    cleaned = strip_all_whitespace(value).replace(',', '')
    if not cleaned.startswith(CURRENCY_SYMBOL):
        cleaned = CURRENCY_SYMBOL + cleaned
    return cleaned


def amount_between(low: float, high: float) -> Callable[[str], bool]:
    """Predicate accepting prices strictly inside (low, high)."""
    def accept(value: str) -> bool:
        amount = parse_amount(value)
        return amount is not None and low < amount < high
    return accept


def positive_amount(value: str) -> bool:
    amount = parse_amount(value)
    return amount is not None and amount > 0


# =============================================================================
# CAPTURE-GROUP SELECTION POLICIES
# =============================================================================

def first_group(match: re.Match) -> str:
    """First non-empty capture group, else the whole match."""
    for group in match.groups():
        if group:
            return group
    return match.group(0)


def whole_match(match: re.Match) -> str:
    return match.group(0)


def join_groups(separator: str, strip_inner: bool = False) -> Callable[[re.Match], str]:
    """
    Join every non-empty capture group with ``separator``.

    Args:
        separator: Text placed between groups.
        strip_inner: Remove all whitespace inside each group instead of
            only trimming it (used for character-spaced layout text).
    """
    def select(match: re.Match) -> str:
        parts = []
        for group in match.groups():
            if not group:
                continue
            part = strip_all_whitespace(group) if strip_inner else group.strip()
            if part:
                parts.append(part)
        return separator.join(parts)
    return select


# =============================================================================
# RULES
# =============================================================================

@dataclass(frozen=True)
class Rule:
    """
    A single extraction rule.

    Attributes:
        name: Identifier used in logs.
        pattern: Compiled regex searched against the text.
        select: Turns a match into the raw candidate.
        clean: Turns the raw candidate into the field value.
        accept: Validity predicate applied to the cleaned value.
    """
    name: str
    pattern: re.Pattern
    select: Callable[[re.Match], str] = first_group
    clean: Callable[[str], str] = str.strip
    accept: Callable[[str], bool] = bool


@dataclass
class PatternRuleSet:
    """
    Ordered rules per field for one source mode.

    ``invoice_number`` rules are only consulted after every ``order_id``
    rule failed. An empty list means the field has a dedicated resolver.
    """
    order_id: List[Rule] = field(default_factory=list)
    invoice_number: List[Rule] = field(default_factory=list)
    date: List[Rule] = field(default_factory=list)
    price: List[Rule] = field(default_factory=list)
    item_name: List[Rule] = field(default_factory=list)
    delivery_address: List[Rule] = field(default_factory=list)

    @property
    def order_identifier(self) -> List[Rule]:
        return self.order_id + self.invoice_number


# =============================================================================
# OCR RULES (normally spaced text)
# =============================================================================

_MONTHS = r'(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*'
_NUMERIC_DATE = r'\d{1,2}[-/]\d{1,2}[-/]\d{4}'

# End of a free-text value: line break, end of text, or the next label
_VALUE_END = (
    r'(?=\s*(?:\n|\Z|(?:Shipping|Billing|Sold\s+By|Qty|Quantity|HSN|SAC|Gross|'
    r'Total|IMEI|Warranty)\b|Name\s*:))'
)


def _item_value(bounds: str) -> str:
    # Stop at the next label when there is one, else take the whole window
    return rf'(?:[^\n]{{{bounds}}}?{_VALUE_END}|[^\n]{{{bounds}}})'


def _clean_item(value: str) -> str:
    return collapse_whitespace(value)[:200]


def _clean_address(value: str) -> str:
    return collapse_whitespace(value)[:300]


def _longer_than_ten(value: str) -> bool:
    return len(value) > 10


# Last address segment: up to a 6-digit pincode, else up to the next comma
_ADDRESS_TAIL = r'([^,\n]*?\b\d{6}\b|[^,\n]+)'

OCR_RULES = PatternRuleSet(
    order_id=[
        Rule("od_prefix", re.compile(r'OD\d{18,}', re.IGNORECASE),
             select=whole_match, accept=lambda value: len(value) >= 15),
        Rule("order_label", re.compile(
            r'Order\s*(?:ID|No|Number)[:\s]*([A-Z]{2}\d{18,})', re.IGNORECASE)),
        Rule("invoice_order_id", re.compile(
            r'Invoice.*?Order\s*Id[:\s]*([A-Z0-9]{15,})', re.IGNORECASE)),
    ],
    invoice_number=[
        Rule("invoice_number_label", re.compile(
            r'Invoice\s*(?:No|Number|#)[:\s]*([A-Z0-9]{10,})', re.IGNORECASE)),
        Rule("vendor_invoice_prefix", re.compile(r'FAXCR\d+', re.IGNORECASE),
             select=whole_match),
    ],
    date=[
        Rule("numeric_date", re.compile(rf'({_NUMERIC_DATE})')),
        Rule("invoice_date_label", re.compile(
            rf'Invoice\s*Date[:\s]*({_NUMERIC_DATE})', re.IGNORECASE)),
        Rule("month_name_date", re.compile(
            rf'(\d{{1,2}}\s+{_MONTHS}\s+\d{{4}})', re.IGNORECASE)),
    ],
    price=[
        Rule("total_price_label", re.compile(
            r'TOTAL\s*PRICE[:\s]*₹?\s*([\d,]+\.?\d*)', re.IGNORECASE),
             clean=format_price, accept=positive_amount),
        Rule("total_currency", re.compile(
            r'Total[:\s]*₹\s*([\d,]+\.?\d*)', re.IGNORECASE),
             clean=format_price, accept=positive_amount),
        Rule("currency_amount", re.compile(r'₹\s*([\d,]+\.\d{2})(?!\d)'),
             clean=format_price, accept=positive_amount),
        Rule("gross_value", re.compile(
            r'Gross\s*Value[:\s]*₹?\s*([\d,]+\.?\d*)', re.IGNORECASE),
             clean=format_price, accept=positive_amount),
    ],
    item_name=[
        Rule("description_label", re.compile(
            rf'Description[:\s]*({_item_value("10,150")})', re.IGNORECASE),
             clean=_clean_item, accept=_longer_than_ten),
        Rule("product_label", re.compile(
            rf'Product[:\s]*({_item_value("10,150")})', re.IGNORECASE),
             clean=_clean_item, accept=_longer_than_ten),
        Rule("brand_name", re.compile(
            rf'(?:Vonue|Voeux){_item_value("5,150")}', re.IGNORECASE),
             select=whole_match, clean=_clean_item, accept=_longer_than_ten),
    ],
    delivery_address=[
        Rule("customer_address", re.compile(
            r'Shipping\s*(?:/|\\)?\s*Customer\s*address[:\s]*Name[:\s]*'
            r'([^,]+),([^,]+),([^,]+)(?:,' + _ADDRESS_TAIL + r')?',
            re.IGNORECASE),
             select=join_groups(', '), clean=_clean_address),
        Rule("shipping_address", re.compile(
            r'Shipping\s*ADDRESS[:\s]*(?:Name[:\s]*)?'
            r'((?:[^\n]*?\b\d{6}\b)|[^\n]+(?:\n[^\n]+){0,3})',
            re.IGNORECASE),
             clean=_clean_address),
        Rule("name_segments", re.compile(
            r'Name[:\s]*([A-Za-z\s]+?)\s*,([^,]+),([^,]+),' + _ADDRESS_TAIL,
            re.IGNORECASE),
             select=join_groups(', '), clean=_clean_address),
    ],
)


# =============================================================================
# LAYOUT RULES (character-spaced PDF text)
# =============================================================================

def _layout_order_id(digits: str) -> str:
    return "OD" + strip_all_whitespace(digits)


def _layout_address(value: str) -> str:
    return strip_all_whitespace(value).replace(',', ', ').strip()[:200]


# Digits with interleaved whitespace/commas, then a two-digit decimal fraction
LAYOUT_AMOUNT = r'\d[\d\s,]*\.\s*\d\s*\d'

LAYOUT_PRICE_KEYWORDS = ["Total", "Gross", "GrandTotal", "Payable", "Amount", "Net"]

LAYOUT_RULES = PatternRuleSet(
    order_id=[
        Rule("spaced_od", re.compile(
            spaced("OD") + r'\s*((?:\d\s*){18,})', re.IGNORECASE),
             clean=_layout_order_id),
    ],
    date=[
        Rule("spaced_dashed_date", re.compile(
            r'(\d\s*\d?)\s*-\s*(\d\s*\d?)\s*-\s*(\d\s*\d\s*\d\s*\d)'),
             select=join_groups('-', strip_inner=True)),
    ],
    price=[
        Rule("spaced_price_keyword", re.compile(
            spaced_any(LAYOUT_PRICE_KEYWORDS) + r'.{0,100}?(' + LAYOUT_AMOUNT + ')',
            re.IGNORECASE | re.DOTALL),
             clean=format_price, accept=amount_between(10, 500000)),
    ],
    item_name=[
        Rule("spaced_brand", re.compile(
            r'V\s*o\s*[en]\s*u(?:\s*x)?[^|]{10,80}', re.IGNORECASE),
             select=whole_match, clean=strip_all_whitespace),
    ],
    delivery_address=[
        Rule("spaced_name_label", re.compile(
            spaced("Name:") + r'\s*(.{10,200}?)(?=\s*' + spaced("IN-") + r'|\Z)',
            re.IGNORECASE | re.DOTALL),
             clean=_layout_address),
    ],
)
