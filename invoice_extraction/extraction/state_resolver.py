"""
Address State Resolver.

Resolves the delivery state from the raw address context and the full
document text. Steps, first success wins:

1. state-name lexicon against the address context
2. city -> state lexicon against the address context
3. state-name lexicon against the whole document

Lexicon order is significant: entries are tried in the order listed, most
frequent destinations first. OCR and layout text use separate lexicons.
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence, Tuple

from invoice_extraction.utils.logger import get_logger
from .field_extractor import first_accepted
from .patterns import spaced

logger = get_logger(__name__)


@dataclass(frozen=True)
class StateLexicon:
    """
    Ordered mapping from recognizable tokens to canonical state names.

    Used both for state names and for the city -> state fallback.

    Attributes:
        entries: (compiled pattern, canonical state) pairs in priority order.
    """
    entries: Tuple[Tuple[re.Pattern, str], ...]

    @classmethod
    def from_words(cls, mapping: Sequence[Tuple[Sequence[str], str]]) -> 'StateLexicon':
        """
        Build a lexicon for normally spaced text.

        Tokens match on word boundaries, with any whitespace between words.
        """
        entries = []
        for tokens, canonical in mapping:
            alternatives = '|'.join(r'\s+'.join(map(re.escape, token.split())) for token in tokens)
            entries.append((re.compile(rf'\b(?:{alternatives})\b', re.IGNORECASE), canonical))
        return cls(tuple(entries))

    @classmethod
    def from_spaced(cls, mapping: Sequence[Tuple[Sequence[str], str]]) -> 'StateLexicon':
        """Build a lexicon tolerant of whitespace between every character."""
        entries = []
        for tokens, canonical in mapping:
            alternatives = '|'.join(spaced(token) for token in tokens)
            entries.append((re.compile(f'(?:{alternatives})', re.IGNORECASE), canonical))
        return cls(tuple(entries))

    def matches(self, text: str) -> Iterator[Tuple[str, str]]:
        """Yield (matched text, canonical state) for each entry found in text."""
        if not text:
            return
        for pattern, canonical in self.entries:
            match = pattern.search(text)
            if match:
                yield match.group(0), canonical


def _no_digits(matched: str) -> bool:
    return len(matched.strip()) >= 3 and not any(ch.isdigit() for ch in matched)


class AddressStateResolver:
    """
    Three-step state resolver.

    Args:
        states: State-name lexicon.
        cities: City -> state lexicon (address context only).
        accept: Predicate on the matched text.

    Example:
        >>> resolver = AddressStateResolver(OCR_STATES, OCR_CITIES)
        >>> resolver.resolve("John Doe, Hojai, 782435", full_text)
        'Assam'
    """

    def __init__(
        self,
        states: StateLexicon,
        cities: StateLexicon,
        accept: Callable[[str], bool] = lambda matched: True
    ) -> None:
        self.states = states
        self.cities = cities
        self.accept = accept

    def candidates(self, address_context: str, full_text: str) -> Iterator[Tuple[str, str]]:
        yield from self.states.matches(address_context)
        yield from self.cities.matches(address_context)
        yield from self.states.matches(full_text)

    def resolve(self, address_context: Optional[str], full_text: str) -> Optional[str]:
        """
        Resolve the canonical delivery state.

        Args:
            address_context: Raw address substring (may be empty).
            full_text: The whole source text.

        Returns:
            Canonical state name, or None.
        """
        found = first_accepted(
            self.candidates(address_context or "", full_text),
            lambda candidate: self.accept(candidate[0])
        )
        if found is None:
            logger.debug("state: no lexicon entry matched")
            return None

        logger.debug(f"state: '{found[0]}' resolved to '{found[1]}'")
        return found[1]


# =============================================================================
# LEXICONS
# =============================================================================

OCR_STATES = StateLexicon.from_words([
    (["Assam"], "Assam"),
    (["West Bengal"], "West Bengal"),
    (["Maharashtra"], "Maharashtra"),
    (["Karnataka"], "Karnataka"),
    (["Tamil Nadu"], "Tamil Nadu"),
    (["Gujarat"], "Gujarat"),
    (["Delhi"], "Delhi"),
    (["Bihar"], "Bihar"),
    (["Uttar Pradesh"], "Uttar Pradesh"),
    (["Rajasthan"], "Rajasthan"),
    (["Madhya Pradesh"], "Madhya Pradesh"),
    (["Andhra Pradesh"], "Andhra Pradesh"),
    (["Telangana"], "Telangana"),
    (["Kerala"], "Kerala"),
    (["Odisha"], "Odisha"),
    (["Punjab"], "Punjab"),
    (["Haryana"], "Haryana"),
    (["Jharkhand"], "Jharkhand"),
    (["Chhattisgarh"], "Chhattisgarh"),
    (["Uttarakhand"], "Uttarakhand"),
    (["Himachal Pradesh"], "Himachal Pradesh"),
    (["Goa"], "Goa"),
    (["Jammu and Kashmir"], "Jammu and Kashmir"),
])

OCR_CITIES = StateLexicon.from_words([
    (["Hojai", "Guwahati"], "Assam"),
    (["Kolkata", "Calcutta"], "West Bengal"),
    (["Mumbai", "Pune"], "Maharashtra"),
    (["Bengaluru", "Bangalore"], "Karnataka"),
    (["Chennai"], "Tamil Nadu"),
    (["Ahmedabad"], "Gujarat"),
    (["New Delhi"], "Delhi"),
    (["Patna"], "Bihar"),
    (["Lucknow"], "Uttar Pradesh"),
    (["Hyderabad"], "Telangana"),
])

LAYOUT_STATES = StateLexicon.from_spaced([
    (["Assam"], "Assam"),
    (["West Bengal"], "WestBengal"),
    (["Maharashtra"], "Maharashtra"),
    (["Karnataka"], "Karnataka"),
    (["Tamil Nadu"], "TamilNadu"),
    (["Gujarat"], "Gujarat"),
    (["Delhi"], "Delhi"),
    (["Bihar"], "Bihar"),
    (["Uttar Pradesh"], "UttarPradesh"),
])

LAYOUT_CITIES = StateLexicon.from_spaced([
    (["Hojai"], "Assam"),
    (["Kolkata", "Calcutta"], "WestBengal"),
    (["Mumbai", "Pune"], "Maharashtra"),
])


def ocr_state_resolver() -> AddressStateResolver:
    """Resolver for normally spaced OCR text (rejects digit-bearing matches)."""
    return AddressStateResolver(OCR_STATES, OCR_CITIES, accept=_no_digits)


def layout_state_resolver() -> AddressStateResolver:
    """Resolver for character-spaced layout text."""
    return AddressStateResolver(LAYOUT_STATES, LAYOUT_CITIES)
