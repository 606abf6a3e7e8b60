"""
Field Extractor Module.

Generic trial algorithm shared by every field: rules are tried in priority
order and the first rule whose cleaned candidate passes its validity
predicate wins. Later rules are only consulted when every earlier rule
either did not match or produced an inadmissible candidate.

Author: ML Engineering Team
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional, Sequence, TypeVar

from invoice_extraction.utils.logger import get_logger
from .patterns import Rule

logger = get_logger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class FieldMatch:
    """
    An accepted field candidate.

    Attributes:
        value: Cleaned value written into the record.
        raw: Candidate as selected from the match, before cleaning.
        rule: Name of the rule that produced it.
    """
    value: str
    raw: str
    rule: str


def first_accepted(
    candidates: Iterable[Optional[T]],
    accept: Callable[[T], bool] = lambda candidate: True
) -> Optional[T]:
    """
    Return the first candidate that is present and accepted.

    Candidates are consumed lazily, so a generator of trials stops being
    evaluated at the first success.

    Args:
        candidates: Candidates in priority order; None entries are skipped.
        accept: Predicate a candidate must satisfy.

    Returns:
        The first accepted candidate, or None.

    Example:
        >>> first_accepted([None, 3, 12, 40], lambda n: n > 10)
        12
    """
    for candidate in candidates:
        if candidate is not None and accept(candidate):
            return candidate
    return None


class FieldExtractor:
    """
    Rule-driven extractor for a single field.

    Example:
        >>> extractor = FieldExtractor()
        >>> match = extractor.extract(text, OCR_RULES.date, "date")
        >>> match.value if match else None
        '12-01-2026'
    """

    def trial(self, text: str, rule: Rule, field_name: str = "field") -> Optional[FieldMatch]:
        """
        Apply one rule to the text.

        Returns:
            FieldMatch when the rule matches and its candidate is valid,
            otherwise None.
        """
        match = rule.pattern.search(text)
        if match is None:
            logger.debug(f"{field_name}: rule '{rule.name}' did not match")
            return None

        raw = rule.select(match)
        value = rule.clean(raw)
        if not value or not rule.accept(value):
            logger.debug(f"{field_name}: rule '{rule.name}' rejected '{value}'")
            return None

        logger.debug(f"{field_name}: rule '{rule.name}' accepted '{value}'")
        return FieldMatch(value=value, raw=raw, rule=rule.name)

    def trials(self, text: str, rules: Sequence[Rule], field_name: str = "field") -> Iterator[Optional[FieldMatch]]:
        for rule in rules:
            yield self.trial(text, rule, field_name)

    def extract(self, text: str, rules: Sequence[Rule], field_name: str = "field") -> Optional[FieldMatch]:
        """
        Extract a field using the first admissible rule.

        Args:
            text: Normalized source text.
            rules: Rules in priority order.
            field_name: Field name for log messages.

        Returns:
            The winning FieldMatch, or None when no rule validated.
        """
        return first_accepted(self.trials(text, rules, field_name))
