"""
Candidate dataclasses for extraction passes.

Each candidate is a potential extracted value with the metadata needed to
explain where it came from (pattern, span, line).
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Any

# Card-number context keywords, matched as substrings of the context window
CARD_NUMBER_INDICATORS = (
    'CARD', 'NUMBER', 'ACCOUNT', '#', 'NUM', 'NO', 'NBR',
    'GIFT', 'REDEMPTION', 'CODE', 'ID',
)
CARD_NUMBER_EXCLUSIONS = (
    'CUSTOMER', 'SERVICE', 'PHONE', 'CALL', 'VISIT', 'WWW',
    'HTTP', 'TERMS', 'CONDITIONS', 'HELP', 'SUPPORT', 'BALANCE',
    'PRICE', 'COST', 'PURCHASE', 'INVOICE', 'RECEIPT', 'ORDER',
    'DATE', 'TIME', 'YEAR', 'MONTH', 'DAY', 'EXPIRES', 'VALID',
)
# Subset of exclusions that marks phone numbers and support lines
CONTACT_INDICATORS = (
    'CUSTOMER', 'SERVICE', 'PHONE', 'CALL', 'VISIT', 'WWW',
    'HTTP', 'HELP', 'SUPPORT',
)


@dataclass
class Candidate:
    """Base class for extraction candidates."""
    value: Any
    pattern_name: str
    match_span: tuple[int, int]  # (start, end) within the searched text
    raw_text: str = ""  # Original matched text


@dataclass
class CardNumberCandidate(Candidate):
    """
    Candidate for an extracted card number.

    Context flags:
    - has_indicator: context names a card/account number
    - has_exclusion: context looks like a phone line, receipt, date, etc.
    - has_contact_context: context is a phone/support line
    """
    value: str  # Digits only
    line_position: Optional[int] = None
    has_indicator: bool = False
    has_exclusion: bool = False
    has_contact_context: bool = False


@dataclass
class DateCandidate(Candidate):
    """Candidate for an expiration date, value in YYYY-MM-DD."""
    value: str
    line_position: Optional[int] = None


@dataclass
class AmountCandidate(Candidate):
    """Candidate for a balance amount."""
    value: Decimal


def create_card_number_candidate(
    value: str,
    pattern_name: str,
    match_span: tuple[int, int],
    raw_text: str,
    context: str,
    line_position: Optional[int] = None
) -> CardNumberCandidate:
    """
    Create CardNumberCandidate with context flags computed from the window.

    Args:
        value: Digit run without separators
        pattern_name: Name of the pass/pattern that matched
        match_span: Character span of match
        raw_text: Original matched text
        context: Uppercase text surrounding the match
        line_position: Line index when the pass is line-based

    Returns:
        CardNumberCandidate with computed flags
    """
    return CardNumberCandidate(
        value=value,
        pattern_name=pattern_name,
        match_span=match_span,
        raw_text=raw_text,
        line_position=line_position,
        has_indicator=any(kw in context for kw in CARD_NUMBER_INDICATORS),
        has_exclusion=any(kw in context for kw in CARD_NUMBER_EXCLUSIONS),
        has_contact_context=any(kw in context for kw in CONTACT_INDICATORS),
    )
