"""
Confidence scoring for parsed gift card text.

The score is additive and advisory: it reflects how much gift-card-shaped
evidence the OCR text contains, not whether the extracted values are correct.
It never gates a field.
"""

from typing import Dict, List, Optional
import re

__all__ = ['CONFIDENCE_WEIGHTS', 'confidence_signals', 'score_confidence']

CONFIDENCE_WEIGHTS = {
    'gift_card_keyword': 20,  # GIFT, CARD, VALUE, BALANCE, REDEEM
    'long_digit_run': 30,     # 13-19 digits, separators allowed
    'dollar_amount': 20,      # $25, $ 25.00
    'date_like': 15,          # MM/YY or MM/YYYY
    'first_line': 15,         # A header line longer than 2 chars
}

GIFT_CARD_KEYWORDS = ('GIFT', 'CARD', 'VALUE', 'BALANCE', 'REDEEM')

_LONG_DIGIT_RUN_RE = re.compile(r'[0-9](?:[ \t\-]*[0-9]){12,18}')
_DOLLAR_AMOUNT_RE = re.compile(r'\$\s*[0-9]')
_DATE_LIKE_RE = re.compile(r'(?<![0-9])[0-9]{1,2}/(?:[0-9]{4}|[0-9]{2})(?![0-9])')


def confidence_signals(text: str, lines: List[str]) -> Dict[str, bool]:
    """
    Detect which evidence signals are present.

    Args:
        text: Normalized (uppercase) text
        lines: Normalized line sequence

    Returns:
        Mapping of signal name to presence
    """
    return {
        'gift_card_keyword': any(kw in text for kw in GIFT_CARD_KEYWORDS),
        'long_digit_run': _LONG_DIGIT_RUN_RE.search(text) is not None,
        'dollar_amount': _DOLLAR_AMOUNT_RE.search(text) is not None,
        'date_like': _DATE_LIKE_RE.search(text) is not None,
        'first_line': bool(lines) and len(lines[0]) > 2,
    }


def score_confidence(
    text: str,
    lines: List[str],
    _breakdown: Optional[Dict[str, int]] = None
) -> int:
    """
    Score parsed text from 0 to 100.

    Args:
        text: Normalized (uppercase) text
        lines: Normalized line sequence
        _breakdown: Optional dict that receives the points per present signal

    Returns:
        Integer score clamped to [0, 100]
    """
    score = 0
    for signal, present in confidence_signals(text, lines).items():
        if present:
            points = CONFIDENCE_WEIGHTS[signal]
            score += points
            if _breakdown is not None:
                _breakdown[signal] = points

    return max(0, min(100, score))
