"""
Card number validation and formatting.

Validation rejects the numbers OCR most often confuses with card numbers:
placeholder sequences (1111..., 1234...) and, for 16-digit numbers, anything
that fails the Luhn checksum. Gift cards of other lengths are not guaranteed
to satisfy Luhn, so only the pattern checks apply to them.
"""

import re

MIN_CARD_LENGTH = 13
MAX_CARD_LENGTH = 19
MASK_GROUP = '••••'

_NON_ALNUM_RE = re.compile(r'[^A-Za-z0-9]')
_DIGITS_RE = re.compile(r'[0-9]+')


def luhn_check(digits: str) -> bool:
    """
    Luhn checksum: double every second digit from the right, subtract 9 from
    doubled values above 9, and require the total to be divisible by 10.

    Examples:
        >>> luhn_check('4111111111111111')
        True
        >>> luhn_check('4111111111111112')
        False
    """
    if not digits or not _DIGITS_RE.fullmatch(digits):
        return False

    total = 0
    for index, char in enumerate(reversed(digits)):
        digit = int(char)
        if index % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def _is_repeated_digit(digits: str) -> bool:
    return len(set(digits)) == 1


def _is_sequential(digits: str) -> bool:
    # 9 -> 0 counts as a step, so 1234567890123456 is sequential
    return all((int(b) - int(a)) % 10 == 1 for a, b in zip(digits, digits[1:]))


def is_valid_card_number(number: str) -> bool:
    """
    Check whether a digit run looks like a real card number.

    Args:
        number: Digits only, no separators

    Returns:
        True if the run has a plausible length and is not a placeholder
    """
    if not number or not _DIGITS_RE.fullmatch(number):
        return False

    if not MIN_CARD_LENGTH <= len(number) <= MAX_CARD_LENGTH:
        return False

    if _is_repeated_digit(number) or _is_sequential(number):
        return False

    if len(number) == 16:
        return luhn_check(number)

    return True


def strip_card_number_formatting(value: str) -> str:
    """Remove separators for storage: keep uppercase alphanumerics only."""
    if not value:
        return ''
    return _NON_ALNUM_RE.sub('', value).upper()


def format_card_number(value: str) -> str:
    """
    Format a card number for display, one space every 4 characters.

    15-character numbers use the American Express 4-6-5 grouping.

    Examples:
        >>> format_card_number('4111111111111111')
        '4111 1111 1111 1111'
        >>> format_card_number('378282246310005')
        '3782 822463 10005'
    """
    cleaned = strip_card_number_formatting(value)
    if not cleaned:
        return ''

    if len(cleaned) == 15:
        return f"{cleaned[:4]} {cleaned[4:10]} {cleaned[10:]}"

    return ' '.join(cleaned[i:i + 4] for i in range(0, len(cleaned), 4))


def mask_card_number(value: str) -> str:
    """
    Mask all but the last 4 characters for previews.

    Examples:
        >>> mask_card_number('4111 1111 1111 1234')
        '•••• •••• •••• 1234'
    """
    cleaned = strip_card_number_formatting(value)
    if not cleaned:
        return ''

    group_count = (len(cleaned) + 3) // 4
    return ' '.join([MASK_GROUP] * (group_count - 1) + [cleaned[-4:]])
