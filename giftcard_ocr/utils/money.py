"""
Money parsing utilities for gift card balances.

Handles the formats printed on US gift cards and their receipts:
- Plain: 25, 25.5, 25.00
- Grouped thousands: 1,000.00
- Currency decorations: $25.00, 25.00 USD
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional
import re

MONEY_Q = Decimal("0.01")


def parse_money(amount_str: str) -> Optional[Decimal]:
    """
    Parse a money string into a Decimal.

    Args:
        amount_str: String containing amount (e.g., "$1,234.56", "25.00 USD")

    Returns:
        Decimal amount or None if parsing fails

    Examples:
        >>> parse_money("$1,234.56")
        Decimal('1234.56')
        >>> parse_money("25 USD")
        Decimal('25')
        >>> parse_money("-5.00") is None
        True
    """
    if not amount_str or not isinstance(amount_str, str):
        return None

    cleaned = amount_str.strip()

    # Balances are never negative
    if cleaned.startswith('-') or (cleaned.startswith('(') and cleaned.endswith(')')):
        return None

    # Strip currency symbols and codes
    cleaned = re.sub(r'\$\s*|USD|DOLLARS?', '', cleaned, flags=re.IGNORECASE)
    cleaned = cleaned.replace(',', '').replace(' ', '')

    if not cleaned:
        return None

    try:
        result = Decimal(cleaned)
    except (InvalidOperation, ValueError):
        return None

    if not result.is_finite():
        return None

    return result


def in_range(amount: Optional[Decimal], minimum: Decimal, maximum: Decimal) -> bool:
    """True when amount lies in the inclusive window [minimum, maximum]."""
    if amount is None:
        return False
    return minimum <= amount <= maximum


def format_balance(amount: Decimal) -> str:
    """
    Format a Decimal with exactly two fraction digits.

    Examples:
        >>> format_balance(Decimal('25'))
        '25.00'
        >>> format_balance(Decimal('10.5'))
        '10.50'
    """
    return str(amount.quantize(MONEY_Q, rounding=ROUND_HALF_UP))
