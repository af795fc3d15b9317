"""
Expiration date normalization.

Gift cards print month-granular expiry dates ("12/25", "DECEMBER 2025").
A card is good through the end of that month, so every normalized date is
the last calendar day of its month.
"""

import calendar
from datetime import date
from typing import Optional, Union

MONTH_NAMES = {
    'JAN': 1, 'JANUARY': 1,
    'FEB': 2, 'FEBRUARY': 2,
    'MAR': 3, 'MARCH': 3,
    'APR': 4, 'APRIL': 4,
    'MAY': 5,
    'JUN': 6, 'JUNE': 6,
    'JUL': 7, 'JULY': 7,
    'AUG': 8, 'AUGUST': 8,
    'SEP': 9, 'SEPT': 9, 'SEPTEMBER': 9,
    'OCT': 10, 'OCTOBER': 10,
    'NOV': 11, 'NOVEMBER': 11,
    'DEC': 12, 'DECEMBER': 12,
}

# Longest names first so regex alternation never stops at a prefix
MONTH_NAME_PATTERN = '|'.join(sorted(MONTH_NAMES, key=len, reverse=True))


def expand_year(year: int) -> int:
    """Two-digit years below 50 are 20YY, the rest 19YY."""
    if year < 100:
        return year + 2000 if year < 50 else year + 1900
    return year


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def parse_expiry(
    month: Union[int, str],
    year: Union[int, str],
    min_year: int = 2024,
    max_year: int = 2040
) -> Optional[str]:
    """
    Normalize a month/year pair to the last day of that month.

    Args:
        month: Month number (1-12) or a month name such as "JAN"
        year: Two- or four-digit year
        min_year: Earliest accepted year (inclusive)
        max_year: Latest accepted year (inclusive)

    Returns:
        Date in YYYY-MM-DD format or None if out of range

    Examples:
        >>> parse_expiry('12', '25')
        '2025-12-31'
        >>> parse_expiry(2, 2028)
        '2028-02-29'
        >>> parse_expiry('13', '25') is None
        True
    """
    try:
        if isinstance(month, str) and not month.strip().isdigit():
            month_num = MONTH_NAMES.get(month.strip().upper().rstrip('.'))
            if month_num is None:
                return None
        else:
            month_num = int(month)
        year_num = expand_year(int(year))
    except (TypeError, ValueError):
        return None

    if not 1 <= month_num <= 12:
        return None

    if not min_year <= year_num <= max_year:
        return None

    day = last_day_of_month(year_num, month_num)
    return date(year_num, month_num, day).isoformat()
