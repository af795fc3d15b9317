"""
Known gift card brands and their printed aliases.

Order matters: the first entry with a matching alias wins, so entries whose
aliases could collide with a broader brand must come first.
"""

from typing import Optional, Tuple

BRAND_ALIASES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    # Retail
    ('Target', ('TARGET', 'BULLSEYE')),
    ('Walmart', ('WALMART', 'WAL-MART', 'WAL MART')),
    ('Amazon', ('AMAZON', 'AMZN', 'AMAZON.COM')),
    ('Costco', ('COSTCO',)),
    ("Macy's", ("MACY'S", 'MACYS')),
    ('Best Buy', ('BEST BUY', 'BESTBUY')),
    ('Home Depot', ('THE HOME DEPOT', 'HOME DEPOT', 'HOMEDEPOT')),
    ('Lowes', ("LOWE'S", 'LOWES', 'LOWE S')),
    ('Nike', ('NIKE',)),
    ('Sephora', ('SEPHORA',)),
    ('Ulta', ('ULTA',)),
    ('CVS', ('CVS PHARMACY', 'CVS')),
    ('Walgreens', ('WALGREENS',)),
    # Dining
    ('Starbucks', ('STARBUCKS', 'SBUX')),
    ("McDonald's", ("MCDONALD'S", 'MCDONALDS')),
    ('Dunkin', ('DUNKIN DONUTS', "DUNKIN'", 'DUNKIN')),
    ('Subway', ('SUBWAY',)),
    ('Chipotle', ('CHIPOTLE',)),
    ('Panera', ('PANERA BREAD', 'PANERA')),
    ('Olive Garden', ('OLIVE GARDEN',)),
    # Payment networks
    ('Visa', ('VISA',)),
    ('Mastercard', ('MASTERCARD', 'MASTER CARD', 'MC')),
    ('American Express', ('AMERICAN EXPRESS', 'AMEX', 'AM EX')),
    # Tech and gaming
    ('Apple', ('APPLE STORE', 'APP STORE', 'ITUNES', 'APPLE')),
    ('Google Play', ('GOOGLE PLAY', 'PLAY STORE', 'GOOGLE')),
    ('GameStop', ('GAMESTOP', 'GAME STOP')),
    ('Steam', ('STEAM',)),
    ('Xbox', ('XBOX', 'MICROSOFT')),
    ('PlayStation', ('PLAYSTATION', 'PSN', 'SONY')),
    ('Roblox', ('ROBLOX',)),
    # Streaming and delivery
    ('Netflix', ('NETFLIX',)),
    ('Spotify', ('SPOTIFY',)),
    ('Uber', ('UBER EATS', 'UBER')),
    ('DoorDash', ('DOORDASH', 'DOOR DASH')),
    ('Grubhub', ('GRUBHUB', 'GRUB HUB')),
)

# A first line made only of these words is generic card copy, not a brand
STOP_WORDS = frozenset({'GIFT', 'CARD', 'VALUE', 'BALANCE', 'THE', 'FOR', 'A'})

MIN_GUESS_LENGTH = 3
MAX_GUESS_LENGTH = 24


def title_case_line(line: str) -> str:
    """
    Capitalize each word, lowercasing the rest ("JOE'S CAFE" -> "Joe's Cafe").

    str.title() would give "Joe'S", so words are handled one at a time.
    """
    return ' '.join(word[:1].upper() + word[1:].lower() for word in line.split())


def guess_brand_from_line(line: str) -> Optional[str]:
    """Best-guess brand from a header line when no known alias matched."""
    if not line:
        return None

    line = line.strip()
    if not MIN_GUESS_LENGTH <= len(line) <= MAX_GUESS_LENGTH:
        return None

    if not any(char.isalpha() for char in line):
        return None

    if all(word in STOP_WORDS for word in line.upper().split()):
        return None

    return title_case_line(line)
