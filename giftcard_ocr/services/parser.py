"""
Gift card parser service for extracting structured data from OCR text.
"""

import re
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Dict, Any, List, Tuple

from giftcard_ocr.config import Settings, settings as default_settings
from giftcard_ocr.models.result import ParsedResult
from giftcard_ocr.utils.brands import BRAND_ALIASES, guess_brand_from_line
from giftcard_ocr.utils.candidates import (
    AmountCandidate,
    CardNumberCandidate,
    Candidate,
    DateCandidate,
    CARD_NUMBER_INDICATORS,
    CARD_NUMBER_EXCLUSIONS,
    create_card_number_candidate,
)
from giftcard_ocr.utils.card_numbers import format_card_number, is_valid_card_number
from giftcard_ocr.utils.dates import MONTH_NAME_PATTERN, parse_expiry
from giftcard_ocr.utils.money import parse_money, in_range, format_balance
from giftcard_ocr.utils.scoring import score_confidence

logger = logging.getLogger(__name__)

_SEPARATOR_RE = re.compile(r'[\s\-]')


@dataclass(frozen=True)
class PatternSpec:
    """A named regex pattern with example and notes for documentation."""
    name: str
    pattern: str
    example: str
    notes: Optional[str] = None
    flags: int = re.IGNORECASE | re.ASCII
    compiled: re.Pattern = field(default=None, init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'compiled', re.compile(self.pattern, self.flags))


def normalize_text(text: str, lines: Optional[List[str]] = None) -> Tuple[str, List[str]]:
    """
    Uppercase OCR text and split it into trimmed, non-empty lines.

    Args:
        text: Full OCR transcript
        lines: Optional line fragments from the recognizer; when absent the
            lines are derived from text

    Returns:
        (normalized_text, lines)
    """
    if not text or not isinstance(text, str):
        text = ''

    normalized = text.upper()
    fragments = lines if lines else [normalized]

    result = []
    for fragment in fragments:
        if not isinstance(fragment, str):
            continue
        for line in fragment.upper().splitlines():
            line = line.strip()
            if line:
                result.append(line)

    return normalized, result


def _context_window(lines: List[str], index: int) -> str:
    """Previous, current and next line joined with spaces."""
    prev_line = lines[index - 1] if index > 0 else ''
    next_line = lines[index + 1] if index < len(lines) - 1 else ''
    return f"{prev_line} {lines[index]} {next_line}"


def _line_window_at(text: str, offset: int) -> Tuple[int, str]:
    """
    Locate the line holding a character offset.

    Returns:
        (index among non-empty lines, previous/current/next non-empty line
        joined with spaces)
    """
    line_start = text.rfind('\n', 0, offset) + 1
    line_end = text.find('\n', offset)
    if line_end == -1:
        line_end = len(text)

    before = [line.strip() for line in text[:line_start].split('\n') if line.strip()]
    after = [line.strip() for line in text[line_end:].split('\n') if line.strip()]
    prev_line = before[-1] if before else ''
    next_line = after[0] if after else ''
    return len(before), f"{prev_line} {text[line_start:line_end].strip()} {next_line}"


def _has_card_context(context: str) -> bool:
    return (
        any(kw in context for kw in CARD_NUMBER_INDICATORS)
        and not any(kw in context for kw in CARD_NUMBER_EXCLUSIONS)
    )


def _record_match(_debug: Optional[Dict[str, Any]], field_name: str, candidate: Candidate) -> None:
    """Record provenance of a winning candidate in debug metadata."""
    if _debug is None:
        return
    _debug.setdefault('patterns_matched', {})[field_name] = candidate.pattern_name
    _debug.setdefault('match_spans', {})[field_name] = candidate.match_span


class GiftCardParser:
    """Service for parsing gift card OCR text into structured fields."""

    # Characters inspected either side of a digit run in the contextual pass
    CONTEXT_RADIUS = 50

    # Lines near these words are searched for an expiration date
    EXPIRATION_KEYWORDS = (
        'EXP', 'EXPIRES', 'EXPIRATION', 'EXPIRY', 'VALID', 'GOOD',
        'THRU', 'THROUGH', 'UNTIL', 'TILL', 'USE BY',
    )

    # Brand search scope: the brand is usually printed at the top
    BRAND_TOP_LINES = 5

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize parser with regex patterns and range settings."""
        self.settings = settings or default_settings
        self._init_patterns()

    def _init_patterns(self):
        """Initialize regex patterns for parsing."""

        # Card numbers on labeled lines, searched with separators removed.
        # Priority order: 19, 16, 15, 13-14 digits.
        self.labeled_card_patterns = [
            PatternSpec(
                name='labeled_19',
                pattern=r'(?<!\d)(\d{19})(?!\d)',
                example='CARD # 6006 4912 3456 7890 123',
            ),
            PatternSpec(
                name='labeled_16',
                pattern=r'(?<!\d)(\d{16})(?!\d)',
                example='CARD NUMBER: 4111 1111 1111 1111',
            ),
            PatternSpec(
                name='labeled_15',
                pattern=r'(?<!\d)(\d{15})(?!\d)',
                example='ACCOUNT 3782 822463 10005',
                notes='American Express style',
            ),
            PatternSpec(
                name='labeled_13_14',
                pattern=r'(?<!\d)(\d{13,14})(?!\d)',
                example='GIFT CARD NO 4222222222222',
            ),
        ]

        # Maximal digit runs; spaces, tabs and hyphens may separate digit
        # groups but a run never crosses a line break
        self.card_run_pattern = PatternSpec(
            name='digit_run',
            pattern=r'\d(?:[ \t\-]*\d)*',
            example='4111 - 1111 - 1111 - 1111',
            notes='Callers check the digit count; runs longer than 19 digits are never cut down',
        )

        # Balance patterns (first in-range match wins)
        amount = r'(\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)(?!\d)'
        self.balance_patterns = [
            PatternSpec(
                name='keyword_amount',
                pattern=r'(?:BALANCE|VALUE|AMOUNT|WORTH)[:\s]*\$?\s*' + amount,
                example='BALANCE: $50.00',
            ),
            PatternSpec(
                name='dollar_amount_suffix',
                pattern=r'\$\s*' + amount + r'\s*(?:BALANCE|VALUE|REMAINING|USD|DOLLARS?)',
                example='$50 REMAINING',
            ),
            PatternSpec(
                name='amount_currency',
                pattern=r'(?<![\d.,])(\d+\.\d{2})\s*(?:USD|DOLLARS?)',
                example='50.00 USD',
            ),
        ]

        # Expiration patterns. Every pattern captures (month, year).
        keyword = r'(?:EXPIRATION|EXPIRES|EXPIRY|EXPIRE|EXP|VALID|GOOD|THRU|THROUGH|UNTIL|TILL|USE\s+BY)\.?'
        month_year = r'(\d{1,2})[/\-](\d{4}|\d{2})(?![/\-]?\d)'
        self.anchored_date_patterns = [
            PatternSpec(
                name='keyword_numeric',
                pattern=keyword + r'[:\s]*' + month_year,
                example='EXP 12/25',
            ),
            PatternSpec(
                name='valid_thru_numeric',
                pattern=r'(?:VALID|GOOD)\s+(?:THRU|THROUGH|UNTIL)[:\s]*' + month_year,
                example='VALID THRU 12/2025',
            ),
            PatternSpec(
                name='bare_numeric',
                pattern=r'(?<![\d/\-])(0?[1-9]|1[0-2])[/\-](\d{4}|\d{2})(?![/\-]?\d)',
                example='12/25',
                notes='Anywhere in a keyword window; full MM/DD/YYYY dates excluded',
            ),
            PatternSpec(
                name='keyword_month_name',
                pattern=keyword + r'[:\s]*(' + MONTH_NAME_PATTERN + r')\.?[,\s]*(\d{4})(?!\d)',
                example='EXPIRES DECEMBER 2025',
            ),
            PatternSpec(
                name='keyword_full_date',
                pattern=keyword + r'[:\s]*(\d{1,2})[/\-]\d{1,2}[/\-](\d{4}|\d{2})(?!\d)',
                example='EXPIRES 12/15/2027',
                notes='Day is dropped, card is good through month end',
            ),
        ]

        self.unanchored_date_pattern = PatternSpec(
            name='unanchored_future',
            pattern=(
                r'(?<![\d/\-])(0?[1-9]|1[0-2])[/\-]'
                r'(20(?:2[5-9]|[34]\d)|2[5-9]|[34]\d)(?![/\-]?\d)'
            ),
            example='06/27',
            notes='Only accepted when the date is still in the future',
        )

        # PIN patterns (first match wins)
        self.pin_patterns = [
            PatternSpec(
                name='pin',
                pattern=r'(?<![A-Z])PIN[:\s#]*(\d{4,8})(?!\d)',
                example='PIN: 1234',
            ),
            PatternSpec(
                name='access_code',
                pattern=r'(?<![A-Z])ACCESS[:\s]*(?:CODE|NUMBER)[:\s#]*(\d{4,8})(?!\d)',
                example='ACCESS CODE: 123456',
            ),
            PatternSpec(
                name='security_code',
                pattern=r'(?<![A-Z])SECURITY[:\s]*CODE[:\s#]*(\d{4,8})(?!\d)',
                example='SECURITY CODE 9876',
            ),
            PatternSpec(
                name='cvv',
                pattern=r'(?<![A-Z])CVV[:\s]*(\d{3,4})(?!\d)',
                example='CVV: 123',
            ),
        ]

        # Brand aliases match as whole words, any whitespace between words
        self.brand_patterns = []
        for brand, aliases in BRAND_ALIASES:
            alternatives = '|'.join(
                r'\s+'.join(re.escape(part) for part in alias.split())
                for alias in aliases
            )
            self.brand_patterns.append(
                (brand, re.compile(r'(?<![A-Z0-9])(?:' + alternatives + r')(?![A-Z0-9])'))
            )

    def parse(
        self,
        text: str,
        lines: Optional[List[str]] = None,
        today: Optional[date] = None,
        _debug: Optional[Dict[str, Any]] = None
    ) -> ParsedResult:
        """
        Parse gift card text and extract all available fields.

        Args:
            text: OCR-extracted text from the card
            lines: Optional line fragments if the recognizer provides them
            today: Reference date for the unanchored expiration pass
            _debug: Optional dict that receives match provenance

        Returns:
            ParsedResult; fields that could not be found are None
        """
        if not text or not isinstance(text, str):
            return ParsedResult()

        normalized, norm_lines = normalize_text(text, lines)

        breakdown: Dict[str, int] = {}
        result = ParsedResult(
            card_number=self.extract_card_number(normalized, norm_lines, _debug=_debug),
            balance=self.extract_balance(normalized, _debug=_debug),
            expiration_date=self.extract_expiration_date(
                normalized, norm_lines, today=today, _debug=_debug
            ),
            brand=self.extract_brand(normalized, norm_lines, _debug=_debug),
            pin=self.extract_pin(normalized, _debug=_debug),
            confidence=score_confidence(normalized, norm_lines, _breakdown=breakdown),
        )

        if _debug is not None:
            _debug['confidence_breakdown'] = breakdown
            _debug['line_count'] = len(norm_lines)

        logger.debug("Parsed gift card text", extra={
            "fields_found": result.found_fields(),
            "confidence": result.confidence,
        })

        return result

    def extract_card_number(self, text: str, lines: List[str], _debug=None) -> Optional[str]:
        """
        Extract the gift card / account number.

        Passes, first success wins:
        1. Labeled lines (card keyword nearby, no exclusion keyword)
        2. Any 13-19 digit run with a good ±50 character window
        3. The only 16-digit run in the text, unless it sits on a phone line

        Args:
            text: Normalized text
            lines: Normalized lines

        Returns:
            Formatted card number or None
        """
        try:
            attempts = (
                self._find_labeled_card_number,
                self._find_contextual_card_number,
                self._find_single_card_number,
            )
            for attempt in attempts:
                candidate = attempt(text, lines)
                if candidate:
                    logger.debug("Card number matched by %s", candidate.pattern_name)
                    _record_match(_debug, 'card_number', candidate)
                    return format_card_number(candidate.value)

            return None

        except (re.error, ValueError, AttributeError):
            logger.warning("Error extracting card number", exc_info=True)
            return None

    def _find_labeled_card_number(self, text: str, lines: List[str]) -> Optional[CardNumberCandidate]:
        for index, line in enumerate(lines):
            context = _context_window(lines, index)
            if not _has_card_context(context):
                continue

            cleaned = _SEPARATOR_RE.sub('', line)
            for spec in self.labeled_card_patterns:
                for match in spec.compiled.finditer(cleaned):
                    digits = match.group(1)
                    if is_valid_card_number(digits):
                        return create_card_number_candidate(
                            value=digits,
                            pattern_name=spec.name,
                            match_span=match.span(1),
                            raw_text=line,
                            context=context,
                            line_position=index,
                        )
        return None

    def _find_contextual_card_number(self, text: str, lines: List[str]) -> Optional[CardNumberCandidate]:
        for match in self.card_run_pattern.compiled.finditer(text):
            start, end = match.span()
            window = text[max(0, start - self.CONTEXT_RADIUS):end + self.CONTEXT_RADIUS]
            digits = _SEPARATOR_RE.sub('', match.group(0))

            candidate = create_card_number_candidate(
                value=digits,
                pattern_name='contextual_window',
                match_span=(start, end),
                raw_text=match.group(0),
                context=window,
            )
            if candidate.has_indicator and not candidate.has_exclusion and is_valid_card_number(digits):
                return candidate
        return None

    def _find_single_card_number(self, text: str, lines: List[str]) -> Optional[CardNumberCandidate]:
        runs = [
            match for match in self.card_run_pattern.compiled.finditer(text)
            if len(_SEPARATOR_RE.sub('', match.group(0))) == 16
        ]
        if len(runs) != 1:
            return None

        match = runs[0]
        start, end = match.span()
        line_position, context = _line_window_at(text, start)

        candidate = create_card_number_candidate(
            value=_SEPARATOR_RE.sub('', match.group(0)),
            pattern_name='single_sixteen_digit',
            match_span=(start, end),
            raw_text=match.group(0),
            context=context,
            line_position=line_position,
        )
        if candidate.has_contact_context or not is_valid_card_number(candidate.value):
            return None
        return candidate

    def extract_balance(self, text: str, _debug=None) -> Optional[str]:
        """
        Extract the card balance/value.

        Args:
            text: Normalized text

        Returns:
            Balance with two decimals (e.g. "25.00") or None
        """
        try:
            for spec in self.balance_patterns:
                for match in spec.compiled.finditer(text):
                    amount = parse_money(match.group(1))
                    if not in_range(amount, self.settings.MIN_BALANCE, self.settings.MAX_BALANCE):
                        continue

                    candidate = AmountCandidate(
                        value=amount,
                        pattern_name=spec.name,
                        match_span=match.span(1),
                        raw_text=match.group(0),
                    )
                    _record_match(_debug, 'balance', candidate)
                    return format_balance(candidate.value)

            return None

        except (re.error, ValueError, AttributeError):
            logger.warning("Error extracting balance", exc_info=True)
            return None

    def _parse_expiry(self, month: str, year: str) -> Optional[str]:
        return parse_expiry(
            month,
            year,
            min_year=self.settings.MIN_EXPIRY_YEAR,
            max_year=self.settings.MAX_EXPIRY_YEAR,
        )

    def extract_expiration_date(
        self,
        text: str,
        lines: List[str],
        today: Optional[date] = None,
        _debug=None
    ) -> Optional[str]:
        """
        Extract the expiration date, normalized to the last day of the month.

        Keyword-anchored lines are tried first. Without any, the whole text is
        scanned for a future MM/YY or MM/YYYY.

        Args:
            text: Normalized text
            lines: Normalized lines
            today: Reference date for the unanchored pass (defaults to today)

        Returns:
            Date in YYYY-MM-DD format or None
        """
        try:
            if isinstance(today, datetime):
                today = today.date()

            candidate = self._find_anchored_date(lines)
            if candidate is None:
                candidate = self._find_unanchored_date(text, today or date.today())

            if candidate:
                logger.debug("Expiration date matched by %s", candidate.pattern_name)
                _record_match(_debug, 'expiration_date', candidate)
                return candidate.value

            return None

        except (re.error, ValueError, TypeError, AttributeError):
            logger.warning("Error extracting expiration date", exc_info=True)
            return None

    def _find_anchored_date(self, lines: List[str]) -> Optional[DateCandidate]:
        for index in range(len(lines)):
            context = _context_window(lines, index)
            if not any(kw in context for kw in self.EXPIRATION_KEYWORDS):
                continue

            for spec in self.anchored_date_patterns:
                for match in spec.compiled.finditer(context):
                    value = self._parse_expiry(*match.groups())
                    if value:
                        return DateCandidate(
                            value=value,
                            pattern_name=spec.name,
                            match_span=match.span(),
                            raw_text=match.group(0),
                            line_position=index,
                        )
        return None

    def _find_unanchored_date(self, text: str, today: date) -> Optional[DateCandidate]:
        spec = self.unanchored_date_pattern
        for match in spec.compiled.finditer(text):
            value = self._parse_expiry(*match.groups())
            if value and date.fromisoformat(value) > today:
                return DateCandidate(
                    value=value,
                    pattern_name=spec.name,
                    match_span=match.span(),
                    raw_text=match.group(0),
                )
        return None

    def extract_pin(self, text: str, _debug=None) -> Optional[str]:
        """
        Extract a PIN / access code.

        Returns:
            Digit string (3-8 digits) or None
        """
        try:
            for spec in self.pin_patterns:
                match = spec.compiled.search(text)
                if match:
                    _record_match(_debug, 'pin', Candidate(
                        value=match.group(1),
                        pattern_name=spec.name,
                        match_span=match.span(1),
                        raw_text=match.group(0),
                    ))
                    return match.group(1)

            return None

        except (re.error, AttributeError):
            logger.warning("Error extracting PIN", exc_info=True)
            return None

    def extract_brand(self, text: str, lines: List[str], _debug=None) -> Optional[str]:
        """
        Extract the merchant brand.

        Known aliases are looked up in the top lines first, then the full
        text. Otherwise the first line is used as a best guess.

        Returns:
            Canonical brand, title-cased guess, or None
        """
        try:
            top_text = ' '.join(lines[:self.BRAND_TOP_LINES])
            for scope_name, scope in (('top_lines', top_text), ('full_text', text)):
                for brand, pattern in self.brand_patterns:
                    match = pattern.search(scope)
                    if match:
                        _record_match(_debug, 'brand', Candidate(
                            value=brand,
                            pattern_name=f'alias_{scope_name}',
                            match_span=match.span(),
                            raw_text=match.group(0),
                        ))
                        return brand

            guess = guess_brand_from_line(lines[0]) if lines else None
            if guess:
                _record_match(_debug, 'brand', Candidate(
                    value=guess,
                    pattern_name='first_line_guess',
                    match_span=(0, len(lines[0])),
                    raw_text=lines[0],
                ))
            return guess

        except (re.error, AttributeError, IndexError):
            logger.warning("Error extracting brand", exc_info=True)
            return None


default_parser = GiftCardParser()


def parse_gift_card_text(
    text: str,
    lines: Optional[List[str]] = None,
    today: Optional[date] = None
) -> ParsedResult:
    """Parse OCR text with the shared default parser."""
    return default_parser.parse(text, lines=lines, today=today)
