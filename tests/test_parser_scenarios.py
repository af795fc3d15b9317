"""
End-to-end tests for GiftCardParser.parse on realistic OCR transcripts.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import calendar
from datetime import date
from decimal import Decimal

import pytest

from giftcard_ocr.models.result import ParsedResult
from giftcard_ocr.services.parser import GiftCardParser, parse_gift_card_text
from giftcard_ocr.utils.card_numbers import luhn_check, strip_card_number_formatting

TODAY = date(2026, 10, 18)

TARGET_CARD = "TARGET GIFT CARD\nCARD NUMBER: 4111 1111 1111 1111\nBALANCE: $45.00\nEXP 12/25"
STARBUCKS_CARD = "STARBUCKS\nVALUE $25.00 USD\nPIN: 4821"
PHONE_CARD = "CALL 1-800-123-4567 FOR BALANCE INFO\n4532 0151 1283 0366"

SAMPLE_TEXTS = [
    TARGET_CARD,
    STARBUCKS_CARD,
    PHONE_CARD,
    "VALID THRU JANUARY 2026",
    "GIFT CARD\nCARD NUMBER: 1111 1111 1111 1111",
    "AMAZON.COM\nEXPIRES 03/2031\nGIFT CARD\nCLAIM CODE\nACCOUNT 6006 4912 3456 7890 123",
    "Best Buy\nGift Card\nCard # 4532-0151-1283-0366\nPIN 7731\n$100",
    "JOE'S COFFEE\nREDEEM IN STORE\nBALANCE $2500\n06/30",
    "SEPHORA\nUSE BY DEC 2045\nVALUE $5",
    "   \n\t\n",
]


@pytest.fixture
def parser():
    return GiftCardParser()


class TestScenarios:
    """Reference transcripts and their expected fields."""

    def test_full_target_card(self, parser):
        result = parser.parse(TARGET_CARD, today=TODAY)

        assert result.card_number == '4111 1111 1111 1111'
        assert result.balance == '45.00'
        assert result.expiration_date == '2025-12-31'
        assert result.brand == 'Target'
        assert result.pin is None
        assert result.confidence == 100

    def test_starbucks_with_pin(self, parser):
        result = parser.parse(STARBUCKS_CARD, today=TODAY)

        assert result.card_number is None
        assert result.balance == '25.00'
        assert result.expiration_date is None
        assert result.brand == 'Starbucks'
        assert result.pin == '4821'
        assert result.confidence == 55

    def test_empty_text(self, parser):
        assert parser.parse('') == ParsedResult()
        assert parser.parse('').confidence == 0

    @pytest.mark.parametrize("value", [None, 123, ['TARGET']])
    def test_non_string_input(self, parser, value):
        assert parser.parse(value) == ParsedResult()

    def test_whitespace_only(self, parser):
        result = parser.parse("   \n\t\n", today=TODAY)
        assert result.found_fields() == []
        assert result.confidence == 0

    def test_placeholder_card_number(self, parser):
        result = parser.parse("GIFT CARD\nCARD NUMBER: 1111 1111 1111 1111", today=TODAY)
        assert result.card_number is None

    def test_month_name_expiry(self, parser):
        result = parser.parse("VALID THRU JANUARY 2026", today=TODAY)
        assert result.expiration_date == '2026-01-31'

    def test_phone_line_number_not_returned(self, parser):
        result = parser.parse(PHONE_CARD, today=TODAY)
        assert result.card_number is None

    def test_amazon_claim_card(self, parser):
        result = parser.parse(SAMPLE_TEXTS[5], today=TODAY)
        assert result.card_number == '6006 4912 3456 7890 123'
        assert result.brand == 'Amazon'
        assert result.expiration_date == '2031-03-31'

    def test_mixed_case_input(self, parser):
        result = parser.parse(SAMPLE_TEXTS[6], today=TODAY)
        assert result.card_number == '4532 0151 1283 0366'
        assert result.brand == 'Best Buy'
        assert result.pin == '7731'
        assert result.balance is None  # "$100" has no balance keyword or suffix

    def test_recognizer_lines_used_for_brand_guess(self, parser):
        text = "CORNER BAKERY GIFT CARD BALANCE $10.00"
        with_lines = parser.parse(text, lines=["Corner Bakery", "Gift card", "Balance $10.00"])
        without_lines = parser.parse(text)

        assert with_lines.brand == 'Corner Bakery'
        assert with_lines.balance == '10.00'
        assert without_lines.brand is None


class TestDeterminism:
    """Same input, same output."""

    @pytest.mark.parametrize("text", SAMPLE_TEXTS)
    def test_repeatable(self, parser, text):
        assert parser.parse(text, today=TODAY) == parser.parse(text, today=TODAY)

    def test_default_parser_helper(self):
        assert parse_gift_card_text(TARGET_CARD, today=TODAY) == GiftCardParser().parse(TARGET_CARD, today=TODAY)


class TestInvariants:
    """Properties every result must satisfy."""

    @pytest.mark.parametrize("text", SAMPLE_TEXTS)
    def test_field_invariants(self, parser, text):
        result = parser.parse(text, today=TODAY)

        assert 0 <= result.confidence <= 100

        if result.card_number is not None:
            digits = strip_card_number_formatting(result.card_number)
            assert 13 <= len(digits) <= 19
            assert len(set(digits)) > 1
            if len(digits) == 16:
                assert luhn_check(digits)

        if result.balance is not None:
            assert Decimal('5') <= Decimal(result.balance) <= Decimal('2000')
            assert len(result.balance.split('.')[1]) == 2

        if result.expiration_date is not None:
            expiry = date.fromisoformat(result.expiration_date)
            assert 2024 <= expiry.year <= 2040
            assert expiry.day == calendar.monthrange(expiry.year, expiry.month)[1]

        if result.pin is not None:
            assert result.pin.isdigit()
            assert 3 <= len(result.pin) <= 8

    def test_out_of_window_values_dropped(self, parser):
        result = parser.parse(SAMPLE_TEXTS[8], today=TODAY)
        assert result.brand == 'Sephora'
        assert result.balance == '5.00'
        assert result.expiration_date is None

    def test_unanchored_date_and_balance_window(self, parser):
        result = parser.parse(SAMPLE_TEXTS[7], today=TODAY)
        assert result.brand == "Joe's Coffee"
        assert result.balance is None
        assert result.expiration_date == '2030-06-30'


class TestDebugProvenance:
    """Test the optional debug metadata."""

    def test_patterns_and_breakdown(self, parser):
        debug = {}
        result = parser.parse(TARGET_CARD, today=TODAY, _debug=debug)

        assert debug['patterns_matched'] == {
            'card_number': 'single_sixteen_digit',
            'balance': 'keyword_amount',
            'expiration_date': 'keyword_numeric',
            'brand': 'alias_top_lines',
        }
        assert set(debug['match_spans']) == set(debug['patterns_matched'])
        assert sum(debug['confidence_breakdown'].values()) == result.confidence
        assert debug['line_count'] == 4

    def test_debug_does_not_change_result(self, parser):
        assert parser.parse(STARBUCKS_CARD, today=TODAY, _debug={}) == parser.parse(STARBUCKS_CARD, today=TODAY)

    def test_serializes_with_camel_case_names(self, parser):
        dumped = parser.parse(TARGET_CARD, today=TODAY).model_dump(by_alias=True)
        assert dumped['cardNumber'] == '4111 1111 1111 1111'
        assert dumped['expirationDate'] == '2025-12-31'
        assert set(dumped) == {'cardNumber', 'balance', 'expirationDate', 'brand', 'pin', 'confidence'}
