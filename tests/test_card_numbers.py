"""
Test suite for card number validation and formatting.

Tests cover:
- Luhn checksum
- Placeholder rejection (repeated and sequential digits)
- Display formatting (4-4-4-4 and Amex 4-6-5)
- Stripping and masking
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from giftcard_ocr.utils.card_numbers import (
    luhn_check,
    is_valid_card_number,
    format_card_number,
    strip_card_number_formatting,
    mask_card_number,
)
import pytest


class TestLuhnCheck:
    """Test the Luhn checksum."""

    @pytest.mark.parametrize("number", [
        '4111111111111111',
        '4532015112830366',
        '5555555555554444',
        '378282246310005',
    ])
    def test_valid_numbers(self, number):
        assert luhn_check(number)

    @pytest.mark.parametrize("number", [
        '4111111111111112',
        '1234567890123456',
    ])
    def test_invalid_numbers(self, number):
        assert not luhn_check(number)

    def test_non_digits_rejected(self):
        assert not luhn_check('')
        assert not luhn_check('4111 1111 1111 1111')
        assert not luhn_check('ABCD')


class TestIsValidCardNumber:
    """Test rejection rules for card number candidates."""

    def test_real_sixteen_digit_number_accepted(self):
        assert is_valid_card_number('4111111111111111')

    def test_all_same_digit_rejected(self):
        assert not is_valid_card_number('1111111111111111')
        assert not is_valid_card_number('0000000000000')

    def test_sequential_digits_rejected(self):
        """Ascending runs are placeholders, including the 9 -> 0 wrap."""
        assert not is_valid_card_number('1234567890123456')
        assert not is_valid_card_number('0123456789012')
        assert not is_valid_card_number('3456789012345')

    def test_sixteen_digits_require_luhn(self):
        assert not is_valid_card_number('4111111111111112')

    def test_other_lengths_skip_luhn(self):
        """Gift cards are not guaranteed to satisfy Luhn."""
        assert not luhn_check('6006491234567890123')
        assert is_valid_card_number('6006491234567890123')  # 19 digits
        assert is_valid_card_number('4222222222223')  # 13 digits
        assert is_valid_card_number('600649123456789012')  # 18 digits

    def test_length_bounds(self):
        assert not is_valid_card_number('411111111111')  # 12 digits
        assert not is_valid_card_number('60064912345678901234')  # 20 digits

    def test_separators_and_empty_rejected(self):
        assert not is_valid_card_number('')
        assert not is_valid_card_number(None)
        assert not is_valid_card_number('4111 1111 1111 1111')


class TestFormatting:
    """Test display formatting helpers."""

    def test_sixteen_digits_grouped_by_four(self):
        assert format_card_number('4111111111111111') == '4111 1111 1111 1111'

    def test_fifteen_digits_use_amex_grouping(self):
        assert format_card_number('378282246310005') == '3782 822463 10005'

    def test_nineteen_digits_trailing_group(self):
        assert format_card_number('6006491234567890123') == '6006 4912 3456 7890 123'

    def test_alphanumeric_uppercased(self):
        assert format_card_number('ab12-cd34 ef56') == 'AB12 CD34 EF56'

    def test_empty(self):
        assert format_card_number('') == ''
        assert format_card_number(None) == ''

    def test_strip(self):
        assert strip_card_number_formatting('4111 1111-1111 1111') == '4111111111111111'
        assert strip_card_number_formatting('x7k2 9m') == 'X7K29M'
        assert strip_card_number_formatting(None) == ''

    @pytest.mark.parametrize("formatted", [
        '4111 1111 1111 1111',
        '4532-0151-1283-0366',
        '3782 822463 10005',
    ])
    def test_format_is_idempotent(self, formatted):
        assert format_card_number(strip_card_number_formatting(formatted)) == format_card_number(formatted)
        assert format_card_number(format_card_number(formatted)) == format_card_number(formatted)


class TestMasking:
    """Test masked previews."""

    def test_mask_keeps_last_four(self):
        assert mask_card_number('4111 1111 1111 1234') == '•••• •••• •••• 1234'

    def test_mask_short_final_group(self):
        assert mask_card_number('378282246310005') == '•••• •••• •••• 0005'

    def test_mask_empty(self):
        assert mask_card_number('') == ''
