"""
Unit Tests for input validators
"""

import pytest

from stkpay.errors import InvalidPhoneFormat
from stkpay.utils.validators import normalize_phone, validate_amount


class TestNormalizePhone:

    @pytest.mark.parametrize('raw, expected', [
        ('0712345678', '254712345678'),
        ('+254712345678', '254712345678'),
        ('254712345678', '254712345678'),
        ('0712 345 678', '254712345678'),
        ('+254-712-345-678', '254712345678'),
        ('0110345678', '254110345678'),
    ])
    def test_accepted_formats(self, raw, expected):
        assert normalize_phone(raw) == expected

    def test_integer_input(self):
        assert normalize_phone(254712345678) == '254712345678'

    @pytest.mark.parametrize('raw', [
        '712345678',
        '+15551234567',
        '07123',
        '2547123456789',
        'not-a-phone',
        '',
    ])
    def test_rejected_formats(self, raw):
        with pytest.raises(InvalidPhoneFormat):
            normalize_phone(raw)

    def test_none_is_rejected(self):
        with pytest.raises(InvalidPhoneFormat):
            normalize_phone(None)


class TestValidateAmount:

    @pytest.mark.parametrize('amount', [1, 500, '750', 100.0])
    def test_valid(self, amount):
        assert validate_amount(amount) == (True, None)

    @pytest.mark.parametrize('amount, message', [
        (None, 'Amount is required'),
        (0, 'Amount must be greater than 0'),
        (-10, 'Amount must be greater than 0'),
        (10.5, 'Amount must be a whole number'),
    ])
    def test_invalid(self, amount, message):
        assert validate_amount(amount) == (False, message)

    def test_non_numeric(self):
        is_valid, error = validate_amount('ten')
        assert not is_valid
        assert error.startswith('Invalid amount format')

    def test_boolean_is_not_an_amount(self):
        assert validate_amount(True) == (False, 'Amount is required')

    @pytest.mark.parametrize('amount', ['NaN', 'Infinity', '-Infinity', float('inf'), float('nan')])
    def test_non_finite(self, amount):
        is_valid, error = validate_amount(amount)
        assert not is_valid
        assert error == 'Amount must be a finite number'
