"""
Unit tests for validation and security helpers.
"""

import base64
import re
from datetime import datetime

import pytest

from mpesa_sdk.exceptions import InvalidAmountError, InvalidPhoneNumberError, InvalidURLError
from mpesa_sdk.utils.security import (
    generate_basic_credentials, generate_password, generate_reference,
    generate_third_party_trans_id, generate_timestamp
)
from mpesa_sdk.utils.validators import (
    is_valid_amount, is_valid_msisdn, is_valid_shortcode, validate_amount,
    validate_https_url, validate_phone_number
)


@pytest.mark.unit
class TestValidators:
    """Test cases for input validators."""

    @pytest.mark.parametrize('phone', ['251700404709', '251112345678', 251700404709])
    def test_valid_msisdn(self, phone):
        assert is_valid_msisdn(phone)
        assert validate_phone_number(phone) == str(phone)

    @pytest.mark.parametrize('phone', ['', '0700404709', '25170040470', '2517004047099', '251500404709'])
    def test_invalid_msisdn(self, phone):
        assert not is_valid_msisdn(phone)
        with pytest.raises(InvalidPhoneNumberError):
            validate_phone_number(phone)

    @pytest.mark.parametrize('amount,valid', [
        (1, True),
        ('10.50', True),
        (0, False),
        (-1, False),
        ('abc', False),
        (True, False),
        ('nan', False),
    ])
    def test_amounts(self, amount, valid):
        assert is_valid_amount(amount) is valid

    def test_validate_amount_returns_float(self):
        assert validate_amount('10.50') == 10.5
        with pytest.raises(InvalidAmountError):
            validate_amount(None)

    @pytest.mark.parametrize('url', [
        'http://example.com/callback',
        '/callback',
        'https://',
        'example.com/callback',
    ])
    def test_invalid_urls(self, url):
        with pytest.raises(InvalidURLError):
            validate_https_url(url)

    def test_shortcode_pattern(self):
        assert is_valid_shortcode('54321')
        assert is_valid_shortcode(174379)
        assert not is_valid_shortcode('1234')
        assert not is_valid_shortcode('12a45')


@pytest.mark.unit
class TestSecurity:
    """Test cases for password and identifier generation."""

    def test_stk_password(self):
        password = generate_password('174379', 'pass', '20240101000000')

        assert password == base64.b64encode(b'174379pass20240101000000').decode()

    def test_timestamp_format(self):
        assert generate_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == '20240102030405'
        assert re.fullmatch(r'\d{14}', generate_timestamp())

    def test_basic_credentials(self):
        assert base64.b64decode(generate_basic_credentials('key', 'secret')) == b'key:secret'

    def test_references(self):
        assert re.fullmatch(r'MPESA-B2C-[0-9a-f]{32}', generate_reference('MPESA-B2C'))
        assert re.fullmatch(r'TXN\d{10,}\d{4}', generate_third_party_trans_id())
