"""
Validation utilities for M-Pesa operations.
"""

import re
from decimal import Decimal, InvalidOperation
from urllib.parse import urlparse

from ..constants import MSISDN_PATTERN, SHORTCODE_PATTERN
from ..exceptions import (
    InvalidPhoneNumberError, InvalidAmountError, InvalidURLError, ValidationError
)


def is_valid_msisdn(phone) -> bool:
    """Check a phone number against the Ethiopian MSISDN format (2517XXXXXXXX / 2511XXXXXXXX)."""
    return phone is not None and re.match(MSISDN_PATTERN, str(phone)) is not None


def is_valid_amount(amount) -> bool:
    """Check that an amount is numeric and greater than zero."""
    if isinstance(amount, bool):
        return False
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError, TypeError):
        return False
    return value.is_finite() and value > 0


def validate_phone_number(phone: str, field_name: str = "Phone number") -> str:
    """
    Validate an Ethiopian phone number.

    Args:
        phone: Phone number to validate
        field_name: Name used in the error message

    Returns:
        The phone number as a string

    Raises:
        InvalidPhoneNumberError: If phone number is missing or malformed
    """
    if phone is None or phone == '':
        raise InvalidPhoneNumberError(f"{field_name} is required")

    phone = str(phone)
    if not is_valid_msisdn(phone):
        raise InvalidPhoneNumberError(
            f"{field_name} must be in the format 251XXXXXXXXX. Got: {phone}"
        )
    return phone


def validate_amount(amount) -> float:
    """
    Validate a transaction amount.

    Returns:
        Validated amount as float

    Raises:
        InvalidAmountError: If amount is missing, not numeric or not positive
    """
    if amount is None or amount == '':
        raise InvalidAmountError("Amount is required")

    if not is_valid_amount(amount):
        raise InvalidAmountError(f"Amount must be greater than 0. Got: {amount}")

    return float(amount)


def validate_https_url(url: str, field_name: str = "URL") -> str:
    """
    Validate that a URL is absolute and uses HTTPS.

    Raises:
        InvalidURLError: If the URL is missing, relative or not HTTPS
    """
    if not url:
        raise InvalidURLError(f"{field_name} is required")

    parsed = urlparse(str(url))
    if parsed.scheme != 'https' or not parsed.netloc:
        raise InvalidURLError(f"{field_name} must be a valid HTTPS URL. Got: {url}")

    return url


def validate_choice(value, choices, field_name: str) -> str:
    """
    Validate that a value is one of a fixed set of strings.

    Args:
        value: Value to check (an enum member or its value)
        choices: Enum class or iterable of allowed strings
        field_name: Name used in the error message
    """
    allowed = [getattr(choice, 'value', choice) for choice in choices]
    value = getattr(value, 'value', value)
    if value not in allowed:
        raise ValidationError(
            f"Invalid {field_name}. Must be one of: {', '.join(allowed)}"
        )
    return value


def validate_shortcode(shortcode, field_name: str = "Shortcode") -> str:
    """
    Validate a business shortcode (numeric).

    Raises:
        ValidationError: If the shortcode is missing or not numeric
    """
    if shortcode is None or str(shortcode).strip() == '':
        raise ValidationError(f"{field_name} is required")

    shortcode = str(shortcode).strip()
    if not shortcode.isdigit():
        raise ValidationError(f"Invalid {field_name.lower()}: {shortcode}")

    return shortcode


def is_valid_shortcode(shortcode) -> bool:
    """Check a shortcode against the 5-6 digit pattern used by C2B callbacks."""
    return shortcode is not None and re.match(SHORTCODE_PATTERN, str(shortcode)) is not None


def validate_required(fields: dict, operation: str) -> None:
    """
    Check that every field in a name -> value mapping is set.

    Raises:
        ValidationError: Listing every missing field
    """
    missing = [name for name, value in fields.items() if value is None or value == '']
    if missing:
        raise ValidationError(
            f"Missing required field(s) for {operation}: {', '.join(missing)}"
        )
