"""
Custom Validators
Validation and normalisation helpers for client input
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from stkpay.errors import InvalidPhoneFormat

# Safaricom MSISDN in international format without the leading +
KENYAN_MSISDN = re.compile(r'^254\d{9}$')


def normalize_phone(phone: Any) -> str:
    """
    Normalise a phone number to the gateway's expected format (2547XXXXXXXX).

    Rules, in order: a leading ``0`` becomes ``254``; a leading ``+254`` loses
    the ``+``; anything else passes through unchanged. Spaces and hyphens are
    stripped first.

    Raises:
        InvalidPhoneFormat: If the result is not a 12-digit Kenyan MSISDN
    """
    if phone is None:
        raise InvalidPhoneFormat('Phone number is required')

    cleaned = re.sub(r'[\s\-]', '', str(phone))

    if cleaned.startswith('0'):
        normalized = '254' + cleaned[1:]
    elif cleaned.startswith('+254'):
        normalized = cleaned[1:]
    else:
        normalized = cleaned

    if not KENYAN_MSISDN.match(normalized):
        raise InvalidPhoneFormat(
            f"Phone number '{phone}' is not a valid Kenyan mobile number (expected 2547XXXXXXXX)"
        )
    return normalized


def validate_amount(amount: Any) -> tuple[bool, Optional[str]]:
    """
    Validate a payment amount (positive whole number of shillings)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if amount is None or isinstance(amount, bool):
        return False, "Amount is required"

    try:
        amount_decimal = Decimal(str(amount))
    except (InvalidOperation, ValueError) as e:
        return False, f"Invalid amount format: {str(e)}"

    if not amount_decimal.is_finite():
        return False, "Amount must be a finite number"

    if amount_decimal <= 0:
        return False, "Amount must be greater than 0"

    if amount_decimal != amount_decimal.to_integral_value():
        return False, "Amount must be a whole number"

    return True, None
