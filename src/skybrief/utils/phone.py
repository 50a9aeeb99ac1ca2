"""
Phone Number Utilities

Validation and E.164 formatting for SMS registration, backed by the
``phonenumbers`` port of libphonenumber. National numbers are interpreted in
a default region (France unless told otherwise); international numbers may be
written with a leading + or the region's international prefix (00 in France).
"""

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat

from skybrief.exceptions import PhoneNumberError

DEFAULT_REGION = "FR"

INVALID_PHONE_MESSAGE = (
    "Invalid phone number format. Please use international format "
    "(e.g., +33123456789) or French format (e.g., 0123456789)"
)


def validate_and_format_phone_number(phone_number: str, default_region: str = DEFAULT_REGION) -> str:
    """
    Validate a phone number and return it in E.164 format.

    Args:
        phone_number: User-supplied number, national or international
        default_region: Region used for numbers written without a country code

    Returns:
        E.164 string, e.g. "+33123456789"

    Raises:
        PhoneNumberError: the number is not valid
    """
    if not phone_number or not phone_number.strip():
        raise PhoneNumberError(INVALID_PHONE_MESSAGE)

    try:
        parsed = phonenumbers.parse(phone_number, default_region.upper())
    except NumberParseException as e:
        raise PhoneNumberError(INVALID_PHONE_MESSAGE) from e

    if not phonenumbers.is_valid_number(parsed):
        raise PhoneNumberError(INVALID_PHONE_MESSAGE)

    return phonenumbers.format_number(parsed, PhoneNumberFormat.E164)


def is_valid_phone_number(phone_number: str, default_region: str = DEFAULT_REGION) -> bool:
    try:
        validate_and_format_phone_number(phone_number, default_region)
        return True
    except PhoneNumberError:
        return False
