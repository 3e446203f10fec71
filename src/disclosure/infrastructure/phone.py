"""Region-aware phone validation and formatting."""

import re

import phonenumbers

DEFAULT_REGION = "GH"

PHONE_INVALID = "Valid phone number is required"

_NON_DIGITS = re.compile(r"\D")


def _parse(raw: str | None, region: str | None) -> phonenumbers.PhoneNumber | None:
    if not raw or not str(raw).strip():
        return None
    raw = str(raw).strip()
    # A leading + carries its own country code; the selected region must not interfere.
    region = None if raw.startswith("+") else (region or DEFAULT_REGION).upper()
    try:
        return phonenumbers.parse(raw, region)
    except phonenumbers.NumberParseException:
        return None


def validate_phone(raw: str | None, region: str | None = None) -> bool:
    """Return True only for a number libphonenumber considers valid.

    "+..." numbers are validated internationally; anything else against region
    (the visitor's selected country, GH when none was selected).
    """
    parsed = _parse(raw, region)
    return parsed is not None and phonenumbers.is_valid_number(parsed)


def get_phone_error(raw: str | None, region: str | None = None) -> str:
    return "" if validate_phone(raw, region) else PHONE_INVALID


def to_international_display(phone: str, region: str | None = None) -> str:
    """Display form of a revealed number: E.164 when parseable, else "+" and its digits."""
    if not phone or not phone.strip():
        return phone
    phone = phone.strip()
    # Without a selected country only "+..." numbers are parsed.
    parsed = _parse(phone, region) if phone.startswith("+") or region else None
    if parsed is not None:
        return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
    digits = _NON_DIGITS.sub("", phone)
    return f"+{digits}" if digits else digits
