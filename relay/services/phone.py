"""
Phone number helpers.
"""
import re

E164_PATTERN = re.compile(r'^\+[1-9]\d{1,14}$')


def is_valid_e164(phone: str) -> bool:
    """Check E.164 format, e.g. +12345678901."""
    return bool(phone) and bool(E164_PATTERN.match(phone))


def mask_phone_number(phone: str) -> str:
    """
    Mask a phone number for log output: keep the leading two characters
    and the last four, e.g. +12345678901 -> +1******8901.
    """
    if not phone or len(phone) < 8:
        return phone

    start = phone[:2]
    end = phone[-4:]
    middle = '*' * min(len(phone) - 6, 7)
    return f"{start}{middle}{end}"
