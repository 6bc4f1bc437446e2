"""
Validation service for SMS replies.

Each reply is checked against the information type the agent asked for and,
when acceptable, reduced to the normalized value handed back to the agent.
"""
import re
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

EMAIL = 'email'
ADDRESS = 'address'
ACCOUNT_NUMBER = 'account_number'

TYPED_INFO_TYPES = (EMAIL, ADDRESS, ACCOUNT_NUMBER)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
ADDRESS_MIN_LENGTH = 15
ACCOUNT_NUMBER_MIN_DIGITS = 5
ACCOUNT_NUMBER_MAX_DIGITS = 20
FREE_TEXT_MAX_LENGTH = 500


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    normalized: Optional[str] = None
    error: Optional[str] = None


def validate_email(text: str) -> ValidationResult:
    trimmed = text.strip()
    if not EMAIL_PATTERN.match(trimmed):
        return ValidationResult(valid=False, error='Please use format: name@example.com')
    return ValidationResult(valid=True, normalized=trimmed.lower())


def validate_address(text: str) -> ValidationResult:
    """
    Heuristic for a full postal address: a street number somewhere and
    enough text to plausibly hold city, state and ZIP.
    """
    trimmed = text.strip()

    if not re.search(r'\d', trimmed):
        return ValidationResult(valid=False, error='Address must include a street number')

    if len(trimmed) < ADDRESS_MIN_LENGTH:
        return ValidationResult(
            valid=False,
            error='Please include street number, city, state, and ZIP'
        )

    return ValidationResult(valid=True, normalized=trimmed)


def validate_account_number(text: str) -> ValidationResult:
    digits_only = re.sub(r'\D', '', text)

    if len(digits_only) < ACCOUNT_NUMBER_MIN_DIGITS:
        return ValidationResult(
            valid=False,
            error=f'Account number must be at least {ACCOUNT_NUMBER_MIN_DIGITS} digits'
        )

    if len(digits_only) > ACCOUNT_NUMBER_MAX_DIGITS:
        return ValidationResult(
            valid=False,
            error=f'Account number must be no more than {ACCOUNT_NUMBER_MAX_DIGITS} digits'
        )

    return ValidationResult(valid=True, normalized=digits_only)


def validate_free_text(text: str) -> ValidationResult:
    trimmed = text.strip()

    if not trimmed:
        return ValidationResult(valid=False, error='Reply cannot be empty')

    if len(trimmed) > FREE_TEXT_MAX_LENGTH:
        return ValidationResult(
            valid=False,
            error=f'Reply must be no more than {FREE_TEXT_MAX_LENGTH} characters'
        )

    return ValidationResult(valid=True, normalized=trimmed)


def validate_reply(text: str, info_type: str) -> ValidationResult:
    """
    Validates a reply against the expected information type.

    Known types (email, address, account_number) get their specific rules;
    any other type accepts non-empty text up to FREE_TEXT_MAX_LENGTH.

    Args:
        text: Raw reply body
        info_type: Information type stored on the request

    Returns:
        ValidationResult with the normalized value or a human-readable error
    """
    if info_type == EMAIL:
        result = validate_email(text)
    elif info_type == ADDRESS:
        result = validate_address(text)
    elif info_type == ACCOUNT_NUMBER:
        result = validate_account_number(text)
    else:
        result = validate_free_text(text)

    if result.valid:
        logger.debug(f"Reply accepted as {info_type}")
    else:
        logger.debug(f"Reply rejected as {info_type}: {result.error}")
    return result
