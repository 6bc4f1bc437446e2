"""
Failures the outbound agent webhook reports back to its caller.
"""
from typing import Optional


class RelayError(Exception):
    """Base class; status_code is the HTTP status returned to the agent."""
    status_code = 500

    def __init__(self, message: str, request_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.request_code = request_code


class InvalidPayloadError(RelayError):
    """Raised when the trigger payload is missing fields or malformed."""
    status_code = 400


class CredentialsNotConfiguredError(RelayError):
    """Raised when the tenant has no carrier credentials on file."""
    status_code = 400


class InsufficientCreditError(RelayError):
    """Raised when the tenant's balance cannot cover one SMS."""
    status_code = 402


class SmsDeliveryError(RelayError):
    """Raised when the prompt SMS could not be handed to the carrier."""
    status_code = 500
