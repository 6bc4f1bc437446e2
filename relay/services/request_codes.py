"""
Short correlation codes shared with the human in SMS and with the agent in responses.
"""
import secrets
import string

REQUEST_CODE_ALPHABET = string.ascii_uppercase + string.digits
REQUEST_CODE_LENGTH = 6


def generate_request_code(length: int = REQUEST_CODE_LENGTH) -> str:
    """Return a random uppercase alphanumeric code, e.g. 'K7Q2ZD'."""
    return ''.join(secrets.choice(REQUEST_CODE_ALPHABET) for _ in range(length))
