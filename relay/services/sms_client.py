"""
Carrier client for sending SMS through the Twilio REST API with tenant credentials.
"""
import logging
import json
import httpx
from django.conf import settings

from relay.services.phone import mask_phone_number

logger = logging.getLogger(__name__)


class SmsSendError(Exception):
    """Raised when the carrier does not accept a message."""
    pass


def _format_response(response: httpx.Response) -> str:
    """Return a readable response string (pretty JSON if possible)."""
    try:
        data = response.json()
        return json.dumps(data, indent=2, ensure_ascii=False)
    except Exception:
        return response.text


def send_sms(to: str, body: str, credentials) -> str:
    """
    Sends an SMS from the tenant's number using the tenant's carrier account.

    Args:
        to: E.164 destination number
        body: Message text
        credentials: TenantCredentials (account_sid, auth_token, phone_number)

    Returns:
        Provider message SID

    Raises:
        SmsSendError: On network/timeout errors or a non-2xx carrier response
    """
    url = f"{settings.TWILIO_API_BASE_URL}/Accounts/{credentials.account_sid}/Messages.json"
    data = {
        'To': to,
        'From': credentials.phone_number,
        'Body': body,
    }

    logger.info(f"Sending SMS to {mask_phone_number(to)} from {mask_phone_number(credentials.phone_number)}")
    logger.debug(f"SMS body: {body}")

    try:
        response = httpx.post(
            url,
            data=data,
            auth=(credentials.account_sid, credentials.auth_token),
            timeout=settings.SMS_SEND_TIMEOUT
        )
    except httpx.TimeoutException as e:
        logger.error(f"Timeout sending SMS: {e}")
        raise SmsSendError(f"Timeout sending SMS: {e}") from e
    except httpx.HTTPError as e:
        logger.error(f"HTTP error sending SMS: {e}")
        raise SmsSendError(f"HTTP error sending SMS: {e}") from e

    if not 200 <= response.status_code < 300:
        logger.error("Carrier rejected SMS (%s):\n%s", response.status_code, _format_response(response))
        raise SmsSendError(f"Failed to send SMS: {response.status_code} {response.text}")

    try:
        message_sid = response.json().get('sid')
    except ValueError:
        logger.warning("Carrier accepted SMS but returned no JSON body")
        message_sid = None
    logger.info(f"SMS sent to {mask_phone_number(to)}, sid={message_sid}")
    return message_sid
