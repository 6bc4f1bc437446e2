"""
Free-form SMS from a tenant's number, outside any information request.
"""
import logging

from django.conf import settings

from relay.models import SmsMessage, TenantCredentials
from relay.services import store
from relay.services.errors import (
    CredentialsNotConfiguredError,
    InvalidPayloadError,
    SmsDeliveryError,
)
from relay.services.phone import mask_phone_number
from relay.services.sms_client import SmsSendError, send_sms

logger = logging.getLogger(__name__)


def send_direct_message(tenant_id: str, phone_number: str, message_body: str) -> str:
    """
    Sends one SMS with the tenant's carrier credentials and logs it.

    The message is logged as outbound with no request code. A failed log
    write does not fail the send.

    Returns:
        Provider message SID

    Raises:
        InvalidPayloadError: Missing, empty or too long message
        CredentialsNotConfiguredError: Tenant has no carrier credentials
        SmsDeliveryError: The carrier refused the message
    """
    if not tenant_id or not phone_number or not message_body:
        raise InvalidPayloadError('Missing phone_number or message_body')

    if not message_body.strip():
        raise InvalidPayloadError('Message cannot be empty')

    if len(message_body) > settings.MAX_PROMPT_LENGTH:
        raise InvalidPayloadError(
            f'Message too long (max {settings.MAX_PROMPT_LENGTH} characters)'
        )

    credentials = TenantCredentials.objects.filter(tenant_id=tenant_id).first()
    if credentials is None:
        logger.error(f"Tenant {tenant_id} has no carrier credentials configured")
        raise CredentialsNotConfiguredError('Twilio credentials not configured')

    try:
        message_sid = send_sms(phone_number, message_body, credentials)
    except SmsSendError as e:
        logger.error(f"Direct SMS to {mask_phone_number(phone_number)} failed: {e}")
        raise SmsDeliveryError('Failed to send SMS via Twilio') from e

    try:
        store.log_message(
            tenant_id=tenant_id,
            phone_number=phone_number,
            message_body=message_body,
            direction=SmsMessage.Direction.OUTBOUND,
            provider_message_sid=message_sid,
        )
    except Exception as e:
        logger.error(f"Failed to log direct SMS {message_sid}: {e}", exc_info=True)

    logger.info(f"Direct SMS sent for tenant {tenant_id} to {mask_phone_number(phone_number)}")
    return message_sid
