"""
Inbound SMS correlation.

Every inbound text is logged, then matched to the newest pending request the
tenant has open for the sender. A reply that passes validation completes the
request; one that fails gets a corrective SMS and the request stays pending
until MAX_INVALID_REPLIES is reached, at which point it becomes invalid.

Nothing here raises to the carrier webhook.
"""
import logging
from typing import Optional

from django.conf import settings

from relay.models import InfoRequest, SmsMessage, TenantCredentials
from relay.services import store, templates
from relay.services.phone import mask_phone_number
from relay.services.sms_client import SmsSendError, send_sms
from relay.services.validation import validate_reply

logger = logging.getLogger(__name__)


def _send_and_log(credentials: TenantCredentials, to: str, body: str, request_code: str) -> None:
    try:
        message_sid = send_sms(to, body, credentials)
    except SmsSendError as e:
        logger.error(f"Failed to send SMS for request {request_code} to {mask_phone_number(to)}: {e}")
        return

    store.log_message(
        tenant_id=credentials.tenant_id,
        phone_number=to,
        message_body=body,
        direction=SmsMessage.Direction.OUTBOUND,
        provider_message_sid=message_sid,
        request_code=request_code,
    )


def _handle_invalid_reply(
    info_request: InfoRequest,
    credentials: TenantCredentials,
    error_message: str,
) -> None:
    attempts = store.record_invalid_reply(info_request.id)
    logger.info(
        f"Invalid reply {attempts}/{settings.MAX_INVALID_REPLIES} "
        f"for request {info_request.request_code}: {error_message}"
    )

    if attempts >= settings.MAX_INVALID_REPLIES:
        if store.mark_invalid(info_request.id):
            _send_and_log(
                credentials,
                info_request.recipient_phone,
                templates.invalid_sms(info_request.info_type),
                info_request.request_code,
            )
        return

    _send_and_log(
        credentials,
        info_request.recipient_phone,
        templates.error_sms(error_message),
        info_request.request_code,
    )


def correlate_reply(
    sender: str,
    recipient: str,
    body: str,
    message_sid: Optional[str] = None,
) -> Optional[InfoRequest]:
    """
    Logs an inbound SMS and applies it to the sender's pending request.

    Args:
        sender: Phone number the reply came from
        recipient: Tenant number the reply was sent to
        body: Message text
        message_sid: Provider message SID

    Returns:
        The matched request (as it was before this reply), or None
    """
    if not sender or not recipient or not body:
        logger.warning("Inbound SMS missing From, To or Body; ignoring")
        return None

    credentials = TenantCredentials.objects.filter(phone_number=recipient).first()
    if credentials is None:
        logger.error(f"No tenant owns number {mask_phone_number(recipient)}; dropping inbound SMS")
        return None

    tenant_id = credentials.tenant_id
    logger.info(f"Inbound SMS for tenant {tenant_id} from {mask_phone_number(sender)}")

    try:
        message = store.log_message(
            tenant_id=tenant_id,
            phone_number=sender,
            message_body=body,
            direction=SmsMessage.Direction.INBOUND,
            provider_message_sid=message_sid,
        )
    except Exception as e:
        # The reply still has to reach its request
        logger.error(f"Failed to log inbound SMS from {mask_phone_number(sender)}: {e}", exc_info=True)
        message = None

    info_request = store.find_newest_pending(tenant_id, sender)
    if info_request is None:
        logger.info(f"No pending request for {mask_phone_number(sender)}; kept as general inbound")
        return None

    logger.info(f"Inbound SMS from {mask_phone_number(sender)} matched request {info_request.request_code}")
    if message is not None:
        store.tag_message(message.id, info_request.request_code)

    result = validate_reply(body, info_request.info_type)
    if result.valid:
        store.complete_request(info_request.id, result.normalized)
    else:
        _handle_invalid_reply(info_request, credentials, result.error)

    return info_request


def handle_inbound_sms(
    sender: str,
    recipient: str,
    body: str,
    message_sid: Optional[str] = None,
) -> None:
    """Webhook entry point; logs and swallows every internal failure."""
    try:
        correlate_reply(sender, recipient, body, message_sid)
    except Exception as e:
        logger.error(f"Error handling inbound SMS: {e}", exc_info=True)
