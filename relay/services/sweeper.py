"""
Expiry sweep: reaps pending requests past expires_at and tells each
recipient the request is gone.
"""
import logging

from django.db import transaction
from django.utils import timezone

from relay.models import SmsMessage, TenantCredentials
from relay.services import store, templates
from relay.services.phone import mask_phone_number
from relay.services.sms_client import SmsSendError, send_sms

logger = logging.getLogger(__name__)


def _notify_recipient(info_request, credentials_by_tenant: dict) -> bool:
    credentials = credentials_by_tenant.get(info_request.tenant_id)
    if credentials is None:
        logger.error(
            f"No carrier credentials for tenant {info_request.tenant_id}; "
            f"timeout notice for request {info_request.request_code} not sent"
        )
        return False

    body = templates.timeout_sms()
    message_sid = send_sms(info_request.recipient_phone, body, credentials)
    store.log_message(
        tenant_id=info_request.tenant_id,
        phone_number=info_request.recipient_phone,
        message_body=body,
        direction=SmsMessage.Direction.OUTBOUND,
        provider_message_sid=message_sid,
        request_code=info_request.request_code,
    )
    logger.info(f"Sent timeout SMS to {mask_phone_number(info_request.recipient_phone)}")
    return True


def expire_overdue_requests(now=None) -> int:
    """
    Expires every overdue pending request and sends each one timeout notice.

    The overdue rows are locked while they are expired, so only requests this
    sweep actually expired are notified. Per-recipient send failures are
    logged and skipped. Never raises.

    Returns:
        Number of requests expired
    """
    try:
        with transaction.atomic():
            overdue = store.find_overdue(now or timezone.now(), for_update=True)
            logger.info(f"Found {len(overdue)} overdue requests")
            if not overdue:
                return 0
            expired_count = store.mark_expired_bulk(r.id for r in overdue)

        tenant_ids = {r.tenant_id for r in overdue}
        credentials_by_tenant = {
            c.tenant_id: c
            for c in TenantCredentials.objects.filter(tenant_id__in=tenant_ids)
        }
    except Exception as e:
        logger.error(f"Expiry sweep failed: {e}", exc_info=True)
        return 0

    for info_request in overdue:
        try:
            _notify_recipient(info_request, credentials_by_tenant)
        except SmsSendError as e:
            logger.error(
                f"Failed to send timeout SMS to {mask_phone_number(info_request.recipient_phone)}: {e}",
                exc_info=True
            )
        except Exception as e:
            logger.error(
                f"Failed to record timeout SMS for request {info_request.request_code}: {e}",
                exc_info=True
            )

    return expired_count
