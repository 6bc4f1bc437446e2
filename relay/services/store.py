"""
Request store: creation, lookup and state transitions of InfoRequest rows,
plus the SMS message log.

State machine:
    pending -> completed   valid reply received
    pending -> expired     no reply in time, or the prompt SMS failed
    pending -> invalid     too many replies failed validation

Every transition is a single conditional UPDATE on status='pending', so only
the first writer wins and terminal rows are never rewritten.
"""
import logging
from datetime import timedelta
from typing import Iterable, List, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from relay.models import InfoRequest, SmsMessage
from relay.services.phone import mask_phone_number
from relay.services.request_codes import generate_request_code

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 5

TERMINAL_STATUSES = (
    InfoRequest.Status.COMPLETED,
    InfoRequest.Status.EXPIRED,
    InfoRequest.Status.INVALID,
)


def request_ttl() -> timedelta:
    return timedelta(seconds=settings.REQUEST_TTL_SECONDS)


def create_request(
    tenant_id: str,
    call_id: str,
    recipient_phone: str,
    prompt_message: str,
    info_type: str = 'general',
) -> InfoRequest:
    """
    Creates a pending request with a fresh request code.

    expires_at is fixed at creation to created_at + REQUEST_TTL_SECONDS.
    A code collision retries with a new code.
    """
    for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
        now = timezone.now()
        request_code = generate_request_code()
        try:
            with transaction.atomic():
                info_request = InfoRequest.objects.create(
                    request_code=request_code,
                    call_id=call_id,
                    tenant_id=tenant_id,
                    recipient_phone=recipient_phone,
                    info_type=info_type,
                    prompt_message=prompt_message,
                    status=InfoRequest.Status.PENDING,
                    created_at=now,
                    expires_at=now + request_ttl(),
                )
        except IntegrityError:
            logger.warning(f"Request code collision on {request_code} (attempt {attempt})")
            continue

        logger.info(
            f"Request {request_code} created for call {call_id}, "
            f"tenant {tenant_id}, recipient {mask_phone_number(recipient_phone)}"
        )
        return info_request

    raise IntegrityError(f"Could not allocate a unique request code after {MAX_CODE_ATTEMPTS} attempts")


def get_by_code(request_code: str) -> Optional[InfoRequest]:
    return InfoRequest.objects.filter(request_code=request_code).first()


def find_newest_pending(tenant_id: str, recipient_phone: str) -> Optional[InfoRequest]:
    """The correlation lookup: newest pending request for this tenant and phone."""
    return (
        InfoRequest.objects
        .filter(
            tenant_id=tenant_id,
            recipient_phone=recipient_phone,
            status=InfoRequest.Status.PENDING
        )
        .order_by('-created_at', '-id')
        .first()
    )


def find_overdue(now=None, for_update: bool = False) -> List[InfoRequest]:
    """
    All pending requests whose expires_at has passed.

    With for_update the rows are locked (rows already locked by a concurrent
    transition are skipped); the caller must hold a transaction.
    """
    now = now or timezone.now()
    queryset = InfoRequest.objects.filter(
        status=InfoRequest.Status.PENDING,
        expires_at__lt=now
    ).order_by('expires_at')
    if for_update:
        queryset = queryset.select_for_update(skip_locked=True)
    return list(queryset)


def complete_request(request_id: int, normalized_value: str) -> bool:
    """
    Marks a pending request completed with the normalized reply.

    A second call for the same request is a no-op: the first completion's
    received_value and received_at stay in place.

    Returns:
        True if the row transitioned, False if it was missing or no longer pending
    """
    updated = InfoRequest.objects.filter(
        id=request_id,
        status=InfoRequest.Status.PENDING
    ).update(
        status=InfoRequest.Status.COMPLETED,
        received_value=normalized_value,
        received_at=timezone.now()
    )
    if not updated:
        logger.error(f"Request {request_id} not completed: missing or no longer pending")
        return False

    logger.info(f"Request {request_id} completed")
    return True


def mark_expired(request_id: int) -> bool:
    updated = InfoRequest.objects.filter(
        id=request_id,
        status=InfoRequest.Status.PENDING
    ).update(status=InfoRequest.Status.EXPIRED)
    if updated:
        logger.info(f"Request {request_id} expired")
    else:
        logger.debug(f"Request {request_id} already resolved, not expiring")
    return bool(updated)


def mark_expired_bulk(request_ids: Iterable[int]) -> int:
    request_ids = list(request_ids)
    if not request_ids:
        return 0
    updated = InfoRequest.objects.filter(
        id__in=request_ids,
        status=InfoRequest.Status.PENDING
    ).update(status=InfoRequest.Status.EXPIRED)
    logger.info(f"Expired {updated} of {len(request_ids)} overdue requests")
    return updated


def mark_invalid(request_id: int) -> bool:
    updated = InfoRequest.objects.filter(
        id=request_id,
        status=InfoRequest.Status.PENDING
    ).update(status=InfoRequest.Status.INVALID)
    if updated:
        logger.info(f"Request {request_id} marked invalid")
    return bool(updated)


def record_invalid_reply(request_id: int) -> int:
    """Increments the invalid reply counter and returns the new count."""
    InfoRequest.objects.filter(id=request_id).update(
        invalid_reply_count=F('invalid_reply_count') + 1
    )
    return (
        InfoRequest.objects
        .filter(id=request_id)
        .values_list('invalid_reply_count', flat=True)
        .first()
    ) or 0


def log_message(
    tenant_id: str,
    phone_number: str,
    message_body: str,
    direction: str,
    provider_message_sid: Optional[str] = None,
    request_code: Optional[str] = None,
) -> SmsMessage:
    with transaction.atomic():
        message = SmsMessage.objects.create(
            tenant_id=tenant_id,
            phone_number=phone_number,
            message_body=message_body,
            direction=direction,
            provider_message_sid=provider_message_sid,
            request_code=request_code,
        )
    logger.debug(
        f"Logged {direction} SMS {message.id} for {mask_phone_number(phone_number)} "
        f"(request {request_code or '-'})"
    )
    return message


def tag_message(message_id: int, request_code: str) -> None:
    """Backfills the request code on a message logged before correlation."""
    SmsMessage.objects.filter(id=message_id).update(request_code=request_code)
