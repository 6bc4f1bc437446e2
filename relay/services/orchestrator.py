"""
Outbound request orchestration.

The agent's call is blocked on this answer, so the webhook does not return
until the request is resolved: it creates the request, texts the prompt and
then polls the store until the reply lands, the request is expired, or the
wait ceiling passes.
"""
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from django.conf import settings

from relay.models import InfoRequest, SmsMessage, TenantCredentials
from relay.services import credits, store, templates
from relay.services.errors import (
    CredentialsNotConfiguredError,
    InsufficientCreditError,
    InvalidPayloadError,
    SmsDeliveryError,
)
from relay.services.payloads import OutboundRequest
from relay.services.phone import mask_phone_number
from relay.services.sms_client import SmsSendError, send_sms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestOutcome:
    """Result of a request that reached the wait loop."""
    request_code: str
    status: str
    received_value: Optional[str] = None
    received_at: Optional[datetime] = None
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status == InfoRequest.Status.COMPLETED

    @property
    def http_status(self) -> int:
        return 200 if self.succeeded else 408

    def to_response(self) -> dict:
        if self.succeeded:
            return {
                'success': True,
                'request_id': self.request_code,
                'value': self.received_value,
                'received_at': self.received_at.isoformat() if self.received_at else None,
            }
        if self.timed_out:
            return {
                'success': False,
                'request_id': self.request_code,
                'error': 'Request timed out',
            }
        return {
            'success': False,
            'request_id': self.request_code,
            'status': self.status,
            'error': 'Request expired or invalid',
        }


def _send_timeout_notice(info_request: InfoRequest, credentials: TenantCredentials) -> None:
    """Tells the recipient a request this call expired is gone. Never raises."""
    body = templates.timeout_sms()
    try:
        message_sid = send_sms(info_request.recipient_phone, body, credentials)
        store.log_message(
            tenant_id=info_request.tenant_id,
            phone_number=info_request.recipient_phone,
            message_body=body,
            direction=SmsMessage.Direction.OUTBOUND,
            provider_message_sid=message_sid,
            request_code=info_request.request_code,
        )
    except Exception as e:
        logger.error(
            f"Failed to send timeout SMS for request {info_request.request_code}: {e}",
            exc_info=True
        )


def wait_for_resolution(
    request_code: str,
    deadline: float,
    poll_interval: float,
    sleep: Callable[[float], None],
    clock: Callable[[], float],
) -> Optional[InfoRequest]:
    """
    Polls the store until the request leaves pending or the deadline passes.

    Returns:
        The request in a terminal status, or None if the deadline passed first
    """
    polls = 0
    while clock() < deadline:
        sleep(poll_interval)
        polls += 1

        info_request = store.get_by_code(request_code)
        if info_request is None:
            logger.warning(f"Request {request_code} disappeared while waiting")
            continue

        if info_request.status in store.TERMINAL_STATUSES:
            logger.info(f"Request {request_code} resolved as {info_request.status} after {polls} polls")
            return info_request

    logger.info(f"Request {request_code} still pending after {polls} polls")
    return None


def request_information(
    outbound: OutboundRequest,
    poll_interval: Optional[float] = None,
    timeout: Optional[float] = None,
    sleep: Optional[Callable[[float], None]] = None,
    clock: Optional[Callable[[], float]] = None,
) -> RequestOutcome:
    """
    Runs one SMS round trip for the agent.

    Workflow:
    1. Check required fields
    2. Ensure the tenant has a credit account and at least one credit
    3. Load the tenant's carrier credentials
    4. Create the pending request
    5. Send the prompt SMS (expire the request if that fails)
    6. Debit one credit and log the outbound message
    7. Poll until completed/expired/invalid or the wait ceiling
    8. On ceiling, expire the request, text the timeout notice and report a timeout

    Args:
        outbound: Normalized trigger payload
        poll_interval: Seconds between polls (default WAIT_POLL_INTERVAL_SECONDS)
        timeout: Wait ceiling in seconds from entry (default WAIT_TIMEOUT_SECONDS)
        sleep: Sleep function, time.sleep by default
        clock: Monotonic clock, time.monotonic by default

    Returns:
        RequestOutcome for the agent

    Raises:
        InvalidPayloadError: Required fields missing
        InsufficientCreditError: Balance below one credit
        CredentialsNotConfiguredError: Tenant has no carrier credentials
        SmsDeliveryError: The carrier refused the prompt SMS
    """
    poll_interval = settings.WAIT_POLL_INTERVAL_SECONDS if poll_interval is None else poll_interval
    timeout = settings.WAIT_TIMEOUT_SECONDS if timeout is None else timeout
    sleep = sleep or time.sleep
    clock = clock or time.monotonic

    deadline = clock() + timeout

    # 1. Required fields
    if not all((outbound.tenant_id, outbound.call_id, outbound.recipient_phone, outbound.prompt_message)):
        raise InvalidPayloadError('Missing required fields')

    tenant_id = outbound.tenant_id
    logger.info(
        f"Outbound request for call {outbound.call_id}, tenant {tenant_id}, "
        f"recipient {mask_phone_number(outbound.recipient_phone)}"
    )

    # 2. Credit
    if not credits.has_credit(tenant_id):
        logger.warning(f"Tenant {tenant_id} has insufficient credits")
        raise InsufficientCreditError('Insufficient credits')

    # 3. Carrier credentials
    credentials = TenantCredentials.objects.filter(tenant_id=tenant_id).first()
    if credentials is None:
        logger.error(f"Tenant {tenant_id} has no carrier credentials configured")
        raise CredentialsNotConfiguredError('Twilio credentials not configured')

    # 4. Pending request
    info_request = store.create_request(
        tenant_id=tenant_id,
        call_id=outbound.call_id,
        recipient_phone=outbound.recipient_phone,
        prompt_message=outbound.prompt_message,
        info_type=outbound.info_type,
    )
    request_code = info_request.request_code

    # 5. Prompt SMS
    try:
        message_sid = send_sms(outbound.recipient_phone, outbound.prompt_message, credentials)
    except SmsSendError as e:
        logger.error(f"Prompt SMS for request {request_code} failed: {e}")
        store.mark_expired(info_request.id)
        raise SmsDeliveryError('Failed to send SMS', request_code=request_code) from e

    # 6. Billing and audit
    credits.debit_for_sms(tenant_id, request_code)
    try:
        store.log_message(
            tenant_id=tenant_id,
            phone_number=outbound.recipient_phone,
            message_body=outbound.prompt_message,
            direction=SmsMessage.Direction.OUTBOUND,
            provider_message_sid=message_sid,
            request_code=request_code,
        )
    except Exception as e:
        # Prompt already delivered, so the log row is best effort
        logger.error(f"Failed to log prompt SMS for request {request_code}: {e}", exc_info=True)

    # 7. Wait
    resolved = wait_for_resolution(request_code, deadline, poll_interval, sleep, clock)
    if resolved is not None:
        return RequestOutcome(
            request_code=request_code,
            status=resolved.status,
            received_value=resolved.received_value,
            received_at=resolved.received_at,
        )

    # 8. Ceiling reached
    if store.mark_expired(info_request.id):
        _send_timeout_notice(info_request, credentials)
    else:
        # Resolved between the last poll and the ceiling
        latest = store.get_by_code(request_code)
        if latest is not None and latest.status in store.TERMINAL_STATUSES:
            return RequestOutcome(
                request_code=request_code,
                status=latest.status,
                received_value=latest.received_value,
                received_at=latest.received_at,
            )

    logger.warning(f"Request {request_code} timed out waiting for a reply")
    return RequestOutcome(
        request_code=request_code,
        status=InfoRequest.Status.EXPIRED,
        timed_out=True,
    )
