"""
Parsing of the outbound trigger payload.

Two callers post to the agent webhook:

- the voice agent, with a nested payload::

    {"call": {"call_id": "...", "from_number": "+1..."},
     "name": "request_info",
     "args": {"message": "...", "info_type": "email"}}

- the test harness, with a flat payload::

    {"call_id": "...", "caller_number": "+1...", "message": "...",
     "info_type": "email", "tenant_id": "..."}

Both are reduced to an OutboundRequest before the orchestrator sees them.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from django.conf import settings

from relay.services.errors import InvalidPayloadError
from relay.services.phone import is_valid_e164

logger = logging.getLogger(__name__)

DEFAULT_INFO_TYPE = 'general'


@dataclass(frozen=True)
class OutboundRequest:
    tenant_id: str
    call_id: str
    recipient_phone: str
    prompt_message: str
    info_type: str = DEFAULT_INFO_TYPE


def _as_text(value) -> str:
    if value is None:
        return ''
    return str(value).strip()


def parse_trigger_payload(payload, tenant_id: Optional[str] = None) -> OutboundRequest:
    """
    Normalizes an agent-style or flat trigger payload.

    Args:
        payload: Decoded JSON body
        tenant_id: Tenant taken from the URL path, if the route carries one;
            it wins over a tenant_id in the payload

    Returns:
        OutboundRequest

    Raises:
        InvalidPayloadError: If required fields are missing or malformed
    """
    if not isinstance(payload, dict) or not payload:
        raise InvalidPayloadError('Missing required fields')

    call = payload.get('call')
    if isinstance(call, dict):
        args = payload.get('args') if isinstance(payload.get('args'), dict) else {}
        call_id = _as_text(call.get('call_id'))
        recipient_phone = _as_text(call.get('from_number'))
        message = _as_text(args.get('message'))
        info_type = _as_text(args.get('info_type'))
        logger.debug(f"Parsed agent payload for call {call_id}")
    else:
        call_id = _as_text(payload.get('call_id'))
        recipient_phone = _as_text(payload.get('caller_number'))
        message = _as_text(payload.get('message'))
        info_type = _as_text(payload.get('info_type'))
        logger.debug(f"Parsed flat payload for call {call_id}")

    tenant = _as_text(tenant_id) or _as_text(payload.get('tenant_id'))

    missing = [
        name for name, value in (
            ('call_id', call_id),
            ('caller_number', recipient_phone),
            ('message', message),
            ('tenant_id', tenant),
        )
        if not value
    ]
    if missing:
        raise InvalidPayloadError(f"Missing required fields: {', '.join(missing)}")

    if not is_valid_e164(recipient_phone):
        raise InvalidPayloadError('caller_number must be in E.164 format')

    if len(message) > settings.MAX_PROMPT_LENGTH:
        raise InvalidPayloadError(
            f'Message too long (max {settings.MAX_PROMPT_LENGTH} characters)'
        )

    return OutboundRequest(
        tenant_id=tenant,
        call_id=call_id,
        recipient_phone=recipient_phone,
        prompt_message=message,
        info_type=info_type or DEFAULT_INFO_TYPE,
    )
