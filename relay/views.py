"""
API views for the SMS relay gateway.
"""
import logging
import uuid
from django.http import HttpResponse
from rest_framework.exceptions import APIException, ParseError, UnsupportedMediaType
from rest_framework.negotiation import DefaultContentNegotiation
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from django.views.decorators.csrf import csrf_exempt
from django.utils.decorators import method_decorator

from relay.services.correlator import handle_inbound_sms
from relay.services.direct_sms import send_direct_message
from relay.services.errors import RelayError
from relay.services.orchestrator import request_information
from relay.services.payloads import parse_trigger_payload
from relay.services.sweeper import expire_overdue_requests

logger = logging.getLogger(__name__)

EMPTY_TWIML = '<?xml version="1.0" encoding="UTF-8"?><Response></Response>'


class FirstRendererNegotiation(DefaultContentNegotiation):
    """Ignores the Accept header and always renders with the first renderer."""

    def select_renderer(self, request, renderers, format_suffix=None):
        return (renderers[0], renderers[0].media_type)


class WebhookView(APIView):
    """
    Base for machine-to-machine webhooks.

    Callers are the voice agent, the carrier and the scheduler. None of them
    log in, and a stray Authorization or Accept header must not turn into
    403 or 406.
    """

    authentication_classes = []
    permission_classes = []
    content_negotiation_class = FirstRendererNegotiation


def _malformed_json_response(error, correlation_id):
    logger.warning(
        f"Malformed JSON payload: {error}, "
        f"correlation_id={correlation_id}"
    )
    return Response(
        {
            'success': False,
            'error': 'Malformed JSON payload',
            'correlation_id': correlation_id
        },
        status=status.HTTP_400_BAD_REQUEST
    )


def _relay_error_response(error, correlation_id):
    logger.warning(
        f"Request rejected ({error.status_code}): {error.message}, "
        f"correlation_id={correlation_id}"
    )
    body = {
        'success': False,
        'error': error.message,
        'correlation_id': correlation_id
    }
    if error.request_code:
        body['request_id'] = error.request_code
    return Response(body, status=error.status_code)


def _internal_error_response(error, correlation_id):
    logger.error(
        f"Error processing request: {error}, "
        f"correlation_id={correlation_id}",
        exc_info=True
    )
    return Response(
        {
            'success': False,
            'error': 'Internal server error',
            'correlation_id': correlation_id
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


@method_decorator(csrf_exempt, name='dispatch')
class AgentRequestView(WebhookView):
    """
    Webhook the voice agent calls when it needs information from the caller.

    POST /webhooks/agent/
    POST /webhooks/agent/<tenant_id>/
    - Accepts the agent's nested payload or the flat test payload
    - Texts the prompt to the caller and blocks until the reply is in
    - Returns the validated value, or why there is none
    """

    def post(self, request, tenant_id=None):
        """
        Handle an information request from the agent.

        Returns:
            200 OK: Reply received and validated
            400 Bad Request: Malformed payload or missing carrier credentials
            402 Payment Required: Tenant is out of credits
            408 Request Timeout: Request expired, invalid, or timed out
            500 Internal Server Error: Prompt SMS failed or unexpected error
        """
        correlation_id = str(uuid.uuid4())

        try:
            outbound = parse_trigger_payload(request.data, tenant_id=tenant_id)
            logger.info(
                f"Agent request for call {outbound.call_id} accepted, "
                f"correlation_id={correlation_id}"
            )

            outcome = request_information(outbound)

            logger.info(
                f"Agent request {outcome.request_code} finished with {outcome.status}, "
                f"correlation_id={correlation_id}"
            )
            return Response(outcome.to_response(), status=outcome.http_status)

        except (ParseError, UnsupportedMediaType) as e:
            return _malformed_json_response(e, correlation_id)
        except RelayError as e:
            return _relay_error_response(e, correlation_id)
        except Exception as e:
            return _internal_error_response(e, correlation_id)


@method_decorator(csrf_exempt, name='dispatch')
class DirectSmsView(WebhookView):
    """
    Sends a free-form SMS from the tenant's number.

    POST /webhooks/send/<tenant_id>/
    - JSON body with phone_number and message_body
    """

    def post(self, request, tenant_id):
        """
        Returns:
            200 OK: {"success": true, "message_sid": ...}
            400 Bad Request: Missing, empty or too long message, or missing carrier credentials
            500 Internal Server Error: Carrier refused the message or unexpected error
        """
        correlation_id = str(uuid.uuid4())

        try:
            data = request.data
            if not isinstance(data, dict):
                data = {}

            message_sid = send_direct_message(
                tenant_id=tenant_id,
                phone_number=str(data.get('phone_number') or '').strip(),
                message_body=str(data.get('message_body') or ''),
            )
            return Response(
                {
                    'success': True,
                    'message_sid': message_sid
                },
                status=status.HTTP_200_OK
            )

        except (ParseError, UnsupportedMediaType) as e:
            return _malformed_json_response(e, correlation_id)
        except RelayError as e:
            return _relay_error_response(e, correlation_id)
        except Exception as e:
            return _internal_error_response(e, correlation_id)


@method_decorator(csrf_exempt, name='dispatch')
class InboundSmsView(WebhookView):
    """
    Carrier webhook for inbound SMS.

    POST /webhooks/sms/
    - Form-encoded From, To, Body, MessageSid
    - Always answers 200 with empty TwiML so the carrier never retries
    """

    parser_classes = [FormParser, MultiPartParser]

    def post(self, request):
        try:
            data = request.data
            handle_inbound_sms(
                sender=data.get('From', ''),
                recipient=data.get('To', ''),
                body=data.get('Body', ''),
                message_sid=data.get('MessageSid') or None,
            )
        except APIException as e:
            logger.warning(f"Unreadable inbound SMS payload: {e}")

        return HttpResponse(EMPTY_TWIML, content_type='text/xml', status=status.HTTP_200_OK)


@method_decorator(csrf_exempt, name='dispatch')
class ExpireRequestsView(WebhookView):
    """
    Scheduled trigger for the expiry sweep.

    POST /webhooks/expire/
    """

    def post(self, request):
        expired_count = expire_overdue_requests()
        return Response(
            {
                'success': True,
                'expired_count': expired_count
            },
            status=status.HTTP_200_OK
        )
