"""
Unit tests for trigger payload parsing.
"""
import pytest

from relay.services.errors import InvalidPayloadError
from relay.services.payloads import OutboundRequest, parse_trigger_payload


class TestAgentPayload:

    def test_nested_payload_with_path_tenant(self, agent_payload):
        outbound = parse_trigger_payload(agent_payload, tenant_id='tenant-1')

        assert outbound == OutboundRequest(
            tenant_id='tenant-1',
            call_id='call_abc123',
            recipient_phone='+15551234567',
            prompt_message='Please reply with your email address.',
            info_type='email',
        )

    def test_info_type_defaults_to_general(self, agent_payload):
        del agent_payload['args']['info_type']

        outbound = parse_trigger_payload(agent_payload, tenant_id='tenant-1')

        assert outbound.info_type == 'general'

    def test_missing_args_reports_message(self, agent_payload):
        del agent_payload['args']

        with pytest.raises(InvalidPayloadError, match='message'):
            parse_trigger_payload(agent_payload, tenant_id='tenant-1')


class TestFlatPayload:

    def test_flat_payload_with_body_tenant(self, flat_payload):
        outbound = parse_trigger_payload(flat_payload)

        assert outbound.tenant_id == 'tenant-1'
        assert outbound.call_id == 'call_test_001'
        assert outbound.recipient_phone == '+15551234567'
        assert outbound.info_type == 'account_number'

    def test_path_tenant_wins_over_body(self, flat_payload):
        outbound = parse_trigger_payload(flat_payload, tenant_id='tenant-path')

        assert outbound.tenant_id == 'tenant-path'

    def test_values_are_trimmed(self, flat_payload):
        flat_payload['message'] = '  Reply please  '

        assert parse_trigger_payload(flat_payload).prompt_message == 'Reply please'


class TestPayloadErrors:

    @pytest.mark.parametrize('payload', [None, {}, [], 'text'])
    def test_empty_or_non_object(self, payload):
        with pytest.raises(InvalidPayloadError):
            parse_trigger_payload(payload, tenant_id='tenant-1')

    @pytest.mark.parametrize('field', ['call_id', 'caller_number', 'message'])
    def test_missing_required_field(self, flat_payload, field):
        del flat_payload[field]

        with pytest.raises(InvalidPayloadError, match=field) as exc_info:
            parse_trigger_payload(flat_payload)

        assert exc_info.value.status_code == 400

    def test_missing_tenant(self, flat_payload):
        del flat_payload['tenant_id']

        with pytest.raises(InvalidPayloadError, match='tenant_id'):
            parse_trigger_payload(flat_payload)

    def test_non_e164_phone(self, flat_payload):
        flat_payload['caller_number'] = '555-123-4567'

        with pytest.raises(InvalidPayloadError, match='E.164'):
            parse_trigger_payload(flat_payload)

    def test_message_too_long(self, flat_payload, settings):
        settings.MAX_PROMPT_LENGTH = 1600
        flat_payload['message'] = 'x' * 1601

        with pytest.raises(InvalidPayloadError, match='too long'):
            parse_trigger_payload(flat_payload)
