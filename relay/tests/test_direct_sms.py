"""
Unit tests for free-form SMS sent outside an information request.
"""
import pytest
from unittest.mock import patch

from relay.models import SmsMessage
from relay.services.direct_sms import send_direct_message
from relay.services.errors import (
    CredentialsNotConfiguredError,
    InvalidPayloadError,
    SmsDeliveryError,
)
from relay.services.sms_client import SmsSendError

TENANT_ID = 'tenant-1'
CALLER_PHONE = '+15551234567'


@pytest.mark.django_db
class TestSendDirectMessage:

    @patch('relay.services.direct_sms.send_sms')
    def test_message_sent_and_logged_without_request_code(self, mock_send, tenant_credentials):
        mock_send.return_value = 'SMdirect'

        assert send_direct_message(TENANT_ID, CALLER_PHONE, 'Your order shipped') == 'SMdirect'

        mock_send.assert_called_once_with(CALLER_PHONE, 'Your order shipped', tenant_credentials)
        message = SmsMessage.objects.get()
        assert message.direction == SmsMessage.Direction.OUTBOUND
        assert message.request_code is None
        assert message.provider_message_sid == 'SMdirect'

    @pytest.mark.parametrize('phone_number,message_body,error', [
        ('', 'Hello', 'Missing phone_number or message_body'),
        (CALLER_PHONE, '', 'Missing phone_number or message_body'),
        (CALLER_PHONE, '   ', 'Message cannot be empty'),
        (CALLER_PHONE, 'x' * 1601, 'Message too long (max 1600 characters)'),
    ])
    @patch('relay.services.direct_sms.send_sms')
    def test_rejected_messages(self, mock_send, tenant_credentials, settings, phone_number, message_body, error):
        settings.MAX_PROMPT_LENGTH = 1600

        with pytest.raises(InvalidPayloadError) as exc_info:
            send_direct_message(TENANT_ID, phone_number, message_body)

        assert str(exc_info.value) == error
        assert exc_info.value.status_code == 400
        mock_send.assert_not_called()

    @patch('relay.services.direct_sms.send_sms')
    def test_missing_credentials(self, mock_send, db):
        with pytest.raises(CredentialsNotConfiguredError, match='Twilio credentials not configured'):
            send_direct_message(TENANT_ID, CALLER_PHONE, 'Hello')

        mock_send.assert_not_called()

    @patch('relay.services.direct_sms.send_sms')
    def test_carrier_failure_raises_delivery_error(self, mock_send, tenant_credentials):
        mock_send.side_effect = SmsSendError('Failed to send SMS: 400 invalid number')

        with pytest.raises(SmsDeliveryError) as exc_info:
            send_direct_message(TENANT_ID, CALLER_PHONE, 'Hello')

        assert exc_info.value.status_code == 500
        assert exc_info.value.request_code is None
        assert SmsMessage.objects.count() == 0

    @patch('relay.services.direct_sms.store.log_message')
    @patch('relay.services.direct_sms.send_sms')
    def test_log_failure_still_returns_sid(self, mock_send, mock_log, tenant_credentials):
        mock_send.return_value = 'SMdirect'
        mock_log.side_effect = RuntimeError('insert failed')

        assert send_direct_message(TENANT_ID, CALLER_PHONE, 'Hello') == 'SMdirect'
