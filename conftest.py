import os
import sys
import pytest
import django

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'relay_gateway.settings')


def pytest_configure(config):
    """Configure Django settings for pytest."""
    from django.conf import settings

    # Only configure if not already configured
    if not settings.configured:
        settings.configure(
            DEBUG=True,
            DATABASES={
                'default': {
                    'ENGINE': 'django.db.backends.sqlite3',
                    'NAME': ':memory:',
                }
            },
            INSTALLED_APPS=[
                'django.contrib.admin',
                'django.contrib.contenttypes',
                'django.contrib.auth',
                'django.contrib.sessions',
                'django.contrib.messages',
                'rest_framework',
                'relay',
            ],
            ROOT_URLCONF='relay_gateway.urls',
            SECRET_KEY='test-secret-key',
            USE_TZ=True,
            # Celery settings for tests
            CELERY_BROKER_URL='memory://',
            CELERY_RESULT_BACKEND='cache+memory://',
            CELERY_TASK_ALWAYS_EAGER=True,
            CELERY_TASK_EAGER_PROPAGATES=True,
            # Carrier settings
            TWILIO_API_BASE_URL='https://api.twilio.com/2010-04-01',
            SMS_SEND_TIMEOUT=30.0,
            # Lifecycle settings
            REQUEST_TTL_SECONDS=300,
            WAIT_POLL_INTERVAL_SECONDS=2.0,
            WAIT_TIMEOUT_SECONDS=300.0,
            MAX_INVALID_REPLIES=3,
            MAX_PROMPT_LENGTH=1600,
            FREE_SIGNUP_CREDITS=20,
        )

        django.setup()
    else:
        settings.CELERY_BROKER_URL = 'memory://'
        settings.CELERY_RESULT_BACKEND = 'cache+memory://'
        settings.CELERY_TASK_ALWAYS_EAGER = True
        settings.CELERY_TASK_EAGER_PROPAGATES = True


TENANT_ID = 'tenant-1'
TENANT_PHONE = '+15550001111'
CALLER_PHONE = '+15551234567'


class FakeClock:
    """Monotonic clock whose time only moves when sleep() is called."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def tenant_credentials(db):
    """Carrier credentials for the default test tenant."""
    from relay.models import TenantCredentials

    return TenantCredentials.objects.create(
        tenant_id=TENANT_ID,
        account_sid='ACtest0000000000000000000000000000',
        auth_token='test-auth-token',
        phone_number=TENANT_PHONE,
    )


@pytest.fixture
def outbound_request():
    """A normalized trigger asking the caller for an email address."""
    from relay.services.payloads import OutboundRequest

    return OutboundRequest(
        tenant_id=TENANT_ID,
        call_id='call_abc123',
        recipient_phone=CALLER_PHONE,
        prompt_message='Please reply with your email address.',
        info_type='email',
    )


@pytest.fixture
def agent_payload():
    """Nested payload as posted by the voice agent."""
    return {
        'call': {
            'call_id': 'call_abc123',
            'from_number': CALLER_PHONE,
            'agent_id': 'agent_42',
        },
        'name': 'request_info',
        'args': {
            'message': 'Please reply with your email address.',
            'info_type': 'email',
        },
    }


@pytest.fixture
def flat_payload():
    """Flat payload as posted by the test harness."""
    return {
        'call_id': 'call_test_001',
        'caller_number': CALLER_PHONE,
        'message': 'Please reply with your account number.',
        'info_type': 'account_number',
        'tenant_id': TENANT_ID,
    }
