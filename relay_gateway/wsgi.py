"""
WSGI config for relay_gateway project.

The outbound agent webhook holds its worker for up to WAIT_TIMEOUT_SECONDS,
so run it under a server whose worker timeout exceeds that ceiling.
"""
import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'relay_gateway.settings')
application = get_wsgi_application()
