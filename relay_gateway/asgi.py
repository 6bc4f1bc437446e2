"""
ASGI config for relay_gateway project.
"""
import os
from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'relay_gateway.settings')
application = get_asgi_application()
