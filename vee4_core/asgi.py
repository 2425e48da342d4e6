"""
ASGI entrypoint for Vee4.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'vee4_core.settings')

application = get_asgi_application()
