"""
WSGI entrypoint for Vee4.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'vee4_core.settings')

application = get_wsgi_application()
