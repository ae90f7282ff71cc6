"""
WSGI config for the TaskHive backend.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'taskhive.settings')

application = get_wsgi_application()
