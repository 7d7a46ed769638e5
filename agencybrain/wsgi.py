"""
WSGI config for the AgencyBrain backend.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "agencybrain.settings")

application = get_wsgi_application()
