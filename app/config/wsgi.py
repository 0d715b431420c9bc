"""
WSGI config for the Django application.

Serves the admin interface used to inspect stored notifications, registered
devices and notification preferences. Dispatch itself runs in Celery workers.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/wsgi/
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
