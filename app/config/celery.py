"""
Celery configuration for the Django application.

Notification dispatch runs as Celery tasks so that the business operation
that triggered an event (adding a transaction, archiving a project) returns
without waiting for recipient resolution or push delivery.

This configuration uses Redis as both the message broker and result backend.
Tasks are auto-discovered from all registered Django apps.

Usage:
    from notifications import notify

    notify(NotificationKind.TRANSACTION_ADDED, context)
    # -> notifications.tasks.dispatch_notification.delay(...)

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings should be prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Celery will look for a tasks.py module in each installed app
app.autodiscover_tasks()
