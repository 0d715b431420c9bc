"""Django app configuration for notifications."""

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    """Configuration for the notifications app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "notifications"
    verbose_name = "Notifications"

    def ready(self):
        from celery.signals import worker_shutdown

        from notifications.executor import shutdown_push_executor
        from notifications.localization import get_localizer

        # Fail at startup, not on the first event, if a bundle is incomplete
        get_localizer().validate()

        worker_shutdown.connect(shutdown_push_executor, weak=False)
