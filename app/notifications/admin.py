"""
Django admin configuration for notification models.

Registers:
- Notification (read-only apart from is_read)
- DeviceRegistration
- UserNotificationSettings
- ProjectNotificationPreference
"""

from django.contrib import admin

from notifications.models import (
    DeviceRegistration,
    Notification,
    ProjectNotificationPreference,
    UserNotificationSettings,
)


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    """
    Admin configuration for Notification.

    Provides read-only view of notifications for debugging and support.
    """

    list_display = ["id", "recipient", "kind", "project_id", "is_read", "created_at"]
    list_filter = ["kind", "is_read", "created_at"]
    search_fields = ["recipient__username", "recipient__email", "message", "project_id"]
    readonly_fields = ["id", "recipient", "kind", "message", "project_id", "created_at", "updated_at"]
    raw_id_fields = ["recipient"]
    ordering = ["-created_at"]
    date_hierarchy = "created_at"


@admin.register(DeviceRegistration)
class DeviceRegistrationAdmin(admin.ModelAdmin):
    list_display = ["token", "user", "platform", "language", "updated_at"]
    list_filter = ["platform", "language"]
    search_fields = ["token", "user__username", "user__email"]
    raw_id_fields = ["user"]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(UserNotificationSettings)
class UserNotificationSettingsAdmin(admin.ModelAdmin):
    list_display = ["user", "notifications_enabled", "updated_at"]
    list_filter = ["notifications_enabled"]
    search_fields = ["user__username", "user__email"]
    raw_id_fields = ["user"]


@admin.register(ProjectNotificationPreference)
class ProjectNotificationPreferenceAdmin(admin.ModelAdmin):
    list_display = ["user", "project_id", "kind", "enabled", "updated_at"]
    list_filter = ["kind", "enabled"]
    search_fields = ["user__username", "user__email", "project_id"]
    raw_id_fields = ["user"]
