"""
Notification system models.

This module defines the enumerations and persisted state of the
notification engine:
- NotificationKind: Closed set of event categories that produce notifications
- Role: Project participant roles consulted by the permission matrix
- Notification: In-app notification record (the Notification Store)
- DeviceRegistration: Push target (device token + language) owned by one user
- UserNotificationSettings: Global notification toggle per user
- ProjectNotificationPreference: Per-project, per-kind opt-out

Design Decisions:
    - Projects and participants live outside this app; project ids are
      stored as opaque strings
    - Device tokens are unique; re-registration updates in place
    - Preferences are opt-out: a missing row means "no explicit preference"
    - Notifications are immutable apart from is_read

Usage:
    from notifications.models import DeviceRegistration, NotificationKind

    DeviceRegistration.objects.update_or_create(
        token=token,
        defaults={"user": user, "language": "ru"},
    )
"""

from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models

from core.models import BaseModel


# =============================================================================
# Enums
# =============================================================================


class NotificationKind(models.TextChoices):
    """
    Category of a notification event.

    Values double as the prefix of template keys in the locale bundles
    (e.g. "transaction_added.title", "transaction_added.body.self").
    """

    TRANSACTION_ADDED = "transaction_added", "Transaction added"
    TRANSACTION_UPDATED = "transaction_updated", "Transaction updated"
    TRANSACTION_REMOVED = "transaction_removed", "Transaction removed"
    BUDGET_THRESHOLD = "budget_threshold", "Budget threshold reached"
    PROJECT_EDITED = "project_edited", "Project edited"
    PROJECT_REMOVED = "project_removed", "Project removed"
    PROJECT_ARCHIVED = "project_archived", "Project archived"
    PROJECT_UNARCHIVED = "project_unarchived", "Project unarchived"
    PARTICIPANT_ROLE_CHANGED = "participant_role_changed", "Participant role changed"
    PARTICIPANT_REMOVED = "participant_removed", "Participant removed"
    INVITE_SENT = "invite_sent", "Invitation sent"
    INVITE_ACCEPTED = "invite_accepted", "Invitation accepted"
    SYSTEM_ALERT = "system_alert", "System alert"


class Role(models.TextChoices):
    """
    Participant role within a project.

    Listed from most to least privileged. The ordering is informational;
    the permission matrix never infers one role's rights from another's.
    """

    OWNER = "owner", "Owner"
    EDITOR = "editor", "Editor"
    VIEWER = "viewer", "Viewer"


class DevicePlatform(models.TextChoices):
    """Platform a device token was issued for."""

    ANDROID = "android", "Android"
    IOS = "ios", "iOS"
    WEB = "web", "Web"


# =============================================================================
# Notification Store
# =============================================================================


class Notification(BaseModel):
    """
    In-app notification record for a user.

    Written by the dispatcher exactly once per eligible recipient per
    dispatch, whatever happened to the push deliveries.

    Fields:
        id: UUID primary key
        recipient: User the notification belongs to
        kind: NotificationKind of the triggering event
        message: Rendered "title\\nbody" text in the recipient's language
        project_id: Project the event belongs to (null for system events)
        is_read: Whether the recipient has read it

    Inherits from BaseModel:
        created_at, updated_at
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
        help_text="User receiving this notification",
    )

    kind = models.CharField(
        max_length=40,
        choices=NotificationKind.choices,
        help_text="Kind of event that produced this notification",
    )

    message = models.TextField(
        help_text="Fully rendered notification text",
    )

    project_id = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        db_index=True,
        help_text="Project the event belongs to (opaque external id)",
    )

    is_read = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether recipient has read this notification",
    )

    class Meta:
        db_table = "notifications_notification"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["recipient", "is_read", "-created_at"],
                name="notif_recipient_unread_idx",
            ),
        ]

    def __str__(self) -> str:
        read_status = "read" if self.is_read else "unread"
        return f"Notification({self.kind}) -> User {self.recipient_id} [{read_status}]"


# =============================================================================
# Push Targets
# =============================================================================


class DeviceRegistration(BaseModel):
    """
    A device that can receive push notifications.

    The token is unique, so a token has at most one owner at any time.
    Registering a known token again moves it to the new owner and language
    (see DeviceService.register_device).
    """

    token = models.CharField(
        max_length=256,
        unique=True,
        help_text="Push provider device token",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="device_registrations",
    )

    language = models.CharField(
        max_length=16,
        default="en",
        help_text="Language code used to localize pushes for this device",
    )

    platform = models.CharField(
        max_length=16,
        choices=DevicePlatform.choices,
        default=DevicePlatform.ANDROID,
    )

    class Meta:
        db_table = "notifications_device_registration"
        # Most recently refreshed device first; the first row per user is the
        # user's primary registration.
        ordering = ["-updated_at"]
        indexes = [
            models.Index(fields=["user", "-updated_at"], name="notif_device_user_idx"),
        ]

    def __str__(self) -> str:
        return f"Device({self.token[:8]}..., user={self.user_id}, {self.language})"


# =============================================================================
# Preference Models
# =============================================================================


class UserNotificationSettings(BaseModel):
    """
    Global notification toggle for a user.

    A user without a row has notifications enabled.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="notification_settings",
    )

    notifications_enabled = models.BooleanField(
        default=True,
        help_text="Master switch for all notifications",
    )

    class Meta:
        db_table = "notifications_user_settings"
        verbose_name = "user notification settings"
        verbose_name_plural = "user notification settings"

    def __str__(self) -> str:
        status = "enabled" if self.notifications_enabled else "disabled"
        return f"NotificationSettings(user={self.user_id}, {status})"


class ProjectNotificationPreference(BaseModel):
    """
    Explicit per-project preference for one notification kind.

    Only explicit choices are stored. enabled=False opts the user out of
    that kind for that project; a missing row leaves the kind enabled.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="project_notification_preferences",
    )

    project_id = models.CharField(
        max_length=64,
        help_text="Project the preference applies to (opaque external id)",
    )

    kind = models.CharField(
        max_length=40,
        choices=NotificationKind.choices,
    )

    enabled = models.BooleanField(default=True)

    class Meta:
        db_table = "notifications_project_preference"
        constraints = [
            models.UniqueConstraint(
                fields=["user", "project_id", "kind"],
                name="unique_user_project_kind_pref",
            ),
        ]

    def __str__(self) -> str:
        status = "enabled" if self.enabled else "disabled"
        return (
            f"ProjectPreference(user={self.user_id}, project={self.project_id}, "
            f"{self.kind}={status})"
        )
