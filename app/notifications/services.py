"""
Notification service layer.

Services:
    NotificationService: In-app notification store (create, list, read, delete)
    DeviceService: Device registration upsert and removal
    PreferenceService: Global toggle and per-project preferences

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures return ServiceResult.failure()
    - Database errors propagate as exceptions

Usage:
    from notifications.services import DeviceService, NotificationService

    DeviceService.register_device(user, token="fcm-token", language="ru")

    result = NotificationService.mark_as_read(notification_id, user)
    if not result.success:
        logger.info(result.error_code)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.utils import timezone

from core.services import BaseService, ServiceResult

from notifications.models import (
    DevicePlatform,
    DeviceRegistration,
    Notification,
    NotificationKind,
    ProjectNotificationPreference,
    UserNotificationSettings,
)

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractBaseUser as User
    from django.db.models import QuerySet


class NotificationService(BaseService):
    """
    In-app notification store.

    Methods:
        create_notification: Persist one notification for a user
        list_for_user: Newest-first notifications of a user
        mark_as_read: Mark one notification as read (owner only)
        mark_all_as_read: Mark every unread notification of a user as read
        delete_notification: Delete one notification (owner only)
    """

    @classmethod
    def create_notification(
        cls,
        user_id: int,
        kind: str,
        message: str,
        project_id: str | None = None,
    ) -> ServiceResult[Notification]:
        """
        Create an in-app notification.

        Args:
            user_id: Recipient user id
            kind: NotificationKind value
            message: Rendered text
            project_id: Project the event belongs to, if any

        Returns:
            ServiceResult with the created Notification

        Error codes:
            INVALID_KIND: kind is not a NotificationKind
        """
        if kind not in NotificationKind.values:
            return ServiceResult.failure(
                f"Unknown notification kind: {kind}",
                error_code="INVALID_KIND",
            )

        notification = Notification.objects.create(
            recipient_id=user_id,
            kind=kind,
            message=message,
            project_id=project_id,
        )
        cls.get_logger().debug(
            f"Created {kind} notification {notification.id} for user {user_id}"
        )
        return ServiceResult.success(notification)

    @classmethod
    def list_for_user(cls, user: User, unread_only: bool = False) -> QuerySet[Notification]:
        queryset = Notification.objects.filter(recipient=user)
        if unread_only:
            queryset = queryset.filter(is_read=False)
        return queryset.order_by("-created_at")

    @classmethod
    def mark_as_read(cls, notification_id, user: User) -> ServiceResult[Notification]:
        """
        Mark a single notification as read.

        Idempotent: marking an already-read notification succeeds.

        Error codes:
            NOT_FOUND: No notification with that id
            NOT_OWNER: User doesn't own the notification
        """
        notification = cls._get_owned(notification_id, user)
        if isinstance(notification, ServiceResult):
            return notification

        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read", "updated_at"])
            cls.get_logger().debug(f"Marked notification {notification.id} as read")

        return ServiceResult.success(notification)

    @classmethod
    def mark_all_as_read(cls, user: User) -> ServiceResult[int]:
        """Mark all user's unread notifications as read; returns the count."""
        count = Notification.objects.filter(
            recipient=user,
            is_read=False,
        ).update(is_read=True, updated_at=timezone.now())

        cls.get_logger().info(f"Marked {count} notifications as read for user {user.pk}")
        return ServiceResult.success(count)

    @classmethod
    def delete_notification(cls, notification_id, user: User) -> ServiceResult[bool]:
        """
        Delete a notification owned by user.

        Error codes:
            NOT_FOUND: No notification with that id
            NOT_OWNER: User doesn't own the notification
        """
        notification = cls._get_owned(notification_id, user)
        if isinstance(notification, ServiceResult):
            return notification

        notification.delete()
        cls.get_logger().info(f"Deleted notification {notification_id} for user {user.pk}")
        return ServiceResult.success(True)

    @classmethod
    def _get_owned(cls, notification_id, user: User) -> Notification | ServiceResult:
        notification = Notification.objects.filter(id=notification_id).first()
        if notification is None:
            return ServiceResult.failure("Notification not found", error_code="NOT_FOUND")

        if notification.recipient_id != user.pk:
            cls.get_logger().warning(
                f"User {user.pk} attempted to access notification {notification.id} "
                f"owned by user {notification.recipient_id}"
            )
            return ServiceResult.failure(
                "Cannot modify notification you don't own",
                error_code="NOT_OWNER",
            )
        return notification


class DeviceService(BaseService):
    """Device registrations used as push targets."""

    @classmethod
    def register_device(
        cls,
        user: User,
        token: str,
        language: str = "en",
        platform: str = DevicePlatform.ANDROID,
    ) -> ServiceResult[DeviceRegistration]:
        """
        Register a device token for user, or refresh an existing one.

        The token is the identity: a known token is moved to this user and
        gets the new language and platform instead of a second row.

        Error codes:
            INVALID_TOKEN: Empty token
            INVALID_PLATFORM: Unknown platform
        """
        token = (token or "").strip()
        if not token:
            return ServiceResult.failure("Device token is required", error_code="INVALID_TOKEN")
        if platform not in DevicePlatform.values:
            return ServiceResult.failure(
                f"Unknown platform: {platform}", error_code="INVALID_PLATFORM"
            )

        device, created = DeviceRegistration.objects.update_or_create(
            token=token,
            defaults={"user": user, "language": language or "en", "platform": platform},
        )

        action = "Registered" if created else "Updated"
        cls.get_logger().info(
            f"{action} {platform} device {token[:8]}... for user {user.pk} ({device.language})"
        )
        return ServiceResult.success(device)

    @classmethod
    def unregister_device(cls, token: str) -> ServiceResult[bool]:
        """
        Error codes:
            NOT_FOUND: Token is not registered
        """
        deleted, _ = DeviceRegistration.objects.filter(token=token).delete()
        if not deleted:
            return ServiceResult.failure("Device not registered", error_code="NOT_FOUND")
        cls.get_logger().info(f"Unregistered device {token[:8]}...")
        return ServiceResult.success(True)


class PreferenceService(BaseService):
    """
    Notification preferences.

    Methods:
        set_global_enabled: Master switch for a user
        set_project_preferences: Per-kind choices for one project
        get_project_preferences: Explicit choices for one project
    """

    @classmethod
    def set_global_enabled(
        cls, user: User, enabled: bool
    ) -> ServiceResult[UserNotificationSettings]:
        settings_row, created = UserNotificationSettings.objects.update_or_create(
            user=user,
            defaults={"notifications_enabled": enabled},
        )

        action = "created" if created else "updated"
        cls.get_logger().info(
            f"Notification settings {action} for user {user.pk}: enabled={enabled}"
        )
        return ServiceResult.success(settings_row)

    @classmethod
    def set_project_preferences(
        cls,
        user: User,
        project_id: str,
        preferences: dict[str, bool],
    ) -> ServiceResult[dict[str, bool]]:
        """
        Store explicit per-kind choices for a project.

        Kinds not mentioned keep their current state. All rows are written
        in one transaction.

        Args:
            user: Preference owner
            project_id: Project the choices apply to
            preferences: {kind: enabled}

        Returns:
            ServiceResult with all explicit choices for the project

        Error codes:
            INVALID_KIND: One or more keys are not NotificationKind values
        """
        unknown = sorted(k for k in preferences if k not in NotificationKind.values)
        if unknown:
            return ServiceResult.failure(
                "Unknown notification kinds",
                error_code="INVALID_KIND",
                errors={"kinds": unknown},
            )

        with cls.atomic():
            for kind, enabled in preferences.items():
                ProjectNotificationPreference.objects.update_or_create(
                    user=user,
                    project_id=project_id,
                    kind=kind,
                    defaults={"enabled": bool(enabled)},
                )

        cls.get_logger().info(
            f"Updated {len(preferences)} preferences for user {user.pk} "
            f"in project {project_id}"
        )
        return cls.get_project_preferences(user, project_id)

    @classmethod
    def get_project_preferences(cls, user: User, project_id: str) -> ServiceResult[dict[str, bool]]:
        rows = ProjectNotificationPreference.objects.filter(
            user=user, project_id=project_id
        ).values_list("kind", "enabled")
        return ServiceResult.success(dict(rows))
