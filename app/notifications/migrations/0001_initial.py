"""
Initial notification schema.

Creates:
    - Notification: in-app notification records
    - DeviceRegistration: push targets, unique per token
    - UserNotificationSettings: global toggle per user
    - ProjectNotificationPreference: per-project, per-kind opt-out
"""

import uuid

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


KIND_CHOICES = [
    ("transaction_added", "Transaction added"),
    ("transaction_updated", "Transaction updated"),
    ("transaction_removed", "Transaction removed"),
    ("budget_threshold", "Budget threshold reached"),
    ("project_edited", "Project edited"),
    ("project_removed", "Project removed"),
    ("project_archived", "Project archived"),
    ("project_unarchived", "Project unarchived"),
    ("participant_role_changed", "Participant role changed"),
    ("participant_removed", "Participant removed"),
    ("invite_sent", "Invitation sent"),
    ("invite_accepted", "Invitation accepted"),
    ("system_alert", "System alert"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "kind",
                    models.CharField(
                        choices=KIND_CHOICES,
                        help_text="Kind of event that produced this notification",
                        max_length=40,
                    ),
                ),
                ("message", models.TextField(help_text="Fully rendered notification text")),
                (
                    "project_id",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Project the event belongs to (opaque external id)",
                        max_length=64,
                        null=True,
                    ),
                ),
                (
                    "is_read",
                    models.BooleanField(
                        db_index=True,
                        default=False,
                        help_text="Whether recipient has read this notification",
                    ),
                ),
                (
                    "recipient",
                    models.ForeignKey(
                        help_text="User receiving this notification",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "notifications_notification",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["recipient", "is_read", "-created_at"],
                        name="notif_recipient_unread_idx",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="DeviceRegistration",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "token",
                    models.CharField(
                        help_text="Push provider device token",
                        max_length=256,
                        unique=True,
                    ),
                ),
                (
                    "language",
                    models.CharField(
                        default="en",
                        help_text="Language code used to localize pushes for this device",
                        max_length=16,
                    ),
                ),
                (
                    "platform",
                    models.CharField(
                        choices=[("android", "Android"), ("ios", "iOS"), ("web", "Web")],
                        default="android",
                        max_length=16,
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="device_registrations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "notifications_device_registration",
                "ordering": ["-updated_at"],
                "indexes": [
                    models.Index(fields=["user", "-updated_at"], name="notif_device_user_idx")
                ],
            },
        ),
        migrations.CreateModel(
            name="UserNotificationSettings",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        primary_key=True,
                        related_name="notification_settings",
                        serialize=False,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "notifications_enabled",
                    models.BooleanField(
                        default=True,
                        help_text="Master switch for all notifications",
                    ),
                ),
            ],
            options={
                "db_table": "notifications_user_settings",
                "verbose_name": "user notification settings",
                "verbose_name_plural": "user notification settings",
            },
        ),
        migrations.CreateModel(
            name="ProjectNotificationPreference",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "project_id",
                    models.CharField(
                        help_text="Project the preference applies to (opaque external id)",
                        max_length=64,
                    ),
                ),
                ("kind", models.CharField(choices=KIND_CHOICES, max_length=40)),
                ("enabled", models.BooleanField(default=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="project_notification_preferences",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "notifications_project_preference",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user", "project_id", "kind"),
                        name="unique_user_project_kind_pref",
                    )
                ],
            },
        ),
    ]
