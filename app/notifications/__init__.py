"""
Project notifications: in-app records and localized push delivery.

This app provides:
- Role/kind permission matrix and per-user guard checks
- Recipient resolution over an injectable participant source
- Localized templates with self/actor body variants
- A dispatcher that fans pushes out on a bounded pool
- notify(), the fire-and-forget entry point for business code

Usage:
    from notifications import notify
    from notifications.context import NotificationContext
    from notifications.models import NotificationKind

    notify(
        NotificationKind.TRANSACTION_ADDED,
        NotificationContext(actor_id=user.pk, actor_name="Anna", project_id="p-1"),
    )
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def notify(kind, context, recipients=None, cooldown_key=None) -> bool:
    """
    Queue a notification event without waiting for it.

    Never raises: enqueue problems are logged so the business operation
    that triggered the event is not affected.

    Args:
        kind: NotificationKind value
        context: NotificationContext for the event
        recipients: Explicit recipient user ids instead of project participants
        cooldown_key: If set, drop the event while a cooldown for this key
            is running and start one otherwise

    Returns:
        True if the event was queued
    """
    from notifications.cooldown import CooldownStore
    from notifications.tasks import dispatch_notification

    try:
        if cooldown_key and not CooldownStore().acquire(cooldown_key):
            logger.info(f"Skipping {kind} notification, cooldown active for {cooldown_key}")
            return False

        dispatch_notification.delay(
            str(kind),
            context.to_dict(),
            list(recipients) if recipients is not None else None,
        )
    except Exception:
        logger.exception(f"Failed to enqueue {kind} notification")
        return False
    return True
