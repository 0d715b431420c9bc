"""
Celery tasks for notification dispatch.

Tasks:
    dispatch_notification: Resolve recipients, push to devices and write
        in-app records for one event

Design:
    - Context travels as a plain dict (NotificationContext.to_dict())
    - No retries: a failed dispatch is logged and dropped

Usage:
    from notifications.tasks import dispatch_notification

    # Normally enqueued by notifications.notify()
    dispatch_notification.delay(kind="invite_sent", context={...}, recipients=[42])
"""

from __future__ import annotations

import logging

from celery import shared_task

from notifications.context import NotificationContext
from notifications.dispatcher import get_dispatcher
from notifications.exceptions import DirectoryUnavailableError

logger = logging.getLogger(__name__)


@shared_task(name="notifications.dispatch_notification")
def dispatch_notification(
    kind: str,
    context: dict | None = None,
    recipients: list[int] | None = None,
) -> dict | None:
    """
    Dispatch one notification event.

    Args:
        kind: NotificationKind value
        context: NotificationContext.to_dict() output
        recipients: Explicit recipient user ids (skips participant lookup)

    Returns:
        Dispatch counters, or None if the directory was unavailable
    """
    event_context = NotificationContext.from_dict(context)
    try:
        report = get_dispatcher().dispatch(kind, event_context, recipients)
    except DirectoryUnavailableError as e:
        logger.error(
            f"Dropping {kind} notification for project {event_context.project_id}: {e}",
            extra={"details": e.details},
        )
        return None

    return {
        "recipients": len(report.recipients),
        "pushes_sent": report.pushes_sent,
        "pushes_failed": report.pushes_failed,
        "pushes_suppressed": report.pushes_suppressed,
        "records_written": report.records_written,
        "records_failed": report.records_failed,
    }
