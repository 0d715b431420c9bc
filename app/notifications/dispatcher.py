"""
Notification dispatcher.

Turns one event into push deliveries and in-app records:

    1. Find eligible recipients (RecipientResolver)
    2. Look up their device registrations
    3. Fan out one push per device to the bounded push pool, skipping the
       actor's own devices
    4. Write exactly one in-app record per recipient, whatever the pushes did

Push tasks localize and send; they never touch the database, and each one
catches and logs its own failure. In-app records are written from the
calling thread.

Usage:
    from notifications.dispatcher import get_dispatcher

    report = get_dispatcher().dispatch(kind, context)
"""

from __future__ import annotations

import logging
from concurrent.futures import wait
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from django.conf import settings

from notifications.context import build_params
from notifications.directory import get_directory
from notifications.executor import get_push_executor
from notifications.localization import get_localizer
from notifications.push import get_push_sender
from notifications.recipients import RecipientResolver
from notifications.services import NotificationService

if TYPE_CHECKING:
    from collections.abc import Iterable

    from notifications.context import NotificationContext
    from notifications.directory import DeviceTarget, RecipientDirectory
    from notifications.executor import BoundedExecutor
    from notifications.localization import MessageLocalizer
    from notifications.push import PushSender

logger = logging.getLogger(__name__)


@dataclass
class DispatchReport:
    """Outcome counters of one dispatch call."""

    kind: str
    recipients: list[int] = field(default_factory=list)
    pushes_sent: int = 0
    pushes_failed: int = 0
    pushes_suppressed: int = 0
    records_written: int = 0
    records_failed: int = 0


class NotificationDispatcher:
    def __init__(
        self,
        directory: RecipientDirectory,
        localizer: MessageLocalizer,
        push_sender: PushSender,
        executor: BoundedExecutor,
        store=NotificationService,
        default_language: str | None = None,
    ):
        self.directory = directory
        self.resolver = RecipientResolver(directory)
        self.localizer = localizer
        self.push_sender = push_sender
        self.executor = executor
        self.store = store
        self.default_language = default_language or localizer.default_language

    def dispatch(
        self,
        kind: str,
        context: NotificationContext,
        explicit_recipients: Iterable[int] | None = None,
    ) -> DispatchReport:
        """
        Deliver a notification event.

        Raises:
            DirectoryUnavailableError: If recipients or devices cannot be
                looked up. Nothing has been sent or written at that point.
        """
        report = DispatchReport(kind=kind)
        report.recipients = self.resolver.eligible_recipients(
            kind, context.project_id, explicit_recipients
        )
        if not report.recipients:
            logger.debug(f"No eligible recipients for {kind} in project {context.project_id}")
            return report

        devices = self.directory.list_device_registrations(report.recipients)

        extra = self._push_extra(kind, context)
        futures = []
        for device in devices:
            if context.actor_id is not None and device.user_id == context.actor_id:
                report.pushes_suppressed += 1
                continue
            try:
                futures.append(self.executor.submit(self._deliver, device, kind, context, extra))
            except RuntimeError:
                # Pool already shut down
                logger.exception(f"Could not schedule {kind} push for user {device.user_id}")
                report.pushes_failed += 1

        languages = self._primary_languages(devices)
        for user_id in report.recipients:
            if self._write_record(user_id, kind, context, languages.get(user_id)):
                report.records_written += 1
            else:
                report.records_failed += 1

        wait(futures)
        for future in futures:
            if future.result():
                report.pushes_sent += 1
            else:
                report.pushes_failed += 1

        logger.info(
            f"Dispatched {kind}: recipients={len(report.recipients)} "
            f"pushes sent={report.pushes_sent} failed={report.pushes_failed} "
            f"suppressed={report.pushes_suppressed} "
            f"records written={report.records_written} failed={report.records_failed}"
        )
        return report

    def _deliver(
        self,
        device: DeviceTarget,
        kind: str,
        context: NotificationContext,
        extra: dict[str, str],
    ) -> bool:
        # Runs on the push pool; must not raise.
        try:
            message = self.localizer.localize(kind, context, device.language, is_self=False)
            delivered = self.push_sender.send(
                device.token,
                message.title,
                message.body,
                kind,
                extra,
            )
        except Exception:
            logger.exception(f"Push {kind} to device {device.token[:8]}... failed")
            return False

        if not delivered:
            logger.warning(f"Push {kind} to device {device.token[:8]}... was not delivered")
        return bool(delivered)

    def _write_record(
        self,
        user_id: int,
        kind: str,
        context: NotificationContext,
        language: str | None,
    ) -> bool:
        is_self = context.actor_id is not None and user_id == context.actor_id
        try:
            message = self.localizer.localize(
                kind, context, language or self.default_language, is_self=is_self
            )
            result = self.store.create_notification(
                user_id, kind, message.as_text(), project_id=context.project_id
            )
        except Exception:
            logger.exception(f"Failed to store {kind} notification for user {user_id}")
            return False

        if not result.success:
            logger.warning(
                f"Notification store rejected {kind} for user {user_id}: {result.error}"
            )
            return False
        return True

    @staticmethod
    def _push_extra(kind: str, context: NotificationContext) -> dict[str, str]:
        """Data shipped with every push: ids plus the template parameters."""
        extra = build_params(kind, context)
        for key, value in (
            ("projectId", context.project_id),
            ("transactionId", context.transaction_id),
            ("senderId", context.actor_id),
        ):
            if value is not None:
                extra[key] = str(value)
        return extra

    @staticmethod
    def _primary_languages(devices: list[DeviceTarget]) -> dict[int, str]:
        # Directories list each user's most recently refreshed device first.
        languages: dict[int, str] = {}
        for device in devices:
            languages.setdefault(device.user_id, device.language)
        return languages


def get_dispatcher() -> NotificationDispatcher:
    """Dispatcher wired to the configured collaborators."""
    return NotificationDispatcher(
        directory=get_directory(),
        localizer=get_localizer(),
        push_sender=get_push_sender(),
        executor=get_push_executor(),
        default_language=getattr(settings, "NOTIFICATIONS_DEFAULT_LANGUAGE", "en"),
    )
