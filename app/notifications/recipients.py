"""
Recipient resolution for notification events.

resolve_recipients answers "who would this event go to"; eligible_recipients
is the dispatcher's view, which also runs explicit recipient lists through
the guard and drops duplicates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from notifications.guard import NotificationGuard

if TYPE_CHECKING:
    from collections.abc import Iterable

    from notifications.directory import RecipientDirectory


class RecipientResolver:
    def __init__(self, directory: RecipientDirectory, guard: NotificationGuard | None = None):
        self.directory = directory
        self.guard = guard or NotificationGuard(directory)

    def resolve_recipients(
        self,
        kind: str,
        project_id: str | None = None,
        explicit_recipients: Iterable[int] | None = None,
    ) -> list[int]:
        """
        Determine the candidate recipients of an event.

        An explicit list wins and is returned as given, without asking the
        directory. Without a project there is nobody to resolve. Otherwise
        the project's participants are filtered through the guard, keeping
        directory order.
        """
        if explicit_recipients is not None:
            return list(explicit_recipients)
        if project_id is None:
            return []
        participants = self.directory.list_participants(project_id)
        return self.guard.filter_receivers(participants, project_id, kind)

    def eligible_recipients(
        self,
        kind: str,
        project_id: str | None = None,
        explicit_recipients: Iterable[int] | None = None,
    ) -> list[int]:
        """Recipients the dispatcher may notify: guarded and de-duplicated."""
        if explicit_recipients is not None:
            candidates = self.guard.filter_receivers(
                self.resolve_recipients(kind, project_id, explicit_recipients),
                project_id,
                kind,
            )
        else:
            candidates = self.resolve_recipients(kind, project_id)
        return list(dict.fromkeys(candidates))
