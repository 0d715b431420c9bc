"""
Notification guard: may this user receive this kind of notification?

Checks run in a fixed order and stop at the first deny:
    1. Global toggle (UserNotificationSettings)
    2. Role permission matrix (non-members and project-less events count
       as viewer)
    3. Explicit per-project preference for the kind

The guard is read-only. Directory failures propagate; they are never
reported as a deny.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from notifications.models import Role
from notifications.permissions import is_allowed

if TYPE_CHECKING:
    from collections.abc import Iterable

    from notifications.directory import RecipientDirectory


class NotificationGuard:
    """Composes toggle, matrix and preference checks over a directory."""

    def __init__(self, directory: RecipientDirectory):
        self.directory = directory

    def can_receive(self, user_id: int, project_id: str | None, kind: str) -> bool:
        """
        Decide whether user_id may receive a notification of kind.

        Raises:
            DirectoryUnavailableError: If the directory cannot answer
        """
        if not self.directory.is_globally_enabled(user_id):
            return False

        role = None
        if project_id is not None:
            role = self.directory.get_role(user_id, project_id)
        if not is_allowed(role or Role.VIEWER, kind):
            return False

        if project_id is not None:
            preference = self.directory.get_project_preference(user_id, project_id, kind)
            if preference is False:
                return False

        return True

    def filter_receivers(
        self, user_ids: Iterable[int], project_id: str | None, kind: str
    ) -> list[int]:
        """Keep the users that pass can_receive, in input order."""
        return [uid for uid in user_ids if self.can_receive(uid, project_id, kind)]
