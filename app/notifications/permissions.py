"""
Role-based permission matrix for notification kinds.

Each role has an explicit allow-list. A role never inherits another role's
kinds, so removing a kind from the editor list does not touch the owner.

Usage:
    from notifications.permissions import is_allowed

    if is_allowed(Role.VIEWER, NotificationKind.BUDGET_THRESHOLD):
        ...
"""

from __future__ import annotations

from notifications.models import NotificationKind, Role

ALLOWED_KINDS: dict[str, frozenset[str]] = {
    Role.OWNER: frozenset(NotificationKind.values),
    Role.EDITOR: frozenset(
        {
            NotificationKind.TRANSACTION_ADDED,
            NotificationKind.TRANSACTION_UPDATED,
            NotificationKind.TRANSACTION_REMOVED,
            NotificationKind.BUDGET_THRESHOLD,
            NotificationKind.PROJECT_EDITED,
            NotificationKind.PROJECT_ARCHIVED,
            NotificationKind.PROJECT_UNARCHIVED,
            NotificationKind.PARTICIPANT_ROLE_CHANGED,
        }
    ),
    Role.VIEWER: frozenset(
        {
            NotificationKind.INVITE_SENT,
            NotificationKind.INVITE_ACCEPTED,
            NotificationKind.PROJECT_ARCHIVED,
            NotificationKind.PROJECT_UNARCHIVED,
            NotificationKind.BUDGET_THRESHOLD,
            NotificationKind.SYSTEM_ALERT,
        }
    ),
}


def is_allowed(role, kind) -> bool:
    """
    Check whether a role may receive a notification kind.

    Total over all inputs: unknown roles and kinds are denied, never raised.
    """
    try:
        return kind in ALLOWED_KINDS.get(role, frozenset())
    except TypeError:
        # Unhashable input
        return False


def allowed_kinds_for(role) -> frozenset[str]:
    """Return the kinds a role may receive (empty for unknown roles)."""
    try:
        return ALLOWED_KINDS.get(role, frozenset())
    except TypeError:
        return frozenset()
