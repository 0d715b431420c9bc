"""
Recipient directory: who participates in a project and how to reach them.

The engine reads everything it needs about recipients through the
RecipientDirectory protocol. The shipped ModelRecipientDirectory answers
device, toggle and preference questions from this app's models and asks a
ParticipantSource about project membership, since projects are owned by
another part of the system.

Usage:
    from notifications.directory import get_directory

    directory = get_directory()
    participants = directory.list_participants(project_id)

Configuration:
    NOTIFICATIONS_PARTICIPANT_SOURCE: Dotted path to a ParticipantSource
        class. When empty, NullParticipantSource is used (no project has
        participants, every membership is unknown).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from django.conf import settings
from django.db import DatabaseError
from django.utils.module_loading import import_string

from notifications.exceptions import DirectoryUnavailableError
from notifications.models import (
    DeviceRegistration,
    ProjectNotificationPreference,
    UserNotificationSettings,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceTarget:
    """A push destination as seen by the dispatcher."""

    token: str
    language: str
    user_id: int


@runtime_checkable
class ParticipantSource(Protocol):
    """Membership lookups for projects owned outside this app."""

    def list_participants(self, project_id: str) -> list[int]:
        """Return participant user ids of a project."""
        ...

    def get_role(self, user_id: int, project_id: str) -> str | None:
        """Return the user's role in the project, or None if not a member."""
        ...


@runtime_checkable
class RecipientDirectory(Protocol):
    """
    Everything the engine needs to know about potential recipients.

    Implementations raise DirectoryUnavailableError when they cannot answer.
    """

    def list_participants(self, project_id: str) -> list[int]: ...

    def list_device_registrations(self, user_ids: Iterable[int]) -> list[DeviceTarget]:
        """Devices of the given users, each user's most recently refreshed first."""
        ...

    def is_globally_enabled(self, user_id: int) -> bool: ...

    def get_role(self, user_id: int, project_id: str) -> str | None: ...

    def get_project_preference(self, user_id: int, project_id: str, kind: str) -> bool | None: ...


class NullParticipantSource:
    """Participant source for deployments without a project backend."""

    def list_participants(self, project_id: str) -> list[int]:
        return []

    def get_role(self, user_id: int, project_id: str) -> str | None:
        return None


def get_participant_source() -> ParticipantSource:
    """Instantiate the configured participant source."""
    path = getattr(settings, "NOTIFICATIONS_PARTICIPANT_SOURCE", "")
    if not path:
        return NullParticipantSource()
    return import_string(path)()


class ModelRecipientDirectory:
    """
    RecipientDirectory backed by the Django ORM.

    Database errors are re-raised as DirectoryUnavailableError so callers
    can tell "unavailable" apart from "no".
    """

    def __init__(self, participants: ParticipantSource | None = None):
        self.participants = participants or get_participant_source()

    def list_participants(self, project_id: str) -> list[int]:
        return list(self._participant_call("list_participants", project_id))

    def get_role(self, user_id: int, project_id: str) -> str | None:
        return self._participant_call("get_role", user_id, project_id)

    def list_device_registrations(self, user_ids: Iterable[int]) -> list[DeviceTarget]:
        user_ids = list(user_ids)
        if not user_ids:
            return []
        try:
            rows = DeviceRegistration.objects.filter(user_id__in=user_ids).values_list(
                "token", "language", "user_id"
            )
            return [DeviceTarget(token=t, language=lang, user_id=u) for t, lang, u in rows]
        except DatabaseError as e:
            raise DirectoryUnavailableError(
                "Device registration lookup failed",
                details={"user_ids": user_ids, "original_error": str(e)},
            ) from e

    def is_globally_enabled(self, user_id: int) -> bool:
        try:
            enabled = (
                UserNotificationSettings.objects.filter(user_id=user_id)
                .values_list("notifications_enabled", flat=True)
                .first()
            )
        except DatabaseError as e:
            raise DirectoryUnavailableError(
                "Notification settings lookup failed",
                details={"user_id": user_id, "original_error": str(e)},
            ) from e
        return True if enabled is None else enabled

    def get_project_preference(self, user_id: int, project_id: str, kind: str) -> bool | None:
        try:
            return (
                ProjectNotificationPreference.objects.filter(
                    user_id=user_id, project_id=project_id, kind=kind
                )
                .values_list("enabled", flat=True)
                .first()
            )
        except DatabaseError as e:
            raise DirectoryUnavailableError(
                "Project preference lookup failed",
                details={
                    "user_id": user_id,
                    "project_id": project_id,
                    "kind": kind,
                    "original_error": str(e),
                },
            ) from e

    def _participant_call(self, method: str, *args):
        try:
            return getattr(self.participants, method)(*args)
        except DirectoryUnavailableError:
            raise
        except Exception as e:
            logger.warning(f"Participant source {method} failed: {e}")
            raise DirectoryUnavailableError(
                "Participant lookup failed",
                details={"method": method, "args": list(args), "original_error": str(e)},
            ) from e


def get_directory() -> RecipientDirectory:
    """Build the directory used by the dispatcher."""
    return ModelRecipientDirectory()
