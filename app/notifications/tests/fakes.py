"""
In-memory collaborators for notification tests.

InMemoryDirectory: RecipientDirectory over plain dicts
RecordingPushSender: PushSender that records calls and fails on demand
InMemoryStore: Notification store that keeps records in a list
StaticParticipantSource: ParticipantSource loadable by dotted path
"""

import threading

from core.services import ServiceResult
from notifications.directory import DeviceTarget
from notifications.exceptions import DirectoryUnavailableError

OWNER_ID = 1
EDITOR_ID = 2
VIEWER_ID = 3
PROJECT_ID = "p-1"


class InMemoryDirectory:
    def __init__(self):
        self.participants = {}
        self.roles = {}
        self.devices = []
        self.disabled_users = set()
        self.preferences = {}
        self.unavailable = False
        self.participant_lookups = 0

    # Setup helpers

    def add_participant(self, project_id, user_id, role):
        self.participants.setdefault(project_id, []).append(user_id)
        self.roles[(user_id, project_id)] = role

    def add_device(self, user_id, token, language="en"):
        self.devices.append(DeviceTarget(token=token, language=language, user_id=user_id))

    def set_preference(self, user_id, project_id, kind, enabled):
        self.preferences[(user_id, project_id, kind)] = enabled

    # RecipientDirectory

    def _check(self):
        if self.unavailable:
            raise DirectoryUnavailableError("Directory offline")

    def list_participants(self, project_id):
        self._check()
        self.participant_lookups += 1
        return list(self.participants.get(project_id, []))

    def list_device_registrations(self, user_ids):
        self._check()
        wanted = set(user_ids)
        return [d for d in self.devices if d.user_id in wanted]

    def is_globally_enabled(self, user_id):
        self._check()
        return user_id not in self.disabled_users

    def get_role(self, user_id, project_id):
        self._check()
        return self.roles.get((user_id, project_id))

    def get_project_preference(self, user_id, project_id, kind):
        self._check()
        return self.preferences.get((user_id, project_id, kind))


class RecordingPushSender:
    """Records sends. Tokens in fail_tokens return False, raise_tokens raise."""

    def __init__(self, fail_tokens=(), raise_tokens=()):
        self.fail_tokens = set(fail_tokens)
        self.raise_tokens = set(raise_tokens)
        self.sent = []
        self._lock = threading.Lock()

    def send(self, token, title, body, kind, extra=None):
        if token in self.raise_tokens:
            raise ConnectionError(f"provider unreachable for {token}")
        with self._lock:
            self.sent.append(
                {"token": token, "title": title, "body": body, "kind": kind, "extra": extra}
            )
        return token not in self.fail_tokens

    def tokens(self):
        return sorted(call["token"] for call in self.sent)

    def for_token(self, token):
        return next(call for call in self.sent if call["token"] == token)


class InMemoryStore:
    """Notification store double. Users in failing_users make create raise."""

    def __init__(self, failing_users=()):
        self.records = []
        self.failing_users = set(failing_users)

    def create_notification(self, user_id, kind, message, project_id=None):
        if user_id in self.failing_users:
            raise RuntimeError("store write failed")
        record = {"user_id": user_id, "kind": kind, "message": message, "project_id": project_id}
        self.records.append(record)
        return ServiceResult.success(record)

    def for_user(self, user_id):
        return [r for r in self.records if r["user_id"] == user_id]


class StaticParticipantSource:
    """Participant source backed by class-level data, reset per test."""

    participants = {}
    roles = {}

    def list_participants(self, project_id):
        return list(self.participants.get(project_id, []))

    def get_role(self, user_id, project_id):
        return self.roles.get((user_id, project_id))
