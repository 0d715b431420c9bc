"""
End-to-end tests: event in, pushes and stored notifications out.

Runs the Celery task body against the real models, the shipped locale
bundles and the process-wide push pool. Project membership comes from
StaticParticipantSource and pushes are captured by RecordingPushSender.
"""

from decimal import Decimal

import pytest

from notifications.context import NotificationContext, budget_threshold_crossed
from notifications.executor import shutdown_push_executor
from notifications.models import Notification
from notifications.services import DeviceService, PreferenceService
from notifications.tasks import dispatch_notification
from notifications.tests.factories import UserFactory
from notifications.tests.fakes import RecordingPushSender


@pytest.fixture
def push_sender(mocker):
    sender = RecordingPushSender()
    mocker.patch("notifications.dispatcher.get_push_sender", return_value=sender)
    yield sender
    shutdown_push_executor()


@pytest.fixture
def members(db, participant_source):
    owner = UserFactory(username="owner")
    editor = UserFactory(username="editor")
    viewer = UserFactory(username="viewer")
    participant_source.participants["p-1"] = [owner.pk, editor.pk, viewer.pk]
    participant_source.roles.update(
        {
            (owner.pk, "p-1"): "owner",
            (editor.pk, "p-1"): "editor",
            (viewer.pk, "p-1"): "viewer",
        }
    )
    DeviceService.register_device(owner, "owner-phone", language="en")
    DeviceService.register_device(editor, "editor-phone", language="ru")
    DeviceService.register_device(viewer, "viewer-phone", language="en-GB")
    return owner, editor, viewer


def spend(owner):
    return NotificationContext(
        actor_id=owner.pk,
        actor_name="Owner",
        project_id="p-1",
        project_name="Renovation",
        transaction_id="tx-1",
        transaction_name="Paint",
        before_spent=Decimal("800"),
        after_spent=Decimal("950"),
        budget_limit=Decimal("1000"),
    )


class TestTransactionAddedFlow:
    def test_owner_adds_transaction(self, members, push_sender):
        """Editor is pushed in Russian; owner and editor get records; viewer nothing."""
        owner, editor, viewer = members

        result = dispatch_notification("transaction_added", spend(owner).to_dict())

        assert result["recipients"] == 2
        assert push_sender.tokens() == ["editor-phone"]
        assert "800.00 (80.0%) → 950.00 (95.0%)" in push_sender.for_token("editor-phone")["body"]

        owner_note = Notification.objects.get(recipient=owner)
        assert owner_note.message.startswith("New transaction in Renovation\nYou added")
        assert owner_note.project_id == "p-1"
        assert Notification.objects.get(recipient=editor).message.startswith("Новая транзакция")
        assert not Notification.objects.filter(recipient=viewer).exists()

    def test_budget_threshold_follow_up(self, members, push_sender):
        """The caller's 90% policy is crossed, so viewers get the alert too."""
        owner, editor, viewer = members
        context = spend(owner)
        assert budget_threshold_crossed(context.after_spent, context.budget_limit, 90)

        result = dispatch_notification("budget_threshold", context.to_dict())

        assert result["records_written"] == 3
        assert push_sender.tokens() == ["editor-phone", "viewer-phone"]
        assert Notification.objects.get(recipient=viewer).message == (
            'Budget alert: Renovation\n95.0% of the budget of "Renovation" has been spent.'
        )

    def test_preferences_are_respected(self, members, push_sender):
        owner, editor, viewer = members
        PreferenceService.set_project_preferences(editor, "p-1", {"transaction_added": False})
        PreferenceService.set_global_enabled(owner, False)

        result = dispatch_notification("transaction_added", spend(owner).to_dict())

        assert result["recipients"] == 0
        assert push_sender.sent == []
        assert Notification.objects.count() == 0

    def test_directory_outage_drops_event(self, members, push_sender, mocker):
        mocker.patch(
            "notifications.tests.fakes.StaticParticipantSource.list_participants",
            side_effect=ConnectionError("projects service down"),
        )

        assert dispatch_notification("project_edited", {"project_id": "p-1"}) is None
        assert Notification.objects.count() == 0


class TestInviteFlow:
    def test_invite_to_non_member(self, members, push_sender):
        """An invitee outside the project is reached through an explicit list."""
        owner = members[0]
        invitee = UserFactory(username="invitee")
        DeviceService.register_device(invitee, "invitee-phone", language="ru")
        context = NotificationContext(actor_id=owner.pk, actor_name="Owner", project_id="p-1", project_name="Renovation")

        result = dispatch_notification("invite_sent", context.to_dict(), [invitee.pk])

        assert result["recipients"] == 1
        assert push_sender.for_token("invitee-phone")["body"] == "Owner приглашает вас в проект «Renovation»."
        assert Notification.objects.filter(recipient=invitee, kind="invite_sent").count() == 1
