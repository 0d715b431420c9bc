"""
Test configuration and fixtures for notification tests.

This module provides:
- User fixtures (actor, participants)
- In-memory directory, push sender and store doubles
- A small bounded executor shut down after each test
- A dispatcher wired to the doubles

Project "p-1" is set up by the `project` fixture with an owner (the
actor), an editor and a viewer, each with one device.

Usage:
    def test_example(dispatcher, directory, push_sender, store):
        report = dispatcher.dispatch("transaction_added", context)
        assert push_sender.tokens() == ["editor-device"]
"""

from decimal import Decimal

import pytest

from notifications.context import NotificationContext
from notifications.dispatcher import NotificationDispatcher
from notifications.executor import BoundedExecutor
from notifications.localization import MessageLocalizer, load_bundles
from notifications.tests.factories import UserFactory
from notifications.tests.fakes import (
    EDITOR_ID,
    OWNER_ID,
    PROJECT_ID,
    VIEWER_ID,
    InMemoryDirectory,
    InMemoryStore,
    RecordingPushSender,
    StaticParticipantSource,
)


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """Create a basic user to receive notifications."""
    return UserFactory()


@pytest.fixture
def other_user(db):
    """Create another user for multi-user tests."""
    return UserFactory()


# =============================================================================
# Collaborator Doubles
# =============================================================================


@pytest.fixture
def directory():
    return InMemoryDirectory()


@pytest.fixture
def project(directory):
    """Project p-1 with owner, editor and viewer, one device each."""
    directory.add_participant(PROJECT_ID, OWNER_ID, "owner")
    directory.add_participant(PROJECT_ID, EDITOR_ID, "editor")
    directory.add_participant(PROJECT_ID, VIEWER_ID, "viewer")
    directory.add_device(OWNER_ID, "owner-device", "en")
    directory.add_device(EDITOR_ID, "editor-device", "ru")
    directory.add_device(VIEWER_ID, "viewer-device", "en-US")
    return PROJECT_ID


@pytest.fixture
def push_sender():
    return RecordingPushSender()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def executor():
    """Small pool, drained after the test."""
    pool = BoundedExecutor(max_workers=4, max_pending=8)
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def localizer():
    """Localizer over the shipped locale bundles."""
    return MessageLocalizer(load_bundles(), default_language="en")


@pytest.fixture
def dispatcher(directory, localizer, push_sender, executor, store):
    return NotificationDispatcher(
        directory=directory,
        localizer=localizer,
        push_sender=push_sender,
        executor=executor,
        store=store,
    )


@pytest.fixture
def spend_context(project):
    """Owner adds a 150 transaction: 800 -> 950 of a 1000 budget."""
    return NotificationContext(
        actor_id=OWNER_ID,
        actor_name="Anna",
        project_id=project,
        project_name="Renovation",
        transaction_id="tx-9",
        transaction_name="Paint",
        before_spent=Decimal("800"),
        after_spent=Decimal("950"),
        budget_limit=Decimal("1000"),
    )


@pytest.fixture
def participant_source(settings):
    """Route ModelRecipientDirectory participant lookups to StaticParticipantSource."""
    settings.NOTIFICATIONS_PARTICIPANT_SOURCE = "notifications.tests.fakes.StaticParticipantSource"
    StaticParticipantSource.participants = {}
    StaticParticipantSource.roles = {}
    yield StaticParticipantSource
    StaticParticipantSource.participants = {}
    StaticParticipantSource.roles = {}
