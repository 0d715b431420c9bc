"""
Tests for RecipientResolver.

Test Classes:
    TestResolveRecipients: Candidate resolution
    TestEligibleRecipients: Dispatcher view (guarded, de-duplicated)
"""

from notifications.recipients import RecipientResolver
from notifications.tests.fakes import EDITOR_ID, OWNER_ID, VIEWER_ID


class TestResolveRecipients:
    """
    Tests for resolve_recipients().

    Verifies:
    - Explicit lists are returned verbatim without directory access
    - No project means nobody
    - Participants are filtered by the guard in directory order
    """

    def test_explicit_list_returned_verbatim(self, directory, project):
        """Explicit recipients bypass lookup and filtering."""
        resolver = RecipientResolver(directory)

        result = resolver.resolve_recipients("transaction_added", project, [VIEWER_ID, 77, 77])

        assert result == [VIEWER_ID, 77, 77]
        assert directory.participant_lookups == 0

    def test_explicit_empty_list_stays_empty(self, directory, project):
        """An explicit empty list does not fall back to participants."""
        resolver = RecipientResolver(directory)
        assert resolver.resolve_recipients("project_edited", project, []) == []

    def test_no_project_resolves_nobody(self, directory):
        """Without project or explicit list the result is empty."""
        assert RecipientResolver(directory).resolve_recipients("system_alert") == []

    def test_filters_participants_through_guard(self, directory, project):
        """Only participants whose role allows the kind remain."""
        resolver = RecipientResolver(directory)

        assert resolver.resolve_recipients("transaction_added", project) == [OWNER_ID, EDITOR_ID]
        assert resolver.resolve_recipients("project_removed", project) == [OWNER_ID]
        assert resolver.resolve_recipients("project_archived", project) == [
            OWNER_ID,
            EDITOR_ID,
            VIEWER_ID,
        ]

    def test_opted_out_participant_excluded(self, directory, project):
        directory.set_preference(OWNER_ID, project, "transaction_added", False)
        resolver = RecipientResolver(directory)

        assert resolver.resolve_recipients("transaction_added", project) == [EDITOR_ID]


class TestEligibleRecipients:
    def test_explicit_list_is_guarded(self, directory, project):
        """Explicit recipients still pass the toggle and matrix checks."""
        directory.disabled_users.add(EDITOR_ID)
        resolver = RecipientResolver(directory)

        result = resolver.eligible_recipients(
            "transaction_added", project, [VIEWER_ID, EDITOR_ID, OWNER_ID]
        )

        assert result == [OWNER_ID]

    def test_duplicates_removed_keeping_first(self, directory, project):
        """Each recipient appears once, in first-seen order."""
        resolver = RecipientResolver(directory)

        result = resolver.eligible_recipients(
            "project_archived", project, [VIEWER_ID, OWNER_ID, VIEWER_ID]
        )

        assert result == [VIEWER_ID, OWNER_ID]

    def test_participants_resolved_when_no_explicit_list(self, directory, project):
        resolver = RecipientResolver(directory)
        assert resolver.eligible_recipients("project_edited", project) == [OWNER_ID, EDITOR_ID]
