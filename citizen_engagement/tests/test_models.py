# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for Pydantic models.
"""

import pytest
from bson import ObjectId
from pydantic import ValidationError

from citizen_engagement.models import (
    ActionRequest, Issue, IssueState, PopulatedIssue, User, UserContext
)


class TestIssue:
    """Test the issue aggregate model."""

    def test_defaults(self):
        issue = Issue(description="Pothole")

        assert ObjectId.is_valid(issue.id)
        assert issue.state == IssueState.NEW
        assert issue.tags == ()
        assert issue.version == 0
        assert issue.updated_on.tzinfo is not None
        assert not issue.has_assignee()
        assert not issue.is_terminal()

    def test_tags_are_deduplicated(self):
        issue = Issue(tags=["a", "b", "a"])

        assert issue.tags == ("a", "b")

    def test_issue_is_frozen(self):
        """Test in-place mutation is rejected."""
        issue = Issue()

        with pytest.raises(ValidationError):
            issue.state = IssueState.RESOLVED

    @pytest.mark.parametrize("state,terminal", [
        (IssueState.NEW, False),
        (IssueState.ACKNOWLEDGED, False),
        (IssueState.ASSIGNED, False),
        (IssueState.IN_PROGRESS, False),
        (IssueState.REJECTED, True),
        (IssueState.RESOLVED, True),
    ])
    def test_terminal_states(self, state, terminal):
        assert Issue(state=state).is_terminal() is terminal

    def test_state_from_string(self):
        assert Issue(state="in_progress").state == IssueState.IN_PROGRESS


class TestPopulatedIssue:
    """Test reference resolution."""

    def test_from_issue_keeps_assignee_id_without_user(self, assigned_issue):
        populated = PopulatedIssue.from_issue(assigned_issue, {})

        assert populated.assignee is None
        assert populated.assignee_id == assigned_issue.assignee_id
        assert populated.has_assignee()

    def test_from_issue_resolves_users(self, assigned_issue, other_staff_user, citizen_user):
        users = {other_staff_user.id: other_staff_user, citizen_user.id: citizen_user}

        populated = PopulatedIssue.from_issue(assigned_issue, users)

        assert populated.assignee == other_staff_user
        assert populated.owner == citizen_user
        assert populated.comments[0].author == citizen_user


class TestUserModels:
    """Test user and user context models."""

    def test_full_name(self):
        user = User(firstname="Ada", lastname="Lovelace", roles=["staff"])

        assert user.full_name == "Ada Lovelace"
        assert user.has_role("staff")
        assert not user.has_role("citizen")

    def test_user_context(self):
        context = UserContext(user_id="u1", firstname="Ada", lastname="Lovelace", roles=["staff"])

        assert context.display_name == "Ada Lovelace"
        assert context.is_staff()
        assert context.has_any_role(["citizen", "staff"])
        assert not context.has_any_role(["citizen"])


class TestActionRequest:
    """Test the action endpoint body."""

    def test_payload_defaults_to_empty(self):
        assert ActionRequest(type="ack").payload == {}
        assert ActionRequest(type="ack", payload=None).payload == {}

    def test_type_required(self):
        with pytest.raises(ValidationError):
            ActionRequest(payload={})

    def test_empty_type_left_to_the_workflow(self):
        """Test an empty action name parses and is rejected later as unknown."""
        assert ActionRequest(type="").type == ""
