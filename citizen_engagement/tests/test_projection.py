# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the issue read-model projection.
"""

from citizen_engagement.domain.audit import record_action
from citizen_engagement.domain.projection import (
    project_action, project_comment, project_issue, project_issue_type, project_user
)
from citizen_engagement.models.entities import PopulatedIssue

from .conftest import FIXED_NOW


class TestProjection:
    """Test flattening of populated issues."""

    def test_project_issue(self, new_issue, citizen_user, issue_type, staff_actor):
        """Test every reference is resolved into the read model."""
        issue = record_action(new_issue, "ack", staff_actor, "The staff has received the issue.", FIXED_NOW)
        populated = PopulatedIssue.from_issue(issue, {citizen_user.id: citizen_user}, issue_type)

        data = project_issue(populated)

        assert data["id"] == new_issue.id
        assert data["description"] == "Streetlight out on Main St."
        assert data["lat"] == 46.78
        assert data["lng"] == 6.64
        assert data["state"] == "new"
        assert data["tags"] == ["lighting"]
        assert data["updatedOn"] == FIXED_NOW.isoformat()
        assert data["issueType"] == {"id": issue_type.id, "name": "broken streetlight"}
        assert data["owner"] == {"id": citizen_user.id, "name": "Casey Citizen"}
        assert data["assignee"] is None
        assert data["comments"][0]["author"] == {"id": citizen_user.id, "name": "Casey Citizen"}
        assert data["comments"][0]["postedOn"] == FIXED_NOW.isoformat()
        assert data["actions"] == [{
            "id": issue.actions[0].id,
            "type": "ack",
            "user": "Sam Staff",
            "actionDate": FIXED_NOW.isoformat(),
            "reason": "The staff has received the issue."
        }]

    def test_missing_references_project_to_none(self, new_issue):
        """Test unresolved owner, issue type and authors do not fail."""
        populated = PopulatedIssue.from_issue(new_issue, {})

        data = project_issue(populated)

        assert data["owner"] is None
        assert data["issueType"] is None
        assert data["comments"][0]["author"] is None

    def test_projection_is_pure(self, new_issue, citizen_user, issue_type):
        """Test projecting twice yields equal output and leaves the input unchanged."""
        populated = PopulatedIssue.from_issue(new_issue, {citizen_user.id: citizen_user}, issue_type)
        snapshot = populated.model_dump()

        assert project_issue(populated) == project_issue(populated)
        assert populated.model_dump() == snapshot

    def test_none_helpers(self):
        assert project_user(None) is None
        assert project_issue_type(None) is None
        assert project_comment(None) is None

    def test_project_action_keys(self, new_issue, staff_actor):
        action = record_action(new_issue, "addTags", staff_actor, "Tags added to the issue.").actions[0]

        assert set(project_action(action)) == {"id", "type", "user", "actionDate", "reason"}
