# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the MongoDB issue repository.
"""

import pytest
from unittest.mock import MagicMock, Mock
from bson import ObjectId
from pymongo.errors import AutoReconnect

from citizen_engagement.middleware.error_handler import (
    ConflictException, NotFoundException, PersistenceException
)
from citizen_engagement.models.entities import Issue, PopulatedIssue
from citizen_engagement.models.enums import IssueState
from citizen_engagement.services.mongodb import MongoDBService
from citizen_engagement.services.repository import (
    MongoIssueRepository, issue_from_document, issue_to_document
)

from .conftest import FIXED_NOW


@pytest.fixture
def collections():
    return {
        "issues": MagicMock(),
        "users": MagicMock(),
        "issue_types": MagicMock()
    }


@pytest.fixture
def mongo_repository(collections):
    mongo_service = Mock(spec=MongoDBService)
    mongo_service.to_object_id.side_effect = MongoDBService.to_object_id
    mongo_service.get_collection.side_effect = lambda name: collections[name]
    return MongoIssueRepository(mongo_service)


def issue_document(issue: Issue):
    document = issue_to_document(issue)
    document["_id"] = ObjectId(issue.id)
    return document


class TestDocumentMapping:
    """Test conversion between issues and MongoDB documents."""

    def test_issue_document_uses_camel_case(self, assigned_issue):
        document = issue_to_document(assigned_issue)

        assert document["state"] == "assigned"
        assert document["assigneeId"] == assigned_issue.assignee_id
        assert document["ownerId"] == assigned_issue.owner_id
        assert document["issueTypeId"] == assigned_issue.issue_type_id
        assert document["updatedOn"] == FIXED_NOW
        assert document["comments"][0]["authorId"] == assigned_issue.owner_id
        assert document["tags"] == ["lighting"]

    def test_issue_from_document(self, assigned_issue):
        issue = issue_from_document(issue_document(assigned_issue))

        assert issue == assigned_issue

    def test_missing_version_reads_as_zero(self, new_issue):
        document = issue_document(new_issue)
        del document["version"]

        assert issue_from_document(document).version == 0

    def test_missing_updated_on_defaults_to_now(self):
        """Test a stored issue without updatedOn still loads."""
        issue = issue_from_document({"_id": ObjectId(), "state": "new"})

        assert issue.state == IssueState.NEW
        assert issue.updated_on is not None
        assert issue.actions == ()


class TestLoadIssue:
    """Test loading issues."""

    def test_load_issue(self, mongo_repository, collections, new_issue):
        collections["issues"].find_one.return_value = issue_document(new_issue)

        issue = mongo_repository.load_issue(new_issue.id)

        assert isinstance(issue, Issue)
        assert issue.id == new_issue.id
        collections["issues"].find_one.assert_called_once_with({"_id": ObjectId(new_issue.id)})

    def test_malformed_id(self, mongo_repository, collections):
        assert mongo_repository.load_issue("not-an-id") is None
        collections["issues"].find_one.assert_not_called()

    def test_unknown_issue(self, mongo_repository, collections):
        collections["issues"].find_one.return_value = None

        assert mongo_repository.load_issue(str(ObjectId())) is None

    def test_load_populated_issue(
        self, mongo_repository, collections, assigned_issue, citizen_user, other_staff_user, issue_type
    ):
        """Test users are fetched in one query and the issue type in one lookup."""
        collections["issues"].find_one.return_value = issue_document(assigned_issue)
        collections["users"].find.return_value = [
            {"_id": ObjectId(user.id), "firstname": user.firstname, "lastname": user.lastname, "roles": list(user.roles)}
            for user in (citizen_user, other_staff_user)
        ]
        collections["issue_types"].find_one.return_value = {"_id": ObjectId(issue_type.id), "name": issue_type.name}

        populated = mongo_repository.load_issue(assigned_issue.id, populate=True)

        assert isinstance(populated, PopulatedIssue)
        assert populated.owner.full_name == "Casey Citizen"
        assert populated.assignee.full_name == "Alex Fixer"
        assert populated.issue_type.name == "broken streetlight"
        assert populated.comments[0].author.id == citizen_user.id

        query = collections["users"].find.call_args[0][0]
        assert set(query["_id"]["$in"]) == {ObjectId(citizen_user.id), ObjectId(other_staff_user.id)}
        collections["users"].find.assert_called_once()

    def test_driver_error_is_persistence_failure(self, mongo_repository, collections):
        collections["issues"].find_one.side_effect = AutoReconnect("connection lost")

        with pytest.raises(PersistenceException):
            mongo_repository.load_issue(str(ObjectId()))


class TestSaveIssue:
    """Test version-guarded saves."""

    def test_save_new_version(self, mongo_repository, collections, new_issue):
        collections["issues"].replace_one.return_value = Mock(matched_count=1)

        saved = mongo_repository.save_issue(new_issue)

        assert saved.version == 1
        query, document = collections["issues"].replace_one.call_args[0]
        assert query == {"_id": ObjectId(new_issue.id), "version": {"$in": [0, None]}}
        assert document["version"] == 1
        assert "_id" not in document

    def test_save_guards_on_current_version(self, mongo_repository, collections, new_issue):
        collections["issues"].replace_one.return_value = Mock(matched_count=1)
        issue = new_issue.model_copy(update={"version": 4, "state": IssueState.ACKNOWLEDGED})

        saved = mongo_repository.save_issue(issue)

        query, document = collections["issues"].replace_one.call_args[0]
        assert query["version"] == 4
        assert document["state"] == "acknowledged"
        assert saved.version == 5

    def test_stale_version_is_conflict(self, mongo_repository, collections, new_issue):
        """Test a save against a concurrently updated document raises a conflict."""
        collections["issues"].replace_one.return_value = Mock(matched_count=0)
        collections["issues"].count_documents.return_value = 1

        with pytest.raises(ConflictException) as exc_info:
            mongo_repository.save_issue(new_issue)

        assert exc_info.value.status_code == 409

    def test_deleted_issue_is_not_found(self, mongo_repository, collections, new_issue):
        collections["issues"].replace_one.return_value = Mock(matched_count=0)
        collections["issues"].count_documents.return_value = 0

        with pytest.raises(NotFoundException):
            mongo_repository.save_issue(new_issue)

    def test_driver_error_is_persistence_failure(self, mongo_repository, collections, new_issue):
        collections["issues"].replace_one.side_effect = AutoReconnect("connection lost")

        with pytest.raises(PersistenceException) as exc_info:
            mongo_repository.save_issue(new_issue)

        assert exc_info.value.status_code == 500
        assert exc_info.value.error_type == "persistence-failure"


class TestFindUser:
    """Test user lookups."""

    def test_find_user(self, mongo_repository, collections, staff_user):
        collections["users"].find_one.return_value = {
            "_id": ObjectId(staff_user.id),
            "firstname": "Sam",
            "lastname": "Staff",
            "roles": ["staff"]
        }

        user = mongo_repository.find_user(staff_user.id)

        assert user == staff_user

    def test_unknown_user(self, mongo_repository, collections):
        collections["users"].find_one.return_value = None

        assert mongo_repository.find_user(str(ObjectId())) is None

    def test_malformed_user_id(self, mongo_repository, collections):
        assert mongo_repository.find_user("bogus") is None
        collections["users"].find_one.assert_not_called()
