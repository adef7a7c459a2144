# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Issue repository port and its MongoDB implementation.

The workflow only talks to storage through ``IssueRepository``: load an issue
(optionally populated with its references), save an issue, find a user.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Union
from opentelemetry import trace
from pymongo.errors import PyMongoError

from .mongodb import MongoDBService
from ..models.base import utcnow
from ..models.entities import Action, Comment, Issue, IssueType, PopulatedIssue, User
from ..middleware.error_handler import ConflictException, NotFoundException, PersistenceException

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class IssueRepository(ABC):
    """Storage contract consumed by the issue service."""

    @abstractmethod
    def load_issue(self, issue_id: str, populate: bool = False) -> Optional[Union[Issue, PopulatedIssue]]:
        """Load an issue, resolving its references when ``populate`` is set."""

    @abstractmethod
    def save_issue(self, issue: Issue) -> Issue:
        """Persist an issue in one write and return it with its new version."""

    @abstractmethod
    def find_user(self, user_id: str) -> Optional[User]:
        """Load a user by ID."""


# Document mapping

def comment_to_document(comment: Comment) -> Dict[str, Any]:
    return {
        "id": comment.id,
        "text": comment.text,
        "postedOn": comment.posted_on,
        "authorId": comment.author_id
    }


def action_to_document(action: Action) -> Dict[str, Any]:
    return {
        "id": action.id,
        "actionType": action.action_type,
        "user": action.user,
        "actionDate": action.action_date,
        "reason": action.reason
    }


def issue_to_document(issue: Issue) -> Dict[str, Any]:
    """Convert an issue to its MongoDB document (without ``_id``)."""
    return {
        "description": issue.description,
        "lat": issue.lat,
        "lng": issue.lng,
        "state": issue.state.value,
        "tags": list(issue.tags),
        "issueTypeId": issue.issue_type_id,
        "ownerId": issue.owner_id,
        "assigneeId": issue.assignee_id,
        "comments": [comment_to_document(comment) for comment in issue.comments],
        "actions": [action_to_document(action) for action in issue.actions],
        "updatedOn": issue.updated_on,
        "version": issue.version
    }


def issue_from_document(document: Dict[str, Any]) -> Issue:
    """Build an issue from its MongoDB document."""
    return Issue(
        id=str(document["_id"]),
        description=document.get("description", ""),
        lat=document.get("lat"),
        lng=document.get("lng"),
        state=document.get("state", "new"),
        tags=document.get("tags", []),
        issue_type_id=document.get("issueTypeId"),
        owner_id=document.get("ownerId"),
        assignee_id=document.get("assigneeId"),
        comments=[
            Comment(
                id=comment["id"],
                text=comment["text"],
                posted_on=comment["postedOn"],
                author_id=comment.get("authorId")
            )
            for comment in document.get("comments", [])
        ],
        actions=[
            Action(
                id=action["id"],
                action_type=action["actionType"],
                user=action["user"],
                action_date=action["actionDate"],
                reason=action.get("reason", "")
            )
            for action in document.get("actions", [])
        ],
        updated_on=document.get("updatedOn") or utcnow(),
        version=document.get("version") or 0
    )


def user_from_document(document: Dict[str, Any]) -> User:
    """Build a user from its MongoDB document."""
    return User(
        id=str(document["_id"]),
        firstname=document.get("firstname", ""),
        lastname=document.get("lastname", ""),
        roles=document.get("roles", [])
    )


def issue_type_from_document(document: Dict[str, Any]) -> IssueType:
    """Build an issue type from its MongoDB document."""
    return IssueType(id=str(document["_id"]), name=document["name"])


def referenced_user_ids(issue: Issue) -> List[str]:
    """IDs of the owner, assignee and comment authors of an issue."""
    ids = [issue.owner_id, issue.assignee_id]
    ids.extend(comment.author_id for comment in issue.comments)
    return list(dict.fromkeys(user_id for user_id in ids if user_id))


class MongoIssueRepository(IssueRepository):
    """Issue repository backed by the ``issues``, ``users`` and ``issue_types`` collections."""

    def __init__(self, mongo_service: MongoDBService):
        self.mongo_service = mongo_service
        self.issues_collection = "issues"
        self.users_collection = "users"
        self.issue_types_collection = "issue_types"

    def load_issue(self, issue_id: str, populate: bool = False) -> Optional[Union[Issue, PopulatedIssue]]:
        object_id = self.mongo_service.to_object_id(issue_id)
        if object_id is None:
            logger.debug(f"Malformed issue ID: {issue_id}")
            return None

        with tracer.start_as_current_span("db.issue.get") as span:
            span.set_attributes({
                "db.collection": self.issues_collection,
                "db.operation": "find_one",
                "issue.id": issue_id,
                "db.populate": populate
            })
            try:
                document = self.mongo_service.get_collection(self.issues_collection).find_one(
                    {"_id": object_id}
                )
            except PyMongoError as e:
                span.record_exception(e)
                logger.error(f"Failed to load issue {issue_id}: {e}")
                raise PersistenceException(f"Failed to load issue {issue_id}")

            span.set_attribute("db.found", document is not None)

        if document is None:
            return None

        issue = issue_from_document(document)
        if not populate:
            return issue

        users = self._find_users(referenced_user_ids(issue))
        issue_type = self._find_issue_type(issue.issue_type_id)
        return PopulatedIssue.from_issue(issue, users, issue_type)

    def save_issue(self, issue: Issue) -> Issue:
        object_id = self.mongo_service.to_object_id(issue.id)
        if object_id is None:
            raise NotFoundException(f"Issue not found: {issue.id}")

        expected_version = issue.version
        document = issue_to_document(issue)
        document["version"] = expected_version + 1

        # A missing version field counts as version 0
        version_filter = {"$in": [0, None]} if expected_version == 0 else expected_version

        with tracer.start_as_current_span("db.issue.update") as span:
            span.set_attributes({
                "db.collection": self.issues_collection,
                "db.operation": "replace_one",
                "issue.id": issue.id,
                "issue.version": expected_version
            })
            collection = self.mongo_service.get_collection(self.issues_collection)
            try:
                result = collection.replace_one(
                    {"_id": object_id, "version": version_filter},
                    document
                )
                matched = result.matched_count
                exists = matched > 0 or collection.count_documents({"_id": object_id}, limit=1) > 0
            except PyMongoError as e:
                span.record_exception(e)
                logger.error(
                    "Failed to save issue",
                    extra={"issue_id": issue.id, "error": str(e)},
                    exc_info=True
                )
                raise PersistenceException(f"Failed to save issue {issue.id}")

            span.set_attribute("db.matched", matched)

        if not matched:
            if exists:
                logger.warning(
                    "Concurrent issue update rejected",
                    extra={"issue_id": issue.id, "expected_version": expected_version}
                )
                raise ConflictException(f"Issue {issue.id} was modified by another request")
            raise NotFoundException(f"Issue not found: {issue.id}")

        logger.info(f"Saved issue {issue.id} at version {expected_version + 1}")
        return issue.model_copy(update={"version": expected_version + 1})

    def find_user(self, user_id: str) -> Optional[User]:
        object_id = self.mongo_service.to_object_id(user_id)
        if object_id is None:
            return None

        with tracer.start_as_current_span("db.user.get"):
            try:
                document = self.mongo_service.get_collection(self.users_collection).find_one(
                    {"_id": object_id}
                )
            except PyMongoError as e:
                logger.error(f"Failed to load user {user_id}: {e}")
                raise PersistenceException(f"Failed to load user {user_id}")

        return user_from_document(document) if document else None

    def _find_users(self, user_ids: Iterable[str]) -> Dict[str, User]:
        object_ids = [oid for oid in map(self.mongo_service.to_object_id, user_ids) if oid is not None]
        if not object_ids:
            return {}

        with tracer.start_as_current_span("db.user.find_many") as span:
            span.set_attribute("db.requested", len(object_ids))
            try:
                documents = self.mongo_service.get_collection(self.users_collection).find(
                    {"_id": {"$in": object_ids}}
                )
                users = [user_from_document(document) for document in documents]
            except PyMongoError as e:
                logger.error(f"Failed to load issue users: {e}")
                raise PersistenceException("Failed to load issue users")

        return {user.id: user for user in users}

    def _find_issue_type(self, issue_type_id: Optional[str]) -> Optional[IssueType]:
        object_id = self.mongo_service.to_object_id(issue_type_id) if issue_type_id else None
        if object_id is None:
            return None

        try:
            document = self.mongo_service.get_collection(self.issue_types_collection).find_one(
                {"_id": object_id}
            )
        except PyMongoError as e:
            logger.error(f"Failed to load issue type {issue_type_id}: {e}")
            raise PersistenceException(f"Failed to load issue type {issue_type_id}")

        return issue_type_from_document(document) if document else None
