# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest
from datetime import datetime, timezone
from typing import Dict, Optional
from bson import ObjectId

# Set test environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['OTEL_ENABLED'] = 'false'

from citizen_engagement.app import create_app
from citizen_engagement.middleware.error_handler import ConflictException
from citizen_engagement.models.entities import (
    Comment, Issue, IssueType, PopulatedIssue, User, UserContext
)
from citizen_engagement.models.enums import IssueState
from citizen_engagement.services.auth import AuthService, generate_key_pair
from citizen_engagement.services.repository import IssueRepository, referenced_user_ids


FIXED_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class InMemoryIssueRepository(IssueRepository):
    """Repository double keeping issues, users and issue types in dictionaries."""

    def __init__(self, users=(), issue_types=(), issues=()):
        self.users: Dict[str, User] = {user.id: user for user in users}
        self.issue_types: Dict[str, IssueType] = {issue_type.id: issue_type for issue_type in issue_types}
        self.issues: Dict[str, Issue] = {issue.id: issue for issue in issues}
        self.save_calls = 0
        self.fail_on_save: Optional[Exception] = None

    def load_issue(self, issue_id, populate=False):
        issue = self.issues.get(issue_id)
        if issue is None or not populate:
            return issue

        users = {user_id: self.users[user_id] for user_id in referenced_user_ids(issue) if user_id in self.users}
        return PopulatedIssue.from_issue(issue, users, self.issue_types.get(issue.issue_type_id))

    def save_issue(self, issue):
        self.save_calls += 1
        if self.fail_on_save is not None:
            raise self.fail_on_save

        stored = self.issues.get(issue.id)
        if stored is not None and stored.version != issue.version:
            raise ConflictException(f"Issue {issue.id} was modified by another request")

        saved = issue.model_copy(update={"version": issue.version + 1})
        self.issues[issue.id] = saved
        return saved

    def find_user(self, user_id):
        return self.users.get(user_id)


@pytest.fixture
def staff_user():
    """Staff member handling issues."""
    return User(id=str(ObjectId()), firstname="Sam", lastname="Staff", roles=("staff",))


@pytest.fixture
def other_staff_user():
    """Second staff member, used as assignee."""
    return User(id=str(ObjectId()), firstname="Alex", lastname="Fixer", roles=("staff",))


@pytest.fixture
def citizen_user():
    """Citizen filing issues."""
    return User(id=str(ObjectId()), firstname="Casey", lastname="Citizen", roles=("citizen",))


@pytest.fixture
def issue_type():
    """Issue type reference data."""
    return IssueType(id=str(ObjectId()), name="broken streetlight")


@pytest.fixture
def new_issue(citizen_user, issue_type):
    """Freshly filed issue."""
    return Issue(
        id=str(ObjectId()),
        description="Streetlight out on Main St.",
        lat=46.78,
        lng=6.64,
        state=IssueState.NEW,
        tags=("lighting",),
        issue_type_id=issue_type.id,
        owner_id=citizen_user.id,
        comments=(
            Comment(text="It has been dark for a week.", author_id=citizen_user.id, posted_on=FIXED_NOW),
        ),
        updated_on=FIXED_NOW
    )


@pytest.fixture
def assigned_issue(new_issue, other_staff_user):
    """Issue already assigned to a staff member."""
    return new_issue.model_copy(update={
        "id": str(ObjectId()),
        "state": IssueState.ASSIGNED,
        "assignee_id": other_staff_user.id
    })


def make_actor(user: User) -> UserContext:
    """Build the acting user context for a user."""
    return UserContext(
        user_id=user.id,
        firstname=user.firstname,
        lastname=user.lastname,
        roles=list(user.roles)
    )


@pytest.fixture
def staff_actor(staff_user):
    return make_actor(staff_user)


@pytest.fixture
def citizen_actor(citizen_user):
    return make_actor(citizen_user)


@pytest.fixture
def repository(staff_user, other_staff_user, citizen_user, issue_type, new_issue, assigned_issue):
    """In-memory repository seeded with users, an issue type and two issues."""
    return InMemoryIssueRepository(
        users=[staff_user, other_staff_user, citizen_user],
        issue_types=[issue_type],
        issues=[new_issue, assigned_issue]
    )


@pytest.fixture(scope="session")
def auth_service():
    """Token service with a key pair generated once per session."""
    private_key, public_key = generate_key_pair()
    return AuthService(private_key, public_key)


@pytest.fixture
def app(repository, auth_service):
    """Application wired to the in-memory repository."""
    application = create_app(
        config={
            'ENVIRONMENT': 'testing',
            'TESTING': True,
            'OTEL_ENABLED': False,
            'DOCS_ENABLED': False,
            'BASE_URL': 'http://localhost:5000'
        },
        repository=repository,
        auth_service=auth_service
    )
    return application


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def auth_headers(auth_service):
    """Factory building bearer headers for a user."""
    def _headers(user: User) -> Dict[str, str]:
        token = auth_service.create_access_token(user)["access_token"]
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def staff_headers(auth_headers, staff_user):
    return auth_headers(staff_user)


@pytest.fixture
def citizen_headers(auth_headers, citizen_user):
    return auth_headers(citizen_user)
