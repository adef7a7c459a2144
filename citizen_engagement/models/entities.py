# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the citizen engagement platform.
"""

from datetime import datetime
from typing import List, Optional, Dict, Any, Tuple
from pydantic import BaseModel, Field, field_validator, ConfigDict
from .base import BaseEntity, utcnow
from .enums import IssueState, UserRole
from ..domain.tags import normalize_tags


class User(BaseEntity):
    """Platform user, owned and managed outside the issue workflow."""
    
    firstname: str = Field("", description="First name")
    lastname: str = Field("", description="Last name")
    roles: Tuple[str, ...] = Field(default_factory=tuple, description="Role names")
    
    @property
    def full_name(self) -> str:
        """Display name as shown in comments and audit records."""
        return f"{self.firstname} {self.lastname}"
    
    def has_role(self, role: str) -> bool:
        """Check if user holds a role."""
        return role in self.roles


class IssueType(BaseEntity):
    """Issue type reference data."""
    
    name: str = Field(..., description="Issue type name")


class Comment(BaseEntity):
    """Comment posted on an issue."""
    
    text: str = Field(..., min_length=1, description="Comment text")
    posted_on: datetime = Field(default_factory=utcnow, description="Posting timestamp")
    author_id: Optional[str] = Field(None, description="User ID of the author")


class Action(BaseEntity):
    """Audit trail record of an operation performed on an issue."""
    
    action_type: str = Field(..., description="Workflow action or tag/comment operation")
    user: str = Field(..., description="Display name of the acting user at action time")
    action_date: datetime = Field(default_factory=utcnow, description="Action timestamp")
    reason: str = Field("", description="Free-text reason")


class Issue(BaseEntity):
    """Issue aggregate root with its comments and audit trail."""
    
    description: str = Field("", description="Issue description")
    lat: Optional[float] = Field(None, description="Latitude")
    lng: Optional[float] = Field(None, description="Longitude")
    state: IssueState = Field(default=IssueState.NEW, description="Lifecycle state")
    tags: Tuple[str, ...] = Field(default_factory=tuple, description="Issue tags")
    issue_type_id: Optional[str] = Field(None, description="Issue type ID")
    owner_id: Optional[str] = Field(None, description="User ID who filed the issue")
    assignee_id: Optional[str] = Field(None, description="User ID in charge of the issue")
    comments: Tuple[Comment, ...] = Field(default_factory=tuple, description="Comments, oldest first")
    actions: Tuple[Action, ...] = Field(default_factory=tuple, description="Audit trail, oldest first")
    updated_on: datetime = Field(default_factory=utcnow, description="Last update timestamp")
    version: int = Field(default=0, ge=0, description="Optimistic concurrency counter")
    
    @field_validator('tags', mode='before')
    @classmethod
    def validate_tags(cls, v):
        """Collapse duplicate tags."""
        return normalize_tags(v or ())
    
    def is_terminal(self) -> bool:
        """Check if the issue reached a state with no further transitions."""
        return self.state.is_terminal
    
    def has_assignee(self) -> bool:
        """Check if somebody is in charge of the issue."""
        return self.assignee_id is not None


class PopulatedComment(BaseModel):
    """Comment with its author resolved."""
    
    model_config = ConfigDict(frozen=True)
    
    id: str
    text: str
    posted_on: datetime
    author: Optional[User] = None


class PopulatedIssue(BaseModel):
    """Issue with owner, assignee, issue type and comment authors resolved."""
    
    model_config = ConfigDict(frozen=True)
    
    id: str
    description: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None
    state: IssueState = IssueState.NEW
    tags: Tuple[str, ...] = ()
    issue_type: Optional[IssueType] = None
    owner: Optional[User] = None
    assignee_id: Optional[str] = None
    assignee: Optional[User] = None
    comments: Tuple[PopulatedComment, ...] = ()
    actions: Tuple[Action, ...] = ()
    updated_on: Optional[datetime] = None
    version: int = 0
    
    @classmethod
    def from_issue(
        cls,
        issue: Issue,
        users: Dict[str, User],
        issue_type: Optional[IssueType] = None
    ) -> "PopulatedIssue":
        """Resolve an issue's references against already loaded users."""
        return cls(
            id=issue.id,
            description=issue.description,
            lat=issue.lat,
            lng=issue.lng,
            state=issue.state,
            tags=issue.tags,
            issue_type=issue_type,
            owner=users.get(issue.owner_id),
            assignee_id=issue.assignee_id,
            assignee=users.get(issue.assignee_id),
            comments=tuple(
                PopulatedComment(
                    id=comment.id,
                    text=comment.text,
                    posted_on=comment.posted_on,
                    author=users.get(comment.author_id)
                )
                for comment in issue.comments
            ),
            actions=issue.actions,
            updated_on=issue.updated_on,
            version=issue.version
        )
    
    def is_terminal(self) -> bool:
        """Check if the issue reached a state with no further transitions."""
        return self.state.is_terminal
    
    def has_assignee(self) -> bool:
        """Check if somebody is in charge of the issue, resolved or not."""
        return self.assignee_id is not None


class UserContext(BaseModel):
    """User context for request processing with authentication and authorization data."""
    
    user_id: str = Field(..., description="Authenticated user ID")
    firstname: str = Field("", description="First name")
    lastname: str = Field("", description="Last name")
    roles: List[str] = Field(default_factory=list, description="User's roles")
    token_payload: Optional[Dict[str, Any]] = Field(None, description="Original JWT payload")
    ip_address: Optional[str] = Field(None, description="Client IP address")
    user_agent: Optional[str] = Field(None, description="Client user agent")
    session_id: Optional[str] = Field(None, description="Session identifier")
    
    @property
    def display_name(self) -> str:
        """Name recorded in audit actions."""
        return f"{self.firstname} {self.lastname}"
    
    def has_role(self, role: str) -> bool:
        """Check if user has a specific role."""
        return role in self.roles
    
    def has_any_role(self, roles: List[str]) -> bool:
        """Check if user has any of the specified roles."""
        return any(role in self.roles for role in roles)
    
    def is_staff(self) -> bool:
        """Check if user belongs to the staff."""
        return self.has_role(UserRole.STAFF.value)
