# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the citizen engagement platform.
"""

# Base models
from .base import BaseEntity, generate_object_id, utcnow

# Enumerations
from .enums import (
    IssueState,
    IssueAction,
    AuditActionType,
    UserRole
)

# Core entities
from .entities import (
    User,
    IssueType,
    Comment,
    Action,
    Issue,
    PopulatedComment,
    PopulatedIssue,
    UserContext
)

# Request models
from .requests import (
    IssuePath,
    ActionRequest,
    TransitionPayload,
    AssignPayload,
    CommentPayload,
    TagsPayload
)

# Response models
from .responses import (
    HalLink,
    HalResponse,
    UserSummaryResponse,
    IssueTypeResponse,
    CommentResponse,
    ActionResponse,
    IssueResponse,
    ActionCollectionResponse,
    ErrorResponse,
    HealthCheckResponse
)

__all__ = [
    # Base models
    "BaseEntity",
    "generate_object_id",
    "utcnow",
    
    # Enumerations
    "IssueState",
    "IssueAction",
    "AuditActionType",
    "UserRole",
    
    # Core entities
    "User",
    "IssueType",
    "Comment",
    "Action",
    "Issue",
    "PopulatedComment",
    "PopulatedIssue",
    "UserContext",
    
    # Request models
    "IssuePath",
    "ActionRequest",
    "TransitionPayload",
    "AssignPayload",
    "CommentPayload",
    "TagsPayload",
    
    # Response models
    "HalLink",
    "HalResponse",
    "UserSummaryResponse",
    "IssueTypeResponse",
    "CommentResponse",
    "ActionResponse",
    "IssueResponse",
    "ActionCollectionResponse",
    "ErrorResponse",
    "HealthCheckResponse"
]
