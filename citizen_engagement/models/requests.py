# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for API endpoints.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field, ConfigDict, field_validator


class IssuePath(BaseModel):
    """Path parameters for issue-scoped endpoints."""
    
    issue_id: str = Field(..., description="Issue identifier")


class ActionRequest(BaseModel):
    """Request body of the issue action endpoint."""
    
    type: str = Field(..., description="Action name")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Action-specific payload")

    @field_validator('payload', mode='before')
    @classmethod
    def default_payload(cls, v):
        """Treat a missing payload as an empty one."""
        return v or {}


class TransitionPayload(BaseModel):
    """Payload of ack, start, reject and resolve."""
    
    model_config = ConfigDict(populate_by_name=True)
    
    comment: Optional[str] = Field(None, description="Optional free-text comment")
    
    @field_validator('comment')
    @classmethod
    def blank_comment_is_absent(cls, v):
        """Drop comments made only of whitespace."""
        if v is not None and not v.strip():
            return None
        return v


class AssignPayload(TransitionPayload):
    """Payload of assign."""
    
    assignee_id: str = Field(..., alias="assigneeId", min_length=1, description="User ID to assign")


class CommentPayload(BaseModel):
    """Payload of comment."""
    
    text: str = Field(..., min_length=1, max_length=5000, description="Comment text")
    
    @field_validator('text')
    @classmethod
    def validate_text(cls, v):
        """Validate comment text."""
        if not v.strip():
            raise ValueError('Comment text cannot be empty')
        return v


class TagsPayload(BaseModel):
    """Payload of addTags, removeTags and replaceTags."""
    
    tags: List[str] = Field(..., description="Tags to apply")
