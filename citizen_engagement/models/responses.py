# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Response models for API endpoints with HAL support.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field, ConfigDict


class HalLink(BaseModel):
    """HAL link representation."""
    
    href: str = Field(..., description="Link URL")
    method: Optional[str] = Field(None, description="HTTP method")
    type: Optional[str] = Field(None, description="Content type")
    title: Optional[str] = Field(None, description="Link title")
    templated: Optional[bool] = Field(None, description="Whether URL is templated")


class HalResponse(BaseModel):
    """Base HAL response with links."""
    
    model_config = ConfigDict(populate_by_name=True)
    
    links: Dict[str, HalLink] = Field(default_factory=dict, alias="_links", description="HAL links")


class UserSummaryResponse(BaseModel):
    """User reference as shown on an issue."""
    
    id: str = Field(..., description="User ID")
    name: str = Field(..., description="First and last name")


class IssueTypeResponse(BaseModel):
    """Issue type reference."""
    
    id: str = Field(..., description="Issue type ID")
    name: str = Field(..., description="Issue type name")


class CommentResponse(BaseModel):
    """Comment as shown on an issue."""
    
    model_config = ConfigDict(populate_by_name=True)
    
    id: str = Field(..., description="Comment ID")
    text: str = Field(..., description="Comment text")
    posted_on: str = Field(..., alias="postedOn", description="Posting timestamp")
    author: Optional[UserSummaryResponse] = Field(None, description="Comment author")


class ActionResponse(BaseModel):
    """Audit trail entry."""
    
    model_config = ConfigDict(populate_by_name=True)
    
    id: str = Field(..., description="Action ID")
    type: str = Field(..., description="Action type")
    user: str = Field(..., description="Display name of the acting user")
    action_date: str = Field(..., alias="actionDate", description="Action timestamp")
    reason: str = Field("", description="Reason")


class IssueResponse(HalResponse):
    """Issue read model."""
    
    id: str = Field(..., description="Issue ID")
    description: str = Field(..., description="Issue description")
    lat: Optional[float] = Field(None, description="Latitude")
    lng: Optional[float] = Field(None, description="Longitude")
    updated_on: Optional[str] = Field(None, alias="updatedOn", description="Last update timestamp")
    state: str = Field(..., description="Lifecycle state")
    tags: List[str] = Field(default_factory=list, description="Issue tags")
    issue_type: Optional[IssueTypeResponse] = Field(None, alias="issueType", description="Issue type")
    owner: Optional[UserSummaryResponse] = Field(None, description="User who filed the issue")
    assignee: Optional[UserSummaryResponse] = Field(None, description="User in charge of the issue")
    comments: List[CommentResponse] = Field(default_factory=list, description="Comments")
    actions: List[ActionResponse] = Field(default_factory=list, description="Audit trail")


class ActionCollectionResponse(HalResponse):
    """Audit trail of an issue."""
    
    total: int = Field(..., description="Number of actions")
    embedded: Dict[str, List[ActionResponse]] = Field(
        default_factory=dict, alias="_embedded", description="Embedded actions"
    )


class ErrorResponse(BaseModel):
    """Error response model following RFC 7807."""
    
    type: str = Field(..., description="Error type URI")
    title: str = Field(..., description="Error title")
    status: int = Field(..., description="HTTP status code")
    detail: str = Field(..., description="Error detail")
    instance: str = Field(..., description="Request instance")
    errors: Optional[List[Dict[str, Any]]] = Field(None, description="Validation errors")


class HealthCheckResponse(BaseModel):
    """Health check response."""
    
    status: str = Field(..., description="Overall status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    dependencies: Dict[str, Any] = Field(default_factory=dict, description="Dependency status")
