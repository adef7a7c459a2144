# SPDX-License-Identifier: Apache-2.0

"""
Read-model projection of issues.

Pure functions turning a populated issue into the flat structure returned to
API consumers. Missing references project to ``None`` instead of failing.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from ..models.entities import Action, IssueType, PopulatedComment, PopulatedIssue, User


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def project_user(user: Optional[User]) -> Optional[Dict[str, Any]]:
    """Project a user reference as id and full name."""
    if user is None:
        return None
    return {
        "id": user.id,
        "name": user.full_name
    }


def project_issue_type(issue_type: Optional[IssueType]) -> Optional[Dict[str, Any]]:
    """Project an issue type reference."""
    if issue_type is None:
        return None
    return {
        "id": issue_type.id,
        "name": issue_type.name
    }


def project_comment(comment: Optional[PopulatedComment]) -> Optional[Dict[str, Any]]:
    """Project a comment with its author."""
    if comment is None:
        return None
    return {
        "id": comment.id,
        "text": comment.text,
        "postedOn": _isoformat(comment.posted_on),
        "author": project_user(comment.author)
    }


def project_action(action: Action) -> Dict[str, Any]:
    """Project an audit action; the user is the display name stored with it."""
    return {
        "id": action.id,
        "type": action.action_type,
        "user": action.user,
        "actionDate": _isoformat(action.action_date),
        "reason": action.reason
    }


def project_actions(issue: PopulatedIssue) -> List[Dict[str, Any]]:
    """Project an issue's audit trail, oldest first."""
    return [project_action(action) for action in issue.actions]


def project_issue(issue: PopulatedIssue) -> Dict[str, Any]:
    """
    Project a populated issue into its API read model.

    Args:
        issue: Issue with owner, assignee, issue type and comment authors resolved

    Returns:
        Flat dictionary with camelCase keys
    """
    return {
        "id": issue.id,
        "description": issue.description,
        "lat": issue.lat,
        "lng": issue.lng,
        "updatedOn": _isoformat(issue.updated_on),
        "state": issue.state.value,
        "tags": list(issue.tags),
        "issueType": project_issue_type(issue.issue_type),
        "owner": project_user(issue.owner),
        "assignee": project_user(issue.assignee),
        "comments": [project_comment(comment) for comment in issue.comments],
        "actions": project_actions(issue)
    }
