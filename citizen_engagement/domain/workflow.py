# SPDX-License-Identifier: Apache-2.0

"""
Issue workflow domain logic.

This module contains the issue state machine: transition definitions, payload
validation and one handler per workflow action. Handlers are pure: they
return a new Issue with state, comments, tags and exactly one audit action
applied, and leave the input untouched.
"""

from typing import Any, Callable, Dict, List, Optional, Type, Union
from dataclasses import dataclass, field
from datetime import datetime
from pydantic import BaseModel, ValidationError

from ..models.base import utcnow
from ..models.entities import Comment, Issue, PopulatedIssue, User, UserContext
from ..models.enums import AuditActionType, IssueAction, IssueState
from ..models.requests import AssignPayload, CommentPayload, TagsPayload, TransitionPayload
from ..middleware.error_handler import (
    InvalidTransitionException,
    NotFoundException,
    UnknownActionException,
    ValidationException
)
from . import audit, tags


@dataclass(frozen=True)
class Transition:
    """State change performed by a workflow action."""
    target_state: IssueState
    mandatory_comment: str
    requires_assignee: bool = False


@dataclass(frozen=True)
class DataChange:
    """Audit metadata of an action that leaves the state untouched."""
    audit_type: AuditActionType
    reason: str


@dataclass
class ValidationResult:
    """Result of a workflow precondition check."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)


TRANSITIONS: Dict[IssueAction, Transition] = {
    IssueAction.ACK: Transition(
        IssueState.ACKNOWLEDGED,
        "The staff has received the issue."
    ),
    IssueAction.ASSIGN: Transition(
        IssueState.ASSIGNED,
        "The issue has been assigned."
    ),
    IssueAction.START: Transition(
        IssueState.IN_PROGRESS,
        "The issue is under investigation.",
        requires_assignee=True
    ),
    IssueAction.REJECT: Transition(
        IssueState.REJECTED,
        "It seems there is nothing to do there!",
        requires_assignee=True
    ),
    IssueAction.RESOLVE: Transition(
        IssueState.RESOLVED,
        "Yeah! Staff is proud to announce that the issue has been solved!",
        requires_assignee=True
    ),
}

DATA_CHANGES: Dict[IssueAction, DataChange] = {
    IssueAction.COMMENT: DataChange(AuditActionType.ADD_COMMENT, "Comment added."),
    IssueAction.ADD_TAGS: DataChange(AuditActionType.ADD_TAGS, "Tags added to the issue."),
    IssueAction.REMOVE_TAGS: DataChange(AuditActionType.REMOVE_TAGS, "Tags removed from the issue."),
    IssueAction.REPLACE_TAGS: DataChange(AuditActionType.REPLACE_TAGS, "Tags replaced on the issue."),
}

PAYLOAD_MODELS: Dict[IssueAction, Type[BaseModel]] = {
    IssueAction.ACK: TransitionPayload,
    IssueAction.ASSIGN: AssignPayload,
    IssueAction.START: TransitionPayload,
    IssueAction.REJECT: TransitionPayload,
    IssueAction.RESOLVE: TransitionPayload,
    IssueAction.COMMENT: CommentPayload,
    IssueAction.ADD_TAGS: TagsPayload,
    IssueAction.REMOVE_TAGS: TagsPayload,
    IssueAction.REPLACE_TAGS: TagsPayload,
}


def parse_action(name: str) -> IssueAction:
    """
    Map a requested action name onto the workflow's action set.

    Raises:
        UnknownActionException: If the name is not a workflow action
    """
    try:
        return IssueAction(name)
    except ValueError:
        raise UnknownActionException(name)


def format_validation_errors(validation_error: ValidationError) -> List[Dict[str, Any]]:
    """Format Pydantic validation errors for API responses."""
    return [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        }
        for error in validation_error.errors()
    ]


def parse_payload(action: IssueAction, payload: Optional[Dict[str, Any]]) -> BaseModel:
    """
    Validate an action payload.

    Raises:
        ValidationException: If the payload does not match the action's shape
    """
    try:
        return PAYLOAD_MODELS[action].model_validate(payload or {})
    except ValidationError as e:
        raise ValidationException(
            f"Invalid payload for action '{action.value}'",
            format_validation_errors(e)
        )


def validate_transition(issue: Union[Issue, PopulatedIssue], action: IssueAction) -> ValidationResult:
    """
    Validate that ``action`` may be applied to ``issue`` in its current state.

    Args:
        issue: Issue to act on
        action: Requested action

    Returns:
        ValidationResult with validation status and errors
    """
    errors = []
    transition = TRANSITIONS.get(action)

    if transition is None:
        # Comments and tag edits are accepted in every state
        return ValidationResult(is_valid=True)

    if issue.is_terminal():
        errors.append(
            f"Issue is {issue.state.value}; no further transition is defined"
        )

    if transition.requires_assignee and not issue.has_assignee():
        errors.append(f"Action '{action.value}' requires an assignee")

    return ValidationResult(is_valid=len(errors) == 0, errors=errors)


def available_actions(issue: Union[Issue, PopulatedIssue], allowed: List[IssueAction]) -> List[IssueAction]:
    """Actions out of ``allowed`` whose precondition holds for ``issue``."""
    return [action for action in allowed if validate_transition(issue, action).is_valid]


def _new_comment(text: str, actor: UserContext, now: datetime) -> Comment:
    return Comment(text=text, author_id=actor.user_id, posted_on=now)


def _change_state(
    issue: Issue,
    action: IssueAction,
    payload: TransitionPayload,
    actor: UserContext,
    now: datetime,
    updates: Optional[Dict[str, Any]] = None
) -> Issue:
    transition = TRANSITIONS[action]

    comments = [_new_comment(transition.mandatory_comment, actor, now)]
    if payload.comment:
        comments.append(_new_comment(payload.comment, actor, now))

    changed = issue.model_copy(update={
        **(updates or {}),
        "state": transition.target_state,
        "comments": issue.comments + tuple(comments),
        "updated_on": now,
    })
    return audit.record_action(changed, action.value, actor, transition.mandatory_comment, now)


def _transition(issue, action, payload, actor, now, assignee=None):
    return _change_state(issue, action, payload, actor, now)


def _assign(issue, action, payload, actor, now, assignee=None):
    if assignee is None or assignee.id != payload.assignee_id:
        raise NotFoundException(f"User not found: {payload.assignee_id}")
    return _change_state(issue, action, payload, actor, now, {"assignee_id": assignee.id})


def _comment(issue, action, payload, actor, now, assignee=None):
    change = DATA_CHANGES[action]
    changed = issue.model_copy(update={
        "comments": issue.comments + (_new_comment(payload.text, actor, now),),
        "updated_on": now,
    })
    return audit.record_action(changed, change.audit_type, actor, change.reason, now)


def _tag_editor(operation: Callable) -> Callable:
    def handler(issue, action, payload, actor, now, assignee=None):
        change = DATA_CHANGES[action]
        changed = issue.model_copy(update={
            "tags": operation(issue.tags, payload.tags),
            "updated_on": now,
        })
        return audit.record_action(changed, change.audit_type, actor, change.reason, now)
    return handler


_HANDLERS: Dict[IssueAction, Callable] = {
    IssueAction.ACK: _transition,
    IssueAction.ASSIGN: _assign,
    IssueAction.START: _transition,
    IssueAction.REJECT: _transition,
    IssueAction.RESOLVE: _transition,
    IssueAction.COMMENT: _comment,
    IssueAction.ADD_TAGS: _tag_editor(tags.union_tags),
    IssueAction.REMOVE_TAGS: _tag_editor(tags.difference_tags),
    IssueAction.REPLACE_TAGS: _tag_editor(tags.replace_tags),
}


def apply_action(
    issue: Issue,
    action: IssueAction,
    payload: BaseModel,
    actor: UserContext,
    assignee: Optional[User] = None,
    now: Optional[datetime] = None
) -> Issue:
    """
    Apply a workflow action and return the resulting issue.

    Args:
        issue: Issue to act on
        action: Workflow action
        payload: Validated payload (see ``parse_payload``)
        actor: User performing the action
        assignee: Resolved user for ``assign``
        now: Timestamp of the operation, defaults to the current time

    Returns:
        New Issue with the action's effects and one audit action appended

    Raises:
        InvalidTransitionException: If the action's precondition does not hold
    """
    validation = validate_transition(issue, action)
    if not validation.is_valid:
        raise InvalidTransitionException(
            "; ".join(validation.errors),
            action=action.value,
            state=issue.state.value
        )

    return _HANDLERS[action](issue, action, payload, actor, now or utcnow(), assignee)
