# SPDX-License-Identifier: Apache-2.0

"""
Audit trail domain logic.

An issue's actions form an append-only log: entries are added at the end and
never edited, reordered or removed.
"""

from datetime import datetime
from typing import Optional, Tuple, Union

from ..models.base import utcnow
from ..models.entities import Action, Issue, UserContext
from ..models.enums import AuditActionType


def build_action(
    action_type: Union[AuditActionType, str],
    actor: UserContext,
    reason: str = "",
    at: Optional[datetime] = None
) -> Action:
    """
    Build an audit action for an operation performed by ``actor``.

    The actor's display name is copied into the record so later profile
    changes do not rewrite history.
    """
    if isinstance(action_type, AuditActionType):
        action_type = action_type.value

    return Action(
        action_type=action_type,
        user=actor.display_name,
        action_date=at or utcnow(),
        reason=reason
    )


def record_action(
    issue: Issue,
    action_type: Union[AuditActionType, str],
    actor: UserContext,
    reason: str = "",
    at: Optional[datetime] = None
) -> Issue:
    """Return a copy of ``issue`` with one audit action appended."""
    action = build_action(action_type, actor, reason, at)
    return issue.model_copy(update={"actions": issue.actions + (action,)})


def audit_trail(issue: Issue) -> Tuple[Action, ...]:
    """Actions recorded on an issue, oldest first."""
    return issue.actions


def is_append_only(before: Issue, after: Issue) -> bool:
    """Check that ``after`` only extends the audit trail of ``before``."""
    return after.actions[:len(before.actions)] == before.actions
