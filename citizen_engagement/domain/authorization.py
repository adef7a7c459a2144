# SPDX-License-Identifier: Apache-2.0

"""
Authorization domain logic for role-based access to issue actions.

This module contains the action rules table and the policy evaluating it.
The policy is total: every action and role set maps to an explicit decision.
"""

from typing import Dict, Iterable, List, Optional
from dataclasses import dataclass, field

from ..models.enums import IssueAction, UserRole
from ..middleware.error_handler import AuthorizationException


@dataclass(frozen=True)
class ActionRule:
    """Authorization metadata of a workflow action."""
    action: IssueAction
    staff_only: bool = False
    requires_assignee: bool = False


@dataclass
class AuthorizationResult:
    """Result of an authorization check."""
    allowed: bool
    reason: Optional[str] = None
    missing_roles: List[str] = field(default_factory=list)


STAFF_ACTION_RULES = (
    ActionRule(IssueAction.ACK, staff_only=True, requires_assignee=False),
    ActionRule(IssueAction.ASSIGN, staff_only=True, requires_assignee=False),
    ActionRule(IssueAction.START, staff_only=True, requires_assignee=True),
    ActionRule(IssueAction.REJECT, staff_only=True, requires_assignee=True),
    ActionRule(IssueAction.RESOLVE, staff_only=True, requires_assignee=True),
)

OPEN_ACTION_RULES = (
    ActionRule(IssueAction.COMMENT),
    ActionRule(IssueAction.ADD_TAGS),
    ActionRule(IssueAction.REMOVE_TAGS),
    ActionRule(IssueAction.REPLACE_TAGS),
)

DEFAULT_ACTION_RULES = STAFF_ACTION_RULES + OPEN_ACTION_RULES

# Roles allowed to reach the issue action endpoint at all
ENDPOINT_ROLES = (UserRole.CITIZEN.value, UserRole.STAFF.value)


class AuthorizationPolicy:
    """
    Decide whether an actor may invoke an issue action.

    Args:
        rules: Action rules; defaults to the platform's rules table
    """

    def __init__(self, rules: Iterable[ActionRule] = DEFAULT_ACTION_RULES):
        self.rules: Dict[IssueAction, ActionRule] = {rule.action: rule for rule in rules}

    def rule_for(self, action: IssueAction) -> Optional[ActionRule]:
        """Rule registered for an action, if any."""
        return self.rules.get(action)

    def evaluate(self, roles: Iterable[str], action: IssueAction) -> AuthorizationResult:
        """
        Evaluate the rules table for an actor's roles.

        Args:
            roles: Roles held by the acting user
            action: Requested action

        Returns:
            AuthorizationResult with an explicit decision
        """
        rule = self.rule_for(action)
        if rule is None:
            return AuthorizationResult(
                allowed=False,
                reason=f"No authorization rule for action '{action.value}'"
            )

        if not rule.staff_only:
            return AuthorizationResult(allowed=True)

        if UserRole.STAFF.value not in set(roles):
            return AuthorizationResult(
                allowed=False,
                reason=f"Action '{action.value}' is restricted to staff",
                missing_roles=[UserRole.STAFF.value]
            )

        # The assignee precondition of start/reject/resolve is checked by the workflow
        # against the issue, so staff is sufficient here whether or not the rule requires it.
        return AuthorizationResult(allowed=True)

    def authorize(self, roles: Iterable[str], action: IssueAction) -> None:
        """
        Raise when an actor may not invoke an action.

        Raises:
            AuthorizationException: If the policy denies the action
        """
        result = self.evaluate(roles, action)
        if not result.allowed:
            raise AuthorizationException(result.reason)

    def allowed_actions(self, roles: Iterable[str]) -> List[IssueAction]:
        """Actions the policy allows for a role set, in declaration order."""
        roles = list(roles)
        return [action for action in IssueAction if self.evaluate(roles, action).allowed]


def check_roles(roles: Iterable[str], allowed_roles: Iterable[str] = ENDPOINT_ROLES) -> AuthorizationResult:
    """
    Check if a user holds any of the allowed roles.

    Args:
        roles: Roles held by the user
        allowed_roles: Roles granting access

    Returns:
        AuthorizationResult indicating if access is granted
    """
    allowed_roles = list(allowed_roles)
    if set(roles) & set(allowed_roles):
        return AuthorizationResult(allowed=True)

    return AuthorizationResult(
        allowed=False,
        reason=f"Missing any of required roles: {', '.join(sorted(allowed_roles))}",
        missing_roles=allowed_roles
    )
