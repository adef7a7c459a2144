# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Issue service orchestrating the action pipeline.

load issue -> parse action -> authorize -> validate payload -> apply workflow
-> save once -> reload populated -> project.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from .repository import IssueRepository
from ..domain import workflow
from ..domain.authorization import AuthorizationPolicy
from ..domain.projection import project_actions, project_issue
from ..models.entities import Issue, PopulatedIssue, User, UserContext
from ..models.enums import IssueAction
from ..models.requests import AssignPayload
from ..middleware.error_handler import NotFoundException

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass
class IssueView:
    """Projected issue together with the actions the actor may perform next."""
    representation: Dict[str, Any]
    available_actions: List[IssueAction] = field(default_factory=list)

    @property
    def issue_id(self) -> str:
        return self.representation["id"]


class IssueService:
    """
    Entry point of the issue workflow.

    Args:
        repository: Storage port for issues and users
        policy: Authorization policy; defaults to the platform's rules table
    """

    def __init__(self, repository: IssueRepository, policy: Optional[AuthorizationPolicy] = None):
        self.repository = repository
        self.policy = policy or AuthorizationPolicy()

    def available_actions(self, issue, actor: UserContext) -> List[IssueAction]:
        """Actions both the policy and the workflow accept for ``actor`` on ``issue``."""
        return workflow.available_actions(issue, self.policy.allowed_actions(actor.roles))

    def get_issue(self, issue_id: str, actor: UserContext) -> IssueView:
        """
        Load and project an issue.

        Raises:
            NotFoundException: If the issue does not exist
        """
        with tracer.start_as_current_span("issue.get") as span:
            span.set_attributes({"issue.id": issue_id, "user.id": actor.user_id})
            populated = self._load_populated(issue_id)
            return IssueView(
                representation=project_issue(populated),
                available_actions=self.available_actions(populated, actor)
            )

    def list_actions(self, issue_id: str) -> List[Dict[str, Any]]:
        """
        Project the audit trail of an issue, oldest first.

        Raises:
            NotFoundException: If the issue does not exist
        """
        with tracer.start_as_current_span("issue.list_actions") as span:
            span.set_attribute("issue.id", issue_id)
            populated = self._load_populated(issue_id)
            span.set_attribute("issue.actions_count", len(populated.actions))
            return project_actions(populated)

    def perform_action(
        self,
        issue_id: str,
        action_name: str,
        payload: Optional[Dict[str, Any]],
        actor: UserContext
    ) -> IssueView:
        """
        Apply a workflow action on behalf of ``actor`` and persist the result.

        Args:
            issue_id: Target issue
            action_name: Requested action name
            payload: Raw action payload
            actor: Authenticated user performing the action

        Returns:
            IssueView of the reloaded issue

        Raises:
            NotFoundException: Unknown issue, assignee or action name
            AuthorizationException: The actor's roles do not allow the action
            ValidationException: The payload does not match the action
            InvalidTransitionException: The action's precondition does not hold
            ConflictException: The issue was saved concurrently
            PersistenceException: The store failed
        """
        with tracer.start_as_current_span(
            "issue.perform_action",
            attributes={
                "issue.id": issue_id,
                "issue.action": action_name,
                "user.id": actor.user_id
            }
        ) as span:
            issue = self._load(issue_id)
            span.set_attribute("issue.state_before", issue.state.value)

            action = workflow.parse_action(action_name)

            with tracer.start_as_current_span("issue.authorize") as auth_span:
                auth_span.set_attribute("user.roles", list(actor.roles))
                self.policy.authorize(actor.roles, action)

            parsed_payload = workflow.parse_payload(action, payload)

            assignee = None
            if isinstance(parsed_payload, AssignPayload):
                assignee = self._find_assignee(parsed_payload.assignee_id)

            try:
                updated = workflow.apply_action(issue, action, parsed_payload, actor, assignee)
            except Exception as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise

            self.repository.save_issue(updated)

            logger.info(
                "Issue action applied",
                extra={
                    "issue_id": issue_id,
                    "action": action.value,
                    "user_id": actor.user_id,
                    "state_before": issue.state.value,
                    "state_after": updated.state.value
                }
            )

            span.set_attribute("issue.state_after", updated.state.value)
            span.set_status(Status(StatusCode.OK))
            return self.get_issue(issue_id, actor)

    def _load(self, issue_id: str) -> Issue:
        issue = self.repository.load_issue(issue_id)
        if issue is None:
            raise NotFoundException(f"Issue not found: {issue_id}")
        return issue

    def _load_populated(self, issue_id: str) -> PopulatedIssue:
        populated = self.repository.load_issue(issue_id, populate=True)
        if populated is None:
            raise NotFoundException(f"Issue not found: {issue_id}")
        return populated

    def _find_assignee(self, user_id: str) -> User:
        user = self.repository.find_user(user_id)
        if user is None:
            raise NotFoundException(f"User not found: {user_id}")
        return user
