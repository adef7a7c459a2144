# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
HAL (Hypertext Application Language) response formatting utilities.
Wraps issue read models with links to the actions the caller may perform.
"""

from typing import Dict, List, Any, Optional, Iterable
from urllib.parse import urljoin

from ..models.enums import IssueAction
from ..models.responses import HalLink

PROBLEM_BASE_URI = "https://citizen-engagement.org/problems"


class HalLinkBuilder:
    """Builder for HAL links with proper URL construction."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/') + '/'

    def build_link(
        self,
        path: str,
        method: str = "GET",
        content_type: Optional[str] = None,
        title: Optional[str] = None,
        templated: bool = False
    ) -> HalLink:
        """Build a HAL link with proper URL construction."""
        href = urljoin(self.base_url, path.lstrip('/'))

        return HalLink(
            href=href,
            method=method,
            type=content_type,
            title=title,
            templated=templated
        )

    def build_self_link(self, resource_path: str) -> HalLink:
        """Build self link for a resource."""
        return self.build_link(resource_path, title="Self")


class AffordanceLinkBuilder:
    """Builder for links advertising the workflow actions available on an issue."""

    ACTION_TITLES = {
        IssueAction.ACK: "Acknowledge",
        IssueAction.ASSIGN: "Assign",
        IssueAction.START: "Start",
        IssueAction.REJECT: "Reject",
        IssueAction.RESOLVE: "Resolve",
        IssueAction.COMMENT: "Comment",
        IssueAction.ADD_TAGS: "Add tags",
        IssueAction.REMOVE_TAGS: "Remove tags",
        IssueAction.REPLACE_TAGS: "Replace tags",
    }

    def __init__(self, base_url: str):
        self.link_builder = HalLinkBuilder(base_url)

    def build_issue_affordances(
        self,
        issue_id: str,
        available_actions: Iterable[IssueAction]
    ) -> Dict[str, HalLink]:
        """Build self, audit trail and action links for an issue."""
        issue_path = f"/api/issues/{issue_id}"
        actions_path = f"{issue_path}/actions"

        links = {
            'self': self.link_builder.build_self_link(issue_path),
            'actions': self.link_builder.build_link(actions_path, title="Audit trail")
        }

        for action in available_actions:
            links[action.value] = self.link_builder.build_link(
                actions_path,
                method="POST",
                content_type="application/json",
                title=self.ACTION_TITLES.get(action, action.value)
            )

        return links


class HalResponseBuilder:
    """Main HAL response builder."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')
        self.link_builder = HalLinkBuilder(base_url)
        self.affordance_builder = AffordanceLinkBuilder(base_url)

    @staticmethod
    def _dump_links(links: Dict[str, HalLink]) -> Dict[str, Dict[str, Any]]:
        return {rel: link.model_dump(exclude_none=True) for rel, link in links.items()}

    def build_issue_response(
        self,
        data: Dict[str, Any],
        available_actions: Iterable[IssueAction]
    ) -> Dict[str, Any]:
        """Build a HAL issue response without altering the projected fields."""
        response = dict(data)
        links = self.affordance_builder.build_issue_affordances(data['id'], available_actions)
        response['_links'] = self._dump_links(links)
        return response

    def build_action_collection_response(
        self,
        issue_id: str,
        actions: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Build a HAL collection response for an issue's audit trail."""
        links = {
            'self': self.link_builder.build_self_link(f"/api/issues/{issue_id}/actions"),
            'issue': self.link_builder.build_link(f"/api/issues/{issue_id}", title="Issue")
        }

        return {
            'total': len(actions),
            '_links': self._dump_links(links),
            '_embedded': {
                'actions': actions
            }
        }

    def build_error_response(
        self,
        error_type: str,
        title: str,
        status: int,
        detail: str,
        instance: str,
        validation_errors: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        """Build RFC 7807 compliant error response with HAL links."""
        error_response = {
            'type': f"{PROBLEM_BASE_URI}/{error_type}",
            'title': title,
            'status': status,
            'detail': detail,
            'instance': instance
        }

        if validation_errors:
            error_response['errors'] = validation_errors

        links = {
            'help': self.link_builder.build_link(
                f"/docs/errors#{error_type}",
                title="Error documentation"
            )
        }

        if error_type == "validation-error":
            links['schema'] = self.link_builder.build_link(
                "/openapi/openapi.json",
                title="API schema"
            )

        error_response['_links'] = self._dump_links(links)
        return error_response


class HalFormatter:
    """High-level HAL formatter with convenience methods."""

    def __init__(self, base_url: str):
        self.builder = HalResponseBuilder(base_url)

    def format_issue(
        self,
        issue: Dict[str, Any],
        available_actions: Iterable[IssueAction] = ()
    ) -> Dict[str, Any]:
        """Format a projected issue with HAL links."""
        return self.builder.build_issue_response(issue, available_actions)

    def format_action_collection(
        self,
        issue_id: str,
        actions: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Format an issue's audit trail with HAL links."""
        return self.builder.build_action_collection_response(issue_id, actions)

    def format_error(
        self,
        error_type: str,
        status: int,
        detail: str,
        instance: str
    ) -> Dict[str, Any]:
        """Format an error of any type, deriving the title from the type."""
        title = error_type.replace('-', ' ').title()
        return self.builder.build_error_response(error_type, title, status, detail, instance)

    def format_validation_error(
        self,
        detail: str,
        instance: str,
        validation_errors: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Format a validation error response."""
        return self.builder.build_error_response(
            "validation-error",
            "Validation Error",
            400,
            detail,
            instance,
            validation_errors
        )

    def format_authentication_error(
        self,
        detail: str,
        instance: str
    ) -> Dict[str, Any]:
        """Format an authentication error response."""
        return self.builder.build_error_response(
            "authentication-required",
            "Authentication Required",
            401,
            detail,
            instance
        )

    def format_authorization_error(
        self,
        detail: str,
        instance: str
    ) -> Dict[str, Any]:
        """Format an authorization error response."""
        return self.builder.build_error_response(
            "insufficient-permissions",
            "Insufficient Permissions",
            403,
            detail,
            instance
        )

    def format_not_found_error(
        self,
        detail: str,
        instance: str
    ) -> Dict[str, Any]:
        """Format a not found error response."""
        return self.builder.build_error_response(
            "resource-not-found",
            "Resource Not Found",
            404,
            detail,
            instance
        )

    def format_conflict_error(
        self,
        detail: str,
        instance: str,
        error_type: str = "resource-conflict"
    ) -> Dict[str, Any]:
        """Format a conflict error response."""
        title = "Invalid Transition" if error_type == "invalid-transition" else "Resource Conflict"
        return self.builder.build_error_response(
            error_type,
            title,
            409,
            detail,
            instance
        )

    def format_server_error(
        self,
        detail: str,
        instance: str,
        error_type: str = "internal-server-error"
    ) -> Dict[str, Any]:
        """Format a server error response."""
        return self.builder.build_error_response(
            error_type,
            "Internal Server Error",
            500,
            detail,
            instance
        )


def create_hal_formatter(base_url: str) -> HalFormatter:
    """Create a HAL formatter instance."""
    return HalFormatter(base_url)
