# SPDX-License-Identifier: Apache-2.0

"""
Issue workflow endpoints.

This module exposes an issue's read model, its audit trail and the single
action endpoint through which every workflow transition, comment and tag edit
is performed.
"""

from flask import request, jsonify, current_app, g
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from pydantic import ValidationError
import logging

from ..domain.authorization import ENDPOINT_ROLES
from ..domain.workflow import format_validation_errors
from ..models.requests import ActionRequest, IssuePath
from ..models.responses import ActionCollectionResponse, ErrorResponse, IssueResponse
from ..middleware.auth import require_roles
from ..middleware.error_handler import ValidationException

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

issues_tag = Tag(name="Issues", description="Citizen issue workflow")
issues_bp = APIBlueprint(
    'issues',
    __name__,
    url_prefix='/api/issues',
    abp_tags=[issues_tag]
)


@issues_bp.get('/<issue_id>', responses={"200": IssueResponse, "401": ErrorResponse, "404": ErrorResponse})
@require_roles(*ENDPOINT_ROLES)
def get_issue(path: IssuePath):
    """
    Get an issue with HAL affordance links.

    The links advertise the actions the caller may perform in the issue's
    current state.
    """
    user_context = g.user_context

    view = current_app.issue_service.get_issue(path.issue_id, user_context)
    response = current_app.hal_formatter.format_issue(view.representation, view.available_actions)

    return jsonify(response), 200


@issues_bp.post(
    '/<issue_id>/actions',
    responses={
        "200": IssueResponse,
        "400": ErrorResponse,
        "401": ErrorResponse,
        "403": ErrorResponse,
        "404": ErrorResponse,
        "409": ErrorResponse
    }
)
@require_roles(*ENDPOINT_ROLES)
def perform_issue_action(path: IssuePath):
    """
    Perform a workflow action on an issue.

    The body is ``{"type": <action>, "payload": {...}}``. On success the
    reloaded issue is returned.
    """
    user_context = g.user_context

    with tracer.start_as_current_span(
        "issue.action.request",
        attributes={
            "user.id": user_context.user_id,
            "issue.id": path.issue_id
        }
    ) as span:
        request_data = request.get_json(silent=True)
        if not isinstance(request_data, dict):
            raise ValidationException("Request body must be a JSON object")

        try:
            action_request = ActionRequest.model_validate(request_data)
        except ValidationError as e:
            logger.warning(
                "Action request validation failed",
                extra={
                    "issue_id": path.issue_id,
                    "user_id": user_context.user_id,
                    "validation_errors": str(e)
                }
            )
            raise ValidationException("Invalid action request", format_validation_errors(e))

        span.set_attribute("issue.action", action_request.type)

        view = current_app.issue_service.perform_action(
            path.issue_id,
            action_request.type,
            action_request.payload,
            user_context
        )
        response = current_app.hal_formatter.format_issue(view.representation, view.available_actions)

        return jsonify(response), 200


@issues_bp.get('/<issue_id>/actions', responses={"200": ActionCollectionResponse, "404": ErrorResponse})
@require_roles(*ENDPOINT_ROLES)
def list_issue_actions(path: IssuePath):
    """Get the audit trail of an issue, oldest first."""
    actions = current_app.issue_service.list_actions(path.issue_id)
    response = current_app.hal_formatter.format_action_collection(path.issue_id, actions)

    return jsonify(response), 200
