# SPDX-License-Identifier: Apache-2.0

"""
Authentication middleware for JWT token validation and user context extraction.

This module provides Flask decorators that validate bearer tokens, build the
acting user's context and gate endpoints on roles.
"""

from functools import wraps
from flask import request, g, current_app
from typing import Optional, Dict, Any, Callable
from opentelemetry import trace
import logging

from .error_handler import AuthenticationException, AuthorizationException
from ..domain.authorization import check_roles
from ..models.entities import UserContext
from ..services.auth import AuthService, TokenValidationError

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class AuthMiddleware:
    """
    JWT authentication middleware for Flask applications.

    Handles token extraction, validation and user context building for
    protected endpoints.
    """

    def __init__(self, auth_service: AuthService):
        self.auth_service = auth_service

    def extract_token_from_request(self) -> Optional[str]:
        """
        Extract JWT token from request headers.

        Returns:
            JWT token string or None if not found
        """
        auth_header = request.headers.get('Authorization', '').strip()

        if not auth_header:
            return None

        scheme, _, token = auth_header.partition(' ')
        if scheme.lower() != 'bearer':
            return None

        return token.strip() or None

    def build_user_context(self, token_payload: Dict[str, Any], request_info: Dict[str, Any]) -> UserContext:
        """
        Build user context from validated token payload and request information.

        Args:
            token_payload: Decoded JWT payload
            request_info: Request metadata (IP, user agent, etc.)

        Returns:
            UserContext object for request processing
        """
        return UserContext(
            user_id=token_payload["sub"],
            firstname=token_payload.get("firstname", ""),
            lastname=token_payload.get("lastname", ""),
            roles=token_payload.get("roles", []),
            token_payload=token_payload,
            ip_address=request_info.get("ip_address"),
            user_agent=request_info.get("user_agent"),
            session_id=request_info.get("session_id")
        )

    def get_request_info(self) -> Dict[str, Any]:
        """Extract request metadata for user context."""
        return {
            "ip_address": request.remote_addr,
            "user_agent": request.headers.get('User-Agent', ''),
            "session_id": request.headers.get('X-Session-ID')
        }

    def authenticate(self) -> UserContext:
        """
        Authenticate the current request.

        Returns:
            UserContext of the token bearer

        Raises:
            AuthenticationException: If the token is missing or invalid
        """
        with tracer.start_as_current_span("auth.middleware.validate_request") as span:
            token = self.extract_token_from_request()
            if not token:
                span.set_attribute("auth.result", "missing_token")
                logger.warning("Authentication failed: missing token")
                raise AuthenticationException("Missing authorization token")

            try:
                token_payload = self.auth_service.validate_token(token, "access")
            except TokenValidationError as e:
                span.set_attribute("auth.result", "invalid_token")
                logger.warning(f"Authentication failed: {str(e)}")
                raise AuthenticationException(str(e))

            user_context = self.build_user_context(token_payload, self.get_request_info())

            span.set_attributes({
                "auth.result": "success",
                "user.id": user_context.user_id
            })
            logger.debug(
                "Authentication successful",
                extra={
                    "user_id": user_context.user_id,
                    "ip_address": user_context.ip_address
                }
            )

            return user_context


def require_auth(f: Callable) -> Callable:
    """
    Decorator requiring a valid bearer token.

    The user context is stored in ``flask.g.user_context``. The middleware is
    looked up on the current application.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_middleware: AuthMiddleware = current_app.auth_middleware
        g.user_context = auth_middleware.authenticate()
        return f(*args, **kwargs)

    return decorated_function


def require_roles(*roles: str) -> Callable:
    """
    Decorator requiring authentication and any of ``roles``.

    Args:
        roles: Roles granting access to the endpoint

    Returns:
        Decorator function
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        @require_auth
        def decorated_function(*args, **kwargs):
            user_context = g.user_context

            with tracer.start_as_current_span("auth.middleware.check_roles") as span:
                span.set_attributes({
                    "auth.operation": "check_roles",
                    "auth.required_roles": list(roles),
                    "user.id": user_context.user_id
                })

                result = check_roles(user_context.roles, roles)
                if not result.allowed:
                    span.set_attribute("auth.role_result", "denied")
                    logger.warning(
                        "Authorization failed: missing role",
                        extra={
                            "user_id": user_context.user_id,
                            "required_roles": list(roles),
                            "user_roles": user_context.roles
                        }
                    )
                    raise AuthorizationException(result.reason)

                span.set_attribute("auth.role_result", "granted")

            return f(*args, **kwargs)

        return decorated_function
    return decorator
