# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Error handling middleware with structured HAL responses.
Provides the application exception hierarchy and its Flask error handlers.
"""

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException
from typing import Dict, Any, Tuple
from opentelemetry import trace
import logging

from ..services.hal import HalFormatter

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware:
    """Centralized error handling for HTTP errors and unexpected exceptions."""

    CLIENT_ERRORS = {
        400: ("bad-request", "Bad Request"),
        401: ("authentication-required", "Authentication Required"),
        403: ("insufficient-permissions", "Insufficient Permissions"),
        404: ("resource-not-found", "Resource Not Found"),
        405: ("method-not-allowed", "Method Not Allowed"),
        409: ("resource-conflict", "Resource Conflict"),
        415: ("unsupported-media-type", "Unsupported Media Type"),
        422: ("validation-error", "Validation Error"),
    }

    def __init__(self, app: Flask, hal_formatter: HalFormatter):
        self.app = app
        self.hal_formatter = hal_formatter
        self.register_error_handlers()

    def register_error_handlers(self):
        """Register error handlers with Flask application."""

        @self.app.errorhandler(HTTPException)
        def handle_http_exception(error: HTTPException):
            if error.code in self.CLIENT_ERRORS:
                error_type, title = self.CLIENT_ERRORS[error.code]
                return self.handle_client_error(error, error_type, title)
            if error.code is not None and error.code >= 500:
                return self.handle_server_error(error, "internal-server-error", error.name)
            return error

        @self.app.errorhandler(Exception)
        def handle_generic_exception(error):
            if isinstance(error, HTTPException):
                return handle_http_exception(error)
            return self.handle_unexpected_error(error)

    def handle_client_error(
        self,
        error: HTTPException,
        error_type: str,
        title: str
    ) -> Tuple[Dict[str, Any], int]:
        """
        Handle client errors (4xx status codes).

        Args:
            error: HTTP exception
            error_type: Error type identifier
            title: Error title

        Returns:
            Tuple of (error response dict, status code)
        """
        with tracer.start_as_current_span("error_handler.client_error") as span:
            span.set_attributes({
                "error.type": error_type,
                "error.status": error.code,
                "http.method": request.method,
                "http.path": request.path
            })

            detail = str(error.description) if error.description else title

            logger.warning(
                f"Client error: {title}",
                extra={
                    "error_type": error_type,
                    "status_code": error.code,
                    "detail": detail,
                    "path": request.path,
                    "method": request.method,
                    "ip_address": request.remote_addr
                }
            )

            error_response = self.hal_formatter.builder.build_error_response(
                error_type,
                title,
                error.code,
                detail,
                request.path
            )

            return error_response, error.code

    def handle_server_error(
        self,
        error: HTTPException,
        error_type: str,
        title: str
    ) -> Tuple[Dict[str, Any], int]:
        """Handle server errors (5xx status codes)."""
        with tracer.start_as_current_span("error_handler.server_error") as span:
            span.set_attributes({
                "error.type": error_type,
                "error.status": error.code,
                "http.method": request.method,
                "http.path": request.path
            })

            logger.error(
                f"Server error: {title}",
                extra={
                    "error_type": error_type,
                    "status_code": error.code,
                    "path": request.path,
                    "method": request.method
                },
                exc_info=True
            )

            detail = str(error.description) if error.description else title
            if self.app.config.get('ENVIRONMENT') == 'production':
                detail = "An internal server error occurred"

            error_response = self.hal_formatter.format_server_error(detail, request.path)
            error_response["status"] = error.code

            return error_response, error.code

    def handle_unexpected_error(self, error: Exception) -> Tuple[Dict[str, Any], int]:
        """
        Handle unexpected exceptions not caught by specific handlers.

        Args:
            error: Unexpected exception

        Returns:
            Tuple of (error response dict, status code)
        """
        with tracer.start_as_current_span("error_handler.unexpected_error") as span:
            span.set_attributes({
                "error.type": "unexpected-error",
                "error.class": error.__class__.__name__,
                "http.method": request.method,
                "http.path": request.path
            })
            span.record_exception(error)

            logger.error(
                f"Unexpected error: {error.__class__.__name__}",
                extra={
                    "error_type": "unexpected-error",
                    "error_class": error.__class__.__name__,
                    "error_message": str(error),
                    "path": request.path,
                    "method": request.method
                },
                exc_info=True
            )

            # Don't expose internal error details
            detail = "An unexpected error occurred"
            if self.app.config.get('ENVIRONMENT') != 'production':
                detail = f"{error.__class__.__name__}: {str(error)}"

            error_response = self.hal_formatter.format_server_error(detail, request.path)

            return error_response, 500


class CustomException(Exception):
    """Base class for custom application exceptions."""

    def __init__(self, message: str, status_code: int = 500, error_type: str = "application-error"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


class ValidationException(CustomException):
    """Exception for validation errors."""

    def __init__(self, message: str, validation_errors: list = None):
        super().__init__(message, 400, "validation-error")
        self.validation_errors = validation_errors or []


class AuthenticationException(CustomException):
    """Exception for authentication errors."""

    def __init__(self, message: str):
        super().__init__(message, 401, "authentication-required")


class AuthorizationException(CustomException):
    """Exception raised when the actor's roles do not allow an operation."""

    def __init__(self, message: str):
        super().__init__(message, 403, "insufficient-permissions")


class NotFoundException(CustomException):
    """Exception for resource not found errors."""

    def __init__(self, message: str):
        super().__init__(message, 404, "resource-not-found")


class UnknownActionException(NotFoundException):
    """Exception for action names outside the workflow's action set."""

    def __init__(self, action_name: str):
        super().__init__(f"Unknown action: {action_name}")
        self.action_name = action_name


class ConflictException(CustomException):
    """Exception for resource conflict errors."""

    def __init__(self, message: str, error_type: str = "resource-conflict"):
        super().__init__(message, 409, error_type)


class InvalidTransitionException(ConflictException):
    """Exception for workflow actions whose precondition does not hold."""

    def __init__(self, message: str, action: str = None, state: str = None):
        super().__init__(message, "invalid-transition")
        self.action = action
        self.state = state


class PersistenceException(CustomException):
    """Exception raised when the issue store fails to save or load."""

    def __init__(self, message: str):
        super().__init__(message, 500, "persistence-failure")


def register_custom_error_handlers(app: Flask, hal_formatter: HalFormatter):
    """
    Register handlers for custom exceptions.

    Args:
        app: Flask application
        hal_formatter: HAL formatter instance
    """

    @app.errorhandler(CustomException)
    def handle_custom_exception(error: CustomException):
        with tracer.start_as_current_span("error_handler.custom_exception") as span:
            span.set_attributes({
                "error.type": error.error_type,
                "error.status": error.status_code,
                "http.method": request.method,
                "http.path": request.path
            })

            log = logger.error if error.status_code >= 500 else logger.warning
            log(
                f"Custom exception: {error.error_type}",
                extra={
                    "error_type": error.error_type,
                    "status_code": error.status_code,
                    "error_message": error.message,
                    "path": request.path,
                    "method": request.method
                }
            )

            if isinstance(error, ValidationException):
                error_response = hal_formatter.format_validation_error(
                    error.message,
                    request.path,
                    error.validation_errors
                )
            elif isinstance(error, AuthenticationException):
                error_response = hal_formatter.format_authentication_error(error.message, request.path)
            elif isinstance(error, AuthorizationException):
                error_response = hal_formatter.format_authorization_error(error.message, request.path)
            elif isinstance(error, NotFoundException):
                error_response = hal_formatter.format_not_found_error(error.message, request.path)
            elif isinstance(error, ConflictException):
                error_response = hal_formatter.format_conflict_error(
                    error.message, request.path, error.error_type
                )
            else:
                detail = error.message
                if app.config.get('ENVIRONMENT') == 'production':
                    detail = "An internal server error occurred"
                error_response = hal_formatter.format_server_error(
                    detail, request.path, error.error_type
                )

            return jsonify(error_response), error.status_code
