"""
Citizen Engagement API - Flask Application Entry Point

This module builds the Flask application with OpenAPI 3.0 support, wires the
issue workflow services and registers middleware and routes.
"""

import os
from typing import Any, Dict, Optional
from flask import jsonify
from flask_openapi3 import OpenAPI, Info, Tag

from .observability.config import setup_observability
from .observability.middleware import add_observability_middleware
from .middleware.error_handler import ErrorHandlerMiddleware, register_custom_error_handlers
from .middleware.auth import AuthMiddleware
from .services.hal import create_hal_formatter
from .services.mongodb import MongoDBService
from .services.repository import IssueRepository, MongoIssueRepository
from .services.issues import IssueService
from .services.auth import AuthService
from .services.health import HealthCheckService
from .routes.issues import issues_bp


def load_config() -> Dict[str, Any]:
    """Read application configuration from the environment."""
    environment = os.getenv('ENVIRONMENT', 'development')

    return {
        'ENVIRONMENT': environment,
        'DEBUG': environment == 'development',
        'DOCS_ENABLED': os.getenv('DOCS_ENABLED', 'true').lower() == 'true',

        # Database configuration
        'MONGODB_URI': os.getenv('MONGODB_URI', 'mongodb://localhost:27017/citizen_engagement'),
        'MONGODB_DATABASE': os.getenv('MONGODB_DATABASE', 'citizen_engagement'),

        # Security configuration
        'JWT_ACCESS_TOKEN_EXPIRES': int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES', '15')),  # minutes

        # Observability
        'OTEL_ENABLED': os.getenv('OTEL_ENABLED', 'true').lower() == 'true',
        'SERVICE_VERSION': os.getenv('SERVICE_VERSION', '1.0.0'),

        # API configuration
        'BASE_URL': os.getenv('BASE_URL', 'http://localhost:5000'),
        'PORT': int(os.getenv('PORT', '5000'))
    }


def create_app(
    config: Optional[Dict[str, Any]] = None,
    repository: Optional[IssueRepository] = None,
    auth_service: Optional[AuthService] = None
) -> OpenAPI:
    """
    Build the application.

    Args:
        config: Overrides applied on top of the environment configuration
        repository: Issue repository; defaults to the MongoDB repository
        auth_service: Token service; defaults to one keyed from the environment

    Returns:
        Configured flask-openapi3 application
    """
    app_config = load_config()
    app_config.update(config or {})

    if app_config['OTEL_ENABLED']:
        setup_observability(app_config['ENVIRONMENT'])

    info = Info(
        title="Citizen Engagement API",
        version=app_config['SERVICE_VERSION'],
        description="Citizen issue workflow API with HATEOAS Level-3 support"
    )

    app = OpenAPI(__name__, info=info, doc_ui=app_config['DOCS_ENABLED'])
    app.config.update(app_config)

    add_observability_middleware(app)

    # Initialize services
    mongodb_service = None
    if repository is None:
        mongodb_service = MongoDBService(app.config['MONGODB_URI'], app.config['MONGODB_DATABASE'])
        repository = MongoIssueRepository(mongodb_service)

    if auth_service is None:
        auth_service = AuthService(access_token_expire_minutes=app.config['JWT_ACCESS_TOKEN_EXPIRES'])

    hal_formatter = create_hal_formatter(app.config['BASE_URL'])
    health_service = HealthCheckService(mongodb_service, app.config['SERVICE_VERSION'])

    # Error handlers
    ErrorHandlerMiddleware(app, hal_formatter)
    register_custom_error_handlers(app, hal_formatter)

    # Make services available to routes
    app.mongodb_service = mongodb_service
    app.repository = repository
    app.auth_service = auth_service
    app.auth_middleware = AuthMiddleware(auth_service)
    app.issue_service = IssueService(repository)
    app.health_service = health_service
    app.hal_formatter = hal_formatter

    app.register_api(issues_bp)

    health_tag = Tag(name="Health", description="System health and status")

    @app.get('/api/healthz', tags=[health_tag])
    def health_check():
        """Health check endpoint with dependency status."""
        health_data = app.health_service.get_health()
        health_data['_links'] = {
            'self': {'href': f"{app.config['BASE_URL'].rstrip('/')}/api/healthz"}
        }
        status_code = 503 if health_data['status'] == 'unhealthy' else 200
        return jsonify(health_data), status_code

    return app


if __name__ == '__main__':
    application = create_app()
    if application.mongodb_service is not None:
        application.mongodb_service.create_indexes()
    application.run(
        host='0.0.0.0',
        port=application.config['PORT'],
        debug=application.config['DEBUG']
    )
