"""
Health Check Service

Reports the status of the API and of its MongoDB dependency.
"""

import os
import time
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from opentelemetry import trace

from .mongodb import MongoDBService

tracer = trace.get_tracer(__name__)


class HealthCheckService:
    """Service for system health monitoring."""

    def __init__(self, mongodb_service: Optional[MongoDBService] = None, service_version: str = "1.0.0"):
        self.mongodb_service = mongodb_service
        self.service_version = service_version

    def get_health(self) -> Dict[str, Any]:
        """Get health status including dependencies."""
        with tracer.start_as_current_span("health.check") as span:
            start_time = time.time()

            dependencies = {}
            if self.mongodb_service is not None:
                dependencies["mongodb"] = self._check_mongodb_health()

            overall_status = self._determine_overall_status(
                [dependency["status"] for dependency in dependencies.values()]
            )
            response_time_ms = round((time.time() - start_time) * 1000, 2)

            span.set_attributes({
                "health.overall_status": overall_status,
                "health.response_time_ms": response_time_ms
            })

            return {
                "status": overall_status,
                "service": "citizen-engagement-api",
                "version": self.service_version,
                "environment": os.getenv('ENVIRONMENT', 'development'),
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "response_time_ms": response_time_ms,
                "dependencies": dependencies
            }

    def _check_mongodb_health(self) -> Dict[str, Any]:
        with tracer.start_as_current_span("health.mongodb_check") as span:
            start_time = time.time()
            health_info = self.mongodb_service.health_check()
            health_info["response_time_ms"] = round((time.time() - start_time) * 1000, 2)
            span.set_attribute("mongodb.status", health_info["status"])
            return health_info

    @staticmethod
    def _determine_overall_status(dependency_statuses: list) -> str:
        """Determine overall system status based on dependency health."""
        if all(status == "healthy" for status in dependency_statuses):
            return "healthy"
        elif any(status == "healthy" for status in dependency_statuses):
            return "degraded"
        else:
            return "unhealthy"
