"""
Tests for the health check service and MongoDB health reporting.
"""

import pytest
from unittest.mock import Mock, MagicMock, patch
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from citizen_engagement.services.health import HealthCheckService
from citizen_engagement.services.mongodb import MongoDBService


class TestHealthCheckService:
    """Test overall status computation."""

    def test_without_dependencies(self):
        health = HealthCheckService().get_health()

        assert health["status"] == "healthy"
        assert health["dependencies"] == {}

    def test_mongodb_healthy(self):
        mongodb_service = Mock(spec=MongoDBService)
        mongodb_service.health_check.return_value = {"status": "healthy", "ping": True}

        health = HealthCheckService(mongodb_service, "2.0.0").get_health()

        assert health["status"] == "healthy"
        assert health["version"] == "2.0.0"
        assert health["dependencies"]["mongodb"]["ping"] is True
        assert "response_time_ms" in health["dependencies"]["mongodb"]

    def test_mongodb_unhealthy(self):
        mongodb_service = Mock(spec=MongoDBService)
        mongodb_service.health_check.return_value = {"status": "unhealthy", "error": "timeout"}

        assert HealthCheckService(mongodb_service).get_health()["status"] == "unhealthy"


class TestMongoDBService:
    """Test MongoDB service helpers that need no server."""

    def test_to_object_id(self):
        oid = ObjectId()

        assert MongoDBService.to_object_id(str(oid)) == oid
        assert MongoDBService.to_object_id("nope") is None
        assert MongoDBService.to_object_id(None) is None

    def test_health_check_reports_failure(self):
        service = MongoDBService("mongodb://localhost:27017", "citizen_engagement_test")

        with patch("citizen_engagement.services.mongodb.MongoClient") as client_class:
            client_class.return_value.admin.command.side_effect = ServerSelectionTimeoutError("no server")
            health = service.health_check()

        assert health["status"] == "unhealthy"
        assert "no server" in health["error"]
        assert service._client is None

    def test_create_indexes(self):
        service = MongoDBService("mongodb://localhost:27017", "citizen_engagement_test")
        database = MagicMock()
        service._database = database

        service.create_indexes()

        database["issues"].create_index.assert_any_call("tags")
        database["issue_types"].create_index.assert_any_call("name", unique=True)

    def test_close_connection(self):
        service = MongoDBService("mongodb://localhost:27017", "citizen_engagement_test")
        client = MagicMock()
        service._client = client
        service._database = MagicMock()

        service.close_connection()

        client.close.assert_called_once()
        assert service._client is None
        assert service._database is None
