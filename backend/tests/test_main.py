"""Tests for application wiring: middleware and structured logging."""

import json
import logging
import pytest
from fastapi.testclient import TestClient

from backoffice.core.logging_config import (
    AuditJsonFormatter,
    CorrelationIdFilter,
    correlation_id_var,
)


@pytest.fixture
def app_client():
    from backoffice.main import app

    # No context manager: skips the lifespan (and table creation on the real engine)
    return TestClient(app, raise_server_exceptions=False)


@pytest.mark.unit
class TestApplication:
    """Test the assembled FastAPI application."""

    def test_health(self, app_client):
        response = app_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_security_headers(self, app_client):
        response = app_client.get("/")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_correlation_id_echoed(self, app_client):
        response = app_client.get("/health", headers={"X-Correlation-ID": "req-42"})
        assert response.headers["X-Correlation-ID"] == "req-42"

    def test_correlation_id_generated(self, app_client):
        response = app_client.get("/health")
        assert response.headers["X-Correlation-ID"]

    def test_routes_registered(self, app_client):
        paths = app_client.app.openapi()["paths"]

        assert "/api/categories/" in paths
        assert "/api/categories/reorder" in paths
        assert "/api/products/bulk/stock" in paths
        assert "/api/auth/login" in paths
        assert "/api/banners/active" in paths
        assert "/api/customers/{customer_id}/addresses" in paths
        assert "/api/orders/{order_id}/status" in paths
        assert "/api/analytics/dashboard" in paths


@pytest.mark.unit
class TestAuditJsonFormatter:
    """Test JSON log output."""

    def _format(self, **extra):
        record = logging.LogRecord(
            name="backoffice.audit",
            level=logging.WARNING,
            pathname=__file__,
            lineno=10,
            msg="Login failed",
            args=(),
            exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        CorrelationIdFilter().filter(record)
        return json.loads(AuditJsonFormatter("%(message)s").format(record))

    def test_standard_fields(self):
        token = correlation_id_var.set("abc-123")
        try:
            data = self._format()
        finally:
            correlation_id_var.reset(token)

        assert data["message"] == "Login failed"
        assert data["level"] == "WARNING"
        assert data["logger"] == "backoffice.audit"
        assert data["correlation_id"] == "abc-123"
        assert data["source"]["line"] == 10
        assert data["timestamp"].endswith("Z")

    def test_request_fields_nested(self):
        data = self._format(
            event_type="auth.login.failure",
            request_method="POST",
            request_path="/api/auth/login",
        )

        assert data["event_type"] == "auth.login.failure"
        assert data["request"] == {"method": "POST", "path": "/api/auth/login"}
        assert "request_method" not in data

    def test_missing_correlation_id(self):
        data = self._format()
        assert data["correlation_id"] == "none"
