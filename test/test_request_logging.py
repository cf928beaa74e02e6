import logging
import uuid

import pytest
from httpx import AsyncClient, ASGITransport

from utils.request_logging import redact, is_excluded


def test_redact_masks_sensitive_fields():
    values = {"email": "admin@example.com", "password": "admin123", "accessToken": "abc", "page": "2"}

    assert redact(values) == {
        "email": "admin@example.com",
        "password": "***REDACTED***",
        "accessToken": "***REDACTED***",
        "page": "2",
    }
    assert values["password"] == "admin123"


def test_health_paths_are_excluded():
    assert is_excluded("/api/health")
    assert is_excluded("/api/health/ready")
    assert not is_excluded("/api/producers")


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(app_with_overrides, auth_headers):
    transport = ASGITransport(app=app_with_overrides)

    async with AsyncClient(transport=transport, base_url="http://test", headers=auth_headers) as client:
        response = await client.get("/api/producers", headers={"X-Correlation-ID": "req-123"})

    assert response.status_code == 200
    assert response.headers["X-Correlation-ID"] == "req-123"


@pytest.mark.asyncio
async def test_correlation_id_is_generated(app_with_overrides):
    transport = ASGITransport(app=app_with_overrides)

    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api")
        first = response.headers["X-Correlation-ID"]
        response = await client.get("/api/health")
        second = response.headers["X-Correlation-ID"]

        # Error responses carry it too
        response = await client.get("/api/producers")
        assert response.status_code == 401
        assert response.headers["X-Correlation-ID"]

    assert str(uuid.UUID(first)) == first
    assert first != second


@pytest.mark.asyncio
async def test_requests_are_logged_without_health_checks(app_with_overrides, caplog):
    caplog.set_level(logging.INFO, logger="utils.request_logging")
    transport = ASGITransport(app=app_with_overrides)

    async with AsyncClient(transport=transport, base_url="http://test") as client:
        await client.get("/api/health", headers={"X-Correlation-ID": "health-check"})
        await client.get("/api", params={"token": "secret-value"}, headers={"X-Correlation-ID": "root-call"})

    messages = [record.getMessage() for record in caplog.records if record.name == "utils.request_logging"]
    assert not any("health-check" in message for message in messages)
    assert any("[root-call] GET /api -> 200" in message for message in messages)
    assert not any("secret-value" in message for message in messages)
