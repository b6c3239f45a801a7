"""Health, readiness and diagnostics endpoints."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI, HTTPException
from httpx import AsyncClient

from routes.health_routes import health, ready


def _request(*, init_done: bool = True, init_error: str | None = None) -> MagicMock:
    request = MagicMock()
    request.app.state.init_done = init_done
    request.app.state.init_error = init_error
    return request


@pytest.mark.unit
async def test_health_reports_service_name():
    result = await health()

    assert (result.status, result.service) == ("healthy", "branch-office-api")


@pytest.mark.unit
class TestReady:
    async def test_ready_checks_database(self):
        request = _request()

        with patch(
            "routes.health_routes.check_db_connection", autospec=True
        ) as check_db:
            result = await ready(request)

        assert result.status == "ready"
        check_db.assert_awaited_once_with(request.app.state.engine)

    @pytest.mark.parametrize(
        ("init_done", "init_error", "detail"),
        [
            (False, "migrations failed", "Initialization failed: migrations failed"),
            (True, "timeout", "Initialization failed: timeout"),
            (False, None, "Starting"),
        ],
    )
    async def test_not_ready_before_init_succeeds(self, init_done, init_error, detail):
        request = _request(init_done=init_done, init_error=init_error)

        with patch("routes.health_routes.check_db_connection") as check_db:
            with pytest.raises(HTTPException) as raised:
                await ready(request)

        assert (raised.value.status_code, raised.value.detail) == (503, detail)
        check_db.assert_not_called()

    async def test_not_ready_when_database_down(self):
        with patch(
            "routes.health_routes.check_db_connection",
            autospec=True,
            side_effect=OSError("connection refused"),
        ):
            with pytest.raises(HTTPException) as raised:
                await ready(_request())

        assert raised.value.status_code == 503
        assert raised.value.detail == "Database unavailable"
        assert isinstance(raised.value.__cause__, OSError)


@pytest.mark.integration
class TestHealthOverHttp:
    async def test_health_sets_telemetry_headers(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "branch-office-api"}
        assert response.headers["x-request-id"]
        assert float(response.headers["x-request-duration-ms"]) >= 0

    async def test_incoming_request_id_is_echoed(self, client: AsyncClient):
        response = await client.get("/health", headers={"X-Request-Id": "req-42"})

        assert response.headers["x-request-id"] == "req-42"

    async def test_ready(self, client: AsyncClient):
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready", "service": "branch-office-api"}

    async def test_detailed_reports_database_without_pool(self, client: AsyncClient):
        response = await client.get("/health/detailed")

        assert response.status_code == 200
        # the in-memory test engine uses StaticPool, which has no counters
        assert response.json() == {
            "status": "healthy",
            "service": "branch-office-api",
            "database": True,
            "pool": None,
        }

    async def test_ready_uses_error_envelope_when_starting(
        self, client: AsyncClient, app: FastAPI
    ):
        app.state.init_done = False

        response = await client.get("/ready")

        assert response.status_code == 503
        assert response.json() == {
            "error": {"detail": "Starting"},
            "message": "Service Unavailable",
        }
