"""Tests for health check endpoints."""

from unittest.mock import MagicMock

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer

from spigot.core.ledger import AccountLedger
from spigot.observability.health import (
    CheckResult,
    HealthCheck,
    HealthResult,
    HealthServer,
    HealthStatus,
    LedgerCheck,
    TokenCheck,
)
from spigot.token.issuer import InMemoryToken

OWNER = "0x1000000000000000000000000000000000000001"


class TestHealthResult:
    """Tests for HealthResult dataclass."""

    def test_health_result_ok(self):
        """HealthResult to_dict for OK status."""
        result = HealthResult(status=HealthStatus.OK)
        assert result.to_dict() == {"status": "ok"}

    def test_health_result_with_checks(self):
        """HealthResult to_dict includes checks."""
        result = HealthResult(
            status=HealthStatus.NOT_READY,
            checks={"ledger": "ok", "token": "total supply above cap"},
        )
        assert result.to_dict() == {
            "status": "not_ready",
            "checks": {"ledger": "ok", "token": "total supply above cap"},
        }


class MockHealthCheck(HealthCheck):
    """Mock health check for testing."""

    def __init__(self, name: str, status: HealthStatus, message: str | None = None):
        self._name = name
        self._status = status
        self._message = message

    @property
    def name(self) -> str:
        return self._name

    async def check(self) -> CheckResult:
        return CheckResult(name=self._name, status=self._status, message=self._message)


class FailingHealthCheck(HealthCheck):
    """Health check that raises an exception."""

    @property
    def name(self) -> str:
        return "failing"

    async def check(self) -> CheckResult:
        raise RuntimeError("Check failed")


class TestComponentChecks:
    """Tests for ledger and token readiness checks."""

    @pytest.mark.asyncio
    async def test_ledger_check_memory(self):
        """In-memory ledger is always ready."""
        result = await LedgerCheck(AccountLedger(max_claim_amount=50)).check()
        assert result.status == HealthStatus.OK

    @pytest.mark.asyncio
    async def test_ledger_check_ping_failed(self):
        """A ledger that fails its ping is reported."""
        ledger = MagicMock()
        ledger.ping.return_value = False

        result = await LedgerCheck(ledger).check()

        assert result.status == HealthStatus.ERROR
        assert result.message == "ping failed"

    @pytest.mark.asyncio
    async def test_token_check_ok(self):
        """A token within its cap is ready."""
        result = await TokenCheck(InMemoryToken(owner=OWNER)).check()
        assert result.status == HealthStatus.OK

    @pytest.mark.asyncio
    async def test_token_check_over_cap(self):
        """Supply above the cap is reported as an error."""
        issuer = MagicMock()
        issuer.total_supply.return_value = 101
        issuer.max_supply = 100

        result = await TokenCheck(issuer).check()

        assert result.status == HealthStatus.ERROR


class TestHealthServer:
    """Tests for HealthServer endpoints."""

    @pytest.fixture
    async def app_client(self):
        """Create test client with the HealthServer app."""
        health_server = HealthServer()

        def register(app: web.Application) -> None:
            async def handle_ping(_request):
                return web.json_response({"pong": True})

            app.router.add_get("/api/ping", handle_ping)

        health_server.add_routes(register)
        client = TestClient(TestServer(health_server.build_app()))
        await client.start_server()
        yield client, health_server
        await client.close()

    @pytest.mark.asyncio
    async def test_health_endpoint_returns_ok(self, app_client):
        """GET /health returns 200 OK."""
        client, _ = app_client
        resp = await client.get("/health")
        assert resp.status == 200
        assert await resp.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_registered_routes_served(self, app_client):
        """Routes added through add_routes are served."""
        client, _ = app_client
        resp = await client.get("/api/ping")
        assert resp.status == 200
        assert await resp.json() == {"pong": True}

    @pytest.mark.asyncio
    async def test_ready_endpoint_no_checks(self, app_client):
        """GET /ready returns 200 when no checks configured."""
        client, _ = app_client
        resp = await client.get("/ready")
        assert resp.status == 200
        assert await resp.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_ready_endpoint_check_fails(self, app_client):
        """GET /ready returns 503 when a check fails."""
        client, server = app_client
        server.add_check(MockHealthCheck("ledger", HealthStatus.OK))
        server.add_check(MockHealthCheck("token", HealthStatus.ERROR, "rpc timeout"))

        resp = await client.get("/ready")
        assert resp.status == 503
        data = await resp.json()
        assert data["status"] == "not_ready"
        assert data["checks"] == {"ledger": "ok", "token": "rpc timeout"}

    @pytest.mark.asyncio
    async def test_ready_endpoint_check_raises(self, app_client):
        """GET /ready handles check exceptions."""
        client, server = app_client
        server.add_check(FailingHealthCheck())

        resp = await client.get("/ready")
        assert resp.status == 503
        data = await resp.json()
        assert "RuntimeError" in data["checks"]["failing"]
        assert "Check failed" in data["checks"]["failing"]

    @pytest.mark.asyncio
    async def test_metrics_endpoint(self, app_client):
        """GET /metrics returns Prometheus metrics."""
        client, _ = app_client
        resp = await client.get("/metrics")
        assert resp.status == 200
        assert "text/plain" in resp.content_type
        assert "spigot_claims_total" in await resp.text()


@pytest.mark.asyncio
async def test_health_server_lifecycle():
    """HealthServer start and stop lifecycle."""
    server = HealthServer(host="127.0.0.1", port=18080)

    await server.start()
    assert server._runner is not None
    assert server._site is not None

    await server.stop()

    assert server._runner is None
    assert server._site is None
