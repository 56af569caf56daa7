"""HTTP server with health endpoints for SPIGOT faucet.

Endpoints:
- /health: Liveness probe (200 if process is alive)
- /ready: Readiness probe (200 if ledger and token issuer respond)
- /metrics: Prometheus metrics endpoint

Application routes (the faucet JSON API) are mounted on the same server
through :meth:`HealthServer.add_routes`.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from aiohttp import web
from prometheus_client import REGISTRY, generate_latest

from spigot.core.ledger import AccountLedger
from spigot.token.issuer import TokenIssuer

logger = logging.getLogger(__name__)

RouteRegistrar = Callable[[web.Application], None]


class HealthStatus(Enum):
    """Health check status values."""

    OK = "ok"
    ERROR = "error"
    NOT_READY = "not_ready"


@dataclass
class CheckResult:
    """Result of a single health check."""

    name: str
    status: HealthStatus
    message: str | None = None


@dataclass
class HealthResult:
    """Combined health check result."""

    status: HealthStatus
    checks: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        result = {"status": self.status.value}
        if self.checks:
            result["checks"] = self.checks
        return result


class HealthCheck(ABC):
    """Abstract base class for readiness checks."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the health check."""
        ...

    @abstractmethod
    async def check(self) -> CheckResult:
        """Perform the health check."""
        ...


class LedgerCheck(HealthCheck):
    """Ready when the ledger storage backend answers."""

    def __init__(self, ledger: AccountLedger):
        self._ledger = ledger

    @property
    def name(self) -> str:
        return "ledger"

    async def check(self) -> CheckResult:
        ok = await asyncio.to_thread(self._ledger.ping)
        if ok:
            return CheckResult(name=self.name, status=HealthStatus.OK)
        return CheckResult(name=self.name, status=HealthStatus.ERROR, message="ping failed")


class TokenCheck(HealthCheck):
    """Ready when the token issuer reports its supply."""

    def __init__(self, issuer: TokenIssuer):
        self._issuer = issuer

    @property
    def name(self) -> str:
        return "token"

    async def check(self) -> CheckResult:
        supply = await asyncio.to_thread(self._issuer.total_supply)
        if supply > self._issuer.max_supply:
            return CheckResult(
                name=self.name,
                status=HealthStatus.ERROR,
                message="total supply above cap",
            )
        return CheckResult(name=self.name, status=HealthStatus.OK)


class HealthServer:
    """HTTP server for health, metrics and application endpoints.

    Parameters
    ----------
    host : str
        Host to bind to.
    port : int
        Port to bind to.
    """

    # Bound to all interfaces by default so probes and scrapers can reach it
    # from outside a container. Pass host="127.0.0.1" for local-only access.
    def __init__(self, host: str = "0.0.0.0", port: int = 8080):  # noqa: S104
        self._host = host
        self._port = port
        self._checks: list[HealthCheck] = []
        self._registrars: list[RouteRegistrar] = []
        self._middlewares: list = []
        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

    def add_check(self, check: HealthCheck) -> None:
        """Add a readiness check."""
        self._checks.append(check)

    def add_routes(self, registrar: RouteRegistrar) -> None:
        """Add a callback that registers extra routes on startup."""
        self._registrars.append(registrar)

    def add_middleware(self, middleware) -> None:
        """Add an aiohttp middleware applied to every route."""
        self._middlewares.append(middleware)

    def build_app(self) -> web.Application:
        """Build the aiohttp application with all routes."""
        app = web.Application(middlewares=self._middlewares)
        app.router.add_get("/health", self._handle_health)
        app.router.add_get("/ready", self._handle_ready)
        app.router.add_get("/metrics", self._handle_metrics)
        for registrar in self._registrars:
            registrar(app)
        return app

    async def start(self) -> None:
        """Start the server."""
        self._app = self.build_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self._host, self._port)
        await self._site.start()

        logger.info(
            "HTTP server started",
            extra={"host": self._host, "port": self._port},
        )

    async def stop(self) -> None:
        """Stop the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            logger.info("HTTP server stopped")

    async def _handle_health(self, _request: web.Request) -> web.Response:
        """Handle /health endpoint (liveness probe)."""
        return web.json_response({"status": "ok"})

    async def _handle_ready(self, _request: web.Request) -> web.Response:
        """Handle /ready endpoint (readiness probe)."""
        result = await self._check_readiness()

        status_code = 200 if result.status == HealthStatus.OK else 503
        return web.json_response(result.to_dict(), status=status_code)

    async def _handle_metrics(self, _request: web.Request) -> web.Response:
        """Handle /metrics endpoint (Prometheus)."""
        metrics = generate_latest(REGISTRY)
        return web.Response(
            body=metrics,
            content_type="text/plain",
            charset="utf-8",
        )

    async def _check_readiness(self) -> HealthResult:
        """Run all readiness checks."""
        if not self._checks:
            return HealthResult(status=HealthStatus.OK)

        checks: dict[str, str] = {}
        all_ok = True

        for check in self._checks:
            try:
                result = await check.check()
                if result.status == HealthStatus.OK:
                    checks[result.name] = "ok"
                else:
                    checks[result.name] = result.message or "error"
                    all_ok = False
            except Exception as e:
                logger.exception("Health check failed", extra={"check": check.name})
                checks[check.name] = f"error: {type(e).__name__}: {e}"
                all_ok = False

        return HealthResult(
            status=HealthStatus.OK if all_ok else HealthStatus.NOT_READY,
            checks=checks,
        )
