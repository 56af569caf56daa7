"""HTTP routes for SPIGOT faucet.

Routes:
- GET  /api/faucet                  - Faucet constants, pause state and supply
- GET  /api/accounts/{account}      - Claim status and balance of an account
- POST /api/claim                   - Claim tokens {"account"}
- POST /api/admin/pause             - Pause or resume {"caller", "paused"}
- POST /api/admin/transfer          - Transfer admin {"caller", "new_admin"}
- GET  /api/events?limit=N          - Recent faucet events
"""

import json
import logging
import re

from aiohttp import web

from spigot.core.errors import InvalidAddress
from spigot.faucet.service import FaucetService
from spigot.observability.logging import request_context

from .formatter import ResponseFormatter

logger = logging.getLogger(__name__)

# Ethereum address pattern: 0x followed by 40 hex characters
ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")

DEFAULT_EVENT_LIMIT = 50

# HTTP status per core error kind
ERROR_STATUS = {
    "OnlyAdmin": 403,
    "InvalidAdmin": 400,
    "InvalidAddress": 400,
    "FaucetPaused": 503,
    "CannotClaimYet": 429,
    "ClaimOverflowError": 409,
    "SupplyCapExceeded": 409,
    "MintFailed": 502,
    "OnlyFaucet": 500,
    "InternalError": 500,
}

FAUCET_KEY = web.AppKey("faucet", FaucetService)
FORMATTER_KEY = web.AppKey("formatter", ResponseFormatter)


def _parse_address(value, field: str) -> tuple[str | None, str | None]:
    """Validate an address from a request.

    Returns
    -------
    tuple[str | None, str | None]
        (address, error_message)
    """
    if not isinstance(value, str) or not value.strip():
        return None, f"Missing required field: {field}"
    value = value.strip()
    if not ADDRESS_PATTERN.match(value):
        return None, f"Invalid address format for {field}: {value}"
    return value, None


async def _read_json(request: web.Request) -> dict:
    """Read a JSON object body, raising 400 on anything else."""
    try:
        body = await request.json()
    except json.JSONDecodeError:
        raise _bad_request(request, "InvalidRequest", "Request body must be JSON") from None
    if not isinstance(body, dict):
        raise _bad_request(request, "InvalidRequest", "Request body must be a JSON object")
    return body


def _bad_request(request: web.Request, error: str, message: str) -> web.HTTPBadRequest:
    formatter = request.app[FORMATTER_KEY]
    return web.HTTPBadRequest(
        text=json.dumps(formatter.format_error(error, message)),
        content_type="application/json",
    )


@web.middleware
async def request_id_middleware(request: web.Request, handler):
    """Bind a request ID to every request's log context."""
    with request_context(request.headers.get("X-Request-ID")) as request_id:
        response = await handler(request)
        response.headers["X-Request-ID"] = request_id
        return response


async def handle_faucet_status(request: web.Request) -> web.Response:
    """GET /api/faucet"""
    faucet = request.app[FAUCET_KEY]
    status = await faucet.get_status()
    return web.json_response(request.app[FORMATTER_KEY].format_status(status))


async def handle_account_status(request: web.Request) -> web.Response:
    """GET /api/accounts/{account}"""
    account, error = _parse_address(request.match_info["account"], "account")
    if error:
        raise _bad_request(request, "InvalidAddress", error)

    try:
        status = await request.app[FAUCET_KEY].get_account_status(account)
    except InvalidAddress as e:
        raise _bad_request(request, "InvalidAddress", str(e)) from None
    return web.json_response(request.app[FORMATTER_KEY].format_account(status))


async def handle_claim(request: web.Request) -> web.Response:
    """POST /api/claim"""
    body = await _read_json(request)
    account, error = _parse_address(body.get("account"), "account")
    if error:
        raise _bad_request(request, "InvalidAddress", error)

    logger.info("Claim requested", extra={"account": account})
    result = await request.app[FAUCET_KEY].claim(account)

    status = 200 if result.success else ERROR_STATUS.get(result.error, 400)
    return web.json_response(request.app[FORMATTER_KEY].format_claim(result), status=status)


async def handle_pause(request: web.Request) -> web.Response:
    """POST /api/admin/pause"""
    body = await _read_json(request)
    caller, error = _parse_address(body.get("caller"), "caller")
    if error:
        raise _bad_request(request, "InvalidAddress", error)
    paused = body.get("paused")
    if not isinstance(paused, bool):
        raise _bad_request(request, "InvalidRequest", "Field 'paused' must be true or false")

    result = await request.app[FAUCET_KEY].set_paused(caller, paused)
    status = 200 if result.success else ERROR_STATUS.get(result.error, 400)
    return web.json_response(request.app[FORMATTER_KEY].format_admin(result), status=status)


async def handle_transfer_admin(request: web.Request) -> web.Response:
    """POST /api/admin/transfer"""
    body = await _read_json(request)
    caller, error = _parse_address(body.get("caller"), "caller")
    if error:
        raise _bad_request(request, "InvalidAddress", error)
    new_admin, error = _parse_address(body.get("new_admin"), "new_admin")
    if error:
        raise _bad_request(request, "InvalidAdmin", error)

    result = await request.app[FAUCET_KEY].transfer_admin(caller, new_admin)
    status = 200 if result.success else ERROR_STATUS.get(result.error, 400)
    return web.json_response(request.app[FORMATTER_KEY].format_admin(result), status=status)


async def handle_events(request: web.Request) -> web.Response:
    """GET /api/events"""
    try:
        limit = int(request.query.get("limit", DEFAULT_EVENT_LIMIT))
    except ValueError:
        raise _bad_request(request, "InvalidRequest", "limit must be an integer") from None
    if limit < 0:
        raise _bad_request(request, "InvalidRequest", "limit cannot be negative")

    events = request.app[FAUCET_KEY].recent_events(limit)
    return web.json_response(request.app[FORMATTER_KEY].format_events(events))


def register_routes(app: web.Application, faucet: FaucetService) -> None:
    """Register the faucet API on an aiohttp application.

    Parameters
    ----------
    app : web.Application
        Application to register on.
    faucet : FaucetService
        Faucet service handling requests.
    """
    app[FAUCET_KEY] = faucet
    app[FORMATTER_KEY] = ResponseFormatter(faucet)

    app.router.add_get("/api/faucet", handle_faucet_status)
    app.router.add_get("/api/accounts/{account}", handle_account_status)
    app.router.add_post("/api/claim", handle_claim)
    app.router.add_post("/api/admin/pause", handle_pause)
    app.router.add_post("/api/admin/transfer", handle_transfer_admin)
    app.router.add_get("/api/events", handle_events)
