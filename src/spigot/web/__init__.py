"""HTTP API for SPIGOT faucet."""

from .formatter import ResponseFormatter
from .routes import register_routes, request_id_middleware

__all__ = ["ResponseFormatter", "register_routes", "request_id_middleware"]
