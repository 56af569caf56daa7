"""Observability module for SPIGOT faucet."""

from .health import HealthCheck, HealthServer, HealthStatus, LedgerCheck, TokenCheck
from .logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    request_context,
    set_request_id,
)
from .metrics import (
    ADMIN_OPERATIONS,
    CLAIM_DURATION,
    CLAIMS,
    FAUCET_PAUSED,
    TOKEN_SUPPLY,
    TOKENS_MINTED,
)

__all__ = [
    # Health
    "HealthCheck",
    "HealthServer",
    "HealthStatus",
    "LedgerCheck",
    "TokenCheck",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "request_context",
    "set_request_id",
    # Metrics
    "ADMIN_OPERATIONS",
    "CLAIM_DURATION",
    "CLAIMS",
    "FAUCET_PAUSED",
    "TOKEN_SUPPLY",
    "TOKENS_MINTED",
]
