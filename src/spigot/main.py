#!/usr/bin/env python3
"""SPIGOT - rate-limited test token faucet.

Entry point for the SPIGOT service.
"""

import argparse
import asyncio
import logging
import signal
import sys
import threading
from dataclasses import dataclass

from spigot.cli import create_parser, run_cli
from spigot.config import SpigotConfig, TokenBackend
from spigot.core import AccountLedger, AdminController, EventBus, FaucetPolicy
from spigot.faucet import ClaimProcessor, FaucetService
from spigot.observability.health import HealthServer, LedgerCheck, TokenCheck
from spigot.observability.logging import configure_logging
from spigot.token import ChainTokenIssuer, InMemoryToken, PrivateKeySigner, TokenIssuer
from spigot.web import register_routes, request_id_middleware

logger = logging.getLogger(__name__)


@dataclass
class Components:
    """Wired faucet components."""

    faucet: FaucetService
    ledger: AccountLedger
    issuer: TokenIssuer
    admin: AdminController
    events: EventBus


def build_issuer(config: SpigotConfig, events: EventBus) -> tuple[TokenIssuer, str]:
    """Create the token issuer and the faucet identity it accepts mints from."""
    if config.token_backend == TokenBackend.CHAIN:
        signer = PrivateKeySigner(
            private_key=config.wallet_private_key,
            private_key_file=config.wallet_private_key_file,
        )
        issuer = ChainTokenIssuer(
            rpc_endpoint=config.rpc_endpoint,
            token_address=config.token_address,
            signer=signer,
            receipt_timeout=config.receipt_timeout,
        )
        logger.info(
            "Chain token issuer configured",
            extra={"token_address": config.token_address, "minter": signer.address},
        )
        return issuer, signer.address

    # Deploy-and-link: the admin deploys the token and points it at the faucet
    token = InMemoryToken(
        owner=config.admin_address,
        events=events,
        name=config.token_name,
        symbol=config.token_symbol,
        decimals=config.token_decimals,
        max_supply=config.max_supply_units,
    )
    token.set_faucet_address(config.admin_address, config.faucet_address)
    return token, token.faucet_address


def build_components(config: SpigotConfig) -> Components:
    """Wire ledger, policy, admin, token and service from config."""
    events = EventBus()
    lock = threading.Lock()

    ledger = AccountLedger(
        max_claim_amount=config.max_claim_amount_units,
        redis_url=config.redis_url,
    )
    policy = FaucetPolicy(
        faucet_amount=config.faucet_amount_units,
        cooldown_seconds=config.cooldown_seconds,
        max_claim_amount=config.max_claim_amount_units,
    )
    admin = AdminController(config.admin_address, events, lock)
    issuer, faucet_identity = build_issuer(config, events)

    processor = ClaimProcessor(
        ledger=ledger,
        policy=policy,
        admin=admin,
        issuer=issuer,
        events=events,
        faucet_identity=faucet_identity,
        lock=lock,
    )
    faucet = FaucetService(processor=processor, admin=admin, events=events)
    return Components(faucet=faucet, ledger=ledger, issuer=issuer, admin=admin, events=events)


async def run_service(config: SpigotConfig) -> None:
    """Run the SPIGOT service (long-running mode).

    Wires up and starts all service components:
    - Account ledger (Redis or in-memory)
    - Token issuer (in-memory or on-chain)
    - FaucetService behind the HTTP API
    - HealthServer serving /health, /ready, /metrics and /api
    """
    logger.info("SPIGOT starting")
    logger.info(
        "Faucet limits: amount=%s, max=%s, cooldown=%ss",
        config.faucet_amount,
        config.max_claim_amount,
        config.cooldown_seconds,
    )

    components = build_components(config)
    logger.info("Account ledger backend: %s", components.ledger.backend)

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def on_shutdown_signal(sig_name: str) -> None:
        logger.info("Received signal %s, initiating shutdown", sig_name)
        shutdown_event.set()

    loop.add_signal_handler(signal.SIGTERM, lambda: on_shutdown_signal("SIGTERM"))
    loop.add_signal_handler(signal.SIGINT, lambda: on_shutdown_signal("SIGINT"))

    await components.faucet.start()

    server = HealthServer(host=config.http_host, port=config.http_port)
    server.add_check(LedgerCheck(components.ledger))
    server.add_check(TokenCheck(components.issuer))
    server.add_middleware(request_id_middleware)
    server.add_routes(lambda app: register_routes(app, components.faucet))
    await server.start()
    logger.info("HTTP API listening on %s:%d", config.http_host, config.http_port)

    logger.info("SPIGOT service ready")
    await shutdown_event.wait()

    logger.info("SPIGOT shutting down...")
    await server.stop()
    await components.faucet.stop()
    logger.info("SPIGOT shutdown complete")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return create_parser().parse_args(argv)


def main() -> None:
    """Main entry point for SPIGOT."""
    args = parse_args()

    if args.command and args.command != "run":
        exit_code = run_cli(args)
        if exit_code < 0:
            create_parser().print_help()
            exit_code = 0
        sys.exit(exit_code)

    if args.command is None:
        create_parser().print_help()
        sys.exit(0)

    config = SpigotConfig()
    configure_logging(level=config.log_level, log_format=config.log_format)
    asyncio.run(run_service(config))


if __name__ == "__main__":
    main()
