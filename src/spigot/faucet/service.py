"""Faucet Service for SPIGOT.

Async facade over the faucet core used by the HTTP API and CLI:
- Supplies the clock to the claim processor
- Turns core errors into result objects for callers
- Keeps Prometheus metrics in step with claims and admin operations
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal

from spigot.core.admin import AdminController
from spigot.core.errors import FaucetError
from spigot.core.events import EventBus, FaucetEvent, FaucetPausedChanged, TokensClaimed
from spigot.observability.metrics import (
    ADMIN_OPERATIONS,
    CLAIM_DURATION,
    CLAIMS,
    FAUCET_PAUSED,
    TOKEN_SUPPLY,
    TOKENS_MINTED,
)

from .processor import ClaimProcessor

logger = logging.getLogger(__name__)


@dataclass
class ClaimResult:
    """Result of a claim request."""

    success: bool
    account: str
    amount: int  # Granted amount, 0 on failure
    message: str
    remaining_allowance: int
    cooldown_seconds: int
    tx_hash: str | None = None
    error: str | None = None  # Error kind, e.g. "CannotClaimYet"
    reason: str | None = None  # Finer policy reason when refused


@dataclass
class AdminResult:
    """Result of an admin operation."""

    success: bool
    message: str
    error: str | None = None


@dataclass
class AccountStatus:
    """Read-only view of one account."""

    account: str
    last_claim_at: int | None
    total_claimed: int
    balance: int
    can_claim: bool
    remaining_allowance: int
    time_until_next_claim: int
    message: str


@dataclass
class FaucetStatus:
    """Current faucet status."""

    paused: bool
    admin: str
    faucet_address: str
    faucet_amount: int
    max_claim_amount: int
    cooldown_seconds: int
    token_name: str
    token_symbol: str
    total_supply: int
    max_supply: int
    max_claims: int
    account_count: int
    healthy: bool
    message: str


class FaucetService:
    """Main faucet service orchestrating all components.

    Parameters
    ----------
    processor : ClaimProcessor
        Claim processor (owns ledger, policy and token issuer).
    admin : AdminController
        Pause flag and admin identity.
    events : EventBus
        Event bus shared with the core components.
    clock : Callable[[], float]
        Source of the current time in Unix seconds.
    """

    def __init__(
        self,
        processor: ClaimProcessor,
        admin: AdminController,
        events: EventBus,
        clock: Callable[[], float] = time.time,
    ):
        self._processor = processor
        self._admin = admin
        self._events = events
        self._clock = clock
        self._running = False

    @property
    def is_running(self) -> bool:
        """Check if the faucet service is running."""
        return self._running

    @property
    def events(self) -> EventBus:
        return self._events

    def now(self) -> int:
        """Current time in whole Unix seconds."""
        return int(self._clock())

    def format_amount(self, units: int) -> str:
        """Format base units as a whole-token amount with symbol."""
        issuer = self._processor.issuer
        amount = Decimal(units) / (Decimal(10) ** issuer.decimals)
        return f"{amount.normalize():f} {issuer.symbol}"

    async def start(self) -> None:
        """Start the faucet service.

        Subscribes the metrics updater and publishes initial gauge values.
        """
        if self._running:
            logger.warning("Faucet service already running")
            return

        self._events.subscribe(self._on_event)
        FAUCET_PAUSED.set(1 if self._admin.paused else 0)
        TOKEN_SUPPLY.set(await asyncio.to_thread(self._processor.issuer.total_supply))

        self._running = True
        logger.info("Faucet service started")

    async def stop(self) -> None:
        """Stop the faucet service."""
        if not self._running:
            return

        self._events.unsubscribe(self._on_event)
        self._running = False
        logger.info("Faucet service stopped")

    def _on_event(self, event: FaucetEvent) -> None:
        """Keep gauges in step with faucet events."""
        if isinstance(event, TokensClaimed):
            TOKENS_MINTED.inc(event.amount)
            TOKEN_SUPPLY.set(self._processor.issuer.total_supply())
        elif isinstance(event, FaucetPausedChanged):
            FAUCET_PAUSED.set(1 if event.paused else 0)

    async def claim(self, account: str) -> ClaimResult:
        """Handle a claim request.

        Parameters
        ----------
        account : str
            Account requesting tokens.

        Returns
        -------
        ClaimResult
            Result of the request. Core errors are reported in ``error``
            rather than raised.
        """
        now = self.now()

        with CLAIM_DURATION.time():
            try:
                receipt = await asyncio.to_thread(self._processor.claim, account, now)
            except FaucetError as e:
                CLAIMS.labels(status=type(e).__name__).inc()
                return await self._failed_claim(account, e, now)
            except Exception as e:
                logger.error(
                    "Claim failed unexpectedly",
                    extra={"account": account, "error": str(e)},
                    exc_info=True,
                )
                CLAIMS.labels(status="InternalError").inc()
                return ClaimResult(
                    success=False,
                    account=account,
                    amount=0,
                    message=f"Claim failed: {e}",
                    remaining_allowance=0,
                    cooldown_seconds=0,
                    error="InternalError",
                )

        CLAIMS.labels(status="success").inc()
        policy = self._processor.policy
        return ClaimResult(
            success=True,
            account=receipt.account,
            amount=receipt.amount,
            message=f"Claimed {self.format_amount(receipt.amount)}",
            remaining_allowance=max(0, policy.max_claim_amount - receipt.total_claimed),
            cooldown_seconds=policy.cooldown_seconds,
            tx_hash=receipt.tx_hash,
        )

    async def _failed_claim(self, account: str, error: FaucetError, now: int) -> ClaimResult:
        remaining = 0
        cooldown = 0
        try:
            remaining = await asyncio.to_thread(self._processor.remaining_allowance, account)
            cooldown = await asyncio.to_thread(
                self._processor.time_until_next_claim, account, now
            )
        except FaucetError:
            # Account itself was invalid; nothing more to report
            pass

        return ClaimResult(
            success=False,
            account=account,
            amount=0,
            message=str(error),
            remaining_allowance=remaining,
            cooldown_seconds=cooldown,
            error=type(error).__name__,
            reason=getattr(error, "reason", None),
        )

    async def set_paused(self, caller: str, paused: bool) -> AdminResult:
        """Pause or resume claims."""
        operation = "pause" if paused else "unpause"
        try:
            await asyncio.to_thread(self._admin.set_paused, caller, paused)
        except FaucetError as e:
            ADMIN_OPERATIONS.labels(operation=operation, status="rejected").inc()
            return AdminResult(success=False, message=str(e), error=type(e).__name__)

        ADMIN_OPERATIONS.labels(operation=operation, status="success").inc()
        return AdminResult(
            success=True,
            message="Faucet paused" if paused else "Faucet resumed",
        )

    async def transfer_admin(self, caller: str, new_admin: str) -> AdminResult:
        """Hand admin rights to a new identity."""
        try:
            await asyncio.to_thread(self._admin.transfer_admin, caller, new_admin)
        except FaucetError as e:
            ADMIN_OPERATIONS.labels(operation="transfer_admin", status="rejected").inc()
            return AdminResult(success=False, message=str(e), error=type(e).__name__)

        ADMIN_OPERATIONS.labels(operation="transfer_admin", status="success").inc()
        return AdminResult(success=True, message=f"Admin transferred to {self._admin.admin}")

    async def get_account_status(self, account: str) -> AccountStatus:
        """Get claim status for an account.

        Raises
        ------
        InvalidAddress
            If account is empty or the zero address.
        """
        now = self.now()
        processor = self._processor
        record = await asyncio.to_thread(processor.get_record, account)
        policy = processor.policy
        decision = policy.evaluate(record, self._admin.paused, now)
        balance = await asyncio.to_thread(processor.issuer.balance_of, account)

        return AccountStatus(
            account=account,
            last_claim_at=record.last_claim_at,
            total_claimed=record.total_claimed,
            balance=balance,
            can_claim=decision.eligible,
            remaining_allowance=policy.remaining_allowance(record),
            time_until_next_claim=policy.time_until_next_claim(record, now),
            message=policy.describe(decision, record, now),
        )

    async def get_status(self) -> FaucetStatus:
        """Get current faucet status."""
        issuer = self._processor.issuer
        policy = self._processor.policy
        total_supply = await asyncio.to_thread(issuer.total_supply)
        accounts = await asyncio.to_thread(self._processor.accounts)

        healthy = True
        message = "Faucet operational"
        if self._admin.paused:
            healthy = False
            message = "Faucet is paused"
        elif total_supply + policy.faucet_amount > issuer.max_supply:
            healthy = False
            message = "Token supply cap reached"

        return FaucetStatus(
            paused=self._admin.paused,
            admin=self._admin.admin,
            faucet_address=self._processor.faucet_identity,
            faucet_amount=policy.faucet_amount,
            max_claim_amount=policy.max_claim_amount,
            cooldown_seconds=policy.cooldown_seconds,
            token_name=issuer.name,
            token_symbol=issuer.symbol,
            total_supply=total_supply,
            max_supply=issuer.max_supply,
            max_claims=policy.max_claims,
            account_count=len(accounts),
            healthy=healthy,
            message=message,
        )

    def recent_events(self, limit: int | None = None) -> list[FaucetEvent]:
        """Recent faucet events, oldest first."""
        return self._events.recent(limit)
