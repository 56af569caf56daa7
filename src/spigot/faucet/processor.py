"""Claim processor for SPIGOT faucet.

The only component that mutates the account ledger. A claim is:
1. Read the account record and pause flag
2. Ask the policy whether the claim is allowed
3. Record the claim in the ledger
4. Mint the grant through the token issuer
5. Emit ``TokensClaimed``

Steps 1-4 run under one lock. If the mint fails the ledger record is put
back, so a claim either fully commits or leaves no trace.
"""

import logging
import threading
from dataclasses import dataclass

from spigot.core.admin import AdminController
from spigot.core.errors import CannotClaimYet, FaucetPaused, InvalidAddress
from spigot.core.events import EventBus, TokensClaimed
from spigot.core.identity import is_null, normalize
from spigot.core.ledger import AccountLedger, AccountRecord
from spigot.core.policy import DenialReason, FaucetPolicy
from spigot.token.issuer import TokenIssuer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClaimReceipt:
    """Outcome of a committed claim."""

    account: str
    amount: int
    timestamp: int
    total_claimed: int
    tx_hash: str | None = None


class ClaimProcessor:
    """Evaluates and commits faucet claims.

    Parameters
    ----------
    ledger : AccountLedger
        Account claim history.
    policy : FaucetPolicy
        Eligibility rules.
    admin : AdminController
        Source of the pause flag. Must share ``lock`` with this processor.
    issuer : TokenIssuer
        Token the grants are minted in.
    events : EventBus
        Bus receiving ``TokensClaimed`` events.
    faucet_identity : str
        Identity the processor mints as.
    lock : threading.Lock
        Lock serialising every read-evaluate-write sequence.
    """

    def __init__(
        self,
        ledger: AccountLedger,
        policy: FaucetPolicy,
        admin: AdminController,
        issuer: TokenIssuer,
        events: EventBus,
        faucet_identity: str,
        lock: threading.Lock,
    ):
        if issuer is None:
            raise InvalidAddress("Token address cannot be zero")
        if is_null(faucet_identity):
            raise InvalidAddress("Faucet identity cannot be zero")

        self._ledger = ledger
        self._policy = policy
        self._admin = admin
        self._issuer = issuer
        self._events = events
        self._faucet_identity = normalize(faucet_identity)
        self._lock = lock

    @property
    def policy(self) -> FaucetPolicy:
        return self._policy

    @property
    def issuer(self) -> TokenIssuer:
        return self._issuer

    @property
    def faucet_identity(self) -> str:
        return self._faucet_identity

    def _account_key(self, account: str) -> str:
        if is_null(account):
            raise InvalidAddress("Account cannot be zero address")
        return normalize(account)

    def claim(self, account: str, now: int) -> ClaimReceipt:
        """Claim the faucet amount for an account.

        Parameters
        ----------
        account : str
            Claiming account.
        now : int
            Current time in Unix seconds.

        Returns
        -------
        ClaimReceipt
            Details of the committed claim.

        Raises
        ------
        InvalidAddress
            If account is empty or the zero address.
        FaucetPaused
            If the faucet is paused.
        CannotClaimYet
            If the cooldown is active or the lifetime cap is reached.
        SupplyCapExceeded
            If the token cannot mint the grant; the ledger is rolled back.
        """
        account = self._account_key(account)

        with self._lock:
            record = self._ledger.get(account)
            decision = self._policy.evaluate(record, self._admin.paused, now)

            if not decision.eligible:
                logger.info(
                    "Claim rejected",
                    extra={"account": account, "reason": decision.reason.value},
                )
                if decision.reason is DenialReason.PAUSED:
                    raise FaucetPaused()
                raise CannotClaimYet(
                    decision.reason.value,
                    self._policy.describe(decision, record, now),
                )

            updated = self._ledger.record_claim(account, decision.grant_amount, now)
            try:
                tx_hash = self._issuer.mint(
                    self._faucet_identity, account, decision.grant_amount
                )
            except Exception as e:
                logger.warning(
                    "Mint failed, rolling back claim",
                    extra={"account": account, "error": str(e)},
                )
                self._ledger.restore(account, record)
                raise

        receipt = ClaimReceipt(
            account=account,
            amount=decision.grant_amount,
            timestamp=now,
            total_claimed=updated.total_claimed,
            tx_hash=tx_hash,
        )
        logger.info(
            "Tokens claimed",
            extra={"account": account, "amount": receipt.amount, "tx_hash": tx_hash},
        )
        self._events.emit(
            TokensClaimed(account=account, amount=receipt.amount, timestamp=now)
        )
        return receipt

    def request_tokens(self, account: str, now: int) -> int:
        """Claim for an account and return the granted amount."""
        return self.claim(account, now).amount

    def get_record(self, account: str) -> AccountRecord:
        """Current claim history of an account."""
        return self._ledger.get(self._account_key(account))

    def can_claim(self, account: str, now: int) -> bool:
        """Whether a claim by account at ``now`` would succeed."""
        return self._policy.can_claim(self.get_record(account), self._admin.paused, now)

    def remaining_allowance(self, account: str) -> int:
        """Amount the account may still claim over its lifetime."""
        return self._policy.remaining_allowance(self.get_record(account))

    def time_until_next_claim(self, account: str, now: int) -> int:
        """Seconds until the account's cooldown expires."""
        return self._policy.time_until_next_claim(self.get_record(account), now)

    def accounts(self) -> list[str]:
        """Accounts that have claimed at least once."""
        return self._ledger.accounts()
