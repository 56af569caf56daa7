"""Claim eligibility policy for SPIGOT faucet.

Pure decision logic: given an account record, the global pause flag and the
current time, decide whether a claim is allowed and how much it grants.
Nothing here reads or writes shared state.

Checks run in a fixed order:
1. Faucet paused
2. Lifetime cap would be exceeded
3. Cooldown since last claim still active
"""

from dataclasses import dataclass
from enum import Enum

from .ledger import AccountRecord


class DenialReason(str, Enum):
    """Why a claim was refused."""

    PAUSED = "paused"
    CAP_REACHED = "cap reached"
    COOLDOWN_ACTIVE = "cooldown active"


@dataclass(frozen=True)
class ClaimDecision:
    """Result of evaluating a claim."""

    eligible: bool
    reason: DenialReason | None  # None when eligible
    grant_amount: int  # 0 when not eligible


def format_wait(seconds: int) -> str:
    """Format a cooldown duration for user display."""
    if seconds < 60:
        return f"Please wait {seconds} seconds before next claim"
    hours, remainder = divmod(seconds, 3600)
    minutes = remainder // 60
    if hours and minutes:
        return f"Please wait {hours}h {minutes}m before next claim"
    if hours:
        return f"Please wait {hours} hours before next claim"
    return f"Please wait {minutes} minutes before next claim"


class FaucetPolicy:
    """Eligibility rules for faucet claims.

    Parameters
    ----------
    faucet_amount : int
        Amount granted per claim, in base units.
    cooldown_seconds : int
        Minimum seconds between two successful claims of one account.
    max_claim_amount : int
        Lifetime cap per account, in base units.
    """

    def __init__(self, faucet_amount: int, cooldown_seconds: int, max_claim_amount: int):
        if faucet_amount <= 0:
            raise ValueError("Faucet amount must be positive")
        if cooldown_seconds < 0:
            raise ValueError("Cooldown cannot be negative")
        if max_claim_amount < faucet_amount:
            raise ValueError("Max claim amount must be at least the faucet amount")

        self._faucet_amount = faucet_amount
        self._cooldown_seconds = cooldown_seconds
        self._max_claim_amount = max_claim_amount

    @property
    def faucet_amount(self) -> int:
        return self._faucet_amount

    @property
    def cooldown_seconds(self) -> int:
        return self._cooldown_seconds

    @property
    def max_claim_amount(self) -> int:
        return self._max_claim_amount

    @property
    def max_claims(self) -> int:
        """Number of claims an account can make before hitting the cap."""
        return self._max_claim_amount // self._faucet_amount

    def evaluate(self, record: AccountRecord, paused: bool, now: int) -> ClaimDecision:
        """Decide whether a claim is allowed.

        Parameters
        ----------
        record : AccountRecord
            Current record of the claiming account.
        paused : bool
            Global pause flag.
        now : int
            Current time in Unix seconds.

        Returns
        -------
        ClaimDecision
            Eligibility, denial reason and grant amount.
        """
        if paused:
            return ClaimDecision(eligible=False, reason=DenialReason.PAUSED, grant_amount=0)

        if record.total_claimed + self._faucet_amount > self._max_claim_amount:
            return ClaimDecision(eligible=False, reason=DenialReason.CAP_REACHED, grant_amount=0)

        if record.has_claimed and now < record.last_claim_at + self._cooldown_seconds:
            return ClaimDecision(
                eligible=False, reason=DenialReason.COOLDOWN_ACTIVE, grant_amount=0
            )

        return ClaimDecision(eligible=True, reason=None, grant_amount=self._faucet_amount)

    def can_claim(self, record: AccountRecord, paused: bool, now: int) -> bool:
        """Whether :meth:`evaluate` would allow a claim."""
        return self.evaluate(record, paused, now).eligible

    def remaining_allowance(self, record: AccountRecord) -> int:
        """Amount the account may still claim over its lifetime."""
        return max(0, self._max_claim_amount - record.total_claimed)

    def time_until_next_claim(self, record: AccountRecord, now: int) -> int:
        """Seconds until the cooldown allows another claim.

        Zero for accounts that never claimed. This ignores the pause flag
        and the lifetime cap.
        """
        if not record.has_claimed:
            return 0
        return max(0, record.last_claim_at + self._cooldown_seconds - now)

    def describe(self, decision: ClaimDecision, record: AccountRecord, now: int) -> str:
        """Human readable explanation of a decision."""
        if decision.eligible:
            return "Claim available"
        if decision.reason is DenialReason.PAUSED:
            return "Faucet is paused"
        if decision.reason is DenialReason.CAP_REACHED:
            return "Lifetime claim limit reached"
        return format_wait(self.time_until_next_claim(record, now))
