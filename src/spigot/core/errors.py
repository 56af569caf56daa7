"""Exceptions raised by SPIGOT components.

Every failure is raised synchronously to the caller. Operations that raise
leave ledger, admin and token state exactly as they found it.
"""


class FaucetError(Exception):
    """Base class for all SPIGOT errors."""


# Admin controller


class OnlyAdmin(FaucetError):
    """Caller is not the current admin."""

    def __init__(self, caller: str):
        super().__init__(f"Only admin can call this function (caller: {caller})")
        self.caller = caller


class InvalidAdmin(FaucetError, ValueError):
    """Attempted to hand admin rights to the zero identity."""

    def __init__(self):
        super().__init__("New admin cannot be zero address")


# Claim processor


class FaucetPaused(FaucetError):
    """Claim attempted while the faucet is paused."""

    def __init__(self):
        super().__init__("Faucet is paused")


class CannotClaimYet(FaucetError):
    """Claim attempted during cooldown or after the lifetime cap was reached.

    Both cases share this error kind. ``reason`` carries the finer-grained
    policy reason for logging and display.
    """

    def __init__(self, reason: str, message: str | None = None):
        super().__init__(message or f"Cannot claim yet: {reason}")
        self.reason = reason


class ClaimOverflowError(FaucetError, OverflowError):
    """Ledger guard: a claim would push an account past its lifetime cap."""


class InvalidAddress(FaucetError, ValueError):
    """Account or address is missing, malformed or the zero address."""


# Token issuer


class NotOwner(FaucetError):
    """Caller is not the token owner."""

    def __init__(self, caller: str):
        super().__init__(f"Caller is not the token owner: {caller}")
        self.caller = caller


class OnlyFaucet(FaucetError):
    """Mint attempted by an identity other than the configured faucet."""

    def __init__(self):
        super().__init__("Only faucet can mint")


class SupplyCapExceeded(FaucetError, OverflowError):
    """Mint would push total supply past ``MAX_SUPPLY``."""

    def __init__(self):
        super().__init__("Max supply exceeded")


class InsufficientBalance(FaucetError):
    """Transfer amount exceeds the sender's balance."""


class InsufficientAllowance(FaucetError):
    """transfer_from amount exceeds the approved allowance."""


class MintFailed(FaucetError):
    """On-chain mint transaction failed or reverted."""

    def __init__(self, message: str, tx_hash: str | None = None):
        super().__init__(message)
        self.tx_hash = tx_hash
