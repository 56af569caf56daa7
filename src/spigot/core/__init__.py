"""Core SPIGOT components: ledger, policy, admin and events."""

from .admin import AdminController
from .events import (
    AdminTransferred,
    EventBus,
    FaucetAddressSet,
    FaucetEvent,
    FaucetPausedChanged,
    TokensClaimed,
)
from .ledger import NEVER, AccountLedger, AccountRecord
from .policy import ClaimDecision, DenialReason, FaucetPolicy

__all__ = [
    "NEVER",
    "AccountLedger",
    "AccountRecord",
    "AdminController",
    "AdminTransferred",
    "ClaimDecision",
    "DenialReason",
    "EventBus",
    "FaucetAddressSet",
    "FaucetEvent",
    "FaucetPausedChanged",
    "FaucetPolicy",
    "TokensClaimed",
]
