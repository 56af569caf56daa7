"""Faucet components for SPIGOT."""

from .processor import ClaimProcessor, ClaimReceipt
from .service import AccountStatus, AdminResult, ClaimResult, FaucetService, FaucetStatus

__all__ = [
    "AccountStatus",
    "AdminResult",
    "ClaimProcessor",
    "ClaimReceipt",
    "ClaimResult",
    "FaucetService",
    "FaucetStatus",
]
