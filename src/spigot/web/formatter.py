"""JSON response formatting for the SPIGOT HTTP API.

Amounts are base-unit integers that overflow JavaScript numbers, so they are
sent as decimal strings alongside a human readable ``*_display`` value.
"""

from spigot.core.events import FaucetEvent
from spigot.faucet.service import (
    AccountStatus,
    AdminResult,
    ClaimResult,
    FaucetService,
    FaucetStatus,
)


class ResponseFormatter:
    """Formats faucet results as JSON-serializable dicts.

    Parameters
    ----------
    faucet : FaucetService
        Service used to render token amounts.
    """

    def __init__(self, faucet: FaucetService):
        self._faucet = faucet

    def _amount(self, key: str, units: int) -> dict:
        return {key: str(units), f"{key}_display": self._faucet.format_amount(units)}

    def format_claim(self, result: ClaimResult) -> dict:
        """Format a claim result."""
        body = {
            "success": result.success,
            "account": result.account,
            "message": result.message,
            "cooldown_seconds": result.cooldown_seconds,
            **self._amount("amount", result.amount),
            **self._amount("remaining_allowance", result.remaining_allowance),
        }
        if result.tx_hash:
            body["tx_hash"] = result.tx_hash
        if result.error:
            body["error"] = result.error
        if result.reason:
            body["reason"] = result.reason
        return body

    def format_account(self, status: AccountStatus) -> dict:
        """Format an account status."""
        return {
            "account": status.account,
            "last_claim_at": status.last_claim_at,
            "can_claim": status.can_claim,
            "time_until_next_claim": status.time_until_next_claim,
            "message": status.message,
            **self._amount("total_claimed", status.total_claimed),
            **self._amount("remaining_allowance", status.remaining_allowance),
            **self._amount("balance", status.balance),
        }

    def format_status(self, status: FaucetStatus) -> dict:
        """Format the faucet status."""
        return {
            "healthy": status.healthy,
            "message": status.message,
            "paused": status.paused,
            "admin": status.admin,
            "faucet_address": status.faucet_address,
            "cooldown_seconds": status.cooldown_seconds,
            "max_claims": status.max_claims,
            "account_count": status.account_count,
            "token": {
                "name": status.token_name,
                "symbol": status.token_symbol,
                **self._amount("total_supply", status.total_supply),
                **self._amount("max_supply", status.max_supply),
            },
            **self._amount("faucet_amount", status.faucet_amount),
            **self._amount("max_claim_amount", status.max_claim_amount),
        }

    def format_admin(self, result: AdminResult) -> dict:
        """Format an admin operation result."""
        body = {"success": result.success, "message": result.message}
        if result.error:
            body["error"] = result.error
        return body

    def format_events(self, events: list[FaucetEvent]) -> dict:
        """Format a list of events."""
        formatted = []
        for event in events:
            data = event.to_dict()
            if "amount" in data["args"]:
                data["args"]["amount"] = str(data["args"]["amount"])
            formatted.append(data)
        return {"events": formatted}

    def format_error(self, error: str, message: str) -> dict:
        """Format a request error."""
        return {"success": False, "error": error, "message": message}
