"""CLI subcommands for SPIGOT operations.

Talks to a running SPIGOT service over its HTTP API:
- Faucet info and account status (info, status)
- Claiming (claim)
- Admin operations (pause, unpause, transfer-admin)
- Event history (events)
"""

import argparse
import asyncio
import json
import os

import aiohttp

DEFAULT_URL = "http://localhost:8080"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="spigot",
        description="SPIGOT - rate-limited test token faucet",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Global flags
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format",
    )
    parser.add_argument(
        "--url",
        default=os.environ.get("SPIGOT_URL", DEFAULT_URL),
        help=f"SPIGOT service URL (default: $SPIGOT_URL or {DEFAULT_URL})",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("run", help="Start the SPIGOT service")
    subparsers.add_parser("info", help="Show faucet configuration and state")

    status_parser = subparsers.add_parser("status", help="Show claim status of an address")
    status_parser.add_argument("address", type=str, help="Account address")

    claim_parser = subparsers.add_parser("claim", help="Claim tokens for an address")
    claim_parser.add_argument("address", type=str, help="Recipient address")

    for name, help_text in (("pause", "Pause the faucet"), ("unpause", "Resume the faucet")):
        admin_parser = subparsers.add_parser(name, help=help_text)
        admin_parser.add_argument(
            "--caller",
            help="Admin address (default: $SPIGOT_ADMIN_ADDRESS)",
        )

    transfer_parser = subparsers.add_parser("transfer-admin", help="Transfer admin rights")
    transfer_parser.add_argument("new_admin", type=str, help="New admin address")
    transfer_parser.add_argument(
        "--caller",
        help="Current admin address (default: $SPIGOT_ADMIN_ADDRESS)",
    )

    events_parser = subparsers.add_parser("events", help="Show recent faucet events")
    events_parser.add_argument("--limit", type=int, default=20, help="Number of events")

    return parser


class FaucetClient:
    """Minimal async client for the SPIGOT HTTP API.

    Parameters
    ----------
    base_url : str
        Service URL, e.g. http://localhost:8080.
    timeout : float
        Request timeout in seconds.
    """

    def __init__(self, base_url: str, timeout: float = 30.0):
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def request(self, method: str, path: str, payload: dict | None = None) -> tuple[int, dict]:
        """Send a request and return (status, JSON body)."""
        async with aiohttp.ClientSession(timeout=self._timeout) as session:
            async with session.request(method, f"{self._base_url}{path}", json=payload) as resp:
                body = await resp.json(content_type=None)
                return resp.status, body


class CLIContext:
    """Shared context for CLI commands."""

    def __init__(self, client: FaucetClient, json_output: bool = False):
        self.client = client
        self.json_output = json_output

    def call(self, method: str, path: str, payload: dict | None = None) -> tuple[int, dict]:
        """Run an API request to completion."""
        return asyncio.run(self.client.request(method, path, payload))

    def output(self, data: dict) -> None:
        """Output data in the appropriate format."""
        if self.json_output:
            print(json.dumps(data, indent=2))
        else:
            self._print_formatted(data)

    def _print_formatted(self, data: dict, indent: int = 0) -> None:
        """Print data in human-readable format."""
        prefix = "  " * indent
        for key, value in data.items():
            if isinstance(value, dict):
                print(f"{prefix}{key}:")
                self._print_formatted(value, indent + 1)
            elif isinstance(value, list):
                print(f"{prefix}{key}:")
                for item in value:
                    if isinstance(item, dict):
                        self._print_formatted(item, indent + 1)
                    else:
                        print(f"{prefix}  - {item}")
            else:
                print(f"{prefix}{key}: {value}")


def _respond(ctx: CLIContext, method: str, path: str, payload: dict | None = None) -> int:
    """Call the API, print the response and map it to an exit code."""
    try:
        status, body = ctx.call(method, path, payload)
    except aiohttp.ClientError as e:
        ctx.output({"error": f"Cannot reach SPIGOT service: {e}"})
        return 1
    except asyncio.TimeoutError:
        ctx.output({"error": "Request to SPIGOT service timed out"})
        return 1

    ctx.output(body)
    return 0 if status < 400 else 1


def _resolve_caller(ctx: CLIContext, caller: str | None) -> str | None:
    caller = caller or os.environ.get("SPIGOT_ADMIN_ADDRESS")
    if not caller:
        ctx.output({"error": "No caller given. Use --caller or set SPIGOT_ADMIN_ADDRESS"})
    return caller


def cmd_info(ctx: CLIContext) -> int:
    """Show faucet configuration and state."""
    return _respond(ctx, "GET", "/api/faucet")


def cmd_status(ctx: CLIContext, address: str) -> int:
    """Show claim status of an address."""
    return _respond(ctx, "GET", f"/api/accounts/{address}")


def cmd_claim(ctx: CLIContext, address: str) -> int:
    """Claim tokens for an address."""
    return _respond(ctx, "POST", "/api/claim", {"account": address})


def cmd_set_paused(ctx: CLIContext, paused: bool, caller: str | None) -> int:
    """Pause or resume the faucet."""
    caller = _resolve_caller(ctx, caller)
    if not caller:
        return 1
    return _respond(ctx, "POST", "/api/admin/pause", {"caller": caller, "paused": paused})


def cmd_transfer_admin(ctx: CLIContext, new_admin: str, caller: str | None) -> int:
    """Transfer admin rights."""
    caller = _resolve_caller(ctx, caller)
    if not caller:
        return 1
    return _respond(
        ctx, "POST", "/api/admin/transfer", {"caller": caller, "new_admin": new_admin}
    )


def cmd_events(ctx: CLIContext, limit: int) -> int:
    """Show recent events."""
    return _respond(ctx, "GET", f"/api/events?limit={limit}")


def run_cli(args: argparse.Namespace) -> int:
    """Run a CLI subcommand.

    Returns
    -------
    int
        Exit code; -1 when no subcommand was given.
    """
    ctx = CLIContext(FaucetClient(args.url), json_output=args.json)

    if args.command == "info":
        return cmd_info(ctx)
    elif args.command == "status":
        return cmd_status(ctx, args.address)
    elif args.command == "claim":
        return cmd_claim(ctx, args.address)
    elif args.command == "pause":
        return cmd_set_paused(ctx, True, args.caller)
    elif args.command == "unpause":
        return cmd_set_paused(ctx, False, args.caller)
    elif args.command == "transfer-admin":
        return cmd_transfer_admin(ctx, args.new_admin, args.caller)
    elif args.command == "events":
        return cmd_events(ctx, args.limit)
    else:
        # No subcommand - show help
        return -1
