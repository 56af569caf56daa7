"""Faucet events and the in-process event bus.

Events mirror what the contracts emit and are what the frontend listens to
in order to refresh balances and cooldowns.
"""

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import ClassVar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FaucetEvent:
    """Base class for faucet events."""

    name: ClassVar[str] = "FaucetEvent"

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {"event": self.name, "args": asdict(self)}


@dataclass(frozen=True)
class TokensClaimed(FaucetEvent):
    """An account successfully claimed tokens."""

    name: ClassVar[str] = "TokensClaimed"

    account: str
    amount: int
    timestamp: int


@dataclass(frozen=True)
class FaucetPausedChanged(FaucetEvent):
    """The pause flag was set (emitted even when unchanged)."""

    name: ClassVar[str] = "FaucetPaused"

    paused: bool


@dataclass(frozen=True)
class AdminTransferred(FaucetEvent):
    """Admin rights moved to a new identity."""

    name: ClassVar[str] = "AdminTransferred"

    previous_admin: str
    new_admin: str


@dataclass(frozen=True)
class FaucetAddressSet(FaucetEvent):
    """The token's authorized minter changed."""

    name: ClassVar[str] = "FaucetAddressSet"

    old_address: str
    new_address: str


EventHandler = Callable[[FaucetEvent], None]


class EventBus:
    """Synchronous publish/subscribe for faucet events.

    Keeps a bounded history of recent events so late subscribers (e.g. the
    HTTP API) can replay them.

    Parameters
    ----------
    history_size : int
        Number of recent events kept.
    """

    def __init__(self, history_size: int = 100):
        self._handlers: list[EventHandler] = []
        self._history: deque[FaucetEvent] = deque(maxlen=history_size)

    def subscribe(self, handler: EventHandler) -> None:
        """Register a handler called for every emitted event."""
        self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        """Remove a previously registered handler."""
        self._handlers.remove(handler)

    def emit(self, event: FaucetEvent) -> None:
        """Record an event and deliver it to all handlers.

        A failing handler is logged and does not stop delivery to the rest.
        """
        self._history.append(event)
        logger.info("Event emitted", extra={"event_name": event.name, **asdict(event)})

        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                logger.exception("Event handler failed", extra={"event_name": event.name})

    def recent(self, limit: int | None = None) -> list[FaucetEvent]:
        """Get recent events, oldest first."""
        events = list(self._history)
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events
