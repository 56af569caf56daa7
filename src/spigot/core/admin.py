"""Admin controller for SPIGOT faucet.

Holds the global pause flag and the single admin identity. Only the current
admin can flip the flag or hand admin rights to someone else.
"""

import logging
import threading

from .errors import InvalidAdmin, OnlyAdmin
from .events import AdminTransferred, EventBus, FaucetPausedChanged
from .identity import is_null, normalize, same_identity

logger = logging.getLogger(__name__)


class AdminController:
    """Single-admin access control and pause switch.

    Parameters
    ----------
    admin : str
        Initial admin identity (the deployer).
    events : EventBus
        Bus that receives pause and admin-transfer events.
    lock : threading.Lock | None
        Lock shared with the claim processor so admin writes never
        interleave with a claim. A private lock is created if omitted.
    """

    def __init__(
        self,
        admin: str,
        events: EventBus,
        lock: "threading.Lock | None" = None,
    ):
        if is_null(admin):
            raise InvalidAdmin()
        self._admin = normalize(admin)
        self._paused = False
        self._events = events
        self._lock = lock or threading.Lock()

    @property
    def admin(self) -> str:
        """Current admin identity."""
        return self._admin

    @property
    def paused(self) -> bool:
        """Whether claims are currently suspended."""
        return self._paused

    def is_admin(self, caller: str | None) -> bool:
        """Check whether caller is the current admin."""
        return same_identity(caller, self._admin)

    def _require_admin(self, caller: str) -> None:
        if not self.is_admin(caller):
            logger.warning("Rejected admin call", extra={"caller": caller})
            raise OnlyAdmin(caller)

    def set_paused(self, caller: str, value: bool) -> None:
        """Set the global pause flag.

        Setting the flag to its current value is allowed and still emits.

        Parameters
        ----------
        caller : str
            Identity making the call.
        value : bool
            New pause state.

        Raises
        ------
        OnlyAdmin
            If caller is not the admin.
        """
        with self._lock:
            self._require_admin(caller)
            self._paused = paused = bool(value)

        logger.info("Faucet pause state set", extra={"paused": paused})
        self._events.emit(FaucetPausedChanged(paused=paused))

    def transfer_admin(self, caller: str, new_admin: str) -> None:
        """Hand admin rights to a new identity.

        Parameters
        ----------
        caller : str
            Identity making the call.
        new_admin : str
            Identity receiving admin rights.

        Raises
        ------
        OnlyAdmin
            If caller is not the admin.
        InvalidAdmin
            If new_admin is empty or the zero address.
        """
        with self._lock:
            self._require_admin(caller)
            if is_null(new_admin):
                raise InvalidAdmin()
            previous = self._admin
            self._admin = current = normalize(new_admin)

        logger.info(
            "Admin transferred",
            extra={"previous_admin": previous, "new_admin": current},
        )
        self._events.emit(AdminTransferred(previous_admin=previous, new_admin=current))
