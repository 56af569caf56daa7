"""Token issuers for SPIGOT faucet.

TokenIssuer:
- Interface the claim processor mints through
- Only the configured faucet identity may mint

InMemoryToken:
- ERC20-style balances, allowances and transfers
- Owner-managed faucet (minter) address
- Hard supply cap enforced on every mint
"""

import logging
from abc import ABC, abstractmethod

from spigot.core.errors import (
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAddress,
    NotOwner,
    OnlyFaucet,
    SupplyCapExceeded,
)
from spigot.core.events import EventBus, FaucetAddressSet
from spigot.core.identity import ZERO_ADDRESS, is_null, normalize, same_identity

logger = logging.getLogger(__name__)

DEFAULT_DECIMALS = 18
DEFAULT_MAX_SUPPLY = 1_000_000 * 10**DEFAULT_DECIMALS


class TokenIssuer(ABC):
    """Abstract token that the faucet mints into."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Token name."""
        ...

    @property
    @abstractmethod
    def symbol(self) -> str:
        """Token symbol."""
        ...

    @property
    @abstractmethod
    def decimals(self) -> int:
        """Number of decimals of the base unit."""
        ...

    @property
    @abstractmethod
    def max_supply(self) -> int:
        """Hard cap on total supply, in base units."""
        ...

    @abstractmethod
    def total_supply(self) -> int:
        """Current total supply, in base units."""
        ...

    @abstractmethod
    def balance_of(self, account: str) -> int:
        """Balance of an account, in base units."""
        ...

    @abstractmethod
    def mint(self, minter: str, recipient: str, amount: int) -> str | None:
        """Mint new tokens to a recipient.

        Parameters
        ----------
        minter : str
            Identity requesting the mint; must be the faucet.
        recipient : str
            Account receiving the tokens.
        amount : int
            Amount in base units.

        Returns
        -------
        str | None
            Transaction hash for on-chain issuers, None otherwise.

        Raises
        ------
        OnlyFaucet
            If minter is not the faucet.
        SupplyCapExceeded
            If the mint would exceed the supply cap.
        """
        ...


class InMemoryToken(TokenIssuer):
    """ERC20-style token held in process memory.

    Parameters
    ----------
    owner : str
        Token owner (the deployer); the only identity that can change the
        faucet address.
    events : EventBus | None
        Bus receiving ``FaucetAddressSet`` events.
    name : str
        Token name.
    symbol : str
        Token symbol.
    decimals : int
        Number of decimals of the base unit.
    max_supply : int
        Supply cap in base units.
    """

    def __init__(
        self,
        owner: str,
        events: EventBus | None = None,
        name: str = "SepoliaTestToken",
        symbol: str = "STT",
        decimals: int = DEFAULT_DECIMALS,
        max_supply: int = DEFAULT_MAX_SUPPLY,
    ):
        if is_null(owner):
            raise InvalidAddress("Owner cannot be zero address")
        if max_supply <= 0:
            raise ValueError("Max supply must be positive")

        self._owner = normalize(owner)
        self._events = events
        self._name = name
        self._symbol = symbol
        self._decimals = decimals
        self._max_supply = max_supply
        self._faucet_address = ZERO_ADDRESS
        self._total_supply = 0
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def decimals(self) -> int:
        return self._decimals

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def max_supply(self) -> int:
        return self._max_supply

    @property
    def faucet_address(self) -> str:
        """Identity allowed to mint."""
        return self._faucet_address

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(normalize(account), 0)

    def set_faucet_address(self, caller: str, address: str) -> None:
        """Set the identity allowed to mint.

        Parameters
        ----------
        caller : str
            Identity making the call; must be the owner.
        address : str
            New faucet identity.

        Raises
        ------
        NotOwner
            If caller is not the owner.
        InvalidAddress
            If address is the zero address.
        """
        if not same_identity(caller, self._owner):
            raise NotOwner(caller)
        if is_null(address):
            raise InvalidAddress("Faucet address cannot be zero")

        old_address = self._faucet_address
        self._faucet_address = normalize(address)

        logger.info(
            "Faucet address set",
            extra={"old_address": old_address, "new_address": self._faucet_address},
        )
        if self._events:
            self._events.emit(
                FaucetAddressSet(old_address=old_address, new_address=self._faucet_address)
            )

    def mint(self, minter: str, recipient: str, amount: int) -> str | None:
        if is_null(self._faucet_address) or not same_identity(minter, self._faucet_address):
            raise OnlyFaucet()
        if is_null(recipient):
            raise InvalidAddress("Cannot mint to zero address")
        if amount <= 0:
            raise ValueError("Mint amount must be positive")
        if self._total_supply + amount > self._max_supply:
            raise SupplyCapExceeded()

        recipient = normalize(recipient)
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
        self._total_supply += amount

        logger.debug(
            "Tokens minted",
            extra={"recipient": recipient, "amount": amount, "total_supply": self._total_supply},
        )
        return None

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move tokens from sender to recipient."""
        self._move(normalize(sender), recipient, amount)
        return True

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Allow spender to move up to amount of owner's tokens."""
        if is_null(spender):
            raise InvalidAddress("Cannot approve zero address")
        if amount < 0:
            raise ValueError("Allowance cannot be negative")
        self._allowances[(normalize(owner), normalize(spender))] = amount
        return True

    def allowance(self, owner: str, spender: str) -> int:
        """Remaining amount spender may move on owner's behalf."""
        return self._allowances.get((normalize(owner), normalize(spender)), 0)

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        """Move tokens from owner to recipient using spender's allowance."""
        key = (normalize(owner), normalize(spender))
        allowed = self._allowances.get(key, 0)
        if amount > allowed:
            raise InsufficientAllowance(
                f"Allowance {allowed} is less than transfer amount {amount}"
            )
        self._move(key[0], recipient, amount)
        self._allowances[key] = allowed - amount
        return True

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        if is_null(recipient):
            raise InvalidAddress("Cannot transfer to zero address")
        if amount < 0:
            raise ValueError("Transfer amount cannot be negative")

        balance = self._balances.get(sender, 0)
        if amount > balance:
            raise InsufficientBalance(f"Balance {balance} is less than transfer amount {amount}")

        recipient = normalize(recipient)
        self._balances[sender] = balance - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
