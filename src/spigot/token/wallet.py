"""Signing key for the on-chain faucet identity."""

from abc import ABC, abstractmethod
from pathlib import Path

from eth_account import Account
from eth_account.signers.local import LocalAccount
from pydantic import SecretStr


class FaucetSigner(ABC):
    """Source of the account that signs mint transactions."""

    @abstractmethod
    def get_account(self) -> LocalAccount:
        """Get the signing account."""
        ...

    @property
    def address(self) -> str:
        """Checksummed address of the signing account.

        On chain this is the faucet identity the token accepts mints from.
        """
        return self.get_account().address


class PrivateKeySigner(FaucetSigner):
    """Signer loaded from a private key value or key file.

    Parameters
    ----------
    private_key : SecretStr, optional
        The private key (e.g. from SPIGOT_WALLET_PRIVATE_KEY).
    private_key_file : str, optional
        Path to a file holding the private key.

    Raises
    ------
    ValueError
        If neither source is given.
    FileNotFoundError
        If private_key_file does not exist.
    """

    def __init__(
        self,
        private_key: SecretStr | None = None,
        private_key_file: str | None = None,
    ):
        if private_key is not None:
            key = private_key.get_secret_value()
        elif private_key_file is not None:
            key_path = Path(private_key_file).expanduser()
            if not key_path.exists():
                raise FileNotFoundError(f"Private key file not found: {private_key_file}")
            key = key_path.read_text().strip()
        else:
            raise ValueError("Either private_key or private_key_file must be provided")

        self._account = Account.from_key(key)

    def get_account(self) -> LocalAccount:
        return self._account
