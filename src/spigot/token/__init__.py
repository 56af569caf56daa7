"""Token issuers the faucet mints through."""

from .chain import ChainTokenIssuer
from .issuer import InMemoryToken, TokenIssuer
from .wallet import FaucetSigner, PrivateKeySigner

__all__ = [
    "ChainTokenIssuer",
    "FaucetSigner",
    "InMemoryToken",
    "PrivateKeySigner",
    "TokenIssuer",
]
