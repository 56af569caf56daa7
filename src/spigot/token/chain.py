"""On-chain token issuer for SPIGOT faucet.

Mints by sending ``mint(address,uint256)`` transactions to a deployed
faucet-mintable ERC20 contract, signed by the faucet wallet.
"""

import logging

from web3 import Web3
from web3.exceptions import ContractLogicError
from web3.types import TxReceipt

from spigot.core.errors import InvalidAddress, MintFailed, OnlyFaucet, SupplyCapExceeded
from spigot.core.identity import is_null, same_identity

from .issuer import TokenIssuer
from .wallet import FaucetSigner

logger = logging.getLogger(__name__)

# Subset of the token contract ABI used by the faucet
TOKEN_ABI = [
    {
        "name": "name",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "name": "symbol",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "name": "decimals",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
    {
        "name": "MAX_SUPPLY",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "totalSupply",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "mint",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [],
    },
]

MINT_GAS_LIMIT = 150000


class ChainTokenIssuer(TokenIssuer):
    """Token issuer backed by a deployed ERC20 contract.

    Parameters
    ----------
    rpc_endpoint : str
        The RPC endpoint URL.
    token_address : str
        Address of the token contract.
    signer : FaucetSigner
        Wallet of the faucet identity; must be the token's faucet address.
    receipt_timeout : int
        Seconds to wait for a mint transaction to be mined.
    """

    def __init__(
        self,
        rpc_endpoint: str,
        token_address: str,
        signer: FaucetSigner,
        receipt_timeout: int = 120,
    ):
        if is_null(token_address):
            raise InvalidAddress("Token address cannot be zero")

        self._w3 = Web3(Web3.HTTPProvider(rpc_endpoint))
        self._signer = signer
        self._receipt_timeout = receipt_timeout
        self._contract = self._w3.eth.contract(
            address=Web3.to_checksum_address(token_address),
            abi=TOKEN_ABI,
        )
        self._name: str | None = None
        self._symbol: str | None = None
        self._decimals: int | None = None
        self._max_supply: int | None = None

    @property
    def name(self) -> str:
        if self._name is None:
            self._name = self._contract.functions.name().call()
        return self._name

    @property
    def symbol(self) -> str:
        if self._symbol is None:
            self._symbol = self._contract.functions.symbol().call()
        return self._symbol

    @property
    def decimals(self) -> int:
        if self._decimals is None:
            self._decimals = self._contract.functions.decimals().call()
        return self._decimals

    @property
    def max_supply(self) -> int:
        if self._max_supply is None:
            self._max_supply = self._contract.functions.MAX_SUPPLY().call()
        return self._max_supply

    def total_supply(self) -> int:
        return self._contract.functions.totalSupply().call()

    def balance_of(self, account: str) -> int:
        return self._contract.functions.balanceOf(Web3.to_checksum_address(account)).call()

    def mint(self, minter: str, recipient: str, amount: int) -> str | None:
        if not same_identity(minter, self._signer.address):
            raise OnlyFaucet()
        if is_null(recipient):
            raise InvalidAddress("Cannot mint to zero address")
        if self.total_supply() + amount > self.max_supply:
            raise SupplyCapExceeded()

        checksum_to = Web3.to_checksum_address(recipient)
        try:
            tx = self._contract.functions.mint(checksum_to, amount).build_transaction(
                {
                    "from": self._signer.address,
                    "gas": MINT_GAS_LIMIT,
                    "gasPrice": self._w3.eth.gas_price,
                    "nonce": self._w3.eth.get_transaction_count(self._signer.address),
                    "chainId": self._w3.eth.chain_id,
                }
            )
        except ContractLogicError as e:
            if "Max supply exceeded" in str(e):
                raise SupplyCapExceeded() from e
            if "Only faucet can mint" in str(e):
                raise OnlyFaucet() from e
            raise MintFailed(f"Mint rejected by contract: {e}") from e

        signed = self._signer.get_account().sign_transaction(tx)
        try:
            tx_hash = self._w3.to_hex(self._w3.eth.send_raw_transaction(signed.raw_transaction))
        except Exception as e:
            raise MintFailed(f"Failed to send mint transaction: {e}") from e

        logger.info(
            "Mint submitted",
            extra={"tx_hash": tx_hash, "to": checksum_to, "amount": amount},
        )

        try:
            receipt = self.wait_for_receipt(tx_hash)
        except Exception as e:
            raise MintFailed(
                f"No receipt for mint transaction {tx_hash}: {e}", tx_hash=tx_hash
            ) from e
        if receipt["status"] != 1:
            raise MintFailed(f"Mint transaction reverted: {tx_hash}", tx_hash=tx_hash)
        return tx_hash

    def wait_for_receipt(self, tx_hash: str) -> TxReceipt:
        """Wait for a transaction receipt.

        Raises
        ------
        web3.exceptions.TimeExhausted
            If the transaction is not mined within the receipt timeout.
        """
        return self._w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self._receipt_timeout)
