"""Tests for the on-chain token issuer."""

from unittest.mock import MagicMock, patch

import pytest
from web3.exceptions import ContractLogicError, TimeExhausted

from spigot.core.errors import InvalidAddress, MintFailed, OnlyFaucet, SupplyCapExceeded
from spigot.core.identity import ZERO_ADDRESS
from spigot.token.chain import MINT_GAS_LIMIT, ChainTokenIssuer
from spigot.token.wallet import FaucetSigner

MINTER = "0x4444444444444444444444444444444444444444"
TOKEN = "0x5555555555555555555555555555555555555555"
ALICE = "0x2222222222222222222222222222222222222222"
TX_HASH = "0x" + "ab" * 32


@pytest.fixture
def signer():
    """Signer whose account returns a canned signed transaction."""
    signer = MagicMock(spec=FaucetSigner)
    signer.address = MINTER
    signer.get_account.return_value.sign_transaction.return_value.raw_transaction = b"raw"
    return signer


@pytest.fixture
def mock_web3():
    """Create a mock Web3 instance with a mock token contract."""
    with patch("spigot.token.chain.Web3") as mock_w3_class:
        mock_w3 = MagicMock()
        mock_w3_class.return_value = mock_w3
        mock_w3_class.HTTPProvider = MagicMock()
        mock_w3_class.to_checksum_address = lambda x: x
        mock_w3.to_hex = lambda _value: TX_HASH
        mock_w3.is_connected.return_value = True
        mock_w3.eth.chain_id = 11155111
        mock_w3.eth.gas_price = 1000000000
        mock_w3.eth.get_transaction_count.return_value = 7
        mock_w3.eth.wait_for_transaction_receipt.return_value = {"status": 1}

        contract = mock_w3.eth.contract.return_value
        contract.functions.name.return_value.call.return_value = "SepoliaTestToken"
        contract.functions.symbol.return_value.call.return_value = "STT"
        contract.functions.decimals.return_value.call.return_value = 18
        contract.functions.MAX_SUPPLY.return_value.call.return_value = 1000
        contract.functions.totalSupply.return_value.call.return_value = 0
        contract.functions.mint.return_value.build_transaction.return_value = {"data": "0x"}
        yield mock_w3, contract


class TestChainTokenIssuer:
    """Tests for ChainTokenIssuer."""

    def test_zero_token_address_rejected(self, signer, mock_web3):
        """Token address cannot be zero."""
        with pytest.raises(InvalidAddress):
            ChainTokenIssuer("http://localhost:8545", ZERO_ADDRESS, signer)

    def test_metadata_cached(self, signer, mock_web3):
        """Token metadata is read once from the contract."""
        _, contract = mock_web3
        issuer = ChainTokenIssuer("http://localhost:8545", TOKEN, signer)

        assert issuer.name == "SepoliaTestToken"
        assert issuer.name == "SepoliaTestToken"
        assert issuer.symbol == "STT"
        assert issuer.decimals == 18
        assert issuer.max_supply == 1000
        contract.functions.name.return_value.call.assert_called_once()

    def test_mint_success(self, signer, mock_web3):
        """Mint builds, signs and sends a transaction."""
        mock_w3, contract = mock_web3
        issuer = ChainTokenIssuer("http://localhost:8545", TOKEN, signer, receipt_timeout=30)

        tx_hash = issuer.mint(MINTER, ALICE, 10)

        assert tx_hash == TX_HASH
        contract.functions.mint.assert_called_once_with(ALICE, 10)
        tx_params = contract.functions.mint.return_value.build_transaction.call_args[0][0]
        assert tx_params["from"] == MINTER
        assert tx_params["gas"] == MINT_GAS_LIMIT
        assert tx_params["nonce"] == 7
        assert tx_params["chainId"] == 11155111
        mock_w3.eth.send_raw_transaction.assert_called_once_with(b"raw")
        mock_w3.eth.wait_for_transaction_receipt.assert_called_once_with(TX_HASH, timeout=30)

    def test_mint_wrong_minter(self, signer, mock_web3):
        """Only the signer identity can mint."""
        issuer = ChainTokenIssuer("http://localhost:8545", TOKEN, signer)

        with pytest.raises(OnlyFaucet):
            issuer.mint(ALICE, ALICE, 10)

    def test_mint_to_zero(self, signer, mock_web3):
        """Cannot mint to the zero address."""
        issuer = ChainTokenIssuer("http://localhost:8545", TOKEN, signer)

        with pytest.raises(InvalidAddress):
            issuer.mint(MINTER, ZERO_ADDRESS, 10)

    def test_mint_supply_precheck(self, signer, mock_web3):
        """A mint past the supply cap fails before sending."""
        mock_w3, contract = mock_web3
        contract.functions.totalSupply.return_value.call.return_value = 995
        issuer = ChainTokenIssuer("http://localhost:8545", TOKEN, signer)

        with pytest.raises(SupplyCapExceeded):
            issuer.mint(MINTER, ALICE, 10)

        mock_w3.eth.send_raw_transaction.assert_not_called()

    def test_mint_contract_revert_mapped(self, signer, mock_web3):
        """Contract reverts map onto faucet errors."""
        _, contract = mock_web3
        build = contract.functions.mint.return_value.build_transaction
        issuer = ChainTokenIssuer("http://localhost:8545", TOKEN, signer)

        build.side_effect = ContractLogicError("execution reverted: Only faucet can mint")
        with pytest.raises(OnlyFaucet):
            issuer.mint(MINTER, ALICE, 10)

        build.side_effect = ContractLogicError("execution reverted: something else")
        with pytest.raises(MintFailed):
            issuer.mint(MINTER, ALICE, 10)

    def test_mint_reverted_receipt(self, signer, mock_web3):
        """A mined but reverted transaction raises MintFailed with its hash."""
        mock_w3, _ = mock_web3
        mock_w3.eth.wait_for_transaction_receipt.return_value = {"status": 0}
        issuer = ChainTokenIssuer("http://localhost:8545", TOKEN, signer)

        with pytest.raises(MintFailed) as exc_info:
            issuer.mint(MINTER, ALICE, 10)

        assert exc_info.value.tx_hash == TX_HASH

    def test_mint_send_failure(self, signer, mock_web3):
        """A transport error while sending raises MintFailed."""
        mock_w3, _ = mock_web3
        mock_w3.eth.send_raw_transaction.side_effect = ConnectionError("rpc down")
        issuer = ChainTokenIssuer("http://localhost:8545", TOKEN, signer)

        with pytest.raises(MintFailed, match="rpc down") as exc_info:
            issuer.mint(MINTER, ALICE, 10)

        assert exc_info.value.tx_hash is None
        mock_w3.eth.wait_for_transaction_receipt.assert_not_called()

    def test_mint_receipt_timeout(self, signer, mock_web3):
        """A receipt timeout raises MintFailed carrying the submitted hash."""
        mock_w3, _ = mock_web3
        mock_w3.eth.wait_for_transaction_receipt.side_effect = TimeExhausted("not mined")
        issuer = ChainTokenIssuer("http://localhost:8545", TOKEN, signer)

        with pytest.raises(MintFailed) as exc_info:
            issuer.mint(MINTER, ALICE, 10)

        assert exc_info.value.tx_hash == TX_HASH
