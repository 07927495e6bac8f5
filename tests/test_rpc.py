"""Tests for the RPC client over a mocked web3 instance."""

from unittest.mock import MagicMock, PropertyMock

import pytest
import requests
from web3.exceptions import Web3Exception

from models.errors import BroadcastFailed, ProviderError, STAGE_BROADCAST
from services.rpc import FALLBACK_PRIORITY_FEE, RpcClient

from conftest import GWEI, SIGNER_ADDRESS


@pytest.fixture
def client():
    client = RpcClient("http://localhost:8545", timeout=5)
    client.w3 = MagicMock()
    client.w3.eth.gas_price = 21 * GWEI
    client.w3.eth.max_priority_fee = 1 * GWEI
    client.w3.eth.get_block.return_value = {"number": 100, "baseFeePerGas": 20 * GWEI}
    return client


class TestFeeData:

    def test_dynamic_chain(self, client):
        fee_data = client.get_fee_data()

        assert fee_data.gas_price == 21 * GWEI
        assert fee_data.base_fee_per_gas == 20 * GWEI
        assert fee_data.max_priority_fee_per_gas == 1 * GWEI
        assert fee_data.max_fee_per_gas == 41 * GWEI
        client.w3.eth.get_block.assert_called_once_with("latest")

    def test_chain_without_base_fee(self, client):
        client.w3.eth.get_block.return_value = {"number": 100}
        fee_data = client.get_fee_data()

        assert fee_data.gas_price == 21 * GWEI
        assert fee_data.max_fee_per_gas is None
        assert fee_data.max_priority_fee_per_gas is None

    def test_priority_fee_fallback(self, client):
        type(client.w3.eth).max_priority_fee = PropertyMock(side_effect=Web3Exception("method not found"))
        fee_data = client.get_fee_data()

        assert fee_data.max_priority_fee_per_gas == FALLBACK_PRIORITY_FEE
        assert fee_data.max_fee_per_gas == 40 * GWEI + FALLBACK_PRIORITY_FEE


class TestReads:

    def test_pending_nonce(self, client):
        client.w3.eth.get_transaction_count.return_value = 12
        assert client.get_nonce(SIGNER_ADDRESS.lower()) == 12
        client.w3.eth.get_transaction_count.assert_called_once_with(SIGNER_ADDRESS, "pending")

    def test_estimate_gas(self, client):
        client.w3.eth.estimate_gas.return_value = 21000
        assert client.estimate_gas({"to": SIGNER_ADDRESS, "value": 1}) == 21000

    @pytest.mark.parametrize("error", [
        Web3Exception("execution reverted"),
        requests.ConnectionError("connection refused"),
        ValueError({"code": -32000, "message": "insufficient funds"}),
    ])
    def test_failures_become_provider_errors(self, client, error):
        client.w3.eth.estimate_gas.side_effect = error

        with pytest.raises(ProviderError) as exc_info:
            client.estimate_gas({"to": SIGNER_ADDRESS})

        assert exc_info.value.method == "eth_estimateGas"
        assert exc_info.value.__cause__ is error

    def test_contract_read_wrapped(self, client):
        def read():
            raise Web3Exception("could not decode")

        with pytest.raises(ProviderError) as exc_info:
            client.call("decimals", read)
        assert exc_info.value.method == "decimals"


class TestBroadcast:

    def test_returns_hex_hash(self, client):
        client.w3.eth.send_raw_transaction.return_value = bytes.fromhex("ab" * 32)
        assert client.broadcast(b"\x02\x01") == "0x" + "ab" * 32

    def test_rejected(self, client):
        client.w3.eth.send_raw_transaction.side_effect = ValueError("nonce too low")

        with pytest.raises(BroadcastFailed) as exc_info:
            client.broadcast(b"\x02\x01")

        assert exc_info.value.stage == STAGE_BROADCAST
        assert exc_info.value.sent
