"""
RPC Client - JSON-RPC reads and broadcast over a web3 HTTP provider.

Every failed read is raised as ProviderError, a failed broadcast as
BroadcastFailed. Nothing is retried here; timeouts come from the HTTP
provider's request timeout.
"""

import logging
from typing import Any, Callable, TypeVar

import requests
from web3 import Web3
from web3.exceptions import Web3Exception

from models.errors import BroadcastFailed, ProviderError, STAGE_BROADCAST
from models.fees import FeeData

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Priority fee assumed when the node lacks eth_maxPriorityFeePerGas (1 gwei)
FALLBACK_PRIORITY_FEE = 1_000_000_000

_RPC_ERRORS = (Web3Exception, requests.RequestException, ValueError)


class RpcClient:
    """Thin wrapper over web3 exposing the reads a transfer needs."""

    def __init__(self, rpc_url: str, timeout: int = 30):
        """
        Initialize the client.

        Args:
            rpc_url: HTTP(S) JSON-RPC endpoint
            timeout: Request timeout in seconds
        """
        self.rpc_url = rpc_url
        self.w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))

    def _call(self, method: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except _RPC_ERRORS as e:
            raise ProviderError(f"RPC call {method} failed: {e}", method=method) from e

    @property
    def is_connected(self) -> bool:
        """Check if connected to the network."""
        try:
            return self.w3.is_connected()
        except _RPC_ERRORS:
            return False

    def get_chain_id(self) -> int:
        return self._call("eth_chainId", lambda: int(self.w3.eth.chain_id))

    def get_latest_block(self) -> dict:
        block = self._call("eth_getBlockByNumber", lambda: self.w3.eth.get_block("latest"))
        return dict(block)

    def get_fee_data(self) -> FeeData:
        """
        Read current fee signals.

        Mirrors what wallets usually report: the node's gas price, and, when
        the latest block has a base fee, a max fee of 2 * base + priority.
        Chains without a base fee come back with dynamic fields unset.
        """
        gas_price = self._call("eth_gasPrice", lambda: int(self.w3.eth.gas_price))
        block = self.get_latest_block()
        base_fee = block.get("baseFeePerGas")

        if base_fee is None:
            return FeeData(gas_price=gas_price)

        try:
            priority = int(self.w3.eth.max_priority_fee)
        except _RPC_ERRORS as e:
            logger.debug(f"eth_maxPriorityFeePerGas unavailable, using fallback: {e}")
            priority = FALLBACK_PRIORITY_FEE

        base_fee = int(base_fee)
        return FeeData(
            gas_price=gas_price,
            max_fee_per_gas=base_fee * 2 + priority,
            max_priority_fee_per_gas=priority,
            base_fee_per_gas=base_fee,
        )

    def get_nonce(self, address: str, block: str = "pending") -> int:
        return self._call(
            "eth_getTransactionCount",
            lambda: int(self.w3.eth.get_transaction_count(Web3.to_checksum_address(address), block)),
        )

    def estimate_gas(self, tx: dict) -> int:
        return self._call("eth_estimateGas", lambda: int(self.w3.eth.estimate_gas(tx)))

    def get_code(self, address: str) -> bytes:
        return self._call(
            "eth_getCode",
            lambda: bytes(self.w3.eth.get_code(Web3.to_checksum_address(address))),
        )

    def get_balance(self, address: str) -> int:
        return self._call(
            "eth_getBalance",
            lambda: int(self.w3.eth.get_balance(Web3.to_checksum_address(address))),
        )

    def contract(self, address: str, abi: list) -> Any:
        """Bind a contract handle (no RPC round-trip)."""
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    def call(self, method: str, fn: Callable[[], T]) -> T:
        """Run a contract read, converting failures to ProviderError."""
        return self._call(method, fn)

    def broadcast(self, raw_transaction: bytes) -> str:
        """
        Send signed bytes to the node.

        Returns:
            Transaction hash with 0x prefix
        """
        try:
            tx_hash = self.w3.eth.send_raw_transaction(raw_transaction)
        except _RPC_ERRORS as e:
            raise BroadcastFailed(f"Broadcast failed: {e}", stage=STAGE_BROADCAST) from e
        return Web3.to_hex(tx_hash)
