"""Pytest configuration and shared fixtures."""

from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from web3.exceptions import MismatchedABI, Web3ValidationError

from config import WalletConfig
from models.fees import FeeData
from models.transfer import ChainContext
from services.evm import EvmWallet
from services.fees import FeeModelEngine


GWEI = 1_000_000_000

# Well-known development keys (hardhat / anvil accounts #0 and #1)
SIGNER_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
SIGNER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
RECIPIENT = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
TOKEN_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
DEV_MNEMONIC = "test test test test test test test test test test test junk"

SEPOLIA = 11155111

TRANSFER_SELECTOR = "0xa9059cbb"
APPROVE_SELECTOR = "0x095ea7b3"

SELECTORS = {"transfer": TRANSFER_SELECTOR, "approve": APPROVE_SELECTOR}


class FakeRpc:
    """In-memory stand-in for RpcClient that records every call."""

    def __init__(
        self,
        fee_data: FeeData,
        nonce: int = 7,
        gas_estimate: int = 21000,
        chain_id: int = SEPOLIA,
        code: bytes = b"\x60\x80",
        balance: int = 0,
        token: Optional[MagicMock] = None,
    ):
        self.rpc_url = "http://localhost:8545"
        self.fee_data = fee_data
        self.nonce = nonce
        self.gas_estimate = gas_estimate
        self.chain_id = chain_id
        self.code = code
        self.balance = balance
        self.token = token if token is not None else make_token()
        self.calls: List[tuple] = []
        self.estimate_requests: List[Dict[str, Any]] = []
        self.broadcasts: List[bytes] = []
        self.broadcast_error: Optional[Exception] = None

    def get_chain_id(self) -> int:
        self.calls.append(("get_chain_id",))
        return self.chain_id

    def get_fee_data(self) -> FeeData:
        self.calls.append(("get_fee_data",))
        return self.fee_data

    def get_latest_block(self) -> dict:
        self.calls.append(("get_latest_block",))
        return {"baseFeePerGas": self.fee_data.base_fee_per_gas}

    def get_nonce(self, address: str, block: str = "pending") -> int:
        self.calls.append(("get_nonce", address, block))
        return self.nonce

    def estimate_gas(self, tx: dict) -> int:
        self.calls.append(("estimate_gas",))
        self.estimate_requests.append(dict(tx))
        return self.gas_estimate

    def get_code(self, address: str) -> bytes:
        self.calls.append(("get_code", address))
        return self.code

    def get_balance(self, address: str) -> int:
        self.calls.append(("get_balance", address))
        return self.balance

    def contract(self, address: str, abi: list) -> Any:
        self.calls.append(("contract", address))
        return self.token

    def call(self, method: str, fn):
        self.calls.append(("call", method))
        return fn()

    def broadcast(self, raw_transaction: bytes) -> str:
        self.calls.append(("broadcast",))
        if self.broadcast_error is not None:
            raise self.broadcast_error
        self.broadcasts.append(raw_transaction)
        return "0x" + "ab" * 32

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


def make_token(decimals: int = 6, symbol: str = "USDC", name: str = "USD Coin",
               total_supply: int = 10**15, balance: int = 2_500_000) -> MagicMock:
    """ERC-20 contract handle double with web3's functions.X().call() shape."""
    token = MagicMock()
    token.functions.decimals.return_value.call.return_value = decimals
    token.functions.symbol.return_value.call.return_value = symbol
    token.functions.name.return_value.call.return_value = name
    token.functions.totalSupply.return_value.call.return_value = total_supply
    token.functions.balanceOf.return_value.call.return_value = balance

    def encode_abi(fn_name, args=None):
        if fn_name not in SELECTORS:
            raise MismatchedABI(f"No function {fn_name} in ABI")
        words = []
        for arg in args or ():
            if isinstance(arg, str) and arg.startswith("0x"):
                words.append(arg[2:].lower().rjust(64, "0"))
            elif isinstance(arg, int) and 0 <= arg < 2**256:
                words.append(format(arg, "064x"))
            else:
                raise Web3ValidationError(f"Could not encode {arg!r} for {fn_name}")
        return SELECTORS[fn_name] + "".join(words)

    token.encode_abi.side_effect = encode_abi
    return token


class CountingFeeEngine(FeeModelEngine):
    """FeeModelEngine that records how often it is asked for an estimate."""

    def __init__(self):
        super().__init__()
        self.estimate_calls = 0

    def estimate_for_call(self, *args, **kwargs):
        self.estimate_calls += 1
        return super().estimate_for_call(*args, **kwargs)


@pytest.fixture
def dynamic_fee_data() -> FeeData:
    """EIP-1559 chain: 20 gwei base fee, 1 gwei tip."""
    return FeeData(
        gas_price=21 * GWEI,
        max_fee_per_gas=41 * GWEI,
        max_priority_fee_per_gas=1 * GWEI,
        base_fee_per_gas=20 * GWEI,
    )


@pytest.fixture
def legacy_fee_data() -> FeeData:
    """Legacy chain: 15 gwei gas price, no dynamic fields."""
    return FeeData(gas_price=15 * GWEI)


@pytest.fixture
def dynamic_rpc(dynamic_fee_data) -> FakeRpc:
    return FakeRpc(dynamic_fee_data)


@pytest.fixture
def legacy_rpc(legacy_fee_data) -> FakeRpc:
    return FakeRpc(legacy_fee_data)


@pytest.fixture
def config() -> WalletConfig:
    return WalletConfig(chain_id=SEPOLIA, rpc_url="http://localhost:8545")


def make_wallet(rpc: FakeRpc, config: Optional[WalletConfig] = None,
                fee_engine: Optional[FeeModelEngine] = None) -> EvmWallet:
    config = config or WalletConfig(chain_id=SEPOLIA, rpc_url="http://localhost:8545")
    return EvmWallet(config, rpc_factory=lambda url, timeout=30: rpc, fee_engine=fee_engine)


def make_context(rpc: FakeRpc, nonce: Optional[int] = 7, signer: Optional[str] = SIGNER_ADDRESS,
                 contract: Optional[Any] = None, contract_address: Optional[str] = None) -> ChainContext:
    return ChainContext(
        rpc=rpc,
        chain_id=rpc.chain_id,
        fee_data=rpc.fee_data,
        nonce=nonce,
        signer_address=signer,
        contract=contract,
        contract_address=contract_address,
    )
