"""
Transfer models.

A TransferRequest (or ContractCallRequest) is what the caller asks for, a
SignableTransaction is what the signer receives, a TransferResult is what
comes back after broadcast.
ChainContext is the chain state snapshot read once per call.
"""

from dataclasses import dataclass, asdict, replace
from decimal import Decimal
from typing import Any, Optional, Sequence, Union, TYPE_CHECKING

from .errors import WalletError, STAGE_VALIDATING
from .fees import (
    FeeData,
    FeeEstimate,
    FeeSignals,
    FeeSpec,
    detect_fee_signals,
    fee_spec_from_fields,
)

if TYPE_CHECKING:
    from services.rpc import RpcClient


TX_TYPE_LEGACY = "legacy"
TX_TYPE_DYNAMIC = "dynamic"

# EIP-2718 envelope type for dynamic fee transactions
DYNAMIC_TX_ENVELOPE = 2

# Minimum gas for a plain value transfer
MIN_TRANSFER_GAS = 21000


@dataclass(frozen=True)
class ChainContext:
    """Chain state read once per call. Discarded when the call returns."""
    rpc: "RpcClient"
    chain_id: int
    fee_data: FeeData
    nonce: Optional[int] = None            # pending-inclusive, only with a signer
    signer_address: Optional[str] = None
    contract: Optional[Any] = None         # web3 contract handle
    contract_address: Optional[str] = None

    @property
    def fee_signals(self) -> FeeSignals:
        return detect_fee_signals(self.fee_data)


@dataclass(frozen=True)
class TransferRequest:
    """A value or token transfer as requested by the caller."""
    recipient: str
    amount: Decimal
    contract_address: Optional[str] = None
    fee_spec: Optional[FeeSpec] = None     # None = auto-estimate
    gas_limit: Optional[int] = None
    nonce: Optional[int] = None
    data: Optional[str] = None

    @classmethod
    def create(
        cls,
        recipient: str,
        amount: Union[str, int, float, Decimal],
        contract_address: Optional[str] = None,
        gas_limit: Optional[int] = None,
        gas_price: Optional[Union[str, int, float, Decimal]] = None,
        max_fee_per_gas: Optional[Union[str, int, float, Decimal]] = None,
        max_priority_fee_per_gas: Optional[Union[str, int, float, Decimal]] = None,
        nonce: Optional[int] = None,
        data: Optional[str] = None,
    ) -> "TransferRequest":
        """
        Create a transfer request from caller-facing values.

        Fee fields are in gwei, the way wallets usually expose them.

        Raises:
            InvalidAmount: amount or a fee field is not a non-negative number
            ConflictingFeeFields: gas_price mixed with dynamic fields
            InvertedFeePriority: max fee below priority fee
        """
        value = _caller_amount(amount)
        fee_spec = _caller_fee_spec(gas_price, max_fee_per_gas, max_priority_fee_per_gas)
        _check_overrides(gas_limit, nonce)

        return cls(
            recipient=recipient,
            amount=value,
            contract_address=contract_address,
            fee_spec=fee_spec,
            gas_limit=int(gas_limit) if gas_limit is not None else None,
            nonce=int(nonce) if nonce is not None else None,
            data=data,
        )

    @property
    def no_fee_provided(self) -> bool:
        return self.fee_spec is None

    @property
    def is_contract_call(self) -> bool:
        return bool(self.contract_address)

    def with_fee_spec(self, fee_spec: FeeSpec) -> "TransferRequest":
        return replace(self, fee_spec=fee_spec)


@dataclass(frozen=True)
class ContractCallRequest:
    """A state-changing contract method call as requested by the caller."""
    contract_address: str
    method: str
    params: tuple = ()
    abi: Optional[list] = None             # None = ERC-20
    value: Decimal = Decimal(0)            # native coin sent with the call
    fee_spec: Optional[FeeSpec] = None     # None = auto-estimate
    gas_limit: Optional[int] = None
    nonce: Optional[int] = None

    @classmethod
    def create(
        cls,
        contract_address: str,
        method: str,
        params: Optional[Sequence[Any]] = None,
        abi: Optional[list] = None,
        value: Optional[Union[str, int, float, Decimal]] = None,
        gas_limit: Optional[int] = None,
        gas_price: Optional[Union[str, int, float, Decimal]] = None,
        max_fee_per_gas: Optional[Union[str, int, float, Decimal]] = None,
        max_priority_fee_per_gas: Optional[Union[str, int, float, Decimal]] = None,
        nonce: Optional[int] = None,
    ) -> "ContractCallRequest":
        """
        Create a contract call request. Fee fields are in gwei, value in native units.

        Raises:
            InvalidAmount: value or a fee field is not a non-negative number
            ConflictingFeeFields: gas_price mixed with dynamic fields
            InvertedFeePriority: max fee below priority fee
        """
        amount = _caller_amount(value) if value is not None else Decimal(0)
        fee_spec = _caller_fee_spec(gas_price, max_fee_per_gas, max_priority_fee_per_gas)
        _check_overrides(gas_limit, nonce)

        return cls(
            contract_address=contract_address,
            method=method,
            params=tuple(params or ()),
            abi=abi,
            value=amount,
            fee_spec=fee_spec,
            gas_limit=int(gas_limit) if gas_limit is not None else None,
            nonce=int(nonce) if nonce is not None else None,
        )

    @property
    def no_fee_provided(self) -> bool:
        return self.fee_spec is None

    @property
    def is_contract_call(self) -> bool:
        return True

    def with_fee_spec(self, fee_spec: FeeSpec) -> "ContractCallRequest":
        return replace(self, fee_spec=fee_spec)


def _caller_amount(amount) -> Decimal:
    # Imported here, units depends on models.errors
    from units import to_decimal

    try:
        return to_decimal(amount)
    except WalletError as e:
        e.stage = e.stage or STAGE_VALIDATING
        raise


def _caller_fee_spec(gas_price, max_fee_per_gas, max_priority_fee_per_gas) -> Optional[FeeSpec]:
    """Parse gwei fee fields into a validated fee spec, None when all are absent."""
    from units import parse_gwei

    try:
        return fee_spec_from_fields(
            gas_price=parse_gwei(gas_price) if gas_price is not None else None,
            max_fee_per_gas=parse_gwei(max_fee_per_gas) if max_fee_per_gas is not None else None,
            max_priority_fee_per_gas=(
                parse_gwei(max_priority_fee_per_gas) if max_priority_fee_per_gas is not None else None
            ),
        )
    except WalletError as e:
        e.stage = e.stage or STAGE_VALIDATING
        raise


def _check_overrides(gas_limit, nonce) -> None:
    if gas_limit is not None and int(gas_limit) <= 0:
        raise ValueError(f"gas_limit must be positive, got {gas_limit}")
    if nonce is not None and int(nonce) < 0:
        raise ValueError(f"nonce must be non-negative, got {nonce}")


@dataclass(frozen=True)
class TransferShape:
    """Resolved target, value, data and gas limit of a transfer."""
    to: str
    value: int
    data: str
    gas_limit: int
    is_contract_call: bool = False


@dataclass(frozen=True)
class SignableTransaction:
    """Fully resolved transaction, ready for the signer."""
    to: str
    value: int
    data: str
    nonce: int
    gas_limit: int
    chain_id: int
    tx_type: str
    gas_price: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None

    def __post_init__(self):
        if self.tx_type == TX_TYPE_LEGACY:
            if self.gas_price is None or self.max_fee_per_gas is not None or self.max_priority_fee_per_gas is not None:
                raise ValueError("Legacy transactions carry gas_price only")
        elif self.tx_type == TX_TYPE_DYNAMIC:
            if self.gas_price is not None or self.max_fee_per_gas is None or self.max_priority_fee_per_gas is None:
                raise ValueError("Dynamic transactions carry max_fee_per_gas and max_priority_fee_per_gas only")
        else:
            raise ValueError(f"Invalid tx_type: {self.tx_type}")

    def to_tx_dict(self) -> dict:
        """Transaction dict in the shape eth_account signs."""
        tx = {
            "to": self.to,
            "value": self.value,
            "data": self.data,
            "nonce": self.nonce,
            "gas": self.gas_limit,
            "chainId": self.chain_id,
        }
        if self.tx_type == TX_TYPE_LEGACY:
            tx["gasPrice"] = self.gas_price
        else:
            tx["type"] = DYNAMIC_TX_ENVELOPE
            tx["maxFeePerGas"] = self.max_fee_per_gas
            tx["maxPriorityFeePerGas"] = self.max_priority_fee_per_gas
        return tx

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class TransferResult:
    """Outcome of a broadcast transfer."""
    tx_hash: str
    transaction: SignableTransaction
    fee_estimate: Optional[FeeEstimate] = None   # set when fees were auto-estimated

    def to_dict(self) -> dict:
        return {
            "tx_hash": self.tx_hash,
            "transaction": self.transaction.to_dict(),
            "fee_estimate": self.fee_estimate.to_dict() if self.fee_estimate else None,
        }
