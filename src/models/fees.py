"""
Fee models.

Two pricing models exist on EVM chains:
- legacy: one gas price per unit of gas
- dynamic: base fee plus a priority tip, bounded by a max fee

Which one a chain uses is read from the provider's fee response on every
call, never from a static table.
"""

from dataclasses import dataclass, asdict
from typing import Optional, Union

from .errors import ConflictingFeeFields, FeeSignalUnavailable, InvertedFeePriority


MODEL_LEGACY = "legacy"
MODEL_DYNAMIC = "dynamic"

TIER_REGULAR = "regular"
TIER_EXPRESS = "express"
TIER_INSTANT = "instant"
TIERS = (TIER_REGULAR, TIER_EXPRESS, TIER_INSTANT)


# ============================================
# Provider Signals
# ============================================

@dataclass(frozen=True)
class FeeData:
    """Raw fee fields as returned by the provider (all wei, any may be None)."""
    gas_price: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None
    base_fee_per_gas: Optional[int] = None


@dataclass(frozen=True)
class LegacyFeeSignals:
    gas_price: int

    @property
    def model(self) -> str:
        return MODEL_LEGACY


@dataclass(frozen=True)
class DynamicFeeSignals:
    base_fee_per_gas: int
    suggested_priority_fee: int

    @property
    def model(self) -> str:
        return MODEL_DYNAMIC


FeeSignals = Union[LegacyFeeSignals, DynamicFeeSignals]


def detect_fee_signals(fee_data: FeeData) -> FeeSignals:
    """
    Derive the fee model from a provider response.

    Dynamic iff both max fee and max priority fee are present, otherwise
    legacy iff a gas price is present.

    Raises:
        FeeSignalUnavailable: If neither model can be determined
    """
    if fee_data.max_fee_per_gas is not None and fee_data.max_priority_fee_per_gas is not None:
        priority = fee_data.max_priority_fee_per_gas
        base_fee = fee_data.base_fee_per_gas
        if base_fee is None:
            # ethers-style providers report max fee as 2 * base + priority
            base_fee = max((fee_data.max_fee_per_gas - priority) // 2, 0)
        return DynamicFeeSignals(base_fee_per_gas=base_fee, suggested_priority_fee=priority)

    if fee_data.gas_price is not None:
        return LegacyFeeSignals(gas_price=fee_data.gas_price)

    raise FeeSignalUnavailable("Provider returned no gas price and no dynamic fee fields")


# ============================================
# Fee Specs (what goes into a transaction)
# ============================================

@dataclass(frozen=True)
class LegacyFeeSpec:
    """Single gas price, in wei."""
    gas_price: int

    def __post_init__(self):
        if self.gas_price < 0:
            raise ValueError(f"gas_price must be non-negative, got {self.gas_price}")


@dataclass(frozen=True)
class DynamicFeeSpec:
    """
    Max fee and priority fee, in wei.

    One half may be missing; the sign params builder fills it from the
    chain's last observed fee data.
    """
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None

    def __post_init__(self):
        if self.max_fee_per_gas is None and self.max_priority_fee_per_gas is None:
            raise ValueError("DynamicFeeSpec needs at least one fee field")
        check_fee_priority(self.max_fee_per_gas, self.max_priority_fee_per_gas)

    @property
    def is_complete(self) -> bool:
        return self.max_fee_per_gas is not None and self.max_priority_fee_per_gas is not None


FeeSpec = Union[LegacyFeeSpec, DynamicFeeSpec]


def check_fee_priority(max_fee_per_gas: Optional[int], max_priority_fee_per_gas: Optional[int]) -> None:
    """Raise InvertedFeePriority if both fields are set and max < priority."""
    if max_fee_per_gas is None or max_priority_fee_per_gas is None:
        return
    if max_fee_per_gas < max_priority_fee_per_gas:
        raise InvertedFeePriority(
            f"Invalid fee config: maxFeePerGas ({max_fee_per_gas} wei) must be >= "
            f"maxPriorityFeePerGas ({max_priority_fee_per_gas} wei)",
            context={
                "max_fee_per_gas": max_fee_per_gas,
                "max_priority_fee_per_gas": max_priority_fee_per_gas,
            },
        )


def fee_spec_from_fields(
    gas_price: Optional[int] = None,
    max_fee_per_gas: Optional[int] = None,
    max_priority_fee_per_gas: Optional[int] = None,
) -> Optional[FeeSpec]:
    """
    Build a fee spec from optional wei fields.

    Returns None when no field is set (the caller wants auto-estimation).

    Raises:
        ConflictingFeeFields: gas_price together with any dynamic field
        InvertedFeePriority: max_fee_per_gas < max_priority_fee_per_gas
    """
    has_dynamic = max_fee_per_gas is not None or max_priority_fee_per_gas is not None

    if gas_price is not None and has_dynamic:
        raise ConflictingFeeFields(
            "gasPrice cannot be combined with maxFeePerGas or maxPriorityFeePerGas",
        )
    if gas_price is not None:
        return LegacyFeeSpec(gas_price=gas_price)
    if has_dynamic:
        return DynamicFeeSpec(
            max_fee_per_gas=max_fee_per_gas,
            max_priority_fee_per_gas=max_priority_fee_per_gas,
        )
    return None


# ============================================
# Quotes
# ============================================

@dataclass(frozen=True)
class FeeQuote:
    """Fee fields for one tier plus the cost they imply."""
    tier: str
    gas_limit: int
    estimated_cost: int                      # wei: gas_limit * (gas_price or max_fee_per_gas)
    gas_price: Optional[int] = None          # legacy only
    max_fee_per_gas: Optional[int] = None    # dynamic only
    max_priority_fee_per_gas: Optional[int] = None

    @property
    def model(self) -> str:
        return MODEL_LEGACY if self.gas_price is not None else MODEL_DYNAMIC

    @property
    def unit_price(self) -> int:
        """Per-gas price used for the cost estimate."""
        return self.gas_price if self.gas_price is not None else self.max_fee_per_gas

    def to_fee_spec(self) -> FeeSpec:
        if self.gas_price is not None:
            return LegacyFeeSpec(gas_price=self.gas_price)
        return DynamicFeeSpec(
            max_fee_per_gas=self.max_fee_per_gas,
            max_priority_fee_per_gas=self.max_priority_fee_per_gas,
        )

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class FeeEstimate:
    """Three fee tiers computed against one gas limit."""
    chain_id: int
    gas_limit: int
    model: str
    regular: FeeQuote
    express: FeeQuote
    instant: FeeQuote

    def tier(self, name: str) -> FeeQuote:
        if name not in TIERS:
            raise ValueError(f"Unknown fee tier: {name}. Must be one of {TIERS}")
        return getattr(self, name)

    def to_dict(self) -> dict:
        return {
            "chain_id": self.chain_id,
            "gas_limit": self.gas_limit,
            "model": self.model,
            "tiers": {name: self.tier(name).to_dict() for name in TIERS},
        }
