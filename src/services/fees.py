"""
Fee Engine - Fee model detection and tier computation.

Produces regular / express / instant quotes from the chain's live fee
signals. All math is integer wei; multipliers are applied as scaled
integers (1.2 -> * 12 // 10) so wei-scale values never go through floats.
"""

import logging
from decimal import Decimal
from typing import Optional

from models.fees import (
    DynamicFeeSignals,
    FeeEstimate,
    FeeQuote,
    LegacyFeeSignals,
    MODEL_DYNAMIC,
    MODEL_LEGACY,
    TIER_EXPRESS,
    TIER_INSTANT,
    TIER_REGULAR,
)
from models.transfer import ChainContext
from networks import native_decimals
from units import to_base_units

logger = logging.getLogger(__name__)


# ============================================
# Tier Constants
# ============================================

# Dynamic tiers: multiplier applied to base fee and priority fee separately
DYNAMIC_TIER_MULTIPLIERS = {
    TIER_REGULAR: Decimal("1.0"),
    TIER_EXPRESS: Decimal("1.2"),
    TIER_INSTANT: Decimal("1.5"),
}

# Legacy tiers: percentage of the node's gas price
LEGACY_TIER_PERCENT = {
    TIER_REGULAR: 100,
    TIER_EXPRESS: 110,
    TIER_INSTANT: 125,
}

# Per-gas cap on dynamic max fee and priority fee (100 gwei).
# Legacy tiers are not capped.
DYNAMIC_FEE_CAP = 100_000_000_000


def apply_multiplier(value: int, multiplier: Decimal) -> int:
    """
    floor(value * round(multiplier * 10) / 10) in integer arithmetic.

    ex: apply_multiplier(20 gwei, 1.2) -> 24 gwei
    """
    tenths = int((Decimal(multiplier) * 10).to_integral_value())
    return value * tenths // 10


def apply_percent(value: int, percent: int) -> int:
    return value * percent // 100


def simulate_gas(context: ChainContext, to: str, value: int, data: Optional[str] = None) -> int:
    """Gas limit from a simulated send (eth_estimateGas), from the signer when known."""
    tx = {"to": to, "value": value}
    if data and data != "0x":
        tx["data"] = data
    if context.signer_address:
        tx["from"] = context.signer_address
    return context.rpc.estimate_gas(tx)


# ============================================
# Fee Engine
# ============================================

class FeeModelEngine:
    """Computes fee tiers for a transfer against a resolved ChainContext."""

    def __init__(self, fee_cap: int = DYNAMIC_FEE_CAP):
        self.fee_cap = fee_cap

    def estimate(
        self,
        context: ChainContext,
        recipient: str,
        amount,
        data: Optional[str] = None,
    ) -> FeeEstimate:
        """
        Estimate fees for a native transfer.

        Args:
            context: Resolved chain context
            recipient: Destination address
            amount: Amount in native display units (e.g. "0.5" ETH)
            data: Optional hex payload

        Returns:
            FeeEstimate with regular, express and instant tiers

        Raises:
            FeeSignalUnavailable: Provider reported no usable fee fields
            ProviderError: Gas estimation failed
        """
        value = to_base_units(amount, native_decimals(context.chain_id))
        return self.estimate_for_call(context, recipient, value, data)

    def estimate_for_call(
        self,
        context: ChainContext,
        to: str,
        value: int,
        data: Optional[str] = None,
        gas_limit: Optional[int] = None,
    ) -> FeeEstimate:
        """
        Estimate fees for an already resolved target/value/data.

        The gas limit is estimated once with a simulated send and shared by
        all three tiers; pass gas_limit to reuse one already resolved.
        """
        signals = context.fee_signals

        if gas_limit is None:
            gas_limit = simulate_gas(context, to, value, data)

        if isinstance(signals, DynamicFeeSignals):
            model = MODEL_DYNAMIC
            quotes = {tier: self._dynamic_quote(signals, tier, gas_limit) for tier in DYNAMIC_TIER_MULTIPLIERS}
        else:
            model = MODEL_LEGACY
            quotes = {tier: self._legacy_quote(signals, tier, gas_limit) for tier in LEGACY_TIER_PERCENT}

        logger.info(
            f"Fee estimate chain={context.chain_id} model={model} gas={gas_limit} "
            f"regular={quotes[TIER_REGULAR].unit_price} instant={quotes[TIER_INSTANT].unit_price}"
        )

        return FeeEstimate(
            chain_id=context.chain_id,
            gas_limit=gas_limit,
            model=model,
            regular=quotes[TIER_REGULAR],
            express=quotes[TIER_EXPRESS],
            instant=quotes[TIER_INSTANT],
        )

    def _dynamic_quote(self, signals: DynamicFeeSignals, tier: str, gas_limit: int) -> FeeQuote:
        multiplier = DYNAMIC_TIER_MULTIPLIERS[tier]
        priority = apply_multiplier(signals.suggested_priority_fee, multiplier)
        max_fee = apply_multiplier(signals.base_fee_per_gas, multiplier) + priority

        max_fee = min(max_fee, self.fee_cap)
        priority = min(priority, self.fee_cap)

        return FeeQuote(
            tier=tier,
            gas_limit=gas_limit,
            estimated_cost=gas_limit * max_fee,
            max_fee_per_gas=max_fee,
            max_priority_fee_per_gas=priority,
        )

    def _legacy_quote(self, signals: LegacyFeeSignals, tier: str, gas_limit: int) -> FeeQuote:
        gas_price = apply_percent(signals.gas_price, LEGACY_TIER_PERCENT[tier])
        return FeeQuote(
            tier=tier,
            gas_limit=gas_limit,
            estimated_cost=gas_limit * gas_price,
            gas_price=gas_price,
        )
