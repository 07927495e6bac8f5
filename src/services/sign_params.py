"""
Sign Params - Maps a resolved transfer onto the signer's transaction shape.
"""

import logging
from typing import Optional

from models.errors import InvertedFeePriority, STAGE_FEE_RESOLVED
from models.fees import DynamicFeeSpec, FeeSpec, LegacyFeeSpec, check_fee_priority
from models.transfer import (
    ChainContext,
    SignableTransaction,
    TransferShape,
    TX_TYPE_DYNAMIC,
    TX_TYPE_LEGACY,
)
from units import parse_gwei

logger = logging.getLogger(__name__)

# Fallbacks when the caller gave one half of the dynamic pair and the
# provider reported no dynamic fields either
DEFAULT_PRIORITY_FEE = parse_gwei("0.1")
DEFAULT_MAX_FEE = parse_gwei("3")


class SignParamsBuilder:
    """Chooses legacy vs dynamic transaction records and fills defaults."""

    def build(
        self,
        context: ChainContext,
        shape: TransferShape,
        fee_spec: FeeSpec,
        nonce: Optional[int] = None,
    ) -> SignableTransaction:
        """
        Build the SignableTransaction.

        Args:
            context: Chain context (chain id, nonce, observed fee data)
            shape: Resolved target, value, data and gas limit
            fee_spec: Legacy or dynamic fee fields
            nonce: Caller override, else the context's pending nonce
        """
        tx_nonce = nonce if nonce is not None else context.nonce
        if tx_nonce is None:
            raise ValueError("No nonce available: resolve the context with a signer key or pass nonce")

        common = dict(
            to=shape.to,
            value=shape.value,
            data=shape.data,
            nonce=tx_nonce,
            gas_limit=shape.gas_limit,
            chain_id=context.chain_id,
        )

        if isinstance(fee_spec, LegacyFeeSpec):
            return SignableTransaction(tx_type=TX_TYPE_LEGACY, gas_price=fee_spec.gas_price, **common)

        if not isinstance(fee_spec, DynamicFeeSpec):
            raise TypeError(f"Unsupported fee spec: {type(fee_spec).__name__}")

        max_fee, priority = self._fill_dynamic(context, fee_spec)
        return SignableTransaction(
            tx_type=TX_TYPE_DYNAMIC,
            max_fee_per_gas=max_fee,
            max_priority_fee_per_gas=priority,
            **common,
        )

    def _fill_dynamic(self, context: ChainContext, fee_spec: DynamicFeeSpec) -> tuple[int, int]:
        """Fill a missing half from the last observed fee data, then defaults."""
        if fee_spec.is_complete:
            return fee_spec.max_fee_per_gas, fee_spec.max_priority_fee_per_gas

        observed = context.fee_data
        priority = fee_spec.max_priority_fee_per_gas
        if priority is None:
            priority = observed.max_priority_fee_per_gas
            if priority is None:
                priority = DEFAULT_PRIORITY_FEE

        max_fee = fee_spec.max_fee_per_gas
        if max_fee is None:
            max_fee = observed.max_fee_per_gas
            if max_fee is None:
                max_fee = DEFAULT_MAX_FEE

        logger.debug(f"Filled dynamic fee pair max_fee={max_fee} priority={priority}")

        try:
            check_fee_priority(max_fee, priority)
        except InvertedFeePriority as e:
            e.stage = STAGE_FEE_RESOLVED
            raise
        return max_fee, priority
