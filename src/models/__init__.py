"""
Models package - Data models for the wallet.

Contains:
- Errors: stage-tagged wallet and transfer failures
- Fees: provider fee data, fee signals, fee specs, quotes and estimates
- Transfer: chain context, transfer request, signable transaction, result
- Token: balances and ERC-20 metadata
"""

from .errors import (
    WalletError,
    InvalidAmount,
    InvalidAddress,
    MissingRpcUrl,
    NotAContract,
    InvalidContractCall,
    ConflictingFeeFields,
    InvertedFeePriority,
    FeeSignalUnavailable,
    ProviderError,
    SigningFailed,
    BroadcastFailed,
    STAGES,
    STAGE_VALIDATING,
    STAGE_SHAPE_RESOLVED,
    STAGE_FEE_RESOLVED,
    STAGE_SIGNED,
    STAGE_BROADCAST,
)
from .fees import (
    FeeData,
    LegacyFeeSignals,
    DynamicFeeSignals,
    LegacyFeeSpec,
    DynamicFeeSpec,
    FeeQuote,
    FeeEstimate,
    detect_fee_signals,
    fee_spec_from_fields,
    MODEL_LEGACY,
    MODEL_DYNAMIC,
    TIERS,
    TIER_REGULAR,
    TIER_EXPRESS,
    TIER_INSTANT,
)
from .transfer import (
    ChainContext,
    TransferRequest,
    ContractCallRequest,
    TransferShape,
    SignableTransaction,
    TransferResult,
    TX_TYPE_LEGACY,
    TX_TYPE_DYNAMIC,
    MIN_TRANSFER_GAS,
)
from .token import Balance, TokenInfo

__all__ = [
    "WalletError",
    "InvalidAmount",
    "InvalidAddress",
    "MissingRpcUrl",
    "NotAContract",
    "InvalidContractCall",
    "ConflictingFeeFields",
    "InvertedFeePriority",
    "FeeSignalUnavailable",
    "ProviderError",
    "SigningFailed",
    "BroadcastFailed",
    "STAGES",
    "STAGE_VALIDATING",
    "STAGE_SHAPE_RESOLVED",
    "STAGE_FEE_RESOLVED",
    "STAGE_SIGNED",
    "STAGE_BROADCAST",
    "FeeData",
    "LegacyFeeSignals",
    "DynamicFeeSignals",
    "LegacyFeeSpec",
    "DynamicFeeSpec",
    "FeeQuote",
    "FeeEstimate",
    "detect_fee_signals",
    "fee_spec_from_fields",
    "MODEL_LEGACY",
    "MODEL_DYNAMIC",
    "TIERS",
    "TIER_REGULAR",
    "TIER_EXPRESS",
    "TIER_INSTANT",
    "ChainContext",
    "TransferRequest",
    "ContractCallRequest",
    "TransferShape",
    "SignableTransaction",
    "TransferResult",
    "TX_TYPE_LEGACY",
    "TX_TYPE_DYNAMIC",
    "MIN_TRANSFER_GAS",
    "Balance",
    "TokenInfo",
]
