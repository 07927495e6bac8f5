"""
Wallet errors.

Every failure raised while building or sending a transfer carries the stage
that produced it, so callers can tell "nothing was sent" apart from
"sent but unconfirmed".

Stage lifecycle:
- validating: recipient, amount and fee fields checked, chain state read
- shape_resolved: native vs contract-call transfer decided, gas limit known
- fee_resolved: fee fields filled (caller supplied or auto-estimated)
- signed: transaction signed by the wallet key
- broadcast: signed bytes handed to the node
"""

from typing import Any, Dict, Optional


# Valid stage values
STAGE_VALIDATING = "validating"
STAGE_SHAPE_RESOLVED = "shape_resolved"
STAGE_FEE_RESOLVED = "fee_resolved"
STAGE_SIGNED = "signed"
STAGE_BROADCAST = "broadcast"

STAGES = (
    STAGE_VALIDATING,
    STAGE_SHAPE_RESOLVED,
    STAGE_FEE_RESOLVED,
    STAGE_SIGNED,
    STAGE_BROADCAST,
)


class WalletError(Exception):
    """Base class for wallet and transfer failures."""

    def __init__(self, message: str, stage: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.stage = stage
        self.context = context or {}

    @property
    def sent(self) -> bool:
        """True if the transaction may have reached the network."""
        return self.stage == STAGE_BROADCAST

    def __str__(self) -> str:
        message = super().__str__()
        if self.stage:
            return f"[{self.stage}] {message}"
        return message


class InvalidAmount(WalletError):
    """Amount is not a finite non-negative number."""


class InvalidAddress(WalletError):
    """Address failed validation."""

    def __init__(self, message: str, address: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.address = address


class MissingRpcUrl(WalletError):
    """No RPC endpoint configured for the call."""


class NotAContract(WalletError):
    """Address has no deployed code."""

    def __init__(self, message: str, address: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.address = address


class ConflictingFeeFields(WalletError):
    """Legacy gas price mixed with dynamic fee fields."""


class InvertedFeePriority(WalletError):
    """maxFeePerGas is lower than maxPriorityFeePerGas."""


class FeeSignalUnavailable(WalletError):
    """Provider returned neither a gas price nor dynamic fee fields."""


class ProviderError(WalletError):
    """An RPC read failed."""

    def __init__(self, message: str, method: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.method = method


class SigningFailed(WalletError):
    """The signer rejected the transaction parameters."""


class BroadcastFailed(WalletError):
    """The node rejected or never acknowledged the signed transaction."""


class InvalidContractCall(WalletError):
    """Method is not in the contract ABI, or its arguments don't encode."""

    def __init__(self, message: str, method: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.method = method
