"""
Services package - Chain access, fees and transfers.

Contains:
- RpcClient: JSON-RPC reads and broadcast over web3
- ChainContextResolver: Per-call chain state (fees, nonce, contract)
- FeeModelEngine: Legacy / dynamic fee tiers
- SignParamsBuilder: Signer transaction shape
- TransferOrchestrator: Staged transfer pipeline
- EvmWallet: Caller-facing wallet operations
"""

from .rpc import RpcClient
from .context import ChainContextResolver
from .fees import FeeModelEngine, apply_multiplier, DYNAMIC_FEE_CAP
from .sign_params import SignParamsBuilder
from .transfer import TransferOrchestrator, transfer_stage
from .evm import EvmWallet
from .logging import configure_logging

__all__ = [
    "RpcClient",
    "ChainContextResolver",
    "FeeModelEngine",
    "apply_multiplier",
    "DYNAMIC_FEE_CAP",
    "SignParamsBuilder",
    "TransferOrchestrator",
    "transfer_stage",
    "EvmWallet",
    "configure_logging",
]
