"""
Chain Context - Reads the chain state a call needs in one round.

Opens a provider connection, reads fee signals, the signer's pending nonce
and binds a token contract when one is given.
"""

import logging
from typing import Callable, Optional

from config import WalletConfig
from models.errors import InvalidAddress, MissingRpcUrl, NotAContract
from models.transfer import ChainContext
from networks import ERC20_ABI, format_address
from wallet import crypto
from .rpc import RpcClient

logger = logging.getLogger(__name__)


class ChainContextResolver:
    """Builds a ChainContext per call. Holds no chain state itself."""

    def __init__(
        self,
        config: Optional[WalletConfig] = None,
        rpc_factory: Optional[Callable[..., RpcClient]] = None,
    ):
        """
        Args:
            config: Wallet configuration (chain id, default RPC, timeout)
            rpc_factory: Called as rpc_factory(rpc_url, timeout=...); defaults to RpcClient
        """
        self.config = config or WalletConfig()
        self._rpc_factory = rpc_factory or RpcClient

    def open(self, rpc_url: Optional[str] = None) -> RpcClient:
        """Open a provider connection for the resolved RPC URL."""
        url = self.config.resolve_rpc_url(rpc_url)
        if not url:
            raise MissingRpcUrl("RPC URL is required")
        return self._rpc_factory(url, timeout=self.config.timeout)

    def resolve(
        self,
        rpc_url: Optional[str] = None,
        private_key: Optional[str] = None,
        contract_address: Optional[str] = None,
        abi: Optional[list] = None,
    ) -> ChainContext:
        """
        Read fee signals, nonce and contract binding.

        Args:
            rpc_url: Explicit endpoint, overrides the configured one
            private_key: Signer key; enables the pending nonce read
            contract_address: Token or contract to bind
            abi: Contract ABI, defaults to ERC-20

        Raises:
            MissingRpcUrl: No endpoint configured anywhere
            InvalidAddress: contract_address is not an address
            NotAContract: contract_address has no deployed code
            ProviderError: Any RPC read failed
        """
        rpc = self.open(rpc_url)

        chain_id = self.config.chain_id
        if chain_id is None:
            chain_id = rpc.get_chain_id()

        fee_data = rpc.get_fee_data()

        nonce = None
        signer_address = None
        if private_key:
            signer_address = crypto.address_from_key(private_key)
            # Pending-inclusive so back-to-back sends don't reuse a nonce
            nonce = rpc.get_nonce(signer_address, "pending")

        contract = None
        normalized_contract = None
        if contract_address:
            validation = crypto.validate_address(contract_address)
            if not validation.is_valid:
                raise InvalidAddress(f"Contract address not valid: {contract_address}", address=contract_address)
            normalized_contract = validation.normalized

            code = rpc.get_code(normalized_contract)
            if not code:
                raise NotAContract(f"No contract deployed at {normalized_contract}", address=normalized_contract)
            contract = rpc.contract(normalized_contract, abi or ERC20_ABI)

        logger.debug(
            f"Resolved context chain={chain_id} "
            f"signer={format_address(signer_address) if signer_address else None} nonce={nonce} "
            f"contract={format_address(normalized_contract) if normalized_contract else None}"
        )

        return ChainContext(
            rpc=rpc,
            chain_id=chain_id,
            fee_data=fee_data,
            nonce=nonce,
            signer_address=signer_address,
            contract=contract,
            contract_address=normalized_contract,
        )
