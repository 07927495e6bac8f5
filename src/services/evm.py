"""
EVM Wallet - Caller-facing wallet operations for EVM chains.

Usage:
    wallet = EvmWallet(WalletConfig(chain_id=11155111))

    # Derive a wallet
    info = wallet.generate_wallet(mnemonic="...")

    # Read balances
    balance = wallet.get_balance(info.address)

    # Send 0.01 ETH with auto-estimated fees
    result = wallet.transfer(info.private_key, "0x...", "0.01")

    # Read or write any contract method
    allowance = wallet.smart_contract_call(token, "allowance", [owner, spender])
"""

import logging
from typing import Any, Callable, Optional, Sequence

from config import WalletConfig
from models.errors import InvalidAddress, InvalidContractCall
from models.fees import FeeEstimate
from models.token import Balance, TokenInfo
from models.transfer import ContractCallRequest, TransferRequest, TransferResult
from networks import ERC20_ABI, native_decimals, native_symbol
from units import to_display_units
from wallet import crypto
from .context import ChainContextResolver
from .fees import FeeModelEngine
from .rpc import RpcClient
from .sign_params import SignParamsBuilder
from .transfer import ENCODE_ERRORS, TransferOrchestrator, check_abi_method

logger = logging.getLogger(__name__)

METHOD_READ = "read"
METHOD_WRITE = "write"


class EvmWallet:
    """Wallet for one EVM chain configuration."""

    def __init__(
        self,
        config: Optional[WalletConfig] = None,
        rpc_factory: Optional[Callable[..., RpcClient]] = None,
        fee_engine: Optional[FeeModelEngine] = None,
    ):
        self.config = config or WalletConfig()
        self.resolver = ChainContextResolver(self.config, rpc_factory=rpc_factory)
        self.fee_engine = fee_engine or FeeModelEngine()
        self.orchestrator = TransferOrchestrator(
            self.resolver,
            fee_engine=self.fee_engine,
            sign_params=SignParamsBuilder(),
        )

    # ============================================
    # Keys
    # ============================================

    def generate_mnemonic(self, num_words: int = 12) -> str:
        return crypto.generate_mnemonic(num_words)

    def generate_wallet(
        self,
        mnemonic: Optional[str] = None,
        derivation_path: Optional[str] = None,
    ) -> crypto.GeneratedWallet:
        """Derive address, public key and private key (new mnemonic if none given)."""
        return crypto.generate_wallet(mnemonic=mnemonic, derivation_path=derivation_path)

    def validate_address(self, address: str) -> crypto.AddressValidation:
        return crypto.validate_address(address)

    # ============================================
    # Reads
    # ============================================

    def get_balance(
        self,
        address: str,
        contract_address: Optional[str] = None,
        rpc_url: Optional[str] = None,
    ) -> Balance:
        """
        Get the native balance, or an ERC-20 balance when contract_address is set.

        Raises:
            InvalidAddress: address is not valid
            MissingRpcUrl: No endpoint configured
            NotAContract: contract_address has no code
        """
        validation = crypto.validate_address(address)
        if not validation.is_valid:
            raise InvalidAddress(f"Address not valid: {address}", address=address)
        owner = validation.normalized

        context = self.resolver.resolve(rpc_url=rpc_url, contract_address=contract_address)

        if context.contract is not None:
            contract = context.contract
            decimals = int(context.rpc.call("decimals", lambda: contract.functions.decimals().call()))
            raw = int(context.rpc.call("balanceOf", lambda: contract.functions.balanceOf(owner).call()))
            symbol = context.rpc.call("symbol", lambda: contract.functions.symbol().call())
            return Balance(
                symbol=symbol,
                raw=raw,
                decimals=decimals,
                formatted=to_display_units(raw, decimals),
                contract_address=context.contract_address,
            )

        decimals = native_decimals(context.chain_id)
        raw = context.rpc.get_balance(owner)
        return Balance(
            symbol=native_symbol(context.chain_id),
            raw=raw,
            decimals=decimals,
            formatted=to_display_units(raw, decimals),
        )

    def get_token_info(self, contract_address: str, rpc_url: Optional[str] = None) -> TokenInfo:
        """
        Read name, symbol, decimals and total supply of an ERC-20 token.

        Raises:
            InvalidAddress: contract_address is missing or not an address
            NotAContract: contract_address has no code
        """
        validation = crypto.validate_address(contract_address)
        if not validation.is_valid:
            raise InvalidAddress(f"Contract address not valid: {contract_address}", address=contract_address)

        context = self.resolver.resolve(rpc_url=rpc_url, contract_address=validation.normalized)
        contract = context.contract
        call = context.rpc.call

        name = call("name", lambda: contract.functions.name().call())
        symbol = call("symbol", lambda: contract.functions.symbol().call())
        decimals = int(call("decimals", lambda: contract.functions.decimals().call()))
        total_supply = int(call("totalSupply", lambda: contract.functions.totalSupply().call()))

        return TokenInfo(
            name=name,
            symbol=symbol,
            decimals=decimals,
            total_supply=to_display_units(total_supply, decimals),
            address=context.contract_address,
        )

    # ============================================
    # Fees and Transfers
    # ============================================

    def estimate_fees(
        self,
        recipient: str,
        amount,
        data: Optional[str] = None,
        rpc_url: Optional[str] = None,
        private_key: Optional[str] = None,
    ) -> FeeEstimate:
        """
        Estimate regular / express / instant fees for a native transfer.

        With a private key the gas estimate is simulated from the signer.
        """
        validation = crypto.validate_address(recipient)
        if not validation.is_valid:
            raise InvalidAddress(f"Recipient address not valid: {recipient}", address=recipient)

        context = self.resolver.resolve(rpc_url=rpc_url, private_key=private_key)
        return self.fee_engine.estimate(context, validation.normalized, amount, data)

    def transfer(
        self,
        private_key: str,
        recipient: str,
        amount,
        contract_address: Optional[str] = None,
        gas_limit: Optional[int] = None,
        gas_price=None,
        max_fee_per_gas=None,
        max_priority_fee_per_gas=None,
        nonce: Optional[int] = None,
        data: Optional[str] = None,
        rpc_url: Optional[str] = None,
    ) -> TransferResult:
        """
        Send native coin or an ERC-20 token.

        Args:
            private_key: Signer key (hex)
            recipient: Destination address
            amount: Amount in display units (ETH, or token units with contract_address)
            contract_address: ERC-20 token to transfer instead of the native coin
            gas_limit: Explicit gas limit
            gas_price: Legacy gas price in gwei
            max_fee_per_gas: Dynamic max fee in gwei
            max_priority_fee_per_gas: Dynamic priority fee in gwei
            nonce: Nonce override
            data: Hex payload for native transfers
            rpc_url: Endpoint override

        Returns:
            TransferResult with the transaction hash
        """
        request = TransferRequest.create(
            recipient=recipient,
            amount=amount,
            contract_address=contract_address,
            gas_limit=gas_limit,
            gas_price=gas_price,
            max_fee_per_gas=max_fee_per_gas,
            max_priority_fee_per_gas=max_priority_fee_per_gas,
            nonce=nonce,
            data=data,
        )
        return self.orchestrator.transfer(private_key, request, rpc_url=rpc_url)

    def smart_contract_call(
        self,
        contract_address: str,
        method: str,
        params: Optional[Sequence[Any]] = None,
        method_type: str = METHOD_READ,
        abi: Optional[list] = None,
        private_key: Optional[str] = None,
        value=None,
        gas_limit: Optional[int] = None,
        gas_price=None,
        max_fee_per_gas=None,
        max_priority_fee_per_gas=None,
        nonce: Optional[int] = None,
        rpc_url: Optional[str] = None,
    ):
        """
        Call a contract method.

        A read returns the decoded method output. A write signs and
        broadcasts the call through the transfer stages and returns a
        TransferResult.

        Args:
            contract_address: Contract to call
            method: Function name in the ABI
            params: Positional method arguments
            method_type: "read" or "write"
            abi: Contract ABI (default: ERC-20)
            private_key: Signer key, required for writes
            value: Native coin to send with a write, in display units
            gas_limit, gas_price, max_fee_per_gas, max_priority_fee_per_gas, nonce:
                Same overrides as transfer()
            rpc_url: Endpoint override

        Raises:
            ValueError: Unknown method_type, or a write without a private key
            InvalidAddress: contract_address is not an address
            InvalidContractCall: method not in the ABI or arguments don't encode
            NotAContract: contract_address has no code
        """
        params = tuple(params or ())

        if method_type == METHOD_WRITE:
            if not private_key:
                raise ValueError("private_key is required for write calls")
            request = ContractCallRequest.create(
                contract_address=contract_address,
                method=method,
                params=params,
                abi=abi,
                value=value,
                gas_limit=gas_limit,
                gas_price=gas_price,
                max_fee_per_gas=max_fee_per_gas,
                max_priority_fee_per_gas=max_priority_fee_per_gas,
                nonce=nonce,
            )
            return self.orchestrator.call_contract(private_key, request, rpc_url=rpc_url)

        if method_type != METHOD_READ:
            raise ValueError(f"method_type must be '{METHOD_READ}' or '{METHOD_WRITE}', got {method_type!r}")

        validation = crypto.validate_address(contract_address)
        if not validation.is_valid:
            raise InvalidAddress(f"Contract address not valid: {contract_address}", address=contract_address)

        abi = abi or ERC20_ABI
        check_abi_method(abi, method)

        context = self.resolver.resolve(rpc_url=rpc_url, contract_address=validation.normalized, abi=abi)
        try:
            bound = getattr(context.contract.functions, method)(*params)
        except ENCODE_ERRORS as e:
            raise InvalidContractCall(f"Arguments for {method} do not match the ABI: {e}", method=method) from e

        return context.rpc.call(method, bound.call)
