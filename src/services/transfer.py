"""
Transfer Orchestrator - Validates, shapes, prices, signs and broadcasts.

Stages run in a fixed order:

    validating -> shape_resolved -> fee_resolved -> signed -> broadcast

When the caller supplies no fee fields, the fee stage runs exactly one
estimation round, takes the regular tier and passes it back through the
same fee validation once. It never estimates a second time.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Optional, Union

from web3.exceptions import Web3Exception

from models.errors import (
    InvalidAddress,
    InvalidAmount,
    InvalidContractCall,
    WalletError,
    STAGE_BROADCAST,
    STAGE_FEE_RESOLVED,
    STAGE_SHAPE_RESOLVED,
    STAGE_SIGNED,
    STAGE_VALIDATING,
)
from models.fees import (
    DynamicFeeSpec,
    FeeEstimate,
    FeeSpec,
    LegacyFeeSpec,
    TIER_REGULAR,
    fee_spec_from_fields,
)
from models.transfer import (
    ChainContext,
    ContractCallRequest,
    MIN_TRANSFER_GAS,
    SignableTransaction,
    TransferRequest,
    TransferResult,
    TransferShape,
)
from networks import ERC20_ABI, format_address, native_decimals
from units import to_base_units
from wallet import crypto
from .context import ChainContextResolver
from .fees import FeeModelEngine, simulate_gas
from .sign_params import SignParamsBuilder

logger = logging.getLogger(__name__)

# What web3 raises when arguments don't fit the ABI
ENCODE_ERRORS = (Web3Exception, ValueError, TypeError, OverflowError)


@contextmanager
def transfer_stage(stage: str):
    """Tag any WalletError raised inside the block with the stage, unless already tagged."""
    try:
        yield
    except WalletError as e:
        if e.stage is None:
            e.stage = stage
        raise


def check_abi_method(abi: list, method: str) -> None:
    """Raise InvalidContractCall unless the ABI declares a function named method."""
    for entry in abi:
        if entry.get("type", "function") == "function" and entry.get("name") == method:
            return
    raise InvalidContractCall(f"Method {method!r} is not in the contract ABI", method=method)


class TransferOrchestrator:
    """Runs one transfer through the stage pipeline. Keeps no state between calls."""

    def __init__(
        self,
        resolver: ChainContextResolver,
        fee_engine: Optional[FeeModelEngine] = None,
        sign_params: Optional[SignParamsBuilder] = None,
        signer: Callable[[str, SignableTransaction], bytes] = crypto.sign_transaction,
    ):
        self.resolver = resolver
        self.fee_engine = fee_engine or FeeModelEngine()
        self.sign_params = sign_params or SignParamsBuilder()
        self._signer = signer

    def transfer(
        self,
        private_key: str,
        request: TransferRequest,
        rpc_url: Optional[str] = None,
    ) -> TransferResult:
        """
        Send a native or token transfer.

        Args:
            private_key: Signer key (hex)
            request: Validated transfer request
            rpc_url: Endpoint override

        Returns:
            TransferResult with the broadcast transaction hash

        Raises:
            WalletError: Any failure, tagged with the stage that produced it
        """
        with transfer_stage(STAGE_VALIDATING):
            recipient = self.validate_recipient(request.recipient)
            context = self.resolver.resolve(
                rpc_url=rpc_url,
                private_key=private_key,
                contract_address=request.contract_address,
            )

        with transfer_stage(STAGE_SHAPE_RESOLVED):
            shape = self.resolve_shape(context, recipient, request)

        return self._price_sign_send(private_key, context, shape, request)

    def call_contract(
        self,
        private_key: str,
        request: ContractCallRequest,
        rpc_url: Optional[str] = None,
    ) -> TransferResult:
        """
        Send a state-changing contract method call.

        Runs the same stages as transfer(). The method must be in the ABI
        (ERC-20 when the request has none).

        Raises:
            WalletError: Any failure, tagged with the stage that produced it
        """
        abi = request.abi or ERC20_ABI

        with transfer_stage(STAGE_VALIDATING):
            validation = crypto.validate_address(request.contract_address)
            if not validation.is_valid:
                raise InvalidAddress(
                    f"Contract address not valid: {request.contract_address}", address=request.contract_address
                )
            check_abi_method(abi, request.method)
            context = self.resolver.resolve(
                rpc_url=rpc_url,
                private_key=private_key,
                contract_address=validation.normalized,
                abi=abi,
            )

        with transfer_stage(STAGE_SHAPE_RESOLVED):
            shape = self.resolve_call_shape(context, request)

        return self._price_sign_send(private_key, context, shape, request)

    def _price_sign_send(
        self,
        private_key: str,
        context: ChainContext,
        shape: TransferShape,
        request: Union[TransferRequest, ContractCallRequest],
    ) -> TransferResult:
        with transfer_stage(STAGE_FEE_RESOLVED):
            fee_spec, estimate = self.resolve_fees(context, shape, request)

        with transfer_stage(STAGE_SIGNED):
            tx = self.sign_params.build(context, shape, fee_spec, nonce=request.nonce)
            raw_transaction = self._signer(private_key, tx)

        with transfer_stage(STAGE_BROADCAST):
            tx_hash = context.rpc.broadcast(raw_transaction)

        kind = "contract call" if isinstance(request, ContractCallRequest) else "transfer"
        logger.info(
            f"Broadcast {tx.tx_type} {kind} {tx_hash} to {format_address(shape.to)} "
            f"chain={tx.chain_id} nonce={tx.nonce}"
        )
        return TransferResult(tx_hash=tx_hash, transaction=tx, fee_estimate=estimate)

    # ============================================
    # Stages
    # ============================================

    def validate_recipient(self, recipient: str) -> str:
        """Return the checksum form of the recipient or raise InvalidAddress."""
        validation = crypto.validate_address(recipient)
        if not validation.is_valid:
            raise InvalidAddress(f"Recipient address not valid: {recipient}", address=recipient)
        return validation.normalized

    def resolve_shape(self, context: ChainContext, recipient: str, request: TransferRequest) -> TransferShape:
        """Decide native vs contract-call transfer and the gas limit."""
        if request.is_contract_call:
            return self._contract_call_shape(context, recipient, request)

        value = to_base_units(request.amount, native_decimals(context.chain_id))
        data = request.data or "0x"

        if request.gas_limit is not None:
            gas_limit = request.gas_limit
        elif not request.data:
            gas_limit = MIN_TRANSFER_GAS
        else:
            gas_limit = simulate_gas(context, recipient, value, data)

        return TransferShape(to=recipient, value=value, data=data, gas_limit=gas_limit)

    def _contract_call_shape(self, context: ChainContext, recipient: str, request: TransferRequest) -> TransferShape:
        contract = context.contract
        decimals = context.rpc.call("decimals", lambda: contract.functions.decimals().call())
        amount = to_base_units(request.amount, int(decimals))
        try:
            data = contract.encode_abi("transfer", args=[recipient, amount])
        except ENCODE_ERRORS as e:
            raise InvalidAmount(f"Token amount does not encode as a transfer: {e}") from e

        if request.data:
            logger.warning("Ignoring data payload on token transfer, the encoded transfer call is used")

        if request.gas_limit is not None:
            gas_limit = request.gas_limit
        else:
            # Estimated as the signer's own call against the token
            gas_limit = simulate_gas(context, context.contract_address, 0, data)

        return TransferShape(
            to=context.contract_address,
            value=0,
            data=data,
            gas_limit=gas_limit,
            is_contract_call=True,
        )

    def resolve_call_shape(self, context: ChainContext, request: ContractCallRequest) -> TransferShape:
        """Encode the method call, convert the attached value and settle the gas limit."""
        value = to_base_units(request.value, native_decimals(context.chain_id))
        try:
            data = context.contract.encode_abi(request.method, args=list(request.params))
        except ENCODE_ERRORS as e:
            raise InvalidContractCall(
                f"Arguments for {request.method} do not match the ABI: {e}", method=request.method
            ) from e

        if request.gas_limit is not None:
            gas_limit = request.gas_limit
        else:
            gas_limit = simulate_gas(context, context.contract_address, value, data)

        return TransferShape(
            to=context.contract_address,
            value=value,
            data=data,
            gas_limit=gas_limit,
            is_contract_call=True,
        )

    def resolve_fees(
        self,
        context: ChainContext,
        shape: TransferShape,
        request: Union[TransferRequest, ContractCallRequest],
    ) -> tuple[FeeSpec, Optional[FeeEstimate]]:
        """
        Use the caller's fee fields, or estimate once and take the regular tier.

        Returns:
            (validated fee spec, the estimate used or None)
        """
        estimate = None
        if request.no_fee_provided:
            estimate = self.fee_engine.estimate_for_call(
                context, shape.to, shape.value, shape.data, gas_limit=shape.gas_limit
            )
            request = request.with_fee_spec(estimate.tier(TIER_REGULAR).to_fee_spec())
            logger.debug(f"Auto-estimated {estimate.model} fees, using {TIER_REGULAR} tier")

        return self._validated(request.fee_spec), estimate

    def _validated(self, fee_spec: FeeSpec) -> FeeSpec:
        """Run a fee spec back through field validation."""
        if isinstance(fee_spec, LegacyFeeSpec):
            return fee_spec_from_fields(gas_price=fee_spec.gas_price)
        if isinstance(fee_spec, DynamicFeeSpec):
            return fee_spec_from_fields(
                max_fee_per_gas=fee_spec.max_fee_per_gas,
                max_priority_fee_per_gas=fee_spec.max_priority_fee_per_gas,
            )
        raise TypeError(f"Unsupported fee spec: {type(fee_spec).__name__}")
