"""
Wallet package - Key management and signing.

Contains:
- Key derivation: BIP-39 seed phrases, BIP-44 private keys
- Addresses: derivation and EIP-55 validation
- Signing: legacy and dynamic fee transactions
"""

from .crypto import (
    AddressValidation,
    AddressInfo,
    GeneratedWallet,
    generate_mnemonic,
    generate_wallet,
    derive_private_key,
    new_address,
    address_from_key,
    validate_address,
    sign_transaction,
    ETH_DERIVATION_PATH,
    DEFAULT_DERIVATION_PATH,
)

__all__ = [
    "AddressValidation",
    "AddressInfo",
    "GeneratedWallet",
    "generate_mnemonic",
    "generate_wallet",
    "derive_private_key",
    "new_address",
    "address_from_key",
    "validate_address",
    "sign_transaction",
    "ETH_DERIVATION_PATH",
    "DEFAULT_DERIVATION_PATH",
]
