"""
Wallet Crypto - Key derivation, address validation and transaction signing.

Industry-standard building blocks:
- BIP-39 seed phrases
- BIP-32/44 HD derivation
- secp256k1 signing via eth_account

Private keys are passed in and used, never stored or logged.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Optional

from eth_keys import keys
from eth_utils import is_checksum_address
from eth_utils.exceptions import ValidationError
from mnemonic import Mnemonic
from eth_account import Account
from eth_account.hdaccount import Language, generate_mnemonic as _generate_mnemonic, seed_from_mnemonic, key_from_seed
from web3 import Web3

from models.errors import SigningFailed, STAGE_SIGNED
from models.transfer import SignableTransaction

logger = logging.getLogger(__name__)

# Enable HD wallet features
Account.enable_unaudited_hdwallet_features()


# ============================================
# Constants
# ============================================

# BIP-44 derivation path for Ethereum
ETH_DERIVATION_PATH = "m/44'/60'/0'/0/{}"
DEFAULT_DERIVATION_PATH = ETH_DERIVATION_PATH.format(0)

VALID_WORD_COUNTS = (12, 15, 18, 21, 24)


# ============================================
# Data Classes
# ============================================

@dataclass(frozen=True)
class AddressValidation:
    """Result of validating an address."""
    is_valid: bool
    normalized: Optional[str] = None  # EIP-55 checksum form when valid


@dataclass(frozen=True)
class AddressInfo:
    """Address and public key for a private key."""
    address: str
    public_key: str


@dataclass(frozen=True)
class GeneratedWallet:
    """A derived key pair. Contains secrets - handle with care."""
    address: str
    public_key: str
    private_key: str
    mnemonic: Optional[str] = None
    derivation_path: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    def __repr__(self) -> str:
        return f"GeneratedWallet(address={self.address!r}, derivation_path={self.derivation_path!r})"


# ============================================
# Keys
# ============================================

def _normalize_private_key(private_key: str | bytes) -> bytes:
    """Accept a hex key with or without 0x prefix, or raw bytes."""
    if isinstance(private_key, bytes):
        key_bytes = private_key
    else:
        hex_key = private_key[2:] if private_key.startswith("0x") else private_key
        try:
            key_bytes = bytes.fromhex(hex_key)
        except ValueError as e:
            raise ValueError("Private key must be hex encoded") from e
    if len(key_bytes) != 32:
        raise ValueError("Private key must be 32 bytes")
    return key_bytes


def generate_mnemonic(num_words: int = 12) -> str:
    """
    Generate a fresh BIP-39 seed phrase.

    Args:
        num_words: 12, 15, 18, 21 or 24

    Returns:
        Space separated english seed phrase
    """
    if num_words not in VALID_WORD_COUNTS:
        raise ValueError(f"num_words must be one of {VALID_WORD_COUNTS}")
    return _generate_mnemonic(num_words=num_words, lang=Language.ENGLISH)


def derive_private_key(mnemonic: str, path: str = DEFAULT_DERIVATION_PATH) -> str:
    """
    Derive the private key at a BIP-44 path.

    Args:
        mnemonic: BIP-39 seed phrase
        path: Derivation path (e.g., "m/44'/60'/0'/0/0")

    Returns:
        Hex-encoded private key with 0x prefix
    """
    if not Mnemonic("english").check(mnemonic):
        raise ValueError("Invalid seed phrase")

    seed = seed_from_mnemonic(mnemonic, passphrase="")
    return "0x" + key_from_seed(seed, path).hex()


def new_address(private_key: str | bytes) -> AddressInfo:
    """Compute the checksum address and uncompressed public key of a key."""
    key = keys.PrivateKey(_normalize_private_key(private_key))
    return AddressInfo(
        address=key.public_key.to_checksum_address(),
        public_key=key.public_key.to_hex(),
    )


def address_from_key(private_key: str | bytes) -> str:
    return Account.from_key(_normalize_private_key(private_key)).address


def generate_wallet(mnemonic: Optional[str] = None, derivation_path: Optional[str] = None) -> GeneratedWallet:
    """
    Derive a wallet from a seed phrase, generating one if none is given.

    Args:
        mnemonic: Existing seed phrase, or None for a new 12-word phrase
        derivation_path: BIP-44 path, defaults to the first Ethereum account
    """
    path = derivation_path or DEFAULT_DERIVATION_PATH
    phrase = mnemonic if mnemonic is not None else generate_mnemonic(12)

    private_key = derive_private_key(phrase, path)
    info = new_address(private_key)

    return GeneratedWallet(
        address=info.address,
        public_key=info.public_key,
        private_key=private_key,
        mnemonic=phrase,
        derivation_path=path,
    )


# ============================================
# Addresses
# ============================================

def validate_address(address: str) -> AddressValidation:
    """
    Validate an EVM address.

    All-lowercase and all-uppercase hex are accepted and normalized;
    mixed case must match the EIP-55 checksum.
    """
    if not isinstance(address, str) or not Web3.is_address(address):
        return AddressValidation(is_valid=False)

    hex_part = address[2:] if address[:2].lower() == "0x" else address
    mixed_case = hex_part != hex_part.lower() and hex_part != hex_part.upper()
    if mixed_case and not is_checksum_address(address):
        return AddressValidation(is_valid=False)

    return AddressValidation(is_valid=True, normalized=Web3.to_checksum_address(address))


# ============================================
# Signing
# ============================================

def sign_transaction(private_key: str | bytes, tx: SignableTransaction) -> bytes:
    """
    Sign a fully resolved transaction.

    Returns:
        Raw signed transaction bytes, ready for eth_sendRawTransaction

    Raises:
        SigningFailed: If the key or the transaction fields are rejected
    """
    try:
        key_bytes = _normalize_private_key(private_key)
        signed = Account.sign_transaction(tx.to_tx_dict(), key_bytes)
    except (ValueError, TypeError, ValidationError) as e:
        # Never include the key in the message
        raise SigningFailed(f"Failed to sign transaction: {e}", stage=STAGE_SIGNED) from e

    logger.debug(f"Signed {tx.tx_type} transaction nonce={tx.nonce} chain={tx.chain_id}")
    return bytes(signed.raw_transaction)
