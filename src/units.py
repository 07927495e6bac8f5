"""
Units - Decimal <-> base unit conversion.

Human amounts ("0.1" USDC, "1.5" ETH) are converted to the integer smallest
denomination of a token or chain and back. All math goes through Decimal so
wei-scale values never touch floating point.
"""

from decimal import Decimal, InvalidOperation, Overflow, ROUND_HALF_UP, localcontext
from typing import Union

from web3 import Web3

from models.errors import InvalidAmount


AmountLike = Union[str, int, float, Decimal]

# Enough digits for uint256 values scaled by any realistic decimals count
_PRECISION = 120

ETHER_DECIMALS = 18
GWEI_DECIMALS = 9
WEI_DECIMALS = 0

# Largest value an EVM word holds
MAX_UINT256 = 2**256 - 1


def to_decimal(amount: AmountLike) -> Decimal:
    """Parse an amount into a finite, non-negative Decimal."""
    if isinstance(amount, bool):
        raise InvalidAmount(f"Invalid amount: {amount!r}")
    try:
        if isinstance(amount, float):
            # str() keeps the shortest repr, so 0.1 stays 0.1
            value = Decimal(str(amount))
        elif isinstance(amount, (int, Decimal)):
            value = Decimal(amount)
        elif isinstance(amount, str):
            value = Decimal(amount.strip())
        else:
            raise InvalidAmount(f"Invalid amount type: {type(amount).__name__}")
    except InvalidOperation as e:
        raise InvalidAmount(f"Invalid amount: {amount!r}") from e

    if not value.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {amount!r}")
    if value < 0:
        raise InvalidAmount(f"Amount must be non-negative, got {amount!r}")
    return value


def to_base_units(amount: AmountLike, decimals: int) -> int:
    """
    Convert a human-readable amount to its integer base units.

    ex: to_base_units("0.1", 6) -> 100000

    Args:
        amount: Decimal string or number
        decimals: Token or chain decimals count

    Returns:
        Amount in the smallest denomination, rounded half-up

    Raises:
        InvalidAmount: If amount is not a finite non-negative number, or
            does not fit in a uint256 once scaled
    """
    if decimals < 0:
        raise InvalidAmount(f"decimals must be non-negative, got {decimals}")

    value = to_decimal(amount)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        try:
            raw = int(value.scaleb(decimals).quantize(Decimal(1), rounding=ROUND_HALF_UP))
        except (InvalidOperation, Overflow) as e:
            raise InvalidAmount(f"Amount out of range: {amount!r}") from e

    if raw > MAX_UINT256:
        raise InvalidAmount(f"Amount exceeds uint256 at {decimals} decimals: {amount!r}")
    return raw


def to_display_units(raw: int, decimals: int) -> Decimal:
    """
    Convert integer base units back to a human-readable Decimal.

    ex: to_display_units(100000, 6) -> Decimal("0.100000")
    """
    if decimals < 0:
        raise InvalidAmount(f"decimals must be non-negative, got {decimals}")
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(int(raw)).scaleb(-decimals)


# ============================================
# EVM shortcuts (named units go through web3)
# ============================================

def _parse_unit(amount: AmountLike, unit: str, decimals: int) -> int:
    """Round half-up to the unit's precision, then let web3 scale to wei."""
    value = to_decimal(amount)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        try:
            value = value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
        except (InvalidOperation, Overflow) as e:
            raise InvalidAmount(f"Amount out of range: {amount!r}") from e
    try:
        return int(Web3.to_wei(value, unit))
    except ValueError as e:
        raise InvalidAmount(f"Amount out of range: {amount!r}") from e


def _format_unit(raw: int, unit: str) -> Decimal:
    try:
        return Decimal(Web3.from_wei(int(raw), unit))
    except ValueError as e:
        raise InvalidAmount(f"Wei value out of range: {raw!r}") from e


def parse_ether(amount: AmountLike) -> int:
    return _parse_unit(amount, "ether", ETHER_DECIMALS)


def format_ether(raw: int) -> Decimal:
    return _format_unit(raw, "ether")


def parse_gwei(amount: AmountLike) -> int:
    return _parse_unit(amount, "gwei", GWEI_DECIMALS)


def format_gwei(raw: int) -> Decimal:
    return _format_unit(raw, "gwei")


def parse_wei(amount: AmountLike) -> int:
    return _parse_unit(amount, "wei", WEI_DECIMALS)


def format_wei(raw: int) -> Decimal:
    return _format_unit(raw, "wei")
