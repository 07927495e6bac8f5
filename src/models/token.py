"""
Balance and token metadata models.
"""

from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Balance:
    """A token or native balance."""
    symbol: str
    raw: int             # Raw balance in smallest unit
    decimals: int
    formatted: Decimal   # Human-readable balance
    contract_address: Optional[str] = None  # None for the native coin

    def to_dict(self) -> dict:
        data = asdict(self)
        data["formatted"] = str(self.formatted)
        return data


@dataclass(frozen=True)
class TokenInfo:
    """ERC-20 token metadata."""
    name: str
    symbol: str
    decimals: int
    total_supply: Decimal  # In display units
    address: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["total_supply"] = str(self.total_supply)
        return data
