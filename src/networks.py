"""
Networks - Chain configurations and the default ERC-20 ABI.

Supports Ethereum, Base, SKALE Base, Polygon and BNB Smart Chain, mainnets
and testnets. Entries only provide defaults: the RPC URL can always be
overridden per call or through settings.
"""

from dataclasses import dataclass
from typing import Optional

# ============================================
# Network Configurations
# ============================================

@dataclass(frozen=True)
class NetworkConfig:
    """Configuration for a blockchain network."""
    chain_id: int
    name: str
    display_name: str
    rpc_url: str
    explorer_url: str
    is_testnet: bool
    native_symbol: str
    native_decimals: int = 18


NETWORKS = {
    # Ethereum Mainnet
    1: NetworkConfig(
        chain_id=1,
        name="ethereum",
        display_name="Ethereum",
        rpc_url="https://ethereum-rpc.publicnode.com",
        explorer_url="https://etherscan.io",
        is_testnet=False,
        native_symbol="ETH",
    ),
    # Ethereum Sepolia Testnet
    11155111: NetworkConfig(
        chain_id=11155111,
        name="sepolia",
        display_name="Ethereum Sepolia",
        rpc_url="https://ethereum-sepolia-rpc.publicnode.com",
        explorer_url="https://sepolia.etherscan.io",
        is_testnet=True,
        native_symbol="ETH",
    ),
    # Base Mainnet
    8453: NetworkConfig(
        chain_id=8453,
        name="base",
        display_name="Base",
        rpc_url="https://base.publicnode.com",  # PublicNode - generous rate limits
        explorer_url="https://basescan.org",
        is_testnet=False,
        native_symbol="ETH",
    ),
    # Base Sepolia Testnet
    84532: NetworkConfig(
        chain_id=84532,
        name="base-sepolia",
        display_name="Base Sepolia",
        rpc_url="https://sepolia.base.org",
        explorer_url="https://sepolia.basescan.org",
        is_testnet=True,
        native_symbol="ETH",
    ),
    # SKALE Base Mainnet (legacy gas pricing)
    1187947933: NetworkConfig(
        chain_id=1187947933,
        name="skale-base",
        display_name="SKALE Base",
        rpc_url="https://skale-base.skalenodes.com/v1/base",
        explorer_url="https://skale-base-explorer.skalenodes.com",
        is_testnet=False,
        native_symbol="CREDIT",
    ),
    # Polygon PoS
    137: NetworkConfig(
        chain_id=137,
        name="polygon",
        display_name="Polygon",
        rpc_url="https://polygon-bor-rpc.publicnode.com",
        explorer_url="https://polygonscan.com",
        is_testnet=False,
        native_symbol="POL",
    ),
    # BNB Smart Chain
    56: NetworkConfig(
        chain_id=56,
        name="bsc",
        display_name="BNB Smart Chain",
        rpc_url="https://bsc-rpc.publicnode.com",
        explorer_url="https://bscscan.com",
        is_testnet=False,
        native_symbol="BNB",
    ),
}


# ============================================
# ERC-20 ABI
# ============================================

# Minimal ERC-20 ABI: metadata, balances and transfer
ERC20_ABI = [
    {
        "constant": True,
        "inputs": [],
        "name": "name",
        "outputs": [{"name": "", "type": "string"}],
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [],
        "name": "totalSupply",
        "outputs": [{"name": "", "type": "uint256"}],
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "type": "function"
    },
    {
        "constant": False,
        "inputs": [
            {"name": "_to", "type": "address"},
            {"name": "_value", "type": "uint256"}
        ],
        "name": "transfer",
        "outputs": [{"name": "", "type": "bool"}],
        "payable": False,
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "constant": False,
        "inputs": [
            {"name": "_spender", "type": "address"},
            {"name": "_value", "type": "uint256"}
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "payable": False,
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [
            {"name": "_owner", "type": "address"},
            {"name": "_spender", "type": "address"}
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "type": "function"
    },
]


# ============================================
# Utility Functions
# ============================================

def get_network(chain_id: int) -> Optional[NetworkConfig]:
    """Get network config by chain ID."""
    return NETWORKS.get(chain_id)


def get_network_by_name(name: str) -> Optional[NetworkConfig]:
    """Get network config by name."""
    for network in NETWORKS.values():
        if network.name == name:
            return network
    return None


def native_decimals(chain_id: Optional[int]) -> int:
    """Native coin decimals for a chain (18 for unknown chains)."""
    network = NETWORKS.get(chain_id) if chain_id is not None else None
    return network.native_decimals if network else 18


def native_symbol(chain_id: Optional[int]) -> str:
    network = NETWORKS.get(chain_id) if chain_id is not None else None
    return network.native_symbol if network else "ETH"


def format_address(address: str, chars: int = 4) -> str:
    """Format address as 0x1234...5678"""
    if len(address) <= chars * 2 + 2:
        return address
    return f"{address[:chars+2]}...{address[-chars:]}"
