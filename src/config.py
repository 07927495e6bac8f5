"""
Configuration - Wallet settings and RPC endpoint resolution.

RPC URL precedence for a call:
1. Explicit rpc_url argument
2. WalletConfig.rpc_url
3. custom_rpcs[chain_id] from settings.json
4. Network registry default
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from networks import get_network, get_network_by_name
from utils import get_settings_path

logger = logging.getLogger(__name__)

# Default RPC request timeout (seconds)
DEFAULT_TIMEOUT = 30


@dataclass
class WalletConfig:
    """Per-wallet configuration."""
    chain_id: Optional[int] = None
    rpc_url: Optional[str] = None
    timeout: int = DEFAULT_TIMEOUT
    custom_rpcs: dict[int, str] = field(default_factory=dict)  # chain_id -> RPC URL

    @classmethod
    def from_settings(
        cls,
        chain_id: Optional[int] = None,
        rpc_url: Optional[str] = None,
        settings_path: Optional[Path] = None,
    ) -> "WalletConfig":
        """Build a config, picking up timeout and custom RPCs from settings.json."""
        settings = load_settings(settings_path)
        custom_rpcs = settings.get("custom_rpcs", {})
        # JSON keys are strings, convert back to int
        custom_rpcs = {int(k): v for k, v in custom_rpcs.items()} if custom_rpcs else {}

        if chain_id is None:
            chain_id = settings.get("chain_id")
        if chain_id is None and settings.get("network"):
            # Network name, e.g. "base-sepolia"
            network = get_network_by_name(settings["network"])
            chain_id = network.chain_id if network else None

        return cls(
            chain_id=chain_id,
            rpc_url=rpc_url,
            timeout=int(settings.get("timeout", DEFAULT_TIMEOUT)),
            custom_rpcs=custom_rpcs,
        )

    def resolve_rpc_url(self, rpc_url: Optional[str] = None) -> Optional[str]:
        """Pick the RPC URL for a call, or None if nothing is configured."""
        if rpc_url:
            return rpc_url
        if self.rpc_url:
            return self.rpc_url
        if self.chain_id is None:
            return None
        if self.chain_id in self.custom_rpcs:
            return self.custom_rpcs[self.chain_id]
        network = get_network(self.chain_id)
        return network.rpc_url if network else None


def load_settings(settings_path: Optional[Path] = None) -> dict:
    """Load settings from disk."""
    settings_path = settings_path or get_settings_path()
    if settings_path.exists():
        try:
            with open(settings_path, 'r') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load settings: {e}")
    return {}


def save_settings(settings: dict, settings_path: Optional[Path] = None) -> None:
    """Save settings to disk."""
    settings_path = settings_path or get_settings_path()
    with open(settings_path, 'w') as f:
        json.dump(settings, f, indent=2)
