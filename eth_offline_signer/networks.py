"""Static directory of known networks and their block explorers."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional

from .config import DEFAULT_ANVIL_RPC_URL

ANVIL_CHAIN_ID = 31337


@dataclass(frozen=True)
class NetworkConfig:
    """Display name and explorer for a chain id."""

    chain_id: int
    name: str
    explorer_base_url: Optional[str] = None
    builtin: bool = True

    def transaction_url(self, tx_hash: str) -> Optional[str]:
        if not self.explorer_base_url:
            return None
        return f"{self.explorer_base_url.rstrip('/')}/tx/{tx_hash}"


BUILTIN_NETWORK_CONFIGS: Mapping[int, NetworkConfig] = {
    11155111: NetworkConfig(
        chain_id=11155111,
        name="Sepolia Testnet",
        explorer_base_url="https://sepolia.etherscan.io",
    ),
    560048: NetworkConfig(
        chain_id=560048,
        name="Hoodi Testnet",
        explorer_base_url="https://hoodi.etherscan.io",
    ),
}

NetworkConfigOverrides = Mapping[int, Mapping[str, Any]]


def is_builtin_chain_id(chain_id: int) -> bool:
    return chain_id in BUILTIN_NETWORK_CONFIGS


def _anvil_config(env: Mapping[str, str]) -> NetworkConfig:
    rpc_url = env.get("ANVIL_RPC_URL") or DEFAULT_ANVIL_RPC_URL
    # A local node has no explorer; its RPC endpoint stands in for one.
    return NetworkConfig(
        chain_id=ANVIL_CHAIN_ID,
        name="Anvil Local Network",
        explorer_base_url=rpc_url,
        builtin=False,
    )


def get_network_config(
    chain_id: int,
    overrides: NetworkConfigOverrides | None = None,
    env: Mapping[str, str] | None = None,
) -> NetworkConfig:
    """Resolve the :class:`NetworkConfig` for ``chain_id``.

    Args:
        chain_id: Positive EVM chain identifier.
        overrides: Optional per-chain field overrides (``name``,
            ``explorer_base_url``) layered over the built-in entry.
        env: Mapping used to resolve ``ANVIL_RPC_URL``; defaults to
            ``os.environ``.

    Returns:
        The built-in entry, the local Anvil entry, or a custom entry with no
        explorer for unknown chains.

    Raises:
        ValueError: If ``chain_id`` is not a positive integer.
    """

    if not isinstance(chain_id, int) or isinstance(chain_id, bool) or chain_id <= 0:
        raise ValueError(f"Invalid chain id: {chain_id!r}")

    if env is None:
        env = os.environ

    if is_builtin_chain_id(chain_id):
        config = BUILTIN_NETWORK_CONFIGS[chain_id]
    elif chain_id == ANVIL_CHAIN_ID:
        config = _anvil_config(env)
    else:
        config = NetworkConfig(chain_id=chain_id, name=f"Custom Network ({chain_id})", builtin=False)

    if overrides and chain_id in overrides:
        fields: Dict[str, Any] = {
            key: value
            for key, value in overrides[chain_id].items()
            if key in ("name", "explorer_base_url")
        }
        config = replace(config, **fields)
    return config


def explorer_tx_url(chain_id: int, tx_hash: str, overrides: NetworkConfigOverrides | None = None) -> Optional[str]:
    return get_network_config(chain_id, overrides).transaction_url(tx_hash)


def get_display_network_info(chain_id: int) -> Dict[str, str]:
    """Return ``name``, ``explorer`` and ``type`` (``builtin``/``custom``) for display."""

    config = get_network_config(chain_id)
    return {
        "name": config.name,
        "explorer": config.explorer_base_url or "n/a",
        "type": "builtin" if config.builtin else "custom",
    }


__all__ = [
    "ANVIL_CHAIN_ID",
    "BUILTIN_NETWORK_CONFIGS",
    "NetworkConfig",
    "NetworkConfigOverrides",
    "explorer_tx_url",
    "get_display_network_info",
    "get_network_config",
    "is_builtin_chain_id",
]
