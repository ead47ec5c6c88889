"""
Network configuration for deploying and talking to the counter.

Environment variables (all optional):

  COUNTER_NETWORK=sepolia            # default network name
  COUNTER_SIGNER=sys                 # default deployer account
  SEPOLIA_SIGNER=...                 # <NAME>_SIGNER overrides the account per network
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Dict, Optional, Union

from client_helper import NetworkError

DEFAULT_NETWORK = "sepolia"
DEFAULT_SIGNER = "sys"


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    chain_id: int
    signer: str = DEFAULT_SIGNER

    @property
    def chain_id_hex(self) -> str:
        return hex(self.chain_id)


NETWORKS: Dict[str, NetworkConfig] = {
    "sepolia": NetworkConfig("sepolia", 11155111),
    "fhenix": NetworkConfig("fhenix", 42069),
    "localhost": NetworkConfig("localhost", 31337),
}


def _getenv(key: str, default: str | None = None) -> str | None:
    v = os.environ.get(key)
    return v if v is not None and v.strip() != "" else default


def load_network(name: Optional[str] = None) -> NetworkConfig:
    """
    Resolve a named network and apply environment overrides.

    The per-network <NAME>_SIGNER wins over COUNTER_SIGNER.
    """
    name = (name or _getenv("COUNTER_NETWORK", DEFAULT_NETWORK)).strip().lower()
    try:
        base = NETWORKS[name]
    except KeyError:
        raise ValueError(f"Unknown network {name!r} (known: {', '.join(sorted(NETWORKS))})") from None

    signer = _getenv(f"{name.upper()}_SIGNER", _getenv("COUNTER_SIGNER", base.signer))
    return replace(base, signer=signer)


def _parse_chain_id(chain_id: Union[int, str]) -> int:
    if isinstance(chain_id, int):
        return chain_id
    v = chain_id.strip().lower()
    try:
        return int(v, 16) if v.startswith("0x") else int(v, 10)
    except ValueError as e:
        raise NetworkError(f"Invalid chain id: {chain_id!r}") from e


def ensure_chain(chain_id: Union[int, str, None], network: NetworkConfig) -> int:
    """Raise NetworkError unless the connected chain matches the target network."""
    if chain_id is None:
        raise NetworkError("No chain id reported")
    connected = _parse_chain_id(chain_id)
    if connected != network.chain_id:
        raise NetworkError(
            f"Connected to chain {connected}, expected {network.name} ({network.chain_id})"
        )
    return connected
