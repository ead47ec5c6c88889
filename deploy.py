"""
Deploy and verify the confidential counter.

    python deploy.py deploy --network sepolia --info contract-info.json
    python deploy.py verify --info contract-info.json

`deploy` writes {contractAddress, network, chainId, deployedAt, owner} to the
info file; that file is what clients read at startup to find the contract.
`verify` checks the recorded chain id against the named network and the
recorded owner against the contract.
"""

from __future__ import annotations

import argparse
import hashlib
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from contracting.client import ContractingClient
from contracting.compilation import whitelists

from client_helper import CounterError
from network_config import NetworkConfig, ensure_chain, load_network

log = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent
CONTRACT_FILE = "con_confidential_counter.py"
CONTRACT_NAME = "con_confidential_counter"
DEFAULT_INFO_PATH = PROJECT_ROOT / "contract-info.json"

# where pyproject's data-files puts the contract source in a non-editable install
SHARE_DIR = Path(sys.prefix) / "share" / "confidential-xian-counter"

REQUIRED_KEYS = ("contractAddress", "network", "deployedAt", "owner")


class DeploymentError(CounterError):
    """Deployment or verification did not produce the expected contract."""


def contract_path() -> Path:
    for candidate in (PROJECT_ROOT / CONTRACT_FILE, SHARE_DIR / CONTRACT_FILE):
        if candidate.is_file():
            return candidate
    raise DeploymentError(f"{CONTRACT_FILE} not found next to {__file__} or in {SHARE_DIR}")


def enable_contract_builtins():
    """
    The contract calls hashlib.sha3 on strings; whitelist hashlib and provide
    sha3 where the interpreter's hashlib has none.
    """
    whitelists.ALLOWED_BUILTINS.update({"hashlib"})

    if not hasattr(hashlib, "sha3"):
        def _sha3(data):
            if isinstance(data, str):
                data = data.encode("utf-8")
            return hashlib.sha3_256(data).hexdigest()

        setattr(hashlib, "sha3", _sha3)


def open_client(signer: str) -> ContractingClient:
    enable_contract_builtins()
    return ContractingClient(signer=signer, metering=False)


def write_contract_info(info: Dict[str, Any], path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(info, indent=2) + "\n")
    return path


def load_contract_info(path) -> Dict[str, Any]:
    path = Path(path)
    try:
        info = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(info, dict):
        raise ValueError(f"{path} must contain a JSON object")
    missing = [k for k in REQUIRED_KEYS if not info.get(k)]
    if missing:
        raise ValueError(f"{path} is missing {', '.join(missing)}")
    return info


def deploy(client: ContractingClient,
           network: NetworkConfig,
           name: str = CONTRACT_NAME,
           info_path=None) -> Dict[str, Any]:
    log.info("Deploying %s to %s (chain %d) as %s", name, network.name, network.chain_id, client.signer)

    client.submit(contract_path().read_text(), name=name, owner=None)
    contract = client.get_contract(name)
    if contract is None:
        raise DeploymentError(f"{name} was not found after submission")

    info = {
        'contractAddress': name,
        'network': network.name,
        'chainId': network.chain_id,
        'deployedAt': datetime.now(timezone.utc).isoformat(),
        'owner': contract.get_owner(),
    }
    log.info("Deployed %s owned by %s, public total %s",
             name, info['owner'], contract.get_public_total())

    if info_path is not None:
        write_contract_info(info, info_path)
        log.info("Contract info saved to %s", info_path)
    return info


def verify(client: ContractingClient, info: Dict[str, Any]):
    ensure_chain(info.get('chainId'), load_network(info['network']))

    name = info['contractAddress']
    contract = client.get_contract(name)
    if contract is None:
        raise DeploymentError(f"No contract deployed at {name}")

    owner = contract.get_owner()
    if owner != info['owner']:
        raise DeploymentError(f"Owner mismatch for {name}: chain has {owner}, info has {info['owner']}")
    log.info("Verified %s (owner %s)", name, owner)
    return contract


# ------------------------------- CLI ----------------------------------------


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Confidential counter • deploy / verify")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    d = sub.add_parser("deploy", help="submit the contract and write the info file")
    d.add_argument("--network", default=None, help="network name (default: $COUNTER_NETWORK or sepolia)")
    d.add_argument("--name", default=CONTRACT_NAME, help="contract name (default: %(default)s)")
    d.add_argument("--signer", default=None, help="deployer account (default: the network's configured signer)")
    d.add_argument("--info", default=str(DEFAULT_INFO_PATH), help="info file (default: %(default)s)")

    v = sub.add_parser("verify", help="check the deployed contract against the info file")
    v.add_argument("--info", default=str(DEFAULT_INFO_PATH), help="info file (default: %(default)s)")
    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None, client: Optional[ContractingClient] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "deploy":
            network = load_network(args.network)
            if client is None:
                client = open_client(args.signer or network.signer)
            info = deploy(client, network, name=args.name, info_path=args.info)
            print(json.dumps(info, indent=2))
        else:
            info = load_contract_info(args.info)
            if client is None:
                client = open_client(load_network(info['network']).signer)
            verify(client, info)
            print(f"verified {info['contractAddress']}")
    except (CounterError, ValueError, OSError) as e:
        log.error("%s failed: %s", args.command, e)
        return 1
    except AssertionError as e:
        log.error("%s reverted: %s", args.command, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
