import importlib
import json
import os
from pathlib import Path
from typing import Dict, Iterator, List, Set

import yaml
from ape import networks, project
from ape.contracts import ContractContainer, ContractInstance

from deployment.constants import (
    ARTIFACTS_DIR,
    CONSTRUCTOR_PARAMS_DIR,
    ETHERSCAN_API_KEY_ENVVAR,
    INFURA_PROVIDER_NAME,
)
from deployment.networks import is_local_network

INFURA_API_KEY_ENVVARS = ("WEB3_INFURA_PROJECT_ID", "WEB3_INFURA_API_KEY")


def _load_yaml(filepath: Path) -> dict:
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def _load_json(filepath: Path) -> dict:
    with open(filepath, "r") as file:
        return json.load(file)


def params_filepath_from_domain(domain: str) -> Path:
    """Returns the YAML params file of a Beldex domain (local, sepolia, mainnet)."""
    filepath = CONSTRUCTOR_PARAMS_DIR / "beldex" / f"{domain}.yml"
    if not filepath.exists():
        raise ValueError(f"No params file found for domain '{domain}'")
    return filepath


def get_artifact_filepath(config: Dict) -> Path:
    """Returns where the registry of this deployment is written."""
    artifacts = config.get("artifacts", {})
    filename = artifacts.get("filename")
    if not filename:
        raise ValueError("artifact filename is not set in params file.")
    return Path(artifacts.get("dir", ARTIFACTS_DIR)) / filename


def _config_chain_id(config: Dict) -> int:
    deployment = config.get("deployment")
    if not deployment:
        raise ValueError("deployment is not set in params file.")
    if not deployment.get("chain_id"):
        raise ValueError("chain_id is not set in params file.")
    return int(deployment["chain_id"])


def _published_chain_ids(registry_filepath: Path) -> Set[int]:
    if not registry_filepath.exists():
        return set()
    return {int(chain_id) for chain_id in _load_json(registry_filepath)}


def validate_config(config: Dict, chain_id: int, live_deployment: bool) -> Path:
    """
    Validates a Beldex params file against the connected chain and returns the
    registry filepath. A live deployment must target the connected chain id, and
    no deployment may already be published for the configured chain id.
    """
    print("Validating parameters YAML...")
    config_chain_id = _config_chain_id(config)
    if live_deployment and config_chain_id != chain_id:
        raise ValueError(
            f"chain_id in params file ({config_chain_id}) does not match "
            f"chain_id of current network ({chain_id})."
        )

    registry_filepath = get_artifact_filepath(config=config)
    if config_chain_id in _published_chain_ids(registry_filepath):
        raise ValueError(f"Deployment is already published for chain_id {config_chain_id}.")
    return registry_filepath


def _require_plugin(module_name: str, plugin_name: str) -> None:
    try:
        importlib.import_module(module_name)
    except ImportError:
        raise ImportError(f"Please install the {plugin_name} plugin to use this script.")


def _require_envvar(*envvars: str) -> None:
    if not any(os.environ.get(envvar) for envvar in envvars):
        raise ValueError(f"{' or '.join(envvars)} is not set.")


def check_plugins() -> None:
    """
    Live deployments need ape-etherscan with an API key; deployments through
    the infura provider also need ape-infura with an API key.
    """
    print("Checking plugins...")
    if is_local_network():
        return

    _require_plugin("ape_etherscan", "ape-etherscan")
    _require_envvar(ETHERSCAN_API_KEY_ENVVAR)
    if networks.provider.name == INFURA_PROVIDER_NAME:
        _require_plugin("ape_infura", "ape-infura")
        _require_envvar(*INFURA_API_KEY_ENVVARS)


def verify_contracts(contracts: List[ContractInstance]) -> None:
    explorer = networks.provider.network.explorer
    if explorer is None:
        raise ValueError(f"No block explorer available for {networks.provider.network.name}.")
    for instance in contracts:
        print(f"(i) Verifying {instance.contract_type.name} at {instance.address}...")
        explorer.publish_contract(instance.address)


def _artifact_sources() -> Iterator:
    yield project
    for dependency_name, versions in project.dependencies.items():
        if len(versions) > 1:
            raise ValueError(f"Ambiguous {dependency_name} dependency.")
        yield from versions.values()


def get_contract_container(contract_name: str) -> ContractContainer:
    """Looks up a compiled artifact in the project, then in its dependencies."""
    for source in _artifact_sources():
        container = getattr(source, contract_name, None)
        if container is not None:
            return container
    raise ValueError(f"No contract found with name '{contract_name}'.")
