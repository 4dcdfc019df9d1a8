import json
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, NamedTuple

from ape.contracts import ContractInstance
from eth_typing import ABI, ChecksumAddress
from eth_utils import to_checksum_address

from deployment.utils import _load_json

ChainId = int
ContractName = str

REGISTRY_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}


class RegistryEntry(NamedTuple):
    """A deployed Beldex contract as recorded in the registry artifact."""

    chain_id: ChainId
    name: ContractName
    address: ChecksumAddress
    abi: ABI
    tx_hash: str
    block_number: int
    deployer: str

    @classmethod
    def from_instance(cls, instance: ContractInstance) -> "RegistryEntry":
        receipt = instance.receipt
        contract_type = instance.contract_type
        return cls(
            chain_id=receipt.chain_id,
            name=contract_type.name,
            address=to_checksum_address(instance.address),
            abi=[item.model_dump(mode="json", by_alias=True) for item in contract_type.abi],
            tx_hash=receipt.txn_hash,
            block_number=receipt.block_number,
            deployer=receipt.transaction.sender,
        )

    @classmethod
    def from_json(cls, chain_id: str, name: ContractName, data: Dict) -> "RegistryEntry":
        return cls(chain_id=int(chain_id), name=name, **data)

    def to_json(self) -> Dict:
        return {
            "address": self.address,
            "abi": sorted(self.abi, key=lambda item: (item["type"], item.get("name", ""))),
            "tx_hash": self.tx_hash,
            "block_number": int(self.block_number),
            "deployer": self.deployer,
        }


def read_registry(filepath: Path) -> List[RegistryEntry]:
    return [
        RegistryEntry.from_json(chain_id, name, data)
        for chain_id, contracts in _load_json(filepath).items()
        for name, data in contracts.items()
    ]


def write_registry(entries: List[RegistryEntry], filepath: Path) -> Path:
    """
    Writes the entries grouped by chain id, then contract name. An existing registry
    only gains chain ids it does not hold yet; overlapping data is written next to it
    as '<name>.unmerged.json' so that published deployments are never overwritten.
    """
    if not entries:
        print("No entries provided.")
        return filepath

    chains = defaultdict(dict)
    for entry in sorted(entries, key=lambda e: (str(e.chain_id), e.name)):
        chains[str(entry.chain_id)][entry.name] = entry.to_json()

    registry = dict()
    if filepath.exists():
        registry = _load_json(filepath)
        if registry.keys() & chains.keys():
            filepath = filepath.with_suffix(".unmerged.json")
            print(f"Chain IDs already in the registry; writing to {filepath} instead.")
            registry = dict()
    registry.update(chains)

    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w") as file:
        json.dump(registry, file, **REGISTRY_JSON_FORMAT)
    return filepath


def registry_from_ape_deployments(
    deployments: List[ContractInstance], output_filepath: Path
) -> Path:
    entries = [RegistryEntry.from_instance(instance) for instance in deployments]
    output_filepath = write_registry(entries=entries, filepath=output_filepath)
    print(f"(i) Registry written to {output_filepath}!")
    return output_filepath
