import asyncio
import typing
from pathlib import Path
from typing import Any, Callable, List, Sequence

from ape import networks
from ape.api import AccountAPI
from ape.cli.choices import select_account
from ape.contracts.base import ContractContainer, ContractInstance
from eth_utils import is_address
from web3.auto import w3

from deployment.confirm import _confirm_resolution, _continue
from deployment.networks import is_local_network
from deployment.registry import registry_from_ape_deployments
from deployment.utils import (
    _load_yaml,
    check_plugins,
    get_contract_container,
    validate_config,
    verify_contracts,
)

INTEGER_ABI_TYPE_PREFIXES = ("uint", "int")


class ConstructorArguments:
    class Invalid(Exception):
        """Raised when the constructor arguments do not match the constructor ABI"""


def _is_encodable(abi_type: str, value: Any) -> bool:
    """
    Returns True if the value can be encoded as the given ABI type.
    Decimal strings for integer types are checked through an exact int conversion.
    """
    if abi_type == "address":
        return is_address(value)
    if abi_type.startswith(INTEGER_ABI_TYPE_PREFIXES) and isinstance(value, str):
        if not value.isdecimal():
            return False
        value = int(value)
    try:
        return w3.is_encodable(abi_type, value)
    except (AttributeError, TypeError, ValueError):
        return False


def _validate_constructor_abi_inputs(
    contract_name: str,
    abi_inputs: List[Any],
    resolved_args: Sequence[Any],
) -> None:
    """Validates the constructor arguments against the constructor ABI."""
    if len(resolved_args) != len(abi_inputs):
        raise ConstructorArguments.Invalid(
            f"Constructor arguments length mismatch - "
            f"{contract_name} ABI requires {len(abi_inputs)}, Got {len(resolved_args)}."
        )

    for position, (abi_input, value) in enumerate(zip(abi_inputs, resolved_args)):
        if not _is_encodable(abi_input.type, value):
            raise ConstructorArguments.Invalid(
                f"{contract_name} constructor param '{abi_input.name}' at position {position} "
                f"has a value '{value}' whose type does not match expected ABI type "
                f"'{abi_input.type}'"
            )


class Deployer:
    """
    Represents an ape account plus a Beldex deployment configuration,
    plus validated/annotated execution.
    """

    def __init__(
        self,
        config: typing.Dict,
        path: Path,
        verify: bool,
        account: typing.Optional[AccountAPI] = None,
        autosign: bool = False,
    ):
        if account is None:
            self._account = select_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        self._account.set_autosign(autosign)

        check_plugins()
        self.path = path
        self.config = config
        self.registry_filepath = validate_config(
            config=self.config,
            chain_id=networks.provider.network.chain_id,
            live_deployment=not is_local_network(),
        )
        self.verify = verify
        self._print_deployment_info()

        if not self._autosign:
            # Confirms the start of the deployment.
            _continue()

    @classmethod
    def from_yaml(cls, filepath: Path, *args, **kwargs) -> "Deployer":
        config = _load_yaml(filepath)
        return cls(config=config, path=filepath, *args, **kwargs)

    def get_account(self) -> AccountAPI:
        """Returns the deployer account."""
        return self._account

    def deploy(self, container: ContractContainer, *args) -> ContractInstance:
        contract_name = container.contract_type.name
        _validate_constructor_abi_inputs(
            contract_name=contract_name,
            abi_inputs=container.constructor.abi.inputs,
            resolved_args=args,
        )
        if not self._autosign:
            _confirm_resolution(args, contract_name)

        return self._account.deploy(container, *args)

    def finalize(self, deployments: List[ContractInstance]) -> None:
        """
        Publishes the deployments to the registry and optionally to block explorers.
        """
        registry_from_ape_deployments(
            deployments=deployments,
            output_filepath=self.registry_filepath,
        )
        if self.verify:
            verify_contracts(contracts=deployments)

    def _print_deployment_info(self):
        print(
            f"Account: {self.get_account().address}",
            f"Config: {self.path}",
            f"Registry: {self.registry_filepath}",
            f"Verify: {self.verify}",
            f"Ecosystem: {networks.provider.network.ecosystem.name}",
            f"Network: {networks.provider.network.name}",
            f"Chain ID: {networks.provider.network.chain_id}",
            f"Gas Price: {networks.provider.gas_price}",
            sep="\n",
        )


class ApeDeployerHandle:
    """
    Exposes a Deployer to the staged deployment plan: contracts are looked up
    by name and deployed from a worker thread, one transaction at a time.

    Once a deployment fails, deployments still waiting for their turn are
    abandoned instead of sent.
    """

    class Abandoned(Exception):
        """Raised for a deployment queued behind a failed one"""

    def __init__(
        self,
        deployer: Deployer,
        container_lookup: Callable[[str], ContractContainer] = get_contract_container,
    ):
        self.deployer = deployer
        self._get_container = container_lookup
        # one account, one nonce sequence
        self._lock = asyncio.Lock()
        self._failed = None

    async def deploy(self, contract_name: str, *args: Any) -> ContractInstance:
        container = self._get_container(contract_name)
        async with self._lock:
            if self._failed is not None:
                raise self.Abandoned(f"{contract_name} not deployed; {self._failed} failed.")
            try:
                return await asyncio.to_thread(self.deployer.deploy, container, *args)
            except Exception:
                self._failed = contract_name
                raise
