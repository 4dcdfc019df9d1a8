import asyncio
import typing
from collections import OrderedDict
from typing import Any, Dict, List, NamedTuple, Sequence

from ape.utils import ZERO_ADDRESS


class DeployerHandle(typing.Protocol):
    """Anything able to deploy a named contract artifact with constructor arguments."""

    async def deploy(self, contract_name: str, *args: Any) -> Any:
        ...


class ContractReference:
    """A constructor argument standing for the address of an already deployed contract."""

    VARIABLE_PREFIX = "$"

    def __init__(self, contract_name: str):
        self.contract_name = contract_name

    @classmethod
    def is_reference(cls, value: Any) -> bool:
        """Returns True if the value is a contract reference such as '$BeldexIP'."""
        return isinstance(value, str) and value.startswith(cls.VARIABLE_PREFIX)

    @classmethod
    def from_value(cls, value: str) -> "ContractReference":
        return cls(value[len(cls.VARIABLE_PREFIX) :])

    def resolve(self, deployed: Dict[str, Any]) -> str:
        """Resolves the reference to the address of the deployed instance."""
        try:
            instance = deployed[self.contract_name]
        except KeyError:
            raise DeploymentPlan.Unresolved(
                f"{self.contract_name} has not been deployed yet; its address cannot be resolved."
            )
        address = getattr(instance, "address", None)
        if not address or address == ZERO_ADDRESS:
            raise DeploymentPlan.Unresolved(
                f"{self.contract_name} resolved to an empty address ({address!r})."
            )
        return address

    def __eq__(self, other):
        return isinstance(other, ContractReference) and other.contract_name == self.contract_name

    def __hash__(self):
        return hash(self.contract_name)

    def __repr__(self):
        return f"{self.VARIABLE_PREFIX}{self.contract_name}"


def _process_raw_arg(value: Any) -> Any:
    if ContractReference.is_reference(value):
        return ContractReference.from_value(value)
    return value


def _resolve_arg(value: Any, deployed: Dict[str, Any]) -> Any:
    if isinstance(value, ContractReference):
        return value.resolve(deployed)
    return value  # literally a value


class ContractDeployment(NamedTuple):
    contract_name: str
    args: tuple = ()

    @classmethod
    def of(cls, contract_name: str, *args: Any) -> "ContractDeployment":
        return cls(contract_name=contract_name, args=tuple(_process_raw_arg(a) for a in args))

    @property
    def references(self) -> List[ContractReference]:
        return [arg for arg in self.args if isinstance(arg, ContractReference)]

    def resolve(self, deployed: Dict[str, Any]) -> List[Any]:
        """Resolves the constructor arguments against the instances deployed so far."""
        return [_resolve_arg(arg, deployed) for arg in self.args]


class DeploymentStage(NamedTuple):
    message: str
    deployments: Sequence[ContractDeployment]

    @property
    def contract_names(self) -> List[str]:
        return [d.contract_name for d in self.deployments]


class DeploymentPlan:
    """
    An ordered list of deployment stages.

    Deployments within a stage are issued concurrently; a stage only starts once
    every deployment of the previous stage has resolved. Any deployment failure
    propagates unchanged and no further stage is started.
    """

    class Invalid(Exception):
        """Raised when the deployment plan is malformed"""

    class Unresolved(Exception):
        """Raised when a referenced contract address is missing or empty"""

    def __init__(self, stages: Sequence[DeploymentStage]):
        self.stages = list(stages)
        self.validate()

    @property
    def contract_names(self) -> List[str]:
        names = list()
        for stage in self.stages:
            names.extend(stage.contract_names)
        return names

    def validate(self) -> None:
        if not self.stages:
            raise self.Invalid("Deployment plan has no stages.")

        available = set()
        for position, stage in enumerate(self.stages, start=1):
            if not stage.deployments:
                raise self.Invalid(f"Stage {position} ('{stage.message}') has no deployments.")

            for contract_deployment in stage.deployments:
                name = contract_deployment.contract_name
                if name in available or stage.contract_names.count(name) > 1:
                    raise self.Invalid(f"{name} is deployed more than once.")

                for reference in contract_deployment.references:
                    if reference.contract_name not in available:
                        raise self.Invalid(
                            f"{name} in stage {position} references {reference.contract_name}, "
                            f"which is not deployed in an earlier stage."
                        )

            available.update(stage.contract_names)

    async def execute(self, handle: DeployerHandle) -> typing.OrderedDict[str, Any]:
        """Executes each stage in order and returns the deployed instances by contract name."""
        deployed = OrderedDict()
        for stage in self.stages:
            print(stage.message)
            # all addresses the stage depends on are resolved before anything is issued
            resolved_args = [d.resolve(deployed) for d in stage.deployments]
            instances = await asyncio.gather(
                *(
                    handle.deploy(d.contract_name, *args)
                    for d, args in zip(stage.deployments, resolved_args)
                )
            )
            for name, instance in zip(stage.contract_names, instances):
                deployed[name] = instance
                print(f"(i) {name} deployed at {getattr(instance, 'address', None)}")

        return deployed
