import asyncio
import threading
import time
from types import SimpleNamespace

import pytest
from eth_utils import to_checksum_address

from deployment import beldex
from deployment.params import (
    ApeDeployerHandle,
    ConstructorArguments,
    _is_encodable,
    _validate_constructor_abi_inputs,
)

TRANSFER_ADDRESS = to_checksum_address("0x" + "dd" * 20)
REDEEM_ADDRESS = to_checksum_address("0x" + "cc" * 20)

BELDEX_ETH_INPUTS = [
    SimpleNamespace(name="_transfer", type="address"),
    SimpleNamespace(name="_redeem", type="address"),
    SimpleNamespace(name="_amount", type="uint256"),
]


class FakeDeployer:
    def __init__(self, failures=()):
        self.failures = set(failures)
        self.attempted = list()
        self.deployed = list()
        self.threads = set()
        self._active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def deploy(self, container, *args):
        self.attempted.append(container.contract_type.name)
        with self._lock:
            self._active += 1
            self.max_active = max(self.max_active, self._active)
        self.threads.add(threading.current_thread().name)
        time.sleep(0.01)
        name = container.contract_type.name
        with self._lock:
            self._active -= 1
        if name in self.failures:
            raise RuntimeError(f"{name} reverted")
        self.deployed.append((name, *args))
        return SimpleNamespace(address=to_checksum_address(f"0x{len(self.deployed):040x}"))


def _container(contract_name):
    return SimpleNamespace(contract_type=SimpleNamespace(name=contract_name))


def test_decimal_string_amount_is_encodable():
    assert _is_encodable("uint256", "10000000000000000")
    assert _is_encodable("uint256", 10000000000000000)
    assert not _is_encodable("uint256", "1e16")
    assert not _is_encodable("uint256", "0.01")
    assert not _is_encodable("address", "10000000000000000")


def test_validate_beldex_eth_arguments():
    _validate_constructor_abi_inputs(
        contract_name="BeldexETH",
        abi_inputs=BELDEX_ETH_INPUTS,
        resolved_args=(TRANSFER_ADDRESS, REDEEM_ADDRESS, "10000000000000000"),
    )


def test_validate_arguments_length_mismatch():
    with pytest.raises(ConstructorArguments.Invalid, match="requires 3, Got 2"):
        _validate_constructor_abi_inputs(
            contract_name="BeldexETH",
            abi_inputs=BELDEX_ETH_INPUTS,
            resolved_args=(TRANSFER_ADDRESS, REDEEM_ADDRESS),
        )


def test_validate_arguments_type_mismatch():
    with pytest.raises(ConstructorArguments.Invalid, match="'_redeem' at position 1"):
        _validate_constructor_abi_inputs(
            contract_name="BeldexETH",
            abi_inputs=BELDEX_ETH_INPUTS,
            resolved_args=(TRANSFER_ADDRESS, "not an address", "10000000000000000"),
        )


def test_ape_handle_deploys_by_name():
    fake_deployer = FakeDeployer()
    handle = ApeDeployerHandle(fake_deployer, container_lookup=_container)

    instance = asyncio.run(handle.deploy("BeldexRedeem", REDEEM_ADDRESS))

    assert fake_deployer.deployed == [("BeldexRedeem", REDEEM_ADDRESS)]
    assert instance.address == to_checksum_address("0x" + "0" * 39 + "1")
    assert threading.current_thread().name not in fake_deployer.threads


def test_ape_handle_runs_beldex_plan_one_transaction_at_a_time():
    fake_deployer = FakeDeployer()
    handle = ApeDeployerHandle(fake_deployer, container_lookup=_container)

    deployments = beldex.run(handle)

    assert fake_deployer.max_active == 1
    assert len(fake_deployer.deployed) == 5
    beldex_eth = fake_deployer.deployed[-1]
    assert beldex_eth == (
        "BeldexETH",
        deployments["BeldexTransfer"].address,
        deployments["BeldexRedeem"].address,
        "10000000000000000",
    )


def test_swapped_beldex_eth_arguments_are_rejected():
    with pytest.raises(ConstructorArguments.Invalid, match="'_transfer' at position 0"):
        _validate_constructor_abi_inputs(
            contract_name="BeldexETH",
            abi_inputs=BELDEX_ETH_INPUTS,
            resolved_args=("10000000000000000", REDEEM_ADDRESS, TRANSFER_ADDRESS),
        )


def test_address_arguments():
    assert _is_encodable("address", TRANSFER_ADDRESS)
    assert _is_encodable("address", TRANSFER_ADDRESS.lower())
    assert not _is_encodable("address", "0x" + TRANSFER_ADDRESS[2:].swapcase())
    assert not _is_encodable("address", 10000000000000000)
    assert not _is_encodable("uint256", TRANSFER_ADDRESS)


def test_ape_handle_abandons_queued_deployments_after_failure():
    fake_deployer = FakeDeployer(failures={"Utils"})
    handle = ApeDeployerHandle(fake_deployer, container_lookup=_container)

    with pytest.raises(RuntimeError, match="Utils reverted"):
        beldex.run(handle)

    assert fake_deployer.attempted == ["Utils"]
    assert fake_deployer.deployed == []


def test_ape_handle_refuses_after_failure():
    fake_deployer = FakeDeployer(failures={"BeldexIP"})
    handle = ApeDeployerHandle(fake_deployer, container_lookup=_container)

    async def deploy_in_order():
        with pytest.raises(RuntimeError):
            await handle.deploy("BeldexIP")
        await handle.deploy("Utils")

    with pytest.raises(ApeDeployerHandle.Abandoned, match="Utils not deployed; BeldexIP failed"):
        asyncio.run(deploy_in_order())
