import asyncio
import typing
from typing import Any

from deployment.constants import (
    BELDEX_ETH,
    BELDEX_ETH_AMOUNT,
    BELDEX_IP,
    BELDEX_REDEEM,
    BELDEX_TRANSFER,
    UTILS,
)
from deployment.stages import ContractDeployment, DeployerHandle, DeploymentPlan, DeploymentStage

BELDEX_STAGES = [
    DeploymentStage(
        message=f"Deploying {UTILS}, {BELDEX_IP}...",
        deployments=[
            ContractDeployment.of(UTILS),
            ContractDeployment.of(BELDEX_IP),
        ],
    ),
    DeploymentStage(
        message=f"Deploying {BELDEX_REDEEM}, {BELDEX_TRANSFER}...",
        deployments=[
            ContractDeployment.of(BELDEX_REDEEM, f"${BELDEX_IP}"),
            ContractDeployment.of(BELDEX_TRANSFER, f"${BELDEX_IP}"),
        ],
    ),
    DeploymentStage(
        message=f"Deploying {BELDEX_ETH}",
        deployments=[
            ContractDeployment.of(
                BELDEX_ETH, f"${BELDEX_TRANSFER}", f"${BELDEX_REDEEM}", BELDEX_ETH_AMOUNT
            ),
        ],
    ),
]

BELDEX_PLAN = DeploymentPlan(stages=BELDEX_STAGES)


async def deploy(deployer_handle: DeployerHandle) -> typing.OrderedDict[str, Any]:
    """
    Deploys the Beldex contracts in dependency order:

        Utils, BeldexIP -> BeldexRedeem, BeldexTransfer -> BeldexETH

    BeldexRedeem and BeldexTransfer take the BeldexIP address; BeldexETH takes the
    BeldexTransfer and BeldexRedeem addresses plus a fixed decimal amount.
    """
    return await BELDEX_PLAN.execute(deployer_handle)


def run(deployer_handle: DeployerHandle) -> typing.OrderedDict[str, Any]:
    return asyncio.run(deploy(deployer_handle))
