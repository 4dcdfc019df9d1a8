#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, network_option

from deployment import beldex
from deployment.options import autosign_option, domain_option, verify_option
from deployment.params import ApeDeployerHandle, Deployer
from deployment.utils import params_filepath_from_domain


@click.command(cls=ConnectedProviderCommand, name="deploy-beldex")
@network_option(required=True)
@domain_option
@autosign_option
@verify_option
def cli(network, domain, autosign, verify):
    """
    Deploys the Beldex contracts in three stages:
    Utils and BeldexIP, then BeldexRedeem and BeldexTransfer, then BeldexETH.

    ape run deploy_beldex --network ethereum:sepolia:infura --domain sepolia
    """
    deployer = Deployer.from_yaml(
        filepath=params_filepath_from_domain(domain=domain),
        verify=verify,
        autosign=autosign,
    )

    deployments = beldex.run(ApeDeployerHandle(deployer))

    deployer.finalize(deployments=list(deployments.values()))


if __name__ == "__main__":
    cli()
