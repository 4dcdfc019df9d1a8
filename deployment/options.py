import click

from deployment.constants import SUPPORTED_BELDEX_DOMAINS

domain_option = click.option(
    "--domain",
    "-d",
    help="Beldex deployment domain",
    type=click.Choice(SUPPORTED_BELDEX_DOMAINS),
    required=True,
)

autosign_option = click.option(
    "--autosign",
    help="Sign deployment transactions without prompting",
    is_flag=True,
    default=False,
)

verify_option = click.option(
    "--verify",
    help="Verify the deployed contracts on the block explorer",
    is_flag=True,
    default=False,
)
