from ape import networks

from deployment.constants import LOCAL_BLOCKCHAIN_ENVIRONMENTS


def is_local_network() -> bool:
    """Returns True if the connected network is a local (ephemeral) one."""
    return networks.provider.network.name in LOCAL_BLOCKCHAIN_ENVIRONMENTS
