from ape import networks

from deployment.constants import FORK_CHAIN_IDS

LOCAL_NETWORKS = ("local",)


def is_local_network() -> bool:
    """True when connected to a local or forked network."""
    network_name = networks.provider.network.name
    return network_name in LOCAL_NETWORKS or network_name.endswith("-fork")


def is_fork_chain(chain_id: int) -> bool:
    """True for the chain ids designated as local mainnet forks."""
    return chain_id in FORK_CHAIN_IDS
