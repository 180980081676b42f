#!/usr/bin/python3

from pathlib import Path

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, network_option

from deployment.abi import ContractLoader
from deployment.constants import ADAPTER_ARTIFACT
from deployment.networks import is_local_network
from deployment.options import adapter_address_option, chain_id_option, registry_option
from deployment.registry import AdapterEntry, write_registry


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@chain_id_option
@registry_option
@adapter_address_option
@click.option("--target", "-t", help="Name of the adapter's target, e.g. cDAI.", required=True)
@click.option("--adapter", help="Adapter contract name, e.g. CAdapter.", default=None)
@click.option("--overwrite", help="Replace an existing entry for the target.", is_flag=True)
def cli(network, chain_id, registry, address, target, adapter, overwrite):
    """
    Adds a deployed adapter to the adapter registry.

    Entries are keyed by the chain id of the params files that will use them,
    e.g. 111 for adapters deployed on the local mainnet fork.

    ape run register_adapter --network ethereum:mainnet-fork:foundry -c hardhat -t cDAI -a 0x...
    """
    network_chain_id = networks.provider.chain_id
    if chain_id != network_chain_id and not is_local_network():
        raise click.ClickException(
            f"Chain {int(chain_id)} does not match the connected network ({network_chain_id})."
        )

    adapter_contract = ContractLoader().at(ADAPTER_ARTIFACT, address)
    _, stake, stake_size = adapter_contract.getStakeAndTarget()
    click.echo(
        f"Registering {adapter or 'adapter'} at {address} for {target} on chain {int(chain_id)} "
        f"(stake {stake}, stake size {stake_size})"
    )
    entry = AdapterEntry(chain_id=int(chain_id), target=target, address=address, adapter=adapter)
    output_filepath = write_registry([entry], filepath=Path(registry), overwrite=overwrite)
    click.echo(f"(i) Registry written to {output_filepath}!")


if __name__ == "__main__":
    cli()
