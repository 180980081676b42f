#!/usr/bin/python3

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, account_option, network_option

from deployment.abi import ContractLoader
from deployment.addresses import get_address_book
from deployment.confirm import _confirm_targets
from deployment.constants import DIVIDER_ARTIFACT, PERIPHERY_ARTIFACT
from deployment.fork import StorageTokenGenerator, top_up_enabled
from deployment.networks import is_fork_chain
from deployment.options import (
    autosign_option,
    params_file_option,
    target_option,
    top_up_option,
)
from deployment.params import SponsorshipParameters, Transactor, validate_config
from deployment.registry import AdapterRegistry
from deployment.series import SeriesSponsor
from deployment.utils import _load_yaml, check_plugins, format_maturity


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@params_file_option
@top_up_option
@target_option
@autosign_option
def cli(network, account, params_file, top_up, targets, autosign):
    """
    Sponsors the configured series against the deployed adapters.

    ape run sponsor_series --network ethereum:mainnet:infura -f deployment/series_params/mainnet.yml
    FORK_TOP_UP=true ape run sponsor_series --network ethereum:mainnet-fork:foundry -f deployment/series_params/fork.yml

    The params file decides the chain: address book, adapter registry and
    stake top-up all follow its chain_id, so a fork run uses the fork's id
    whatever id the local node reports.
    """
    check_plugins()
    config = _load_yaml(params_file)
    chain_id = validate_config(config)

    address_book = get_address_book(chain_id)
    params = SponsorshipParameters.from_config(config, address_book=address_book)
    selected_targets = params.select(targets) if targets else params.targets
    if params.divider is None or params.periphery is None:
        raise click.ClickException(f"Divider and Periphery must be set for chain {chain_id}.")

    if top_up is None:
        top_up = top_up_enabled()
    if top_up and not is_fork_chain(chain_id):
        click.echo(
            f"(i) Stake top-up is only available on a local fork; ignored for chain {chain_id}."
        )
        top_up = False

    transactor = Transactor(account=account, autosign=autosign)
    click.echo(
        "\n".join(
            [
                f"Account: {transactor.address}",
                f"Config: {params_file}",
                f"Registry: {params.registry_filepath}",
                f"Network: {network.name} (chain {networks.provider.chain_id})",
                f"Chain ID: {chain_id}",
                f"Top-up: {top_up}",
            ]
        )
    )
    _confirm_targets(selected_targets, autosign=autosign)

    contracts = ContractLoader()
    sponsor = SeriesSponsor(
        transactor=transactor,
        divider=contracts.at(DIVIDER_ARTIFACT, params.divider),
        periphery=contracts.at(PERIPHERY_ARTIFACT, params.periphery),
        adapters=AdapterRegistry.from_file(params.registry_filepath, chain_id=chain_id),
        contracts=contracts,
        chain_id=chain_id,
        top_up=top_up,
        token_generator=StorageTokenGenerator(networks.provider) if top_up else None,
    )
    report = sponsor.run(selected_targets)

    click.echo(f"\nSponsored {len(report.sponsored)} series:")
    for series in report.sponsored:
        click.echo(
            f"\t{series.target} {format_maturity(series.maturity)} "
            f"(adapter {series.adapter}, tx {series.receipt.txn_hash})"
        )
    if not report.ok:
        raise click.ClickException(f"[{report.error.kind.value}] {report.error}")


if __name__ == "__main__":
    cli()
