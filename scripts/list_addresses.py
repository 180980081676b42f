#!/usr/bin/python3

import click

from deployment.addresses import get_address_book
from deployment.options import chain_id_option


@click.command()
@chain_id_option
def cli(chain_id):
    """Prints the fixed addresses known for a chain."""
    address_book = get_address_book(chain_id)
    click.echo(f"{chain_id.name} ({int(chain_id)})")
    click.echo("=" * len(f"{chain_id.name} ({int(chain_id)})"))
    for name, address in address_book.items():
        click.echo(f"\t{name:<24}: {address}")


if __name__ == "__main__":
    cli()
