from typing import Iterable

import click
from ape.utils import ZERO_ADDRESS

from deployment.utils import format_maturity


def _continue() -> None:
    """Asks the user to continue."""
    answer = input("Continue Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting sponsorship!")
        raise click.Abort()


def _confirm_zero_address(name: str) -> None:
    answer = input(f"Zero Address detected for '{name}'; Continue? Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting sponsorship!")
        raise click.Abort()


def _confirm_targets(targets: Iterable, autosign: bool = False) -> None:
    """Prints the series about to be sponsored and asks the user to confirm them."""
    print("\nSeries to sponsor")
    zero_address_target = None
    for target in targets:
        print(f"\t{target.name} ({target.address})")
        for maturity in target.series:
            print(f"\t\t{maturity} ({format_maturity(maturity)})")
        if zero_address_target is None and target.address == ZERO_ADDRESS:
            zero_address_target = target.name
    if autosign:
        return
    _continue()
    if zero_address_target:
        _confirm_zero_address(zero_address_target)
