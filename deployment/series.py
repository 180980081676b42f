"""
Series sponsorship.

For every target: let the Divider move the deployer's Target, then for each
of the target's maturities let the Periphery move the deployer's Stake, make
sure the deployer holds enough Stake, and sponsor the Series. Everything is
sent sequentially from a single account and every transaction is confirmed
before the next one is built.
"""

import typing
from typing import List, NamedTuple, Optional

from ape.api import ReceiptAPI
from ape.contracts import ContractInstance
from eth_typing import ChecksumAddress

from deployment.abi import ContractLoader
from deployment.constants import (
    ADAPTER_ARTIFACT,
    MAX_UINT256,
    SPONSOR_SELF,
    TOKEN_ARTIFACT,
)
from deployment.errors import InsufficientStake, SponsorshipError
from deployment.networks import is_fork_chain
from deployment.params import Target, Transactor
from deployment.registry import AdapterRegistry
from deployment.utils import format_maturity

SEPARATOR = "-------------------------------------------------------"


class SponsoredSeries(NamedTuple):
    target: str
    maturity: int
    adapter: ChecksumAddress
    receipt: ReceiptAPI


class SponsorshipReport(NamedTuple):
    """Outcome of a sponsorship run: the series sponsored, in order, and what stopped it."""

    sponsored: List[SponsoredSeries]
    error: Optional[SponsorshipError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SeriesSponsor:
    def __init__(
        self,
        transactor: Transactor,
        divider: ContractInstance,
        periphery: ContractInstance,
        adapters: AdapterRegistry,
        contracts: ContractLoader,
        chain_id: int,
        top_up: bool = False,
        token_generator=None,
    ):
        self.transactor = transactor
        self.divider = divider
        self.periphery = periphery
        self.adapters = adapters
        self.contracts = contracts
        self.chain_id = chain_id
        self.top_up = top_up
        self.token_generator = token_generator

    @property
    def deployer(self) -> ChecksumAddress:
        return self.transactor.address

    @property
    def can_top_up(self) -> bool:
        return self.top_up and is_fork_chain(self.chain_id) and self.token_generator is not None

    def _approve_max(self, token: ContractInstance, spender: ChecksumAddress) -> Optional[ReceiptAPI]:
        """Grants `spender` an unlimited allowance over the deployer's `token`."""
        if token.allowance(self.deployer, spender) == MAX_UINT256:
            print(f"(i) {spender} already has an unlimited allowance over {token.address}")
            return None
        return self.transactor.transact(token.approve, spender, MAX_UINT256)

    def _ensure_stake(self, target: Target, maturity: int, stake: ContractInstance, stake_size: int):
        balance = stake.balanceOf(self.deployer)
        if balance >= stake_size:
            return

        if self.can_top_up:
            print(f"\nTopping up the deployer's stake ({balance} < {stake_size})")
            self.token_generator.generate_tokens(stake, self.deployer, stake_size - balance)
            balance = stake.balanceOf(self.deployer)
            if balance >= stake_size:
                return

        raise InsufficientStake(
            target=target.name,
            maturity=maturity,
            stake=stake.address,
            balance=balance,
            required=stake_size,
        )

    def sponsor_target(self, target: Target, sponsored: List[SponsoredSeries]) -> None:
        """Sponsors every series of a single target, appending each to `sponsored`."""
        target_token = self.contracts.at(TOKEN_ARTIFACT, target.address)

        print("\nEnable the Divider to move the deployer's Target for issuance")
        self._approve_max(target_token, self.divider.address)

        for maturity in target.series:
            adapter_address = self.adapters.get_adapter(target.name)
            adapter = self.contracts.at(ADAPTER_ARTIFACT, adapter_address)

            print("\nEnable the Periphery to move the Deployer's STAKE for Series sponsorship")
            _, stake_address, stake_size = adapter.getStakeAndTarget()
            stake = self.contracts.at(TOKEN_ARTIFACT, stake_address)
            self._approve_max(stake, self.periphery.address)

            self._ensure_stake(target, maturity, stake, stake_size)

            print(f"\nInitializing Series maturing on {format_maturity(maturity)} for {target.name}")
            receipt = self.transactor.transact(
                self.periphery.sponsorSeries, adapter_address, maturity, SPONSOR_SELF
            )
            sponsored.append(
                SponsoredSeries(
                    target=target.name, maturity=maturity, adapter=adapter_address, receipt=receipt
                )
            )
            print(f"\n{SEPARATOR}")

    def run(self, targets: typing.Iterable[Target]) -> SponsorshipReport:
        """
        Sponsors the series of every target, in order. Stops at the first
        sponsorship error and reports it; any other failure propagates.
        """
        print(f"\n{SEPARATOR}")
        print("SPONSOR SERIES")
        print(SEPARATOR)

        sponsored = list()
        for target in targets:
            try:
                self.sponsor_target(target, sponsored)
            except SponsorshipError as e:
                print(f"\nx {e}")
                return SponsorshipReport(sponsored=sponsored, error=e)

        return SponsorshipReport(sponsored=sponsored)
