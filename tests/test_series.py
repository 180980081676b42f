import pytest

from deployment.constants import MAX_UINT256, SPONSOR_SELF, ChainId
from deployment.errors import ErrorKind, InsufficientStake, MissingAdapter
from deployment.params import Target
from deployment.series import SeriesSponsor
from tests.conftest import (
    CDAI,
    CDAI_ADAPTER,
    DEPLOYER,
    DIVIDER,
    MATURITY_1,
    MATURITY_2,
    PERIPHERY,
    STAKE,
    STAKE_SIZE,
    WSTETH,
    WSTETH_ADAPTER,
)


@pytest.fixture()
def sponsor(transactor, divider, periphery, adapters, contracts):
    def _sponsor(chain_id=ChainId.MAINNET, top_up=False, token_generator=None):
        return SeriesSponsor(
            transactor=transactor,
            divider=divider,
            periphery=periphery,
            adapters=adapters,
            contracts=contracts,
            chain_id=chain_id,
            top_up=top_up,
            token_generator=token_generator,
        )

    return _sponsor


def test_sponsor_all_series(sponsor, chain, targets, cdai, wsteth, stake):
    report = sponsor().run(targets)

    assert report.ok
    assert report.error is None
    assert [(s.target, s.maturity) for s in report.sponsored] == [
        ("cDAI", MATURITY_1),
        ("cDAI", MATURITY_2),
        ("wstETH", MATURITY_2),
    ]
    assert [s.adapter for s in report.sponsored] == [CDAI_ADAPTER, CDAI_ADAPTER, WSTETH_ADAPTER]
    assert all(s.receipt.txn_hash for s in report.sponsored)

    # the divider may move the deployer's target, the periphery the deployer's stake
    assert cdai.allowance(DEPLOYER, DIVIDER) == MAX_UINT256
    assert wsteth.allowance(DEPLOYER, DIVIDER) == MAX_UINT256
    assert stake.allowance(DEPLOYER, PERIPHERY) == MAX_UINT256

    # the stake of every series was pulled by the periphery
    assert stake.balanceOf(PERIPHERY) == 3 * STAKE_SIZE
    assert stake.balanceOf(DEPLOYER) == 7 * STAKE_SIZE


def test_transaction_order(sponsor, chain, targets):
    sponsor().run(targets)

    assert chain.transactions == [
        ("approve", CDAI, DIVIDER, MAX_UINT256),
        ("approve", STAKE, PERIPHERY, MAX_UINT256),
        ("sponsorSeries", CDAI_ADAPTER, MATURITY_1, SPONSOR_SELF),
        # stake allowance is already unlimited for the second cDAI series
        ("sponsorSeries", CDAI_ADAPTER, MATURITY_2, SPONSOR_SELF),
        ("approve", WSTETH, DIVIDER, MAX_UINT256),
        ("sponsorSeries", WSTETH_ADAPTER, MATURITY_2, SPONSOR_SELF),
    ]


def test_series_sponsored_in_configured_order(sponsor, chain):
    maturities = (1696118400, 1680300000, 1688169600)
    target = Target(name="cDAI", address=CDAI, series=maturities)

    report = sponsor().run([target])

    assert tuple(s.maturity for s in report.sponsored) == maturities
    assert tuple(t[2] for t in chain.calls("sponsorSeries")) == maturities


def test_existing_allowances_are_not_approved_again(sponsor, chain, targets, cdai, stake):
    cdai.allowances[(DEPLOYER, DIVIDER)] = MAX_UINT256
    stake.allowances[(DEPLOYER, PERIPHERY)] = MAX_UINT256

    report = sponsor().run(targets[:1])

    assert report.ok
    assert chain.calls("approve") == []
    assert len(chain.calls("sponsorSeries")) == 2


def test_partial_allowance_is_raised_to_max(sponsor, chain, targets, stake):
    stake.allowances[(DEPLOYER, PERIPHERY)] = STAKE_SIZE

    sponsor().run(targets[:1])

    assert ("approve", STAKE, PERIPHERY, MAX_UINT256) in chain.transactions
    assert stake.allowance(DEPLOYER, PERIPHERY) == MAX_UINT256


def test_insufficient_stake(sponsor, chain, targets, stake):
    stake.balances[DEPLOYER] = STAKE_SIZE // 2

    report = sponsor().run(targets)

    assert not report.ok
    assert report.sponsored == []
    assert isinstance(report.error, InsufficientStake)
    assert report.error.kind == ErrorKind.INSUFFICIENT_STAKE
    assert report.error.target == "cDAI"
    assert report.error.maturity == MATURITY_1
    assert report.error.balance == STAKE_SIZE // 2
    assert report.error.required == STAKE_SIZE

    # no series sponsored and the stake untouched; approvals already sent stay
    assert chain.calls("sponsorSeries") == []
    assert stake.balanceOf(DEPLOYER) == STAKE_SIZE // 2
    assert len(chain.calls("approve")) == 2


def test_insufficient_stake_stops_the_run(sponsor, chain, targets, stake):
    # enough for exactly one series
    stake.balances[DEPLOYER] = STAKE_SIZE

    report = sponsor().run(targets)

    assert [(s.target, s.maturity) for s in report.sponsored] == [("cDAI", MATURITY_1)]
    assert report.error.maturity == MATURITY_2
    # wstETH was never reached
    assert not any(t[1] == WSTETH for t in chain.calls("approve"))


def test_top_up_on_fork(sponsor, chain, targets, stake, token_generator):
    stake.balances[DEPLOYER] = STAKE_SIZE // 2
    runner = sponsor(chain_id=ChainId.HARDHAT, top_up=True, token_generator=token_generator)

    report = runner.run(targets[:1])

    assert report.ok
    assert len(report.sponsored) == 2
    # each series is topped up with exactly the missing stake
    assert token_generator.generated == [
        (STAKE, DEPLOYER, STAKE_SIZE // 2),
        (STAKE, DEPLOYER, STAKE_SIZE),
    ]
    assert stake.balanceOf(PERIPHERY) == 2 * STAKE_SIZE


def test_top_up_requires_fork_chain(sponsor, chain, targets, stake, token_generator):
    stake.balances[DEPLOYER] = 0
    runner = sponsor(chain_id=ChainId.MAINNET, top_up=True, token_generator=token_generator)

    report = runner.run(targets)

    assert isinstance(report.error, InsufficientStake)
    assert token_generator.generated == []
    assert chain.calls("sponsorSeries") == []


def test_top_up_disabled_on_fork(sponsor, chain, targets, stake, token_generator):
    stake.balances[DEPLOYER] = 0
    runner = sponsor(chain_id=ChainId.HARDHAT, top_up=False, token_generator=token_generator)

    report = runner.run(targets)

    assert isinstance(report.error, InsufficientStake)
    assert token_generator.generated == []


def test_top_up_that_falls_short(sponsor, chain, targets, stake):
    class StingyGenerator:
        def generate_tokens(self, token, recipient, amount):
            token.balances[recipient] = token.balanceOf(recipient) + amount - 1

    stake.balances[DEPLOYER] = 0
    runner = sponsor(chain_id=ChainId.HARDHAT, top_up=True, token_generator=StingyGenerator())

    report = runner.run(targets)

    assert isinstance(report.error, InsufficientStake)
    assert report.error.balance == STAKE_SIZE - 1
    assert chain.calls("sponsorSeries") == []


def test_missing_adapter(sponsor, chain, stake):
    targets = [Target(name="cUSDC", address=CDAI, series=(MATURITY_1,))]

    report = sponsor().run(targets)

    assert isinstance(report.error, MissingAdapter)
    assert report.error.kind == ErrorKind.MISSING_ADAPTER
    assert report.error.target == "cUSDC"
    assert report.error.chain_id == ChainId.MAINNET
    assert chain.calls("sponsorSeries") == []


def test_transaction_failures_propagate(sponsor, chain, targets, periphery):
    periphery.fail_with = RuntimeError("execution reverted")

    with pytest.raises(RuntimeError, match="execution reverted"):
        sponsor().run(targets)

    assert chain.calls("sponsorSeries") == []


def test_insufficient_stake_example(sponsor, chain, stake):
    stake.balances[DEPLOYER] = 50
    targets = [Target(name="cDAI", address=CDAI, series=(1680300000, 1685600000))]

    report = sponsor().run(targets)

    assert isinstance(report.error, InsufficientStake)
    assert "Not enough stake funds on wallet" in str(report.error)
    assert chain.calls("sponsorSeries") == []
