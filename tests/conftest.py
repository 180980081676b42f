from typing import Dict, List, NamedTuple

import pytest

from deployment.constants import ChainId
from deployment.params import Target
from deployment.registry import AdapterRegistry

# Common constants
STAKE_SIZE = 100
MATURITY_1 = 1680300000
MATURITY_2 = 1685600000


def address(n: int) -> str:
    return "0x" + f"{n:040x}"


DEPLOYER = address(0xDE)
DIVIDER = address(0xD1)
PERIPHERY = address(0xAE)
CDAI = address(0xCDA1)
WSTETH = address(0x57E7)
STAKE = address(0x57A4E)
CDAI_ADAPTER = address(0xADA1)
WSTETH_ADAPTER = address(0xADA2)


class FakeReceipt(NamedTuple):
    txn_hash: str


class FakeChain:
    """In-memory stand-in for the contracts a sponsorship run touches."""

    def __init__(self):
        self.contracts: Dict[str, object] = dict()
        self.transactions: List[tuple] = list()

    def add(self, contract):
        self.contracts[contract.address] = contract
        return contract

    def record(self, *call) -> FakeReceipt:
        self.transactions.append(call)
        return FakeReceipt(txn_hash=f"0x{len(self.transactions):064x}")

    def calls(self, name: str) -> List[tuple]:
        return [t for t in self.transactions if t[0] == name]


class FakeToken:
    def __init__(self, chain: FakeChain, address: str, balances: Dict[str, int] = None):
        self.chain = chain
        self.address = address
        self.balances = dict(balances or {})
        self.allowances: Dict[tuple, int] = dict()

    def balanceOf(self, owner):
        return self.balances.get(owner, 0)

    def allowance(self, owner, spender):
        return self.allowances.get((owner, spender), 0)

    def approve(self, spender, amount, sender=None):
        self.allowances[(sender, spender)] = amount
        return self.chain.record("approve", self.address, spender, amount)

    def transferFrom(self, owner, recipient, amount):
        assert self.allowance(owner, recipient) >= amount, "allowance too low"
        assert self.balanceOf(owner) >= amount, "balance too low"
        self.balances[owner] -= amount
        self.balances[recipient] = self.balanceOf(recipient) + amount


class FakeAdapter:
    def __init__(self, address: str, target: str, stake: str, stake_size: int):
        self.address = address
        self._target = target
        self._stake = stake
        self._stake_size = stake_size

    def getStakeAndTarget(self):
        return self._target, self._stake, self._stake_size


class FakePeriphery:
    def __init__(self, chain: FakeChain, address: str):
        self.chain = chain
        self.address = address
        self.fail_with = None

    def sponsorSeries(self, adapter, maturity, with_pool, sender=None):
        if self.fail_with is not None:
            raise self.fail_with
        adapter = self.chain.contracts[adapter]
        _, stake_address, stake_size = adapter.getStakeAndTarget()
        stake = self.chain.contracts[stake_address]
        # the periphery pulls the stake from the sponsor
        stake.transferFrom(sender, self.address, stake_size)
        return self.chain.record("sponsorSeries", adapter.address, maturity, with_pool)


class FakeContract:
    def __init__(self, address: str):
        self.address = address


class FakeContractLoader:
    def __init__(self, chain: FakeChain):
        self.chain = chain
        self.loaded: List[tuple] = list()

    def at(self, name, address):
        self.loaded.append((name, address))
        return self.chain.contracts[address]


class FakeTransactor:
    def __init__(self, address: str):
        self.address = address

    def transact(self, method, *args):
        return method(*args, sender=self.address)


class FakeTokenGenerator:
    def __init__(self):
        self.generated: List[tuple] = list()

    def generate_tokens(self, token, recipient, amount):
        token.balances[recipient] = token.balanceOf(recipient) + amount
        self.generated.append((token.address, recipient, amount))
        return token.balances[recipient]


# Fixtures
@pytest.fixture()
def chain():
    return FakeChain()


@pytest.fixture()
def stake(chain):
    return chain.add(FakeToken(chain, STAKE, balances={DEPLOYER: 10 * STAKE_SIZE}))


@pytest.fixture()
def cdai(chain):
    return chain.add(FakeToken(chain, CDAI))


@pytest.fixture()
def wsteth(chain):
    return chain.add(FakeToken(chain, WSTETH))


@pytest.fixture()
def adapters(chain, stake, cdai, wsteth):
    chain.add(FakeAdapter(CDAI_ADAPTER, CDAI, STAKE, STAKE_SIZE))
    chain.add(FakeAdapter(WSTETH_ADAPTER, WSTETH, STAKE, STAKE_SIZE))
    return AdapterRegistry(
        chain_id=ChainId.MAINNET, adapters={"cDAI": CDAI_ADAPTER, "wstETH": WSTETH_ADAPTER}
    )


@pytest.fixture()
def divider(chain):
    return chain.add(FakeContract(DIVIDER))


@pytest.fixture()
def periphery(chain):
    return chain.add(FakePeriphery(chain, PERIPHERY))


@pytest.fixture()
def contracts(chain):
    return FakeContractLoader(chain)


@pytest.fixture()
def transactor():
    return FakeTransactor(DEPLOYER)


@pytest.fixture()
def token_generator():
    return FakeTokenGenerator()


@pytest.fixture()
def targets():
    return [
        Target(name="cDAI", address=CDAI, series=(MATURITY_1, MATURITY_2)),
        Target(name="wstETH", address=WSTETH, series=(MATURITY_2,)),
    ]
