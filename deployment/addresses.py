from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional, Union

from ape.utils import ZERO_ADDRESS
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from deployment.constants import ChainId


class AddressBook(NamedTuple):
    """Fixed infrastructure and token addresses for a single chain."""

    chain_id: ChainId

    # core
    divider: Optional[ChecksumAddress] = None
    periphery: Optional[ChecksumAddress] = None
    space_factory: Optional[ChecksumAddress] = None
    balancer_vault: Optional[ChecksumAddress] = None
    exchange_proxy: Optional[ChecksumAddress] = None
    permit2: Optional[ChecksumAddress] = None

    # governance
    divider_cup: Optional[ChecksumAddress] = None
    sense_multisig: Optional[ChecksumAddress] = None
    oz_relayer: Optional[ChecksumAddress] = None

    # tokens
    comp_token: Optional[ChecksumAddress] = None
    dai_token: Optional[ChecksumAddress] = None
    cdai_token: Optional[ChecksumAddress] = None
    cusdc_token: Optional[ChecksumAddress] = None
    weth_token: Optional[ChecksumAddress] = None
    wsteth_token: Optional[ChecksumAddress] = None

    # fuse pools and oracles
    fuse_pool_dir: Optional[ChecksumAddress] = None
    fuse_comptroller_impl: Optional[ChecksumAddress] = None
    fuse_cerc20_impl: Optional[ChecksumAddress] = None
    master_oracle_impl: Optional[ChecksumAddress] = None
    master_oracle: Optional[ChecksumAddress] = None
    compound_price_feed: Optional[ChecksumAddress] = None
    interest_rate_model: Optional[ChecksumAddress] = None

    def resolve(self, name: str) -> ChecksumAddress:
        """
        Returns the address registered under an upper-case variable name
        (e.g. CDAI_TOKEN) for this chain.
        """
        field = name.lower()
        if field == "chain_id" or field not in self._fields:
            raise ValueError(f"Unknown address '{name}'.")
        address = getattr(self, field)
        if address is None:
            raise ValueError(f"Address '{name}' is not set for chain {int(self.chain_id)}.")
        return address

    def items(self):
        """Yields (name, address) for every address set on this chain."""
        for field in self._fields[1:]:
            address = getattr(self, field)
            if address is not None:
                yield field.upper(), address


def _book(chain_id: ChainId, **addresses: str) -> AddressBook:
    checksummed = {name: to_checksum_address(value) for name, value in addresses.items()}
    return AddressBook(chain_id=chain_id, **checksummed)


_MAINNET_TOKENS = dict(
    comp_token="0xc00e94cb662c3520282e6f5717214004a7f26888",
    dai_token="0x6b175474e89094c44da98b954eedeac495271d0f",
    cdai_token="0x5d3a536E4D6DbD6114cc1Ead35777bAB948E3643",
    cusdc_token="0x39AA39c021dfbaE8faC545936693aC917d5E7563",
    wsteth_token="0x7f39C581F595B53c5cb19bD0b3f8dA6c935E2Ca0",
)

_MAINNET_FUSE = dict(
    fuse_pool_dir="0x835482FE0532f169024d5E9410199369aAD5C77E",
    fuse_comptroller_impl="0xE16DB319d9dA7Ce40b666DD2E365a4b8B3C18217",
    fuse_cerc20_impl="0x67db14e73c2dce786b5bbbfa4d010deab4bbfcf9",
    master_oracle_impl="0xb3c8ee7309be658c186f986388c2377da436d8fb",
    master_oracle="0x1887118E49e0F4A78Bd71B792a49dE03504A764D",
    compound_price_feed="0x6D2299C48a8dD07a872FDd0F8233924872Ad1071",
    # TODO: replace with the launch interest rate model once governance sets it
    interest_rate_model="0xEDE47399e2aA8f076d40DC52896331CBa8bd40f7",
)

_MAINNET_CORE = dict(
    divider="0x86bA3E96Be68563E41c2f5769F1AF9fAf758e6E0",
    periphery="0xaa17633AA5A3Cb56698838561161bdb16Cebb8E3",
    space_factory="0x9e629751b3FE0b030C219e567156adCB70ad5541",
    balancer_vault="0xBA12222222228d8Ba445958a75a0704d566BF2C8",
    exchange_proxy="0xDef1C0ded9bec7F1a1670819833240f027b25EfF",
    permit2="0x000000000022D473030F116dDEE9F6B43aC78BA3",
)

_SENSE_MULTISIG = "0xF13519734649F7464E5BE4aa91987A35594b2B16"

ADDRESS_BOOKS: Mapping[ChainId, AddressBook] = MappingProxyType(
    {
        ChainId.MAINNET: _book(
            ChainId.MAINNET,
            divider_cup=ZERO_ADDRESS,  # unclaimed issuance fees destination not yet chosen
            sense_multisig=_SENSE_MULTISIG,
            oz_relayer=ZERO_ADDRESS,
            **_MAINNET_CORE,
            **_MAINNET_TOKENS,
            **_MAINNET_FUSE,
        ),
        ChainId.GOERLI: _book(
            ChainId.GOERLI,
            divider="0x09B10E45A912BcD4E80a8A3119f0cfCcad1e1f12",
            periphery="0x4bCBA1316C95B812cC014CA18C08971Ce1C10861",
            space_factory="0x1621cb1a1A4BA17aF0aD62c6142A7389C81e831D",
            balancer_vault="0x1aB16CB0cb0e5520e0C081530C679B2e846e4D37",
            weth_token="0xffc94fb06b924e6dba5f0325bbed941807a018cd",
        ),
        ChainId.KOVAN: _book(
            ChainId.KOVAN,
            weth_token="0xa1C74a9A3e59ffe9bEe7b85Cd6E91C0751289EbD",
        ),
        # a mainnet fork sees every mainnet contract at its mainnet address
        ChainId.HARDHAT: _book(
            ChainId.HARDHAT,
            divider_cup=ZERO_ADDRESS,
            sense_multisig=_SENSE_MULTISIG,
            oz_relayer="0x19f3bf5d7f8a58945da80eaa4131df2958f7aa4a",
            weth_token="0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
            **_MAINNET_CORE,
            **_MAINNET_TOKENS,
            **_MAINNET_FUSE,
        ),
    }
)


def get_address_book(chain_id: Union[ChainId, int, str]) -> AddressBook:
    """Returns the address book for a chain id (int, str or ChainId)."""
    try:
        chain_id = ChainId(int(chain_id))
    except ValueError:
        raise ValueError(f"Unsupported chain id '{chain_id}'.")

    try:
        return ADDRESS_BOOKS[chain_id]
    except KeyError:
        raise ValueError(f"No address book for chain {chain_id.name} ({int(chain_id)}).")
