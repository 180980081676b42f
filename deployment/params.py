import typing
from pathlib import Path
from typing import Any, List, NamedTuple, Optional, Tuple

from ape import networks
from ape.api import AccountAPI, ReceiptAPI
from ape.cli.choices import select_account
from ape.contracts.base import ContractTransactionHandler
from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address
from ethpm_types import MethodABI
from web3.auto import w3

from deployment.addresses import AddressBook
from deployment.confirm import _continue
from deployment.constants import ARTIFACTS_DIR
from deployment.networks import is_local_network
from deployment.utils import _load_yaml

VARIABLE_PREFIX = "$"


class Target(NamedTuple):
    """A collateral-bearing asset and the maturities to sponsor for it, in order."""

    name: str
    address: ChecksumAddress
    series: Tuple[int, ...]


def is_variable(param: Any) -> bool:
    """Returns True if the param is an address book variable."""
    return isinstance(param, str) and param.startswith(VARIABLE_PREFIX)


def _resolve_address(value: Any, address_book: AddressBook, name: str) -> ChecksumAddress:
    if is_variable(value):
        try:
            return address_book.resolve(value[len(VARIABLE_PREFIX):])
        except ValueError as e:
            raise SponsorshipParameters.Invalid(f"Cannot resolve {name}: {e}")

    if not isinstance(value, str) or not is_address(value):
        raise SponsorshipParameters.Invalid(f"Invalid address '{value}' for {name}.")
    return to_checksum_address(value)


def _validate_series(series: Any, target_name: str) -> Tuple[int, ...]:
    if not isinstance(series, list) or not series:
        raise SponsorshipParameters.Invalid(f"Target '{target_name}' has no series listed.")

    maturities = list()
    for maturity in series:
        if isinstance(maturity, bool) or not isinstance(maturity, int) or maturity <= 0:
            raise SponsorshipParameters.Invalid(
                f"Maturity '{maturity}' for target '{target_name}' is not a unix timestamp."
            )
        if maturity in maturities:
            raise SponsorshipParameters.Invalid(
                f"Maturity {maturity} is listed twice for target '{target_name}'."
            )
        maturities.append(maturity)
    return tuple(maturities)


def _process_target(target_data: Any, address_book: AddressBook) -> Target:
    if not isinstance(target_data, dict):
        raise SponsorshipParameters.Invalid("Malformed target entry in params YAML.")
    try:
        name = target_data["name"]
        address = target_data["address"]
    except KeyError as e:
        raise SponsorshipParameters.Invalid(f"Target entry is missing the {e} field.")

    return Target(
        name=name,
        address=_resolve_address(address, address_book, name=f"target '{name}'"),
        series=_validate_series(target_data.get("series"), target_name=name),
    )


def get_chain_id(config: typing.Dict) -> int:
    """Returns the chain id declared in a params file."""
    deployment = config.get("deployment")
    if not deployment:
        raise ValueError("deployment is not set in params file.")

    config_chain_id = deployment.get("chain_id")
    if not config_chain_id:
        raise ValueError("chain_id is not set in params file.")

    return int(config_chain_id)


def get_registry_filepath(config: typing.Dict) -> Path:
    """Returns the filepath of the adapter registry."""
    artifact_config = config.get("artifacts", {})
    artifact_dir = Path(artifact_config.get("dir", ARTIFACTS_DIR))
    filename = artifact_config.get("filename")
    if not filename:
        raise ValueError("artifact filename is not set in params file.")
    return artifact_dir / filename


def validate_config(config: typing.Dict) -> int:
    """
    Checks that the params file targets the chain of the connected network.
    Local networks (including forks) are exempt.
    """
    print("Validating parameters YAML...")
    config_chain_id = get_chain_id(config)
    chain_mismatch = config_chain_id != networks.provider.network.chain_id
    live_deployment = not is_local_network()
    if chain_mismatch and live_deployment:
        raise ValueError(
            f"chain_id in params file ({config_chain_id}) does not match "
            f"chain_id of current network ({networks.provider.network.chain_id})."
        )
    return config_chain_id


class SponsorshipParameters:
    """Represents the targets and series of a single sponsorship run."""

    class Invalid(Exception):
        """Raised when the sponsorship parameters are invalid"""

    def __init__(
        self,
        chain_id: int,
        targets: List[Target],
        divider: Optional[ChecksumAddress],
        periphery: Optional[ChecksumAddress],
        registry_filepath: Path,
    ):
        self.chain_id = chain_id
        self.targets = targets
        self.divider = divider
        self.periphery = periphery
        self.registry_filepath = registry_filepath

    @classmethod
    def from_yaml(cls, filepath: Path, address_book: AddressBook) -> "SponsorshipParameters":
        config = _load_yaml(filepath)
        return cls.from_config(config=config, address_book=address_book)

    @classmethod
    def from_config(cls, config: typing.Dict, address_book: AddressBook) -> "SponsorshipParameters":
        """Loads the sponsorship parameters from a parsed params file."""
        print("Processing sponsorship parameters...")
        chain_id = get_chain_id(config)
        if chain_id != address_book.chain_id:
            raise cls.Invalid(
                f"chain_id in params file ({chain_id}) does not match "
                f"address book chain ({int(address_book.chain_id)})."
            )

        targets = list()
        for factory in config.get("factories") or list():
            if not isinstance(factory, dict):
                raise cls.Invalid(f"Malformed factory entry '{factory}' in params YAML.")
            factory_name = factory.get("name", "<unnamed>")
            factory_targets = factory.get("targets")
            if not factory_targets or not isinstance(factory_targets, list):
                raise cls.Invalid(f"Factory '{factory_name}' has no targets.")
            for target_data in factory_targets:
                targets.append(_process_target(target_data, address_book))

        for adapter in config.get("adapters") or list():
            if not isinstance(adapter, dict):
                raise cls.Invalid(f"Malformed adapter entry '{adapter}' in params YAML.")
            if "target" not in adapter:
                raise cls.Invalid(f"Adapter '{adapter.get('name', '<unnamed>')}' has no target.")
            targets.append(_process_target(adapter["target"], address_book))

        if not targets:
            raise cls.Invalid("No targets found in params file.")

        # a target listed twice would sponsor the same series twice
        seen = set()
        for target in targets:
            if target.name in seen:
                raise cls.Invalid(f"Target '{target.name}' is listed more than once.")
            seen.add(target.name)

        contracts = config.get("contracts") or dict()
        divider = contracts.get("divider", address_book.divider)
        periphery = contracts.get("periphery", address_book.periphery)
        if divider is not None:
            divider = _resolve_address(divider, address_book, name="divider")
        if periphery is not None:
            periphery = _resolve_address(periphery, address_book, name="periphery")

        return cls(
            chain_id=chain_id,
            targets=targets,
            divider=divider,
            periphery=periphery,
            registry_filepath=get_registry_filepath(config),
        )

    def select(self, names: typing.Iterable[str]) -> List[Target]:
        """Returns the targets with the given names, in configured order."""
        names = set(names)
        unknown = names - {t.name for t in self.targets}
        if unknown:
            raise self.Invalid(f"Unknown target(s): {', '.join(sorted(unknown))}")
        return [t for t in self.targets if t.name in names]


def _validate_method_args(
    method_abis: List[MethodABI], args: typing.Sequence[Any]
) -> typing.Dict[str, Any]:
    """Validates the transaction arguments against the function ABI."""
    if len(method_abis) == 0:
        raise ValueError("No method abis provided for validation of args")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        named_args = {}
        for arg, abi_input in zip(args, abi.inputs):
            try:
                encodable = w3.is_encodable(abi_input.type, arg)
            except (AttributeError, TypeError, ValueError):
                # some encoders reject malformed values by raising
                encodable = False
            if not encodable:
                break
            named_args[abi_input.name] = arg
        else:
            return named_args
    raise ValueError(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


class Transactor:
    """
    Represents an ape account plus validated/annotated transaction execution.
    """

    def __init__(self, account: typing.Optional[AccountAPI] = None, autosign: bool = False):
        if account is None:
            self._account = select_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        self._account.set_autosign(autosign)

    @property
    def address(self) -> ChecksumAddress:
        return self._account.address

    def transact(self, method: ContractTransactionHandler, *args) -> ReceiptAPI:
        """Sends a transaction and returns its receipt once confirmed."""
        named_args = _validate_method_args(method_abis=method.abis, args=args)
        base_message = (
            f"\nTransacting {method.contract.contract_type.name}"
            f"[{method.contract.address[:10]}].{method}"
        )
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)
        if not self._autosign:
            _continue()

        return method(*args, sender=self._account)
