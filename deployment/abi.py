from typing import Dict

from ape import Contract
from ape.contracts import ContractInstance
from eth_typing import ABI, ChecksumAddress

from deployment.constants import ABI_DIR
from deployment.utils import _load_json


def load_abi(name: str) -> ABI:
    """Loads a contract ABI shipped with the deployment package."""
    filepath = ABI_DIR / f"{name}.json"
    if not filepath.exists():
        raise ValueError(f"No ABI found for contract '{name}'.")
    return _load_json(filepath)


class ContractLoader:
    """Builds ape contract handles from the packaged ABIs."""

    def __init__(self):
        self._abis: Dict[str, ABI] = dict()

    def get_abi(self, name: str) -> ABI:
        if name not in self._abis:
            self._abis[name] = load_abi(name)
        return self._abis[name]

    def at(self, name: str, address: ChecksumAddress) -> ContractInstance:
        return Contract(address, abi=self.get_abi(name))
