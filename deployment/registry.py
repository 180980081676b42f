import json
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, NamedTuple, Optional

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from deployment.errors import MissingAdapter
from deployment.utils import _load_json

ChainId = int
TargetName = str


STANDARD_REGISTRY_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}


class AdapterEntry(NamedTuple):
    """Represents a single deployed adapter in an adapter registry."""

    chain_id: ChainId
    target: TargetName
    address: ChecksumAddress
    adapter: Optional[str] = None


def read_registry(filepath: Path) -> List[AdapterEntry]:
    data = _load_json(filepath)
    registry_entries = list()
    for chain_id, entries in data.items():
        for target_name, artifacts in entries.items():
            registry_entry = AdapterEntry(
                chain_id=int(chain_id),
                target=target_name,
                address=to_checksum_address(artifacts["address"]),
                adapter=artifacts.get("adapter"),
            )
            registry_entries.append(registry_entry)
    return registry_entries


def write_registry(
    entries: List[AdapterEntry], filepath: Path, overwrite: bool = False, silent: bool = False
) -> Path:
    """
    Writes an adapter registry to a file, merging with any existing registry.

    Entries colliding with an existing (chain id, target) pair replace it only
    when `overwrite` is set; otherwise the result is written next to the
    original as *.unmerged.json.
    """

    if not entries:
        print("No entries provided.")
        return filepath

    merged: Dict[tuple, AdapterEntry] = dict()
    if filepath.exists():
        if not silent:
            print(f"Updating existing registry at {filepath}.")
        for entry in read_registry(filepath):
            merged[(entry.chain_id, entry.target)] = entry

        collisions = [e for e in entries if (e.chain_id, e.target) in merged]
        if collisions and not overwrite:
            filepath = filepath.with_suffix(".unmerged.json")
            merged = dict()
            if not silent:
                names = ", ".join(f"{e.target}@{e.chain_id}" for e in collisions)
                print(
                    f"Registry already has entries for {names}.\n"
                    f"Writing to {filepath} to avoid overwriting existing data."
                )
    elif not silent:
        print(f"Creating new registry at {filepath}.")

    for entry in entries:
        merged[(entry.chain_id, entry.target)] = entry

    data = defaultdict(dict)
    for entry in sorted(merged.values(), key=lambda e: (str(e.chain_id), e.target)):
        artifacts = {"address": entry.address}
        if entry.adapter:
            artifacts["adapter"] = entry.adapter
        data[str(entry.chain_id)][entry.target] = artifacts

    # Create the parent directory if it does not exist
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w") as file:
        json.dump(data, file, **STANDARD_REGISTRY_JSON_FORMAT)

    return filepath


class AdapterRegistry(Mapping[TargetName, ChecksumAddress]):
    """Read-only view of the adapters deployed on a single chain, keyed by target name."""

    def __init__(self, chain_id: ChainId, adapters: Mapping[TargetName, ChecksumAddress]):
        self.chain_id = chain_id
        self._adapters = dict(adapters)

    @classmethod
    def from_entries(cls, entries: List[AdapterEntry], chain_id: ChainId) -> "AdapterRegistry":
        adapters = {e.target: e.address for e in entries if e.chain_id == chain_id}
        return cls(chain_id=chain_id, adapters=adapters)

    @classmethod
    def from_file(cls, filepath: Path, chain_id: ChainId) -> "AdapterRegistry":
        return cls.from_entries(read_registry(filepath), chain_id=chain_id)

    def get_adapter(self, target: TargetName) -> ChecksumAddress:
        try:
            return self._adapters[target]
        except KeyError:
            raise MissingAdapter(target=target, chain_id=self.chain_id)

    def __getitem__(self, target: TargetName) -> ChecksumAddress:
        return self._adapters[target]

    def __iter__(self) -> Iterator[TargetName]:
        return iter(self._adapters)

    def __len__(self) -> int:
        return len(self._adapters)
