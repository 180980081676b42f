import os
from typing import Mapping, Optional

from ape.exceptions import APINotImplementedError
from eth_typing import ChecksumAddress
from eth_utils import keccak, to_bytes, to_checksum_address

from deployment.constants import FORK_TOP_UP_ENVVAR, MAX_SLOT_SEARCH


def top_up_enabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Reads the fork top-up toggle; only an explicit "true" enables it."""
    environ = os.environ if environ is None else environ
    return environ.get(FORK_TOP_UP_ENVVAR, "").strip().lower() == "true"


def _word(value: int) -> bytes:
    return value.to_bytes(32, "big")


def _balance_slot(holder: ChecksumAddress, slot: int, vyper: bool = False) -> int:
    """
    Storage location of holder's entry in a mapping(address => uint256)
    declared at `slot`. Vyper hashes the slot before the key.
    """
    key = to_bytes(hexstr=holder).rjust(32, b"\x00")
    if vyper:
        return int.from_bytes(keccak(_word(slot) + key), "big")
    return int.from_bytes(keccak(key + _word(slot)), "big")


class StorageTokenGenerator:
    """
    Synthesizes ERC20 balances on a local fork by writing the token's
    balance mapping directly, through the provider's set_storage where it has
    one (ape-foundry) and hardhat_setStorageAt otherwise.
    """

    GET_STORAGE_METHOD = "eth_getStorageAt"
    SET_STORAGE_METHOD = "hardhat_setStorageAt"

    def __init__(self, provider, max_slot: int = MAX_SLOT_SEARCH):
        self.provider = provider
        self.max_slot = max_slot

    def _set_storage(self, token: ChecksumAddress, location: int, value: int) -> None:
        set_storage = getattr(self.provider, "set_storage", None)
        if set_storage is not None:
            try:
                set_storage(token, location, _word(value))
                return
            except APINotImplementedError:
                pass  # provider without a storage cheatcode; fall back to the raw RPC
        self.provider.make_request(
            self.SET_STORAGE_METHOD, [token, hex(location), "0x" + _word(value).hex()]
        )

    def _get_storage(self, token: ChecksumAddress, location: int) -> int:
        raw = self.provider.make_request(self.GET_STORAGE_METHOD, [token, hex(location), "latest"])
        if isinstance(raw, str):
            return int(raw, 16)
        return int.from_bytes(bytes(raw), "big")

    def generate_tokens(self, token, recipient: ChecksumAddress, amount: int) -> int:
        """
        Adds `amount` to recipient's balance of `token` and returns the new balance.
        """
        recipient = to_checksum_address(recipient)
        token_address = to_checksum_address(token.address)
        balance = token.balanceOf(recipient)
        target_balance = balance + amount

        for slot in range(self.max_slot):
            for vyper in (False, True):
                location = _balance_slot(recipient, slot, vyper=vyper)
                original = self._get_storage(token_address, location)
                self._set_storage(token_address, location, target_balance)
                if token.balanceOf(recipient) == target_balance:
                    print(
                        f"(i) Generated {amount} tokens of {token_address} for {recipient} "
                        f"(balance slot {slot})"
                    )
                    return target_balance
                self._set_storage(token_address, location, original)

        raise ValueError(
            f"Could not locate the balance mapping of {token_address} "
            f"within the first {self.max_slot} storage slots."
        )
