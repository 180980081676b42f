import click
from eth_utils import to_checksum_address

from deployment.constants import ChainId


class ChainIdParam(click.ParamType):
    """Accepts a chain id either as a number or by name (e.g. 1 or mainnet)."""

    name = "chain_id"

    def convert(self, value, param, ctx):
        if isinstance(value, ChainId):
            return value
        try:
            return ChainId(int(value))
        except ValueError:
            pass
        try:
            return ChainId[str(value).upper()]
        except KeyError:
            choices = ", ".join(f"{c.name.lower()} ({int(c)})" for c in ChainId)
            self.fail(f"{value} is not a supported chain; expected one of {choices}", param, ctx)


class ChecksumAddress(click.ParamType):
    name = "checksum_address"

    def convert(self, value, param, ctx):
        try:
            value = to_checksum_address(value=value)
        except ValueError:
            self.fail(f"Invalid ethereum address {value}", param, ctx)
        else:
            return value
