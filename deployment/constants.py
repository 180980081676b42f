from enum import IntEnum
from pathlib import Path

import deployment

#
# Filesystem
#

DEPLOYMENT_DIR = Path(deployment.__file__).parent
PARAMS_DIR = DEPLOYMENT_DIR / "series_params"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"
ABI_DIR = DEPLOYMENT_DIR / "abis"

#
# Chains
#


class ChainId(IntEnum):
    MAINNET = 1
    GOERLI = 5
    KOVAN = 42
    HARDHAT = 111  # local mainnet fork
    ARBITRUM = 42161


# Chains where stake tokens may be synthesized into the deployer's balance
FORK_CHAIN_IDS = frozenset([ChainId.HARDHAT])

#
# Environment
#

FORK_TOP_UP_ENVVAR = "FORK_TOP_UP"

#
# Contracts
#

MAX_UINT256 = 2**256 - 1

# Third argument of Periphery.sponsorSeries
SPONSOR_SELF = True

# Upper bound (exclusive) of the storage slots searched for an ERC20 balance mapping
MAX_SLOT_SEARCH = 20

TOKEN_ARTIFACT = "Token"
ADAPTER_ARTIFACT = "Adapter"
DIVIDER_ARTIFACT = "Divider"
PERIPHERY_ARTIFACT = "Periphery"
