from enum import Enum


class ErrorKind(Enum):
    INSUFFICIENT_STAKE = "insufficient-stake"
    MISSING_ADAPTER = "missing-adapter"


class SponsorshipError(Exception):
    """Base class for the conditions that stop a sponsorship run."""

    kind: ErrorKind


class MissingAdapter(SponsorshipError, LookupError):
    """Raised when no adapter is deployed for a target on the active chain."""

    kind = ErrorKind.MISSING_ADAPTER

    def __init__(self, target: str, chain_id: int):
        self.target = target
        self.chain_id = chain_id
        super().__init__(f"No adapter deployed for target '{target}' on chain {chain_id}.")


class InsufficientStake(SponsorshipError):
    """Raised when the deployer holds less stake than the adapter requires."""

    kind = ErrorKind.INSUFFICIENT_STAKE

    def __init__(self, target: str, maturity: int, stake: str, balance: int, required: int):
        self.target = target
        self.maturity = maturity
        self.stake = stake
        self.balance = balance
        self.required = required
        super().__init__(
            f"Not enough stake funds on wallet to sponsor {target} series "
            f"maturing at {maturity}: stake {stake} balance {balance} < required {required}."
        )
