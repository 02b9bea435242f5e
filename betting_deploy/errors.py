import dataclasses
from typing import Any, Generic, Optional, TypeVar, Union


class LedgerError(Exception):
    """Transport or node failure raised by a ledger client."""


class ConfirmationTimeout(LedgerError):
    def __init__(self, tx_hash: str, timeout: Optional[float]):
        self.tx_hash = tx_hash
        self.timeout = timeout
        super().__init__(f"Transaction {tx_hash} not confirmed after {timeout}s")


class TransactionReverted(LedgerError):
    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(f"Contract creation {tx_hash} reverted")


class DeploymentError(Exception):
    """Base for the errors a deployment run can end with."""

    step = "deployment"


class IdentityResolutionError(DeploymentError):
    step = "identity"


class BalanceQueryError(DeploymentError):
    step = "balance"


class ArtifactNotFoundError(DeploymentError):
    step = "artifact"

    def __init__(self, name: str, detail: str = ""):
        self.name = name
        msg = f"Artifact for contract '{name}' not found"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class SubmissionError(DeploymentError):
    step = "submission"


T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclasses.dataclass(frozen=True)
class Err:
    error: DeploymentError


Result = Union[Ok[Any], Err]
