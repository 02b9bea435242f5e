"""Deployment of the BettingPlatform contract.

``DeploymentPipeline.run`` performs one deployment through the injected ledger
client: resolve the signer, read its balance, resolve the compiled artifact,
submit the creation transaction, wait for confirmation and report the
address. Every step returns ``Ok``/``Err``; the first ``Err`` ends the run.
"""
import dataclasses
import sys
from typing import Any, Awaitable, Callable, Optional, TextIO

from betting_deploy.errors import (
    ArtifactNotFoundError,
    BalanceQueryError,
    DeploymentError,
    Err,
    IdentityResolutionError,
    LedgerError,
    Ok,
    Result,
    SubmissionError,
)
from betting_deploy.ledger import LedgerClient, Signer

CONTRACT_NAME = "BettingPlatform"


@dataclasses.dataclass
class RunResult:
    signer: Optional[str] = None
    balance: Optional[int] = None
    address: Optional[str] = None
    tx_hash: Optional[str] = None
    error: Optional[DeploymentError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


async def _attempt(wrap: Callable[[LedgerError], DeploymentError], awaitable: Awaitable[Any]) -> Result:
    try:
        return Ok(await awaitable)
    except DeploymentError as e:
        return Err(e)
    except LedgerError as e:
        wrapped = wrap(e)
        wrapped.__cause__ = e
        return Err(wrapped)


class DeploymentPipeline:
    def __init__(self, ledger: LedgerClient, *, contract_name: str = CONTRACT_NAME,
                 stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None):
        self.ledger = ledger
        self.contract_name = contract_name
        self.stdout = stdout
        self.stderr = stderr

    def _out(self, *parts: Any) -> None:
        print(*parts, file=self.stdout or sys.stdout)

    def _fail(self, result: RunResult, error: DeploymentError) -> RunResult:
        err = self.stderr or sys.stderr
        print("Error deploying contract:", error, file=err)
        if error.__cause__ is not None:
            print("Caused by:", repr(error.__cause__), file=err)
        result.error = error
        return result

    async def resolve_identity(self) -> Result:
        res = await _attempt(lambda e: IdentityResolutionError(f"Could not list signers: {e}"),
                             self.ledger.get_signers())
        if isinstance(res, Err):
            return res
        if not res.value:
            return Err(IdentityResolutionError(
                "No signer configured (set DEPLOYER_PRIVATE_KEY or use a node with unlocked accounts)"))
        return Ok(res.value[0])

    async def resolve_balance(self, signer: Signer) -> Result:
        return await _attempt(lambda e: BalanceQueryError(f"Could not read balance of {signer.address}: {e}"),
                              self.ledger.get_balance(signer.address))

    async def resolve_artifact(self, signer: Signer) -> Result:
        return await _attempt(lambda e: ArtifactNotFoundError(self.contract_name, str(e)),
                              self.ledger.get_contract_factory(self.contract_name, signer=signer))

    async def submit_and_confirm(self, factory: Any) -> Result:
        async def _deploy():
            handle = await factory.deploy()
            await handle.wait_for_deployment()
            return handle

        return await _attempt(lambda e: SubmissionError(f"Deployment of {self.contract_name} failed: {e}"),
                              _deploy())

    async def report_address(self, handle: Any) -> Result:
        async def _address():
            return handle.get_address()

        return await _attempt(lambda e: SubmissionError(f"Could not read address of {self.contract_name}: {e}"),
                              _address())

    async def run(self) -> RunResult:
        result = RunResult()
        self._out(f"Deploying {self.contract_name} contract...")

        res = await self.resolve_identity()
        if isinstance(res, Err):
            return self._fail(result, res.error)
        signer = res.value
        result.signer = signer.address
        self._out("Deploying contracts with the account:", signer.address)

        res = await self.resolve_balance(signer)
        if isinstance(res, Err):
            return self._fail(result, res.error)
        result.balance = res.value
        self._out("Account balance:", str(res.value))

        res = await self.resolve_artifact(signer)
        if isinstance(res, Err):
            return self._fail(result, res.error)
        factory = res.value

        res = await self.submit_and_confirm(factory)
        if isinstance(res, Err):
            return self._fail(result, res.error)
        handle = res.value
        result.tx_hash = getattr(handle, "tx_hash", None)

        res = await self.report_address(handle)
        if isinstance(res, Err):
            return self._fail(result, res.error)
        result.address = res.value
        self._out(f"{self.contract_name} deployed to: {result.address}")
        return result
