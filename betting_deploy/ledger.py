"""Ledger client used by the deployment pipeline.

``LedgerClient`` is the interface the pipeline depends on. ``Web3LedgerClient``
implements it with web3.py against any Ethereum JSON-RPC node (a local Hardhat
node, a testnet or mainnet provider). Transactions are signed locally with
``eth_account`` when a private key is configured; otherwise the node's own
unlocked accounts are used.
"""
import asyncio
import dataclasses
from typing import Any, Callable, Dict, List, Optional, Protocol

import requests
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception

from betting_deploy.artifacts import ArtifactStore, ContractArtifact
from betting_deploy.config import DeployConfig
from betting_deploy.errors import ConfirmationTimeout, LedgerError, TransactionReverted

# web3 surfaces node errors as Web3Exception and transport errors from requests
NODE_FAILURES = (Web3Exception, requests.RequestException)


@dataclasses.dataclass(frozen=True)
class Signer:
    address: str
    # None when the account is managed (unlocked) by the node
    account: Optional[LocalAccount] = dataclasses.field(default=None, repr=False, compare=False)


class DeploymentHandle(Protocol):
    tx_hash: str

    async def wait_for_deployment(self) -> "DeploymentHandle": ...

    def get_address(self) -> str: ...


class ContractFactory(Protocol):
    async def deploy(self, *args: Any) -> DeploymentHandle: ...


class LedgerClient(Protocol):
    async def get_signers(self) -> List[Signer]: ...

    async def get_balance(self, address: str) -> int: ...

    async def get_contract_factory(self, name: str, signer: Optional[Signer] = None) -> ContractFactory: ...


def connect(config: DeployConfig) -> Web3:
    headers = {"Content-Type": "application/json"}
    if config.api_key:
        headers["Authorization"] = f"Bearer {config.api_key}"
    provider = Web3.HTTPProvider(config.rpc_url, request_kwargs={"timeout": config.rpc_timeout, "headers": headers})
    return Web3(provider)


class Web3Deployment:
    def __init__(self, client: "Web3LedgerClient", tx_hash: str, contract_name: str):
        self.client = client
        self.tx_hash = tx_hash
        self.contract_name = contract_name
        self.receipt: Optional[Dict[str, Any]] = None

    @property
    def confirmed(self) -> bool:
        return self.receipt is not None

    async def wait_for_deployment(self) -> "Web3Deployment":
        config = self.client.config
        try:
            receipt = await self.client.run(
                self.client.w3.eth.wait_for_transaction_receipt,
                self.tx_hash,
                timeout=config.confirmation_timeout,
                poll_latency=config.poll_interval,
            )
        except LedgerError as e:
            if isinstance(e.__cause__, TimeExhausted):
                raise ConfirmationTimeout(self.tx_hash, config.confirmation_timeout) from e.__cause__
            raise

        if receipt.get("status", 1) == 0:
            raise TransactionReverted(self.tx_hash)
        if not receipt.get("contractAddress"):
            raise LedgerError(f"Receipt for {self.tx_hash} has no contract address")
        self.receipt = receipt
        return self

    def get_address(self) -> str:
        if self.receipt is None:
            raise RuntimeError(f"Deployment {self.tx_hash} is not confirmed yet")
        address = self.receipt["contractAddress"]
        try:
            return Web3.to_checksum_address(address)
        except ValueError as e:
            raise LedgerError(f"Node returned malformed contract address {address!r}") from e


class Web3ContractFactory:
    def __init__(self, client: "Web3LedgerClient", artifact: ContractArtifact, signer: Signer):
        self.client = client
        self.artifact = artifact
        self.signer = signer

    def _submit(self, *args: Any) -> bytes:
        w3 = self.client.w3
        contract = w3.eth.contract(abi=self.artifact.abi, bytecode=self.artifact.bytecode)
        constructor = contract.constructor(*args)
        address = self.signer.address
        if self.signer.account is None:
            return constructor.transact({"from": address})
        tx = constructor.build_transaction({
            "from": address,
            "nonce": w3.eth.get_transaction_count(address, "pending"),
        })
        signed = self.signer.account.sign_transaction(tx)
        return w3.eth.send_raw_transaction(signed.raw_transaction)

    async def deploy(self, *args: Any) -> Web3Deployment:
        tx_hash = await self.client.run(self._submit, *args)
        return Web3Deployment(self.client, Web3.to_hex(tx_hash), self.artifact.name)


class Web3LedgerClient:
    def __init__(self, config: DeployConfig, w3: Optional[Web3] = None,
                 store: Optional[ArtifactStore] = None):
        self.config = config
        self.w3 = w3 or connect(config)
        self.store = store or ArtifactStore(config.artifacts_dir)

    async def run(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a blocking web3 call off the event loop, mapping node failures to ``LedgerError``."""
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except NODE_FAILURES as e:
            raise LedgerError(f"{type(e).__name__}: {e}") from e

    async def get_signers(self) -> List[Signer]:
        if self.config.private_key:
            try:
                account = Account.from_key(self.config.private_key)
            except (ValueError, TypeError) as e:
                raise LedgerError("DEPLOYER_PRIVATE_KEY is not a valid private key") from e
            return [Signer(address=account.address, account=account)]
        accounts = await self.run(lambda: self.w3.eth.accounts) or []
        return [Signer(address=Web3.to_checksum_address(a)) for a in accounts]

    async def get_balance(self, address: str) -> int:
        return await self.run(self.w3.eth.get_balance, address)

    async def get_contract_factory(self, name: str, signer: Optional[Signer] = None) -> Web3ContractFactory:
        artifact = self.store.load(name)
        if signer is None:
            signers = await self.get_signers()
            if not signers:
                raise LedgerError("No signer available for deployment")
            signer = signers[0]
        return Web3ContractFactory(self, artifact, signer)
