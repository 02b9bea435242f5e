import asyncio
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from betting_deploy.config import DeployConfig
from betting_deploy.ledger import LedgerClient, Web3LedgerClient
from betting_deploy.pipeline import DeploymentPipeline, RunResult


def write_deploy_record(path: Path, result: RunResult, contract_name: str, rpc_url: str) -> None:
    payload = {
        "contract": contract_name,
        "contract_address": result.address,
        "deployer": result.signer,
        "tx_hash": result.tx_hash,
        "rpc_url": rpc_url,
        "updated_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n")
    print(f"Wrote {path}", file=sys.stderr)


async def deploy(config: DeployConfig, ledger: Optional[LedgerClient] = None) -> RunResult:
    pipeline = DeploymentPipeline(ledger or Web3LedgerClient(config))
    result = await pipeline.run()
    if result.ok and config.record_path:
        try:
            write_deploy_record(config.record_path, result, pipeline.contract_name, config.rpc_url)
        except OSError as e:
            print(f"Warning: could not write deployment record {config.record_path}: {e}", file=sys.stderr)
    return result


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if argv:
        print(f"Unexpected arguments: {' '.join(argv)} (configure via environment)", file=sys.stderr)
        return 1
    try:
        config = DeployConfig.from_env()
    except ValueError as e:
        print("Error deploying contract:", e, file=sys.stderr)
        return 1
    result = asyncio.run(deploy(config))
    return result.exit_code


def run() -> None:
    sys.exit(main())
