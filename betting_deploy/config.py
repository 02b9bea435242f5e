import dataclasses
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values

DEFAULT_RPC_URL = "http://127.0.0.1:8545"
# Artifact roots produced by the two Hardhat configurations in use.
DEFAULT_ARTIFACT_DIRS = ("artifacts", "src/artifacts")


@dataclasses.dataclass(frozen=True)
class DeployConfig:
    rpc_url: str = DEFAULT_RPC_URL
    private_key: Optional[str] = None
    api_key: Optional[str] = None
    artifacts_dir: Path = Path(DEFAULT_ARTIFACT_DIRS[0])
    rpc_timeout: float = 20.0
    confirmation_timeout: Optional[float] = None
    poll_interval: float = 1.0
    record_path: Optional[Path] = None

    def __repr__(self) -> str:
        # never print key material
        key = "<set>" if self.private_key else None
        return (
            f"DeployConfig(rpc_url={self.rpc_url!r}, private_key={key!r}, "
            f"artifacts_dir={str(self.artifacts_dir)!r})"
        )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, cwd: Optional[Path] = None) -> "DeployConfig":
        """Build the configuration from environment variables.

        ``env`` defaults to ``os.environ`` layered over the project `.env`
        file, and ``cwd`` to the current directory (where `.env` is read
        from and the default artifacts root is picked).
        """
        cwd = cwd or Path.cwd()
        env = load_env(cwd) if env is None else env

        artifacts = env.get("ARTIFACTS_DIR", "").strip()
        if artifacts:
            artifacts_dir = Path(artifacts)
        else:
            artifacts_dir = _default_artifacts_dir(cwd)

        record = env.get("DEPLOY_RECORD_PATH", "").strip()
        return cls(
            rpc_url=env.get("RPC_URL", "").strip() or DEFAULT_RPC_URL,
            private_key=env.get("DEPLOYER_PRIVATE_KEY", "").strip() or None,
            api_key=env.get("RPC_API_KEY", "").strip() or None,
            artifacts_dir=artifacts_dir,
            rpc_timeout=_float(env, "RPC_TIMEOUT", 20.0),
            confirmation_timeout=_float(env, "CONFIRMATION_TIMEOUT", None),
            poll_interval=_float(env, "POLL_INTERVAL", 1.0),
            record_path=Path(record) if record else None,
        )


def load_env(cwd: Path) -> Dict[str, str]:
    """Values from `<cwd>/.env`, overridden by the process environment."""
    values = {k: v for k, v in dotenv_values(cwd / ".env").items() if v is not None}
    values.update(os.environ)
    return values


def _default_artifacts_dir(cwd: Path) -> Path:
    for name in DEFAULT_ARTIFACT_DIRS:
        if (cwd / name).is_dir():
            return cwd / name
    return cwd / DEFAULT_ARTIFACT_DIRS[0]


def _float(env: Mapping[str, str], key: str, default: Optional[float]) -> Optional[float]:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{key} must be positive, got {raw!r}")
    return value
