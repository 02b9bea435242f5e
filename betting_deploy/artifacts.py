"""Lookup of compiled contracts in a Hardhat artifacts tree.

Hardhat writes one JSON file per contract under
``<root>/<source path>/<Contract>.json`` next to a ``.dbg.json`` file, and keeps
compiler input/output under ``<root>/build-info``. Only the contract files
are read here; nothing is compiled.
"""
import dataclasses
import json
from pathlib import Path
from typing import Any, Dict, List

from betting_deploy.errors import ArtifactNotFoundError


@dataclasses.dataclass(frozen=True)
class ContractArtifact:
    name: str
    source: str
    abi: List[Dict[str, Any]]
    bytecode: str

    @property
    def constructor_inputs(self) -> List[Dict[str, Any]]:
        for entry in self.abi:
            if entry.get("type") == "constructor":
                return entry.get("inputs", [])
        return []


class ArtifactStore:
    def __init__(self, root: Path):
        self.root = Path(root)

    def load(self, name: str) -> ContractArtifact:
        """Resolve ``name`` (``Contract`` or ``path/File.sol:Contract``)."""
        path = self._find(name)
        try:
            data = json.loads(path.read_text())
        except (OSError, ValueError) as e:
            raise ArtifactNotFoundError(name, f"unreadable artifact {path}: {e}")

        bytecode = data.get("bytecode") or ""
        if not bytecode.startswith("0x"):
            bytecode = "0x" + bytecode
        if bytecode == "0x":
            raise ArtifactNotFoundError(name, "contract is abstract or an interface and has no bytecode")
        if "__$" in bytecode:
            raise ArtifactNotFoundError(name, "bytecode has unlinked library references")

        return ContractArtifact(
            name=data.get("contractName", name),
            source=data.get("sourceName", ""),
            abi=data.get("abi", []),
            bytecode=bytecode,
        )

    def _find(self, name: str) -> Path:
        if not self.root.is_dir():
            raise ArtifactNotFoundError(name, f"artifacts directory {self.root} does not exist (compile first)")

        if ":" in name:
            source, contract = name.rsplit(":", 1)
            path = self.root / source / f"{contract}.json"
            if not path.is_file():
                raise ArtifactNotFoundError(name)
            return path

        matches = [
            p for p in sorted(self.root.rglob(f"{name}.json"))
            if "build-info" not in p.relative_to(self.root).parts
        ]
        if not matches:
            raise ArtifactNotFoundError(name)
        if len(matches) > 1:
            found = ", ".join(str(p.parent.relative_to(self.root)) + ":" + name for p in matches)
            raise ArtifactNotFoundError(name, f"ambiguous name, use one of {found}")
        return matches[0]
