import json
import os
import sys

import pytest

# Ensure project root is on sys.path so tests can import local package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

BYTECODE = "0x6080604052348015600f57600080fd5b50603f80601d6000396000f3fe6080604052600080fdfe"


@pytest.fixture
def write_artifact(tmp_path):
    root = tmp_path / "artifacts"

    def _write(name="BettingPlatform", source=None, abi=None, bytecode=BYTECODE):
        source = source or f"contracts/{name}.sol"
        d = root / source
        d.mkdir(parents=True, exist_ok=True)
        payload = {
            "_format": "hh-sol-artifact-1",
            "contractName": name,
            "sourceName": source,
            "abi": abi or [],
            "bytecode": bytecode,
            "deployedBytecode": bytecode,
            "linkReferences": {},
            "deployedLinkReferences": {},
        }
        (d / f"{name}.json").write_text(json.dumps(payload))
        (d / f"{name}.dbg.json").write_text(json.dumps({"_format": "hh-sol-dbg-1", "buildInfo": "../../build-info/x.json"}))
        return root

    root.mkdir()
    return _write
