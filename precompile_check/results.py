"""
Result records written by each stage.

Field names in the JSON documents are stable and camelCase; they are meant
for external inspection and comparison.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from eth_utils import to_checksum_address


@dataclass
class InvocationResult:
    """Outcome of one hash call (raw precompile or wrapper) for one input."""
    input: bytes
    expected_hash: bytes
    returned_hash: Optional[bytes]
    contract_address: bytes
    call_success: bool = True
    error: Optional[str] = None

    @property
    def match(self) -> bool:
        return self.call_success and self.returned_hash == self.expected_hash

    def to_json(self) -> dict[str, Any]:
        doc = {
            "input": self.input.decode("utf-8", errors="replace"),
            "expectedHash": self.expected_hash.hex(),
            "returnedHash": self.returned_hash.hex() if self.returned_hash is not None else "",
            "match": self.match,
            "contractAddress": to_checksum_address(self.contract_address),
            "callSuccess": self.call_success,
        }
        if self.error is not None:
            doc["error"] = self.error
        return doc


@dataclass
class DeploymentRecord:
    block_number: int
    transaction_hash: bytes
    contract_address: bytes
    gas_used: int
    status: int
    bytecode_size: int = 0
    verification_pass: bool = False

    def to_json(self) -> dict[str, Any]:
        return {
            "blockNumber": self.block_number,
            "transactionHash": "0x" + self.transaction_hash.hex(),
            "contractAddress": to_checksum_address(self.contract_address),
            "gasUsed": self.gas_used,
            "bytecodeSize": self.bytecode_size,
            "status": self.status,
            "verificationPass": self.verification_pass,
        }


@dataclass
class RawInvocationReport:
    """Stage 1 document: run metadata plus one result per input."""
    precompile: str
    network: str
    rpc_url: str
    stage: str = "Stage 1 - Raw Precompile Invocation"
    timestamp: str = field(default_factory=lambda: utc_timestamp())
    results: list[InvocationResult] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None and bool(self.results) and all(r.call_success for r in self.results)

    @property
    def all_match(self) -> bool:
        return self.success and all(r.match for r in self.results)

    def to_json(self) -> dict[str, Any]:
        doc = {
            "stage": self.stage,
            "success": self.success,
            "precompile": self.precompile,
            "network": self.network,
            "rpcUrl": self.rpc_url,
            "timestamp": self.timestamp,
            "results": [r.to_json() for r in self.results],
        }
        if self.error is not None:
            doc["error"] = self.error
        return doc


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def save_json(path: Path, document: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(document, f, indent=2)
        f.write("\n")
    return path
