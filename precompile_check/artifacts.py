"""
Compiled contract artifacts and the deployed-address hand-off file.

Bytecode (.bin, hex) and ABI (.abi, JSON) are produced by solc and consumed
read-only. compile_contract() shells out to solc to regenerate them.
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Optional

from eth_utils import is_hex_address, to_canonical_address, to_checksum_address

from precompile_check.errors import ConfigError

logger = logging.getLogger(__name__)


def load_bytecode(path: Path) -> bytes:
    """Read a hex bytecode file (optional 0x prefix, surrounding whitespace ignored)."""
    try:
        text = Path(path).read_text().strip()
    except OSError as e:
        raise ConfigError(f"Failed to read bytecode: {e}", stage="config", context={"path": path}) from None
    if text.startswith(("0x", "0X")):
        text = text[2:]
    if not text:
        raise ConfigError("Bytecode file is empty", stage="config", context={"path": path})
    try:
        return bytes.fromhex(text)
    except ValueError:
        raise ConfigError("Bytecode file is not valid hex", stage="config", context={"path": path}) from None


def load_abi(path: Path) -> list[dict]:
    try:
        abi = json.loads(Path(path).read_text())
    except OSError as e:
        raise ConfigError(f"Failed to read ABI: {e}", stage="config", context={"path": path}) from None
    except json.JSONDecodeError as e:
        raise ConfigError(f"Failed to parse ABI: {e}", stage="config", context={"path": path}) from None
    if not isinstance(abi, list):
        raise ConfigError("ABI must be a JSON array", stage="config", context={"path": path})
    return abi


def find_function_abi(abi: list[dict], name: str) -> Optional[dict]:
    for item in abi:
        if item.get("type") == "function" and item.get("name") == name:
            return item
    return None


def compile_contract(sol_file: Path, output_dir: Path, solc: str = "solc") -> list[Path]:
    """
    Compile a Solidity file into <Contract>.bin / <Contract>.abi files.

    Args:
        sol_file: Solidity source file
        output_dir: Directory receiving the artifacts
        solc: solc executable to run

    Returns:
        Paths of the written artifacts
    """
    if not sol_file.exists():
        raise ConfigError("Contract source not found", stage="compile", context={"path": sol_file})

    output_dir.mkdir(parents=True, exist_ok=True)
    try:
        result = subprocess.run(
            [solc, "--bin", "--abi", "--optimize", "--overwrite", "-o", str(output_dir), str(sol_file)],
            capture_output=True,
            text=True,
        )
    except FileNotFoundError:
        raise ConfigError(f"Compiler not found: {solc}", stage="compile") from None

    if result.returncode != 0:
        raise ConfigError(f"Compilation failed:\n{result.stderr}", stage="compile", context={"path": sol_file})

    written = sorted(output_dir.glob(f"{sol_file.stem}.*"))
    for path in written:
        logger.info("Wrote %s", path)
    return written


# ---------------------------------------------------------------------------
# Deployed address hand-off
# ---------------------------------------------------------------------------

def write_address(path: Path, address: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_checksum_address(address))


def read_address(path: Path) -> bytes:
    """Read the deployed address written by the deploy stage."""
    try:
        text = Path(path).read_text().strip()
    except OSError as e:
        raise ConfigError(
            f"Failed to read deployed address: {e}", stage="config", context={"path": path}
        ) from None
    if not is_hex_address(text):
        raise ConfigError(
            f"Deployed address file does not hold an address: {text!r}",
            stage="config",
            context={"path": path},
        )
    return to_canonical_address(text)
