"""
Run configuration loaded from the environment.

A .env file is read with python-dotenv; variables already present in the
process environment win over the file. CLI flags are applied on top by the
caller via dataclasses.replace().
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from precompile_check.crypto import parse_private_key
from precompile_check.errors import ConfigError
from precompile_check.hashing import DEFAULT_PRECOMPILE


DEFAULT_RPC_HOST = "127.0.0.1"
DEFAULT_RPC_PORT = 8545
DEFAULT_RPC_TIMEOUT = 10.0

DEFAULT_GAS_PRICE = 1_000_000_000  # 1 gwei
DEFAULT_GAS_LIMIT = 2_000_000
DEFAULT_RECEIPT_TIMEOUT = 180.0
DEFAULT_POLL_INTERVAL = 2.0

DEFAULT_CONTRACT_NAME = "Sha256Wrapper"
DEFAULT_WRAPPER_FUNCTION = "sha256Hash"

STAGE1_RESULTS_FILE = "results_stage1.json"
STAGE2_RESULTS_FILE = "results_stage2.json"
STAGE3_RESULTS_FILE = "results_stage3.json"
DEPLOYED_ADDRESS_FILE = "deployed_address.txt"


@dataclass(frozen=True)
class Config:
    rpc_url: str = f"http://{DEFAULT_RPC_HOST}:{DEFAULT_RPC_PORT}"
    rpc_timeout: float = DEFAULT_RPC_TIMEOUT
    private_key_hex: Optional[str] = None
    expected_chain_id: Optional[int] = None
    network_name: str = "devnet"
    precompile: str = DEFAULT_PRECOMPILE

    artifacts_dir: Path = Path("artifacts")
    contract_name: str = DEFAULT_CONTRACT_NAME
    wrapper_function: str = DEFAULT_WRAPPER_FUNCTION
    results_dir: Path = Path(".")

    gas_price: int = DEFAULT_GAS_PRICE
    gas_limit: int = DEFAULT_GAS_LIMIT
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL

    # -- derived paths ------------------------------------------------------

    @property
    def bytecode_path(self) -> Path:
        return self.artifacts_dir / f"{self.contract_name}.bin"

    @property
    def abi_path(self) -> Path:
        return self.artifacts_dir / f"{self.contract_name}.abi"

    @property
    def address_file(self) -> Path:
        return self.results_dir / DEPLOYED_ADDRESS_FILE

    def results_file(self, stage: int) -> Path:
        names = {1: STAGE1_RESULTS_FILE, 2: STAGE2_RESULTS_FILE, 3: STAGE3_RESULTS_FILE}
        return self.results_dir / names[stage]

    def private_key(self) -> bytes:
        """Return the deployer key, failing if it is absent or malformed."""
        if not self.private_key_hex:
            raise ConfigError("DEPLOYER_PRIVATE_KEY is not set", stage="config")
        try:
            return parse_private_key(self.private_key_hex)
        except ValueError as e:
            raise ConfigError(f"Invalid DEPLOYER_PRIVATE_KEY: {e}", stage="config") from None

    # -- loading ------------------------------------------------------------

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        env_file: Optional[Path] = None,
    ) -> Config:
        """Build a Config from environment variables.

        When env is None the process environment is used, after loading
        env_file (or ./.env) into it. ./.env is optional; an explicit
        env_file must exist.
        """
        if env is None:
            if env_file is not None and not Path(env_file).exists():
                raise ConfigError(f"env file not found: {env_file}", stage="config")
            load_dotenv(env_file or Path(".env"), override=False)
            env = os.environ

        rpc_url = env.get("RPC_URL")
        if not rpc_url:
            host = env.get("RPC_HOST") or DEFAULT_RPC_HOST
            port = _parse_int(env, "RPC_PORT", DEFAULT_RPC_PORT)
            rpc_url = f"http://{host}:{port}"

        chain_id = env.get("CHAIN_ID")
        return cls(
            rpc_url=rpc_url,
            rpc_timeout=_parse_float(env, "RPC_TIMEOUT", DEFAULT_RPC_TIMEOUT),
            private_key_hex=env.get("DEPLOYER_PRIVATE_KEY") or None,
            expected_chain_id=_parse_int(env, "CHAIN_ID", 0) if chain_id else None,
            network_name=env.get("NETWORK_NAME") or "devnet",
            precompile=env.get("PRECOMPILE") or DEFAULT_PRECOMPILE,
            artifacts_dir=Path(env.get("ARTIFACTS_DIR") or "artifacts"),
            contract_name=env.get("CONTRACT_NAME") or DEFAULT_CONTRACT_NAME,
            wrapper_function=env.get("WRAPPER_FUNCTION") or DEFAULT_WRAPPER_FUNCTION,
            results_dir=Path(env.get("RESULTS_DIR") or "."),
            gas_price=_parse_int(env, "GAS_PRICE", DEFAULT_GAS_PRICE),
            gas_limit=_parse_int(env, "GAS_LIMIT", DEFAULT_GAS_LIMIT),
            receipt_timeout=_parse_float(env, "RECEIPT_TIMEOUT", DEFAULT_RECEIPT_TIMEOUT),
            poll_interval=_parse_float(env, "POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
        )


def _parse_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    try:
        value = int(raw, 0)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}", stage="config") from None
    if value < 0:
        raise ConfigError(f"{name} must be non-negative, got {value}", stage="config")
    return value


def _parse_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}", stage="config") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}", stage="config")
    return value
