"""
Command-line entry point.

  precompile-check raw       Stage 1: call the precompile directly
  precompile-check deploy    Stage 2: deploy the wrapper contract
  precompile-check invoke    Stage 3: call the wrapper for every test vector
  precompile-check all       Stages 1-3 in one process
  precompile-check compile   Regenerate wrapper artifacts with solc

Exit status is 0 when every comparison matched, 1 on a fatal error or any
mismatch, 2 on usage errors.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from eth_utils import to_checksum_address

from precompile_check.artifacts import compile_contract
from precompile_check.config import Config
from precompile_check.errors import StageError
from precompile_check.hashing import PRECOMPILES
from precompile_check.results import DeploymentRecord, InvocationResult, RawInvocationReport
from precompile_check.rpc import RPCClient
from precompile_check.stages import run_deployment, run_raw_invocation, run_wrapper_invocation
from precompile_check.vectors import display_input

logger = logging.getLogger("precompile_check")


# ---------------------------------------------------------------------------
# Console output
# ---------------------------------------------------------------------------

def print_invocation_results(title: str, results: list[InvocationResult]) -> None:
    print(f"\n=== {title} ===")
    for res in results:
        status = "✅" if res.match else "❌"
        print(f"{status} Input: '{display_input(res.input)}'")
        print(f"  Expected: {res.expected_hash.hex()}")
        if res.call_success:
            print(f"  Got:      {res.returned_hash.hex()}")
        else:
            print(f"  Error:    {res.error}")


def print_raw_report(report: RawInvocationReport) -> None:
    print(f"\nRPC Endpoint: {report.rpc_url}")
    print(f"Precompile Address: {report.precompile}")
    print_invocation_results("Precompile Call Results", report.results)


def print_deployment(record: DeploymentRecord) -> None:
    print("\n🚀 Deployment successful!")
    print(f"📌 Contract Address: {to_checksum_address(record.contract_address)}")
    print(f"   Block: {record.block_number}  Gas used: {record.gas_used}  Code size: {record.bytecode_size} bytes")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_raw(client: RPCClient, config: Config) -> bool:
    report = run_raw_invocation(client, config)
    print_raw_report(report)
    print(f"\n📝 Results saved to {config.results_file(1)}")
    return report.all_match


def cmd_deploy(client: RPCClient, config: Config) -> bool:
    record = run_deployment(client, config)
    print_deployment(record)
    print(f"📝 Results saved to {config.results_file(2)}")
    return record.verification_pass


def cmd_invoke(client: RPCClient, config: Config) -> bool:
    results = run_wrapper_invocation(client, config)
    print_invocation_results("Wrapper Call Results", results)
    print(f"\n📝 Results saved to {config.results_file(3)}")
    return bool(results) and all(r.match for r in results)


def cmd_all(client: RPCClient, config: Config) -> bool:
    raw_ok = cmd_raw(client, config)
    record = run_deployment(client, config)
    print_deployment(record)
    results = run_wrapper_invocation(client, config, address=record.contract_address)
    print_invocation_results("Wrapper Call Results", results)
    return raw_ok and all(r.match for r in results)


COMMANDS = {
    "raw": cmd_raw,
    "deploy": cmd_deploy,
    "invoke": cmd_invoke,
    "all": cmd_all,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="precompile-check",
        description="Verify a hash precompile gives the same digest called directly and through a wrapper contract",
    )
    parser.add_argument(
        "command",
        choices=[*COMMANDS, "compile"],
        help="Stage to run",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file (default: ./.env)",
    )
    parser.add_argument(
        "--rpc-url",
        type=str,
        default=None,
        help="Node JSON-RPC endpoint (overrides RPC_URL / RPC_HOST / RPC_PORT)",
    )
    parser.add_argument(
        "--results-dir",
        type=Path,
        default=None,
        help="Directory for result files and the deployed address file",
    )
    parser.add_argument(
        "--precompile",
        choices=sorted(PRECOMPILES),
        default=None,
        help="Precompile under test (default: sha256)",
    )
    parser.add_argument(
        "--source",
        type=Path,
        default=Path("contracts/Sha256Wrapper.sol"),
        help="Solidity source for the compile command",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    overrides = {}
    if args.rpc_url:
        overrides["rpc_url"] = args.rpc_url
    if args.results_dir:
        overrides["results_dir"] = args.results_dir
    if args.precompile:
        overrides["precompile"] = args.precompile
    return dataclasses.replace(config, **overrides)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = apply_overrides(Config.from_env(env_file=args.env_file), args)

        if args.command == "compile":
            compile_contract(args.source, config.artifacts_dir)
            return 0

        with RPCClient(config.rpc_url, timeout=config.rpc_timeout) as client:
            ok = COMMANDS[args.command](client, config)
    except StageError as e:
        logger.error("%s", e)
        return 1

    if not ok:
        logger.error("Verification failed: not every result matched the reference hash")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
