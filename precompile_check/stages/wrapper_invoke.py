"""
Stage 3: call the deployed wrapper for every test vector.

Failures are isolated per input: a revert or an undecodable return value is
recorded against that vector and the loop continues. Only conditions that
leave nothing to test (no code at the address, unreachable node, unusable
ABI) abort the stage.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import function_abi_to_4byte_selector, to_checksum_address

from precompile_check.artifacts import find_function_abi, load_abi, read_address
from precompile_check.config import Config
from precompile_check.errors import ConfigError, StageError
from precompile_check.hashing import PrecompileSpec, get_precompile
from precompile_check.results import InvocationResult, save_json
from precompile_check.rpc import NodeConnectionError, RPCClient, RPCError
from precompile_check.vectors import TEST_VECTORS, display_input

logger = logging.getLogger(__name__)

STAGE = "stage3"


def load_wrapper_function(abi: list[dict], name: str) -> dict:
    """Find the hashing entry point; it must be f(bytes) returns (bytes32)."""
    fn_abi = find_function_abi(abi, name)
    if fn_abi is None:
        raise ConfigError(f"Function {name!r} not found in ABI", stage=STAGE)
    inputs = [p.get("type") for p in fn_abi.get("inputs", [])]
    outputs = [p.get("type") for p in fn_abi.get("outputs", [])]
    if inputs != ["bytes"] or outputs != ["bytes32"]:
        raise ConfigError(
            f"{name}({','.join(inputs)}) returns ({','.join(outputs)}); "
            "expected (bytes) returns (bytes32)",
            stage=STAGE,
        )
    return fn_abi


def encode_hash_call(fn_abi: dict, data: bytes) -> bytes:
    return function_abi_to_4byte_selector(fn_abi) + encode(["bytes"], [data])


def decode_hash_result(raw: bytes) -> bytes:
    (value,) = decode(["bytes32"], raw)
    return value


def verify_contract_code(client: RPCClient, address: bytes) -> int:
    code = client.get_code(address)
    if not code:
        raise StageError(
            "No contract code found at address",
            stage=STAGE,
            context={"endpoint": client.url, "address": to_checksum_address(address)},
        )
    logger.info("Contract verified (code size: %d bytes)", len(code))
    return len(code)


def invoke_wrapper(
    client: RPCClient,
    address: bytes,
    fn_abi: dict,
    precompile: PrecompileSpec,
    data: bytes,
) -> InvocationResult:
    result = InvocationResult(
        input=data,
        expected_hash=precompile.digest(data),
        returned_hash=None,
        contract_address=address,
    )
    try:
        raw = client.call(address, encode_hash_call(fn_abi, data))
        result.returned_hash = decode_hash_result(raw)
    except RPCError as e:
        result.call_success = False
        result.error = f"contract call failed: {e}"
    except (DecodingError, EncodingError) as e:
        result.call_success = False
        result.error = f"failed to decode result: {e}"
    if result.error:
        logger.warning("Test failed for input %r: %s", display_input(data), result.error)
    return result


def run_wrapper_invocation(
    client: RPCClient,
    config: Config,
    address: Optional[bytes] = None,
    vectors: Iterable[bytes] = TEST_VECTORS,
) -> list[InvocationResult]:
    """Run stage 3 and write the ordered result list.

    address defaults to the one recorded in the deployed-address file.
    """
    if address is None:
        address = read_address(config.address_file)
    fn_abi = load_wrapper_function(load_abi(config.abi_path), config.wrapper_function)
    try:
        precompile = get_precompile(config.precompile)
    except ValueError as e:
        raise ConfigError(str(e), stage=STAGE) from None
    logger.info("Using contract at %s", to_checksum_address(address))

    results: list[InvocationResult] = []
    try:
        verify_contract_code(client, address)
        for data in vectors:
            results.append(invoke_wrapper(client, address, fn_abi, precompile, data))
    except (NodeConnectionError, RPCError) as e:
        raise StageError(
            str(e),
            stage=STAGE,
            context={"endpoint": client.url, "address": to_checksum_address(address)},
        ) from e

    output = config.results_file(3)
    save_json(output, [r.to_json() for r in results])
    logger.info("Results saved to %s", output)
    return results
