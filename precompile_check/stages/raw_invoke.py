"""
Stage 1: call the hash precompile directly at its reserved address.

The call is a read-only eth_call with the raw input as call data. The bytes
returned are the digest; nothing is decoded. A call-level error is not a
transient condition (it means the node does not route the address to its
native routine), so it aborts the stage without retry.
"""

from __future__ import annotations

import logging
from typing import Iterable

from precompile_check.config import Config
from precompile_check.errors import StageError
from precompile_check.hashing import PrecompileSpec, get_precompile
from precompile_check.results import InvocationResult, RawInvocationReport, save_json
from precompile_check.rpc import NodeConnectionError, RPCClient, RPCError
from precompile_check.vectors import TEST_VECTORS, display_input

logger = logging.getLogger(__name__)

STAGE = "stage1"


def invoke_precompile(client: RPCClient, precompile: PrecompileSpec, data: bytes) -> InvocationResult:
    expected = precompile.digest(data)
    returned = client.call(precompile.address, data)
    if len(returned) != 32:
        logger.warning(
            "Precompile %s returned %d bytes for %r, expected 32",
            precompile.address_hex, len(returned), display_input(data),
        )
    return InvocationResult(
        input=data,
        expected_hash=expected,
        returned_hash=returned,
        contract_address=precompile.address,
    )


def check_network(client: RPCClient) -> int:
    """Log what the node reports about its network and return the chain id."""
    network_id = client.net_version()
    chain_id = client.chain_id()
    logger.info("Connected to %s (network id %s, chain id %d)", client.url, network_id, chain_id)
    return chain_id


def run_raw_invocation(
    client: RPCClient,
    config: Config,
    vectors: Iterable[bytes] = TEST_VECTORS,
) -> RawInvocationReport:
    """Run stage 1 over every vector and write the report.

    The report is written even when the stage aborts, with the error and the
    results collected up to that point.
    """
    try:
        precompile = get_precompile(config.precompile)
    except ValueError as e:
        raise StageError(str(e), stage=STAGE) from None

    report = RawInvocationReport(
        precompile=precompile.address_hex,
        network=config.network_name,
        rpc_url=client.url,
    )
    output = config.results_file(1)
    context = {"endpoint": client.url, "precompile": precompile.address_hex}

    try:
        check_network(client)
    except (NodeConnectionError, RPCError) as e:
        report.error = f"Network verification error: {e}"
        save_json(output, report.to_json())
        raise StageError(report.error, stage=STAGE, context=context) from e

    for data in vectors:
        try:
            result = invoke_precompile(client, precompile, data)
        except NodeConnectionError as e:
            report.error = f"Client connection error: {e}"
            save_json(output, report.to_json())
            raise StageError(report.error, stage=STAGE, context=context) from e
        except RPCError as e:
            report.results.append(InvocationResult(
                input=data,
                expected_hash=precompile.digest(data),
                returned_hash=None,
                contract_address=precompile.address,
                call_success=False,
                error=str(e),
            ))
            report.error = f"Precompile call error: {e}"
            save_json(output, report.to_json())
            raise StageError(report.error, stage=STAGE, context=context) from e

        report.results.append(result)
        logger.info(
            "%s %r expected=%s returned=%s",
            "match" if result.match else "MISMATCH",
            display_input(data), result.expected_hash.hex(), result.returned_hash.hex(),
        )

    save_json(output, report.to_json())
    logger.info("Results saved to %s", output)
    return report
