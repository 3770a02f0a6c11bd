"""
Stage 2: deploy the wrapper contract with a signed legacy transaction.

The contract address is derived from (sender, nonce) rather than trusted
from the receipt; when the receipt does report one, the two must agree.
Confirmation is a fixed-interval receipt poll bounded by a deadline.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from eth_utils import to_checksum_address

from precompile_check.artifacts import load_bytecode, write_address
from precompile_check.config import Config
from precompile_check.crypto import compute_create_address, private_key_to_address
from precompile_check.errors import StageError
from precompile_check.results import DeploymentRecord, save_json
from precompile_check.rpc import (
    NodeConnectionError,
    RPCClient,
    RPCError,
    TransactionReceipt,
    bytes_to_hex,
)
from precompile_check.transaction import LegacyTransaction

logger = logging.getLogger(__name__)

STAGE = "stage2"

# Nodes answer a resubmission of a pooled transaction with this message.
ALREADY_KNOWN = "already known"


def resolve_chain_id(client: RPCClient, expected: Optional[int] = None) -> int:
    """Return the node's chain id; it is the only value signatures are bound to."""
    try:
        chain_id = client.chain_id()
    except RPCError as e:
        raise StageError(
            f"Node did not report a chain id: {e}", stage=STAGE, context={"endpoint": client.url}
        ) from e
    if expected is not None and expected != chain_id:
        raise StageError(
            f"Configured CHAIN_ID {expected} does not match node chain id {chain_id}",
            stage=STAGE,
            context={"endpoint": client.url},
        )
    return chain_id


def build_deployment_tx(nonce: int, bytecode: bytes, gas_price: int, gas_limit: int) -> LegacyTransaction:
    return LegacyTransaction(
        nonce=nonce,
        gas_price=gas_price,
        gas_limit=gas_limit,
        to=None,  # contract creation
        value=0,
        data=bytecode,
    )


def submit_transaction(client: RPCClient, tx: LegacyTransaction) -> bytes:
    """Send a signed transaction and return its hash.

    A node that already holds the transaction rejects the resubmission with
    "already known"; that is treated as accepted.
    """
    tx_hash = tx.tx_hash()
    try:
        client.send_raw_transaction(tx.encode_rlp())
    except RPCError as e:
        if ALREADY_KNOWN not in e.message.lower():
            raise StageError(
                f"Failed to send transaction: {e}",
                stage=STAGE,
                context={"endpoint": client.url, "tx": bytes_to_hex(tx_hash)},
            ) from e
        logger.warning("Transaction %s already known by node", bytes_to_hex(tx_hash))
    return tx_hash


def wait_for_receipt(
    client: RPCClient,
    tx_hash: bytes,
    timeout: float,
    interval: float,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> TransactionReceipt:
    deadline = clock() + timeout
    while True:
        try:
            receipt = client.get_transaction_receipt(tx_hash)
        except RPCError as e:
            # Some nodes error on unknown hashes instead of returning null.
            logger.debug("Receipt lookup failed: %s", e)
            receipt = None
        if receipt is not None:
            return receipt
        if clock() >= deadline:
            raise StageError(
                f"No receipt after {timeout:g}s; node stalled or chain halted",
                stage=STAGE,
                context={"endpoint": client.url, "tx": bytes_to_hex(tx_hash)},
            )
        sleep(interval)


def deploy_contract(
    client: RPCClient,
    private_key: bytes,
    bytecode: bytes,
    chain_id: int,
    gas_price: int,
    gas_limit: int,
    receipt_timeout: float,
    poll_interval: float,
    sleep: Callable[[float], None] = time.sleep,
) -> DeploymentRecord:
    sender = private_key_to_address(private_key)
    logger.info("Using deployer address %s", to_checksum_address(sender))

    # Always read the pending nonce so repeated runs never reuse a stale one.
    nonce = client.get_transaction_count(sender, "pending")
    logger.info("Nonce: %d", nonce)

    tx = build_deployment_tx(nonce, bytecode, gas_price, gas_limit)
    tx.sign(private_key, chain_id)

    logger.info("Sending deployment transaction %s", bytes_to_hex(tx.tx_hash()))
    tx_hash = submit_transaction(client, tx)

    logger.info("Waiting for transaction to be mined...")
    receipt = wait_for_receipt(client, tx_hash, receipt_timeout, poll_interval, sleep=sleep)

    contract_address = compute_create_address(sender, nonce)
    record = DeploymentRecord(
        block_number=receipt.block_number,
        transaction_hash=tx_hash,
        contract_address=contract_address,
        gas_used=receipt.gas_used,
        status=receipt.status,
    )
    context = {
        "endpoint": client.url,
        "tx": bytes_to_hex(tx_hash),
        "address": to_checksum_address(contract_address),
    }

    if receipt.status != 1:
        raise StageError(
            f"Contract deployment failed (reverted): status {receipt.status}, gas used {receipt.gas_used}",
            stage=STAGE,
            context=context,
        )
    if receipt.contract_address is not None and receipt.contract_address != contract_address:
        raise StageError(
            f"Receipt reports contract at {to_checksum_address(receipt.contract_address)}, "
            f"expected {to_checksum_address(contract_address)} from sender and nonce",
            stage=STAGE,
            context=context,
        )
    logger.info("Transaction mined in block %d", receipt.block_number)
    return record


def verify_deployment(client: RPCClient, record: DeploymentRecord) -> DeploymentRecord:
    code = client.get_code(record.contract_address)
    record.bytecode_size = len(code)
    if not code:
        raise StageError(
            "No contract code found at deployed address",
            stage=STAGE,
            context={"endpoint": client.url, "address": to_checksum_address(record.contract_address)},
        )
    record.verification_pass = True
    logger.info("Contract verification passed, code size %d bytes", record.bytecode_size)
    return record


def run_deployment(
    client: RPCClient,
    config: Config,
    sleep: Callable[[float], None] = time.sleep,
) -> DeploymentRecord:
    """Run stage 2 and write the deployment record and the address file."""
    # Configuration problems surface before any network activity.
    private_key = config.private_key()
    bytecode = load_bytecode(config.bytecode_path)
    logger.info("Bytecode loaded from %s (%d bytes)", config.bytecode_path, len(bytecode))

    try:
        chain_id = resolve_chain_id(client, config.expected_chain_id)
        logger.info("Network chain id: %d", chain_id)
        record = deploy_contract(
            client,
            private_key,
            bytecode,
            chain_id=chain_id,
            gas_price=config.gas_price,
            gas_limit=config.gas_limit,
            receipt_timeout=config.receipt_timeout,
            poll_interval=config.poll_interval,
            sleep=sleep,
        )
        verify_deployment(client, record)
    except (NodeConnectionError, RPCError) as e:
        raise StageError(str(e), stage=STAGE, context={"endpoint": client.url}) from e

    write_address(config.address_file, record.contract_address)
    save_json(config.results_file(2), record.to_json())
    logger.info("Results saved to %s", config.results_file(2))
    return record
