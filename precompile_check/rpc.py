"""
Synchronous JSON-RPC 2.0 client for an Ethereum execution node.

Implements only the handful of eth_* methods the verification stages need.
Transport failures raise NodeConnectionError; error objects returned by the
node raise RPCError with the node's code and message.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class RPCError(Exception):
    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def __str__(self) -> str:
        return f"RPC error {self.code}: {self.message}"


class NodeConnectionError(Exception):
    """The node could not be reached or answered with something other than JSON-RPC."""


# ---------------------------------------------------------------------------
# Hex helpers
# ---------------------------------------------------------------------------

def hex_to_int(value: str) -> int:
    return int(value, 16)


def int_to_hex(value: int) -> str:
    return hex(value)


def bytes_to_hex(value: bytes) -> str:
    return "0x" + value.hex()


def hex_to_bytes(value: str) -> bytes:
    if value.startswith("0x") or value.startswith("0X"):
        value = value[2:]
    if len(value) % 2:
        value = "0" + value
    return bytes.fromhex(value)


# ---------------------------------------------------------------------------
# Receipt
# ---------------------------------------------------------------------------

@dataclass
class TransactionReceipt:
    transaction_hash: bytes
    block_number: int
    gas_used: int
    status: int
    contract_address: Optional[bytes] = None

    @classmethod
    def from_json(cls, data: dict) -> TransactionReceipt:
        contract_address = data.get("contractAddress")
        return cls(
            transaction_hash=hex_to_bytes(data["transactionHash"]),
            block_number=hex_to_int(data["blockNumber"]),
            gas_used=hex_to_int(data["gasUsed"]),
            # Pre-Byzantium receipts carry a state root instead of a status.
            status=hex_to_int(data["status"]) if data.get("status") else 0,
            contract_address=hex_to_bytes(contract_address) if contract_address else None,
        )


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class RPCClient:
    """Blocking JSON-RPC client bound to one node endpoint."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        http: Optional[httpx.Client] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._owns_http = http is None
        self._http = http if http is not None else httpx.Client(timeout=timeout)
        self._ids = itertools.count(1)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> RPCClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def request(self, method: str, params: Optional[list] = None) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": next(self._ids),
        }
        logger.debug("-> %s %s", method, payload["params"])
        try:
            response = self._http.post(self.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            raise NodeConnectionError(f"{method} to {self.url} failed: {e}") from e
        except ValueError as e:
            raise NodeConnectionError(f"{method} to {self.url} returned invalid JSON: {e}") from e

        if not isinstance(body, dict):
            raise NodeConnectionError(f"{method} to {self.url} returned a non-object response")
        error = body.get("error")
        if error is not None:
            raise RPCError(error.get("code", 0), error.get("message", ""), error.get("data"))
        logger.debug("<- %s %s", method, body.get("result"))
        return body.get("result")

    # -- eth_* methods ------------------------------------------------------

    def chain_id(self) -> int:
        return hex_to_int(self.request("eth_chainId"))

    def net_version(self) -> str:
        return str(self.request("net_version"))

    def block_number(self) -> int:
        return hex_to_int(self.request("eth_blockNumber"))

    def get_transaction_count(self, address: bytes, block: str = "pending") -> int:
        return hex_to_int(self.request("eth_getTransactionCount", [bytes_to_hex(address), block]))

    def call(self, to: bytes, data: bytes, block: str = "latest") -> bytes:
        """Read-only eth_call; no transaction is created."""
        result = self.request("eth_call", [{"to": bytes_to_hex(to), "data": bytes_to_hex(data)}, block])
        return hex_to_bytes(result or "0x")

    def send_raw_transaction(self, raw_tx: bytes) -> bytes:
        return hex_to_bytes(self.request("eth_sendRawTransaction", [bytes_to_hex(raw_tx)]))

    def get_transaction_receipt(self, tx_hash: bytes) -> Optional[TransactionReceipt]:
        result = self.request("eth_getTransactionReceipt", [bytes_to_hex(tx_hash)])
        if result is None:
            return None
        return TransactionReceipt.from_json(result)

    def get_code(self, address: bytes, block: str = "latest") -> bytes:
        return hex_to_bytes(self.request("eth_getCode", [bytes_to_hex(address), block]) or "0x")
