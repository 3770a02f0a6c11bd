"""
Legacy (type 0) transaction encoding and EIP-155 signing.

Only the original transaction format is supported: nonce, gas price, gas
limit, recipient, value, data and the (v, r, s) signature. A missing
recipient marks a contract creation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import rlp

from precompile_check.crypto import (
    ecdsa_recover,
    ecdsa_sign,
    keccak256,
    pubkey_to_address,
)


def _decode_uint(raw: bytes) -> int:
    if len(raw) > 1 and raw[0] == 0:
        raise rlp.DecodingError("Leading zeros in RLP integer", raw)
    return int.from_bytes(raw, "big")


@dataclass
class LegacyTransaction:
    nonce: int = 0
    gas_price: int = 0
    gas_limit: int = 0
    to: Optional[bytes] = None  # None for contract creation
    value: int = 0
    data: bytes = b""

    # Signature
    v: int = 0
    r: int = 0
    s: int = 0

    @property
    def is_contract_creation(self) -> bool:
        return self.to is None

    @property
    def is_signed(self) -> bool:
        return self.r != 0 and self.s != 0

    @property
    def chain_id(self) -> Optional[int]:
        """Chain id bound into an EIP-155 signature, None for pre-EIP-155 v values."""
        if self.v >= 35:
            return (self.v - 35) // 2
        return None

    def to_rlp_list(self) -> list:
        return [
            self.nonce,
            self.gas_price,
            self.gas_limit,
            self.to if self.to is not None else b"",
            self.value,
            self.data,
            self.v,
            self.r,
            self.s,
        ]

    @classmethod
    def from_rlp_list(cls, items: list) -> LegacyTransaction:
        if len(items) != 9:
            raise rlp.DecodingError(f"Legacy transaction has 9 fields, got {len(items)}", items)
        to = items[3]
        if to and len(to) != 20:
            raise rlp.DecodingError(f"Recipient must be 20 bytes, got {len(to)}", to)
        return cls(
            nonce=_decode_uint(items[0]),
            gas_price=_decode_uint(items[1]),
            gas_limit=_decode_uint(items[2]),
            to=to or None,
            value=_decode_uint(items[4]),
            data=items[5],
            v=_decode_uint(items[6]),
            r=_decode_uint(items[7]),
            s=_decode_uint(items[8]),
        )

    def encode_rlp(self) -> bytes:
        return rlp.encode(self.to_rlp_list())

    @classmethod
    def decode_rlp(cls, data: bytes) -> LegacyTransaction:
        if len(data) == 0:
            raise rlp.DecodingError("Empty transaction data", data)
        if data[0] < 0xc0:
            raise rlp.DecodingError("Typed transactions are not supported", data)
        return cls.from_rlp_list(rlp.decode(data))

    def signing_hash(self, chain_id: Optional[int] = None) -> bytes:
        """Compute the hash to be signed (pre-signature)."""
        items = [
            self.nonce, self.gas_price, self.gas_limit,
            self.to if self.to is not None else b"", self.value, self.data,
        ]
        if chain_id is not None:
            # EIP-155
            items += [chain_id, 0, 0]
        return keccak256(rlp.encode(items))

    def sign(self, private_key: bytes, chain_id: int) -> LegacyTransaction:
        """Sign in place with the chain id bound in (EIP-155) and return self."""
        recovery_id, r, s = ecdsa_sign(self.signing_hash(chain_id), private_key)
        self.v = chain_id * 2 + 35 + recovery_id
        self.r = r
        self.s = s
        return self

    def tx_hash(self) -> bytes:
        return keccak256(self.encode_rlp())

    def sender(self) -> bytes:
        """Recover sender address from signature."""
        if not self.is_signed:
            raise ValueError("Transaction is not signed")

        chain_id = self.chain_id
        if chain_id is not None:
            recovery_id = self.v - 35 - 2 * chain_id
        else:
            recovery_id = self.v - 27
        if recovery_id not in (0, 1):
            raise ValueError(f"Invalid signature v value: {self.v}")

        pubkey = ecdsa_recover(self.signing_hash(chain_id), recovery_id, self.r, self.s)
        return pubkey_to_address(pubkey)
