"""
Reference hashing for precompile verification.

The reference digests are the oracle every node result is compared against.
Each supported precompile is described by a PrecompileSpec that pairs its
reserved address with the local hasher producing the same 32-byte output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from Crypto.Hash import RIPEMD160, SHA256


def sha256(data: bytes) -> bytes:
    """Compute SHA-256 hash."""
    return SHA256.new(data).digest()


def ripemd160(data: bytes) -> bytes:
    """Compute RIPEMD-160 hash."""
    return RIPEMD160.new(data).digest()


# ---------------------------------------------------------------------------
# Precompile registry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PrecompileSpec:
    name: str
    address: bytes  # 20 bytes
    hasher: Callable[[bytes], bytes]

    @property
    def address_hex(self) -> str:
        """Short form used in reports, e.g. 0x02."""
        return "0x" + self.address.lstrip(b"\x00").hex().rjust(2, "0")

    def digest(self, data: bytes) -> bytes:
        # Precompiles always return a full word; RIPEMD-160 is left-padded.
        return self.hasher(data).rjust(32, b"\x00")


SHA256_PRECOMPILE = PrecompileSpec(
    name="sha256",
    address=(0x02).to_bytes(20, "big"),
    hasher=sha256,
)

RIPEMD160_PRECOMPILE = PrecompileSpec(
    name="ripemd160",
    address=(0x03).to_bytes(20, "big"),
    hasher=ripemd160,
)

PRECOMPILES: dict[str, PrecompileSpec] = {
    SHA256_PRECOMPILE.name: SHA256_PRECOMPILE,
    RIPEMD160_PRECOMPILE.name: RIPEMD160_PRECOMPILE,
}

DEFAULT_PRECOMPILE = SHA256_PRECOMPILE.name


def get_precompile(name: str) -> PrecompileSpec:
    try:
        return PRECOMPILES[name]
    except KeyError:
        raise ValueError(
            f"Unknown precompile {name!r} (known: {', '.join(sorted(PRECOMPILES))})"
        ) from None


def reference_hash(data: bytes, algorithm: str = DEFAULT_PRECOMPILE) -> bytes:
    """Compute the 32-byte digest a precompile is expected to return for data."""
    return get_precompile(algorithm).digest(data)
