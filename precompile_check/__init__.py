"""Conformance checks for hash precompiles on Ethereum-compatible nodes."""

from precompile_check.hashing import PRECOMPILES, reference_hash
from precompile_check.vectors import TEST_VECTORS

__version__ = "0.1.0"

__all__ = [
    "PRECOMPILES",
    "TEST_VECTORS",
    "reference_hash",
]
