"""
Cryptographic utilities for signing and address derivation.

- keccak256 hashing
- secp256k1 ECDSA signing and public key recovery
- Ethereum address derivation (from keys and from CREATE)
"""

from __future__ import annotations

import rlp
from Crypto.Hash import keccak as _keccak_mod
from coincurve import PrivateKey, PublicKey


def keccak256(data: bytes) -> bytes:
    """Compute Keccak-256 hash (NOT SHA3-256)."""
    h = _keccak_mod.new(digest_bits=256)
    h.update(data)
    return h.digest()


# ---------------------------------------------------------------------------
# secp256k1
# ---------------------------------------------------------------------------

def parse_private_key(value: str) -> bytes:
    """Parse a hex private key, with or without the 0x prefix."""
    text = value.strip()
    if text.startswith(("0x", "0X")):
        text = text[2:]
    if len(text) != 64:
        raise ValueError(f"Private key must be 32 bytes of hex, got {len(text)} hex chars")
    try:
        key = bytes.fromhex(text)
    except ValueError:
        raise ValueError("Private key is not valid hex") from None
    # coincurve rejects zero and keys >= curve order
    PrivateKey(key)
    return key


def ecdsa_sign(msg_hash: bytes, private_key: bytes) -> tuple[int, int, int]:
    """Sign a 32-byte message hash with a private key.

    Returns (v, r, s) where v is the recovery id (0 or 1).
    """
    if len(msg_hash) != 32:
        raise ValueError("Message hash must be 32 bytes")
    if len(private_key) != 32:
        raise ValueError("Private key must be 32 bytes")

    pk = PrivateKey(private_key)
    sig = pk.sign_recoverable(msg_hash, hasher=None)
    # coincurve returns 65 bytes: r(32) + s(32) + v(1)
    r = int.from_bytes(sig[:32], "big")
    s = int.from_bytes(sig[32:64], "big")
    v = sig[64]
    return v, r, s


def ecdsa_recover(msg_hash: bytes, v: int, r: int, s: int) -> bytes:
    """Recover the 65-byte uncompressed public key from a signature.

    v is the recovery id (0 or 1).
    """
    if len(msg_hash) != 32:
        raise ValueError("Message hash must be 32 bytes")

    sig_bytes = r.to_bytes(32, "big") + s.to_bytes(32, "big") + bytes([v])
    pub = PublicKey.from_signature_and_message(sig_bytes, msg_hash, hasher=None)
    return pub.format(compressed=False)


def pubkey_to_address(pubkey: bytes) -> bytes:
    """Derive a 20-byte address from a 65-byte (0x04 || x || y) or 64-byte public key."""
    if len(pubkey) == 65:
        pubkey = pubkey[1:]
    if len(pubkey) != 64:
        raise ValueError(f"Expected 64-byte public key, got {len(pubkey)}")
    return keccak256(pubkey)[12:]


def private_key_to_address(private_key: bytes) -> bytes:
    """Derive Ethereum address from a 32-byte private key."""
    pubkey = PrivateKey(private_key).public_key.format(compressed=False)
    return pubkey_to_address(pubkey)


# ---------------------------------------------------------------------------
# Contract addresses
# ---------------------------------------------------------------------------

def compute_create_address(sender: bytes, nonce: int) -> bytes:
    """
    Compute the address of a contract created by a plain CREATE.

    The contract address is the last 20 bytes of:
        keccak256(rlp([sender, nonce]))

    Args:
        sender: 20-byte deployer address
        nonce: Sender's nonce at the time of the deployment transaction

    Returns:
        20-byte contract address

    Raises:
        ValueError: If sender is not 20 bytes or nonce is negative
    """
    if len(sender) != 20:
        raise ValueError(f"Sender must be 20 bytes, got {len(sender)}")
    if nonce < 0:
        raise ValueError("Nonce must be non-negative")

    return keccak256(rlp.encode([sender, nonce]))[12:]
