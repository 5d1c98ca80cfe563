"""Forward key chain: key advancement, chain identity and seeds.

advance_key is the one-way step between consecutive marks. Knowing a
mark's key lets anyone compute the successor's key and check it, but
the successor's key alone reveals nothing about its predecessor. The
step is a ChaCha20 keystream seeded by the key, truncated to the
resolution's link_length.

The genesis key is the seed itself. The chain identifier is a SHA-256
prefix of the seed, so a genesis mark can be recognised from its own
key and chain_id without the seed being supplied separately.
"""
from __future__ import annotations

import os

from provenance_mark.crypto.primitives import extend_key, keystream, sha256_prefix
from provenance_mark.domain.fields import check_link_field
from provenance_mark.domain.resolution import Resolution
from provenance_mark.errors import InvalidSeedLength, MalformedField


def advance_key(key: bytes, resolution: Resolution) -> bytes:
    """Return the key of the next mark in the chain.

    Raises MalformedField if `key` is not link_length bytes.
    """
    key = check_link_field("key", key, resolution)
    return keystream(key, resolution.link_length)


def derive_chain_id(seed: bytes, resolution: Resolution) -> bytes:
    """Chain identifier for a chain started from `seed`."""
    seed = check_seed(seed, resolution)
    return sha256_prefix(seed, resolution.link_length)


def check_seed(seed: object, resolution: Resolution) -> bytes:
    """Return seed as bytes, raising InvalidSeedLength on a width mismatch."""
    if not isinstance(seed, (bytes, bytearray, memoryview)):
        raise MalformedField("seed", f"expected bytes, got {type(seed).__name__}")
    data = bytes(seed)
    if len(data) != resolution.link_length:
        raise InvalidSeedLength(resolution.link_length, len(data))
    return data


def generate_seed(resolution: Resolution) -> bytes:
    """Draw a fresh seed from the OS CSPRNG.

    Store it securely if you ever need verify_genesis: it is the only
    input from which the chain identifier can be re-derived.
    """
    return os.urandom(resolution.link_length)


def seed_from_passphrase(passphrase: str, resolution: Resolution) -> bytes:
    """Deterministic seed from a passphrase (HKDF-SHA256 over its UTF-8 bytes).

    Only as strong as the passphrase. Useful for reproducible chains in
    tests and demos.
    """
    return extend_key(passphrase.encode("utf-8"))[: resolution.link_length]
