"""Low-level primitives: SHA-256, HKDF-SHA256 and the ChaCha20 keystream.

Everything here is public and deterministic. The only "secret" is
whatever the caller passes in as key material.

HKDF and ChaCha20 come from the `cryptography` package; SHA-256 from
hashlib, as there is nothing to gain from the heavier API for a plain
digest.
"""
from __future__ import annotations

import hashlib

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

SHA256_SIZE = 32
CHACHA20_KEY_SIZE = 32
CHACHA20_NONCE_SIZE = 12

# cryptography's ChaCha20 takes a 16-byte nonce: a 4-byte little-endian
# block counter followed by the 12-byte RFC 7539 nonce.
_INITIAL_COUNTER = b"\x00\x00\x00\x00"


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def sha256_prefix(data: bytes, length: int) -> bytes:
    """First `length` bytes of SHA-256(data)."""
    if not 0 < length <= SHA256_SIZE:
        raise ValueError(f"prefix length must be in 1..{SHA256_SIZE}, got {length}")
    return sha256(data)[:length]


def hkdf_sha256(
    key_material: bytes,
    length: int,
    salt: bytes | None = None,
    info: bytes = b"",
) -> bytes:
    """HKDF-HMAC-SHA256 (RFC 5869) extract-and-expand."""
    return HKDF(
        algorithm=hashes.SHA256(),
        length=length,
        salt=salt,
        info=info,
    ).derive(key_material)


def extend_key(data: bytes) -> bytes:
    """Stretch arbitrary-length key material to a 32-byte ChaCha20 key."""
    return hkdf_sha256(data, CHACHA20_KEY_SIZE)


def keystream(key: bytes, length: int) -> bytes:
    """First `length` bytes of the ChaCha20 keystream seeded by `key`.

    The key is extended with HKDF; the nonce is the last 12 bytes of the
    extended key in reverse order, so the stream depends on `key` alone.
    """
    extended = extend_key(key)
    nonce = extended[::-1][:CHACHA20_NONCE_SIZE]
    cipher = Cipher(algorithms.ChaCha20(extended, _INITIAL_COUNTER + nonce), mode=None)
    encryptor = cipher.encryptor()
    return encryptor.update(b"\x00" * length) + encryptor.finalize()

