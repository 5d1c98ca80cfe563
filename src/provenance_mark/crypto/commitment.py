"""Commitment hash binding a mark to its successor's key.

commit() is computed with the *next* key before the next mark exists, so
publishing a mark fixes exactly one possible successor. The hash is
HKDF-SHA256 with the next key as input key material and the SHA-256
digest of the canonical metadata encoding as the HKDF info string,
truncated to the resolution's link_length. Digesting first keeps the
info string a fixed 32 bytes however large the caller's payload is.

Canonical encoding, in this order:

    resolution  1 byte (tier value)
    chain_id    link_length bytes
    sequence    4 bytes big-endian
    date        6 bytes big-endian milliseconds since 2001-01-01Z
    next_key    link_length bytes
    info        0x00 | 0x01 + 4-byte length + payload

Every field before info is fixed width for a given resolution, and the
resolution byte comes first, so the encoding is injective. Field order
must never change: doing so silently invalidates every existing chain.
"""
from __future__ import annotations

from datetime import datetime

from provenance_mark.crypto.primitives import hkdf_sha256, sha256
from provenance_mark.domain.fields import (
    check_info,
    check_link_field,
    encode_date,
    encode_info,
    encode_sequence,
)
from provenance_mark.domain.resolution import Resolution

COMMITMENT_SALT = b"provenance-mark/commitment"


def canonicalize(
    resolution: Resolution,
    chain_id: bytes,
    sequence: int,
    date: datetime,
    info: bytes | None,
    next_key: bytes,
) -> bytes:
    """Deterministic byte string for the commitment input tuple."""
    parts: list[bytes] = [
        bytes([resolution.value]),
        check_link_field("chain_id", chain_id, resolution),
        encode_sequence(sequence),
        encode_date(date),
        check_link_field("next_key", next_key, resolution),
        encode_info(check_info(info)),
    ]
    return b"".join(parts)


def commit(
    resolution: Resolution,
    chain_id: bytes,
    sequence: int,
    date: datetime,
    info: bytes | None,
    next_key: bytes,
) -> bytes:
    """Compute the link_length-byte commitment hash."""
    canonical = canonicalize(resolution, chain_id, sequence, date, info, next_key)
    return hkdf_sha256(
        bytes(next_key),
        resolution.link_length,
        salt=COMMITMENT_SALT,
        info=sha256(canonical),
    )
