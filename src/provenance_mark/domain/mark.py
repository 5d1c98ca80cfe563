"""ProvenanceMark -- immutable record issued at each step of a chain.

A mark stores:
- resolution and chain_id (fixed for the whole chain)
- sequence: zero-based position in the chain
- date: UTC, millisecond precision
- key: this mark's key, revealed when the mark is published
- hash: commitment to this mark's metadata and the *next* mark's key
- info: optional opaque payload describing the protected work

Constructing a mark never computes anything cryptographic. Decoders
call from_fields() with values read off the wire; only the validator
recomputes hashes.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from provenance_mark.domain.fields import (
    check_info,
    check_link_field,
    check_sequence,
    encode_date,
    encode_info,
    encode_sequence,
    normalize_date,
)
from provenance_mark.domain.resolution import Resolution
from provenance_mark.errors import MalformedField

if TYPE_CHECKING:
    from provenance_mark.crypto.validator import ValidationResult


@dataclass(frozen=True, slots=True)
class ProvenanceMark:
    """One link of a provenance chain.

    frozen=True makes the mark a pure value: equal fields, equal marks.
    Field values are checked in __post_init__ and raise MalformedField.
    """

    resolution: Resolution
    chain_id: bytes
    sequence: int
    date: datetime
    key: bytes
    hash: bytes
    info: bytes | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.resolution, Resolution):
            raise MalformedField(
                "resolution",
                f"expected Resolution, got {type(self.resolution).__name__}",
            )
        res = self.resolution
        # Bytes-like inputs are copied to immutable bytes.
        object.__setattr__(self, "chain_id", check_link_field("chain_id", self.chain_id, res))
        object.__setattr__(self, "key", check_link_field("key", self.key, res))
        object.__setattr__(self, "hash", check_link_field("hash", self.hash, res))
        object.__setattr__(self, "sequence", check_sequence(self.sequence))
        object.__setattr__(self, "date", normalize_date(self.date))
        object.__setattr__(self, "info", check_info(self.info))

    @classmethod
    def from_fields(
        cls,
        resolution: Resolution | int | str,
        chain_id: bytes,
        sequence: int,
        date: datetime,
        key: bytes,
        hash: bytes,
        info: bytes | None = None,
    ) -> ProvenanceMark:
        """Build a mark from already-decoded field values.

        Accepts the resolution as a Resolution, its numeric tag or its
        name. Never recomputes `hash`.
        """
        if not isinstance(resolution, Resolution):
            resolution = Resolution.from_value(resolution)
        return cls(
            resolution=resolution,
            chain_id=chain_id,
            sequence=sequence,
            date=date,
            key=key,
            hash=hash,
            info=info,
        )

    @property
    def link_length(self) -> int:
        return self.resolution.link_length

    @property
    def sequence_bytes(self) -> bytes:
        """Sequence as 4 big-endian bytes."""
        return encode_sequence(self.sequence)

    @property
    def date_bytes(self) -> bytes:
        """Date as 6 big-endian bytes of milliseconds since 2001-01-01Z."""
        return encode_date(self.date)

    @property
    def info_payload(self) -> bytes:
        """Tagged info exactly as the commitment encodes it.

        0x00 when there is no info, else 0x01 + 4-byte length + payload.
        """
        return encode_info(self.info)

    def identifier(self) -> str:
        """First four bytes of the hash as 8 lowercase hex characters."""
        return self.hash[:4].hex()

    def is_genesis(self) -> bool:
        """True for sequence 0 whose chain_id derives from its own key.

        The genesis key is the chain seed, so this needs no outside input.
        """
        from provenance_mark.crypto.keys import derive_chain_id

        return self.sequence == 0 and self.chain_id == derive_chain_id(
            self.key, self.resolution
        )

    def precedes(self, successor: ProvenanceMark) -> bool:
        """True if `successor` is a valid immediate successor of this mark."""
        return self.check_successor(successor).is_valid

    def check_successor(self, successor: ProvenanceMark) -> ValidationResult:
        from provenance_mark.crypto.validator import verify_adjacent

        return verify_adjacent(self, successor)

    def __str__(self) -> str:
        return f"ProvenanceMark({self.identifier()})"
