"""Resolution tiers -- the one parameter table every component reads.

A resolution fixes link_length: the byte width of keys, hashes and
chain identifiers for every mark in a chain. Higher tiers trade encoded
size for a lower forgery/collision probability.

    LOW       4 bytes
    MEDIUM    8 bytes
    QUARTILE 16 bytes
    HIGH     32 bytes

The enum value (0-3) is the stable tag written into the commitment
encoding and used by external serializers.
"""
from __future__ import annotations

from enum import Enum

from provenance_mark.errors import MalformedField


class Resolution(Enum):
    LOW = 0
    MEDIUM = 1
    QUARTILE = 2
    HIGH = 3

    @property
    def link_length(self) -> int:
        """Byte length of key, hash and chain_id at this tier."""
        return _LINK_LENGTHS[self]

    @classmethod
    def from_value(cls, value: int | str) -> Resolution:
        """Look up a tier by its numeric tag or lower-case name.

        Raises MalformedField for unknown tags.
        """
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise MalformedField(
                    "resolution", f"unknown resolution name {value!r}"
                ) from None
        if isinstance(value, bool) or not isinstance(value, int):
            raise MalformedField(
                "resolution", f"expected int or str, got {type(value).__name__}"
            )
        try:
            return cls(value)
        except ValueError:
            raise MalformedField(
                "resolution", f"invalid resolution value {value}"
            ) from None

    def __str__(self) -> str:
        return self.name.lower()


_LINK_LENGTHS: dict[Resolution, int] = {
    Resolution.LOW: 4,
    Resolution.MEDIUM: 8,
    Resolution.QUARTILE: 16,
    Resolution.HIGH: 32,
}
