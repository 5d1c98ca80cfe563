"""Fixed-width byte encodings for mark fields.

These are the shared primitives used by the commitment function and
exposed to serialization collaborators. Widths do not depend on the
resolution:

    sequence   4 bytes, big-endian unsigned (0 .. 2**32 - 1)
    date       6 bytes, big-endian unsigned milliseconds since
               2001-01-01T00:00:00Z (up to 9999-12-31T23:59:59.999Z)
    info       0x00 when absent, else 0x01 + 4-byte length + bytes

Dates are always timezone-aware UTC with millisecond precision. A naive
datetime is rejected rather than guessed at.
"""
from __future__ import annotations

import struct
from datetime import datetime, timedelta, timezone

from provenance_mark.domain.resolution import Resolution
from provenance_mark.errors import MalformedField

SEQUENCE_LENGTH = 4
DATE_LENGTH = 6

MAX_SEQUENCE = 0xFFFF_FFFF
MAX_DATE_MILLIS = 0xE594_0A78_A7FF

REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=timezone.utc)

_ONE_MS = timedelta(milliseconds=1)
_INFO_ABSENT = b"\x00"
_INFO_PRESENT = b"\x01"


def check_link_field(name: str, value: object, resolution: Resolution) -> bytes:
    """Return value as bytes if it is bytes-like and link_length long."""
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise MalformedField(
            name, f"expected bytes, got {type(value).__name__}"
        )
    data = bytes(value)
    if len(data) != resolution.link_length:
        raise MalformedField(
            name,
            f"expected {resolution.link_length} bytes for {resolution} "
            f"resolution, got {len(data)}",
        )
    return data


def check_sequence(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedField(
            "sequence", f"expected int, got {type(value).__name__}"
        )
    if not 0 <= value <= MAX_SEQUENCE:
        raise MalformedField(
            "sequence", f"{value} outside 0..{MAX_SEQUENCE}"
        )
    return value


def encode_sequence(sequence: int) -> bytes:
    return struct.pack("!I", check_sequence(sequence))


def decode_sequence(data: bytes) -> int:
    if len(data) != SEQUENCE_LENGTH:
        raise MalformedField(
            "sequence", f"expected {SEQUENCE_LENGTH} bytes, got {len(data)}"
        )
    return struct.unpack("!I", data)[0]


def normalize_date(date: object) -> datetime:
    """Convert to UTC and truncate to whole milliseconds.

    Range is checked here too so that a date which normalizes cleanly is
    guaranteed to encode.
    """
    if not isinstance(date, datetime):
        raise MalformedField("date", f"expected datetime, got {type(date).__name__}")
    if date.tzinfo is None or date.utcoffset() is None:
        raise MalformedField("date", "naive datetime; attach a timezone")
    try:
        utc = date.astimezone(timezone.utc)
    except OverflowError:
        raise MalformedField(
            "date", f"{date.isoformat()} has no UTC equivalent"
        ) from None
    utc = utc.replace(microsecond=utc.microsecond // 1000 * 1000)
    _millis_since_reference(utc)
    return utc


def _millis_since_reference(date: datetime) -> int:
    millis = (date - REFERENCE_DATE) // _ONE_MS
    if not 0 <= millis <= MAX_DATE_MILLIS:
        raise MalformedField(
            "date",
            f"{date.isoformat()} outside {REFERENCE_DATE.isoformat()} .. "
            "9999-12-31T23:59:59.999+00:00",
        )
    return millis


def encode_date(date: datetime) -> bytes:
    millis = _millis_since_reference(normalize_date(date))
    return millis.to_bytes(DATE_LENGTH, "big")


def decode_date(data: bytes) -> datetime:
    if len(data) != DATE_LENGTH:
        raise MalformedField(
            "date", f"expected {DATE_LENGTH} bytes, got {len(data)}"
        )
    millis = int.from_bytes(data, "big")
    if millis > MAX_DATE_MILLIS:
        raise MalformedField("date", "exceeds maximum representable value")
    return REFERENCE_DATE + timedelta(milliseconds=millis)


def check_info(value: object) -> bytes | None:
    if value is None:
        return None
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise MalformedField(
            "info", f"expected bytes or None, got {type(value).__name__}"
        )
    data = bytes(value)
    if len(data) > 0xFFFF_FFFF:
        raise MalformedField("info", "payload longer than 2**32 - 1 bytes")
    return data


def encode_info(info: bytes | None) -> bytes:
    """Length-prefixed info with an explicit presence tag.

    None and b"" must encode differently, otherwise a mark without info
    and a mark with an empty payload would share a commitment.
    """
    if info is None:
        return _INFO_ABSENT
    return _INFO_PRESENT + struct.pack("!I", len(info)) + info
