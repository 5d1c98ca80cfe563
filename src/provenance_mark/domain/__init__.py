"""Domain model for provenance_mark.

Re-exports all public types for convenient access:
    from provenance_mark.domain import ProvenanceMark, Resolution
"""
from provenance_mark.domain.fields import (
    DATE_LENGTH,
    MAX_DATE_MILLIS,
    MAX_SEQUENCE,
    REFERENCE_DATE,
    SEQUENCE_LENGTH,
    decode_date,
    decode_sequence,
    encode_date,
    encode_info,
    encode_sequence,
    normalize_date,
)
from provenance_mark.domain.mark import ProvenanceMark
from provenance_mark.domain.resolution import Resolution

__all__ = [
    "DATE_LENGTH",
    "MAX_DATE_MILLIS",
    "MAX_SEQUENCE",
    "REFERENCE_DATE",
    "SEQUENCE_LENGTH",
    "decode_date",
    "decode_sequence",
    "encode_date",
    "encode_info",
    "encode_sequence",
    "normalize_date",
    "ProvenanceMark",
    "Resolution",
]
