"""Mark validation with a distinct verdict for every failed property.

verify_adjacent() checks one (mark, successor) pair. The checks run in
a fixed order and the first failure is reported:

    1. RESOLUTION_MISMATCH  resolutions differ, or a field has the wrong width
    2. CHAIN_MISMATCH       chain ids differ
    3. SEQUENCE_GAP         successor.sequence != mark.sequence + 1
    4. DATE_REGRESSION      successor is dated before mark
    5. KEY_CHAIN_BROKEN     successor.key != advance_key(mark.key)
    6. COMMITMENT_MISMATCH  mark.hash does not commit to successor.key

Three entry points:
- verify_adjacent(mark, successor): one link. O(1).
- verify_chain(marks): every consecutive pair, plus a check that the run
  starts at sequence 0. Stops at the first failure. O(n).
- verify_genesis(mark, seed): proves a chain traces back to `seed`.

Tampering is reported as a ValidationResult, never raised. Everything
here is stateless and safe to call from many threads at once.
"""
from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Sequence

from provenance_mark.crypto.commitment import commit
from provenance_mark.crypto.keys import advance_key, derive_chain_id
from provenance_mark.domain.mark import ProvenanceMark

log = logging.getLogger(__name__)


class ValidationKind(Enum):
    VALID = auto()
    RESOLUTION_MISMATCH = auto()
    CHAIN_MISMATCH = auto()
    SEQUENCE_GAP = auto()
    DATE_REGRESSION = auto()
    KEY_CHAIN_BROKEN = auto()
    COMMITMENT_MISMATCH = auto()
    GENESIS_MISMATCH = auto()


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of a validation call.

    `index` is the position, in the caller's input, of the mark that
    failed to follow its predecessor (0 for a bad start of chain or a
    genesis failure). `expected`/`actual` carry the values of the
    failing comparison where one exists.
    """

    kind: ValidationKind
    marks_verified: int
    index: int | None = None
    expected: Any = None
    actual: Any = None
    message: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.kind is ValidationKind.VALID

    def at_index(self, index: int, marks_verified: int) -> ValidationResult:
        """Copy of this result re-anchored to a position in a longer run."""
        return ValidationResult(
            kind=self.kind,
            marks_verified=marks_verified,
            index=index,
            expected=self.expected,
            actual=self.actual,
            message=self.message,
        )


def _valid(marks_verified: int) -> ValidationResult:
    return ValidationResult(kind=ValidationKind.VALID, marks_verified=marks_verified)


def _failure(
    kind: ValidationKind,
    message: str,
    index: int = 1,
    expected: Any = None,
    actual: Any = None,
) -> ValidationResult:
    log.debug("Validation failed: %s at index %d: %s", kind.name, index, message)
    return ValidationResult(
        kind=kind,
        marks_verified=0,
        index=index,
        expected=expected,
        actual=actual,
        message=message,
    )


def _widths_ok(mark: ProvenanceMark) -> bool:
    n = mark.resolution.link_length
    return len(mark.key) == n and len(mark.hash) == n and len(mark.chain_id) == n


def verify_adjacent(mark: ProvenanceMark, successor: ProvenanceMark) -> ValidationResult:
    """Check that `successor` legitimately follows `mark`.

    On success marks_verified is 2. On failure index is 1 (the successor).
    """
    if mark.resolution is not successor.resolution:
        return _failure(
            ValidationKind.RESOLUTION_MISMATCH,
            f"resolution mismatch: {mark.resolution} then {successor.resolution}",
            expected=mark.resolution,
            actual=successor.resolution,
        )
    if not (_widths_ok(mark) and _widths_ok(successor)):
        return _failure(
            ValidationKind.RESOLUTION_MISMATCH,
            f"field width does not match {mark.resolution} resolution",
        )

    if mark.chain_id != successor.chain_id:
        return _failure(
            ValidationKind.CHAIN_MISMATCH,
            f"chain id mismatch: {mark.chain_id.hex()} then {successor.chain_id.hex()}",
            expected=mark.chain_id,
            actual=successor.chain_id,
        )

    expected_seq = mark.sequence + 1
    if successor.sequence != expected_seq:
        return _failure(
            ValidationKind.SEQUENCE_GAP,
            f"sequence gap: expected {expected_seq}, got {successor.sequence}",
            expected=expected_seq,
            actual=successor.sequence,
        )

    if successor.date < mark.date:
        return _failure(
            ValidationKind.DATE_REGRESSION,
            f"date must be equal or later: previous is {mark.date.isoformat()}, "
            f"next is {successor.date.isoformat()}",
            expected=mark.date,
            actual=successor.date,
        )

    expected_key = advance_key(mark.key, mark.resolution)
    if not hmac.compare_digest(successor.key, expected_key):
        return _failure(
            ValidationKind.KEY_CHAIN_BROKEN,
            f"key chain broken at sequence {successor.sequence}: "
            "successor key is not the advance of its predecessor's key",
            expected=expected_key,
            actual=successor.key,
        )

    expected_hash = commit(
        mark.resolution,
        mark.chain_id,
        mark.sequence,
        mark.date,
        mark.info,
        successor.key,
    )
    if not hmac.compare_digest(mark.hash, expected_hash):
        return _failure(
            ValidationKind.COMMITMENT_MISMATCH,
            f"hash mismatch at sequence {mark.sequence}: "
            f"expected {expected_hash.hex()}, got {mark.hash.hex()}",
            expected=expected_hash,
            actual=mark.hash,
        )

    return _valid(2)


def verify_chain(
    marks: Sequence[ProvenanceMark],
    require_genesis: bool = True,
) -> ValidationResult:
    """Verify an ordered run of marks.

    With require_genesis (the default) the run must start at sequence 0.
    Pass require_genesis=False to check a slice from the middle of a
    chain; the first mark is then trusted as an anchor.

    Empty and single-mark input is trivially valid. That is not proof
    of authenticity, only the absence of contradictions.
    """
    if not marks:
        return _valid(0)

    first = marks[0]
    if require_genesis and first.sequence != 0:
        return _failure(
            ValidationKind.SEQUENCE_GAP,
            f"chain does not start at genesis: expected sequence 0, got {first.sequence}",
            index=0,
            expected=0,
            actual=first.sequence,
        )

    verified = 1
    for i in range(1, len(marks)):
        result = verify_adjacent(marks[i - 1], marks[i])
        if not result.is_valid:
            return result.at_index(i, verified)
        verified += 1

    return _valid(verified)


def verify_genesis(mark: ProvenanceMark, seed: bytes) -> ValidationResult:
    """Check that `mark` is the genesis mark of the chain started from `seed`."""
    res = mark.resolution
    if mark.sequence != 0:
        return _failure(
            ValidationKind.GENESIS_MISMATCH,
            f"genesis mark must have sequence 0, got {mark.sequence}",
            index=0,
            expected=0,
            actual=mark.sequence,
        )
    if not isinstance(seed, (bytes, bytearray, memoryview)):
        return _failure(
            ValidationKind.GENESIS_MISMATCH,
            f"seed must be bytes, got {type(seed).__name__}",
            index=0,
        )
    seed = bytes(seed)
    if len(seed) != res.link_length:
        return _failure(
            ValidationKind.GENESIS_MISMATCH,
            f"seed is {len(seed)} bytes, {res} resolution needs {res.link_length}",
            index=0,
            expected=res.link_length,
            actual=len(seed),
        )
    expected_chain_id = derive_chain_id(seed, res)
    if not hmac.compare_digest(mark.chain_id, expected_chain_id):
        return _failure(
            ValidationKind.GENESIS_MISMATCH,
            "chain id was not derived from this seed",
            index=0,
            expected=expected_chain_id,
            actual=mark.chain_id,
        )
    if not hmac.compare_digest(mark.key, seed):
        return _failure(
            ValidationKind.GENESIS_MISMATCH,
            "genesis key does not equal the seed",
            index=0,
        )
    return _valid(1)
