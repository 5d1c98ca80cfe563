"""Batch audit of an unordered pile of marks.

verify_chain() answers "is this ordered run intact?". audit_marks()
answers the messier question a verifier usually has: "here are some
marks I collected, possibly from several chains, possibly with
duplicates and holes -- what do they prove?"

Steps:
1. Drop exact duplicates, keeping first appearance order.
2. Bin by chain_id; bins are sorted by chain_id bytes.
3. Sort each bin by sequence and walk consecutive pairs with
   verify_adjacent(). Every failure closes the current segment and
   starts a new one whose first mark is flagged with the failure.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from provenance_mark.crypto.validator import ValidationResult, verify_adjacent
from provenance_mark.domain.mark import ProvenanceMark

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FlaggedMark:
    """A mark plus the reason, if any, it does not follow its predecessor."""

    mark: ProvenanceMark
    issues: tuple[ValidationResult, ...] = ()


@dataclass(frozen=True, slots=True)
class SegmentReport:
    """A maximal run of marks where every adjacent pair verifies."""

    marks: tuple[FlaggedMark, ...]

    @property
    def start_sequence(self) -> int:
        return self.marks[0].mark.sequence

    @property
    def end_sequence(self) -> int:
        return self.marks[-1].mark.sequence


@dataclass(frozen=True, slots=True)
class ChainReport:
    chain_id: bytes
    has_genesis: bool
    marks: tuple[ProvenanceMark, ...]
    segments: tuple[SegmentReport, ...]

    @property
    def chain_id_hex(self) -> str:
        return self.chain_id.hex()

    @property
    def is_contiguous(self) -> bool:
        return len(self.segments) == 1


@dataclass(frozen=True, slots=True)
class AuditReport:
    original_marks: tuple[ProvenanceMark, ...]
    deduplicated_marks: tuple[ProvenanceMark, ...]
    chains: tuple[ChainReport, ...] = field(default_factory=tuple)

    @property
    def duplicate_count(self) -> int:
        return len(self.original_marks) - len(self.deduplicated_marks)

    @property
    def is_clean(self) -> bool:
        """One chain, starting at its genesis mark, with no breaks."""
        return (
            len(self.chains) == 1
            and self.chains[0].has_genesis
            and self.chains[0].is_contiguous
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly summary; issues are reported by kind name."""
        return {
            "mark_count": len(self.original_marks),
            "duplicate_count": self.duplicate_count,
            "is_clean": self.is_clean,
            "chains": [
                {
                    "chain_id": chain.chain_id_hex,
                    "has_genesis": chain.has_genesis,
                    "segments": [
                        {
                            "start_sequence": seg.start_sequence,
                            "end_sequence": seg.end_sequence,
                            "marks": [
                                {
                                    "sequence": flagged.mark.sequence,
                                    "identifier": flagged.mark.identifier(),
                                    "issues": [
                                        {"kind": issue.kind.name, "message": issue.message}
                                        for issue in flagged.issues
                                    ],
                                }
                                for flagged in seg.marks
                            ],
                        }
                        for seg in chain.segments
                    ],
                }
                for chain in self.chains
            ],
        }


def audit_marks(marks: Iterable[ProvenanceMark]) -> AuditReport:
    """Deduplicate, bin by chain and segment a collection of marks."""
    original = tuple(marks)
    seen: set[ProvenanceMark] = set()
    deduplicated: list[ProvenanceMark] = []
    for mark in original:
        if mark not in seen:
            seen.add(mark)
            deduplicated.append(mark)

    bins: dict[bytes, list[ProvenanceMark]] = {}
    for mark in deduplicated:
        bins.setdefault(mark.chain_id, []).append(mark)

    chains = tuple(
        _chain_report(chain_id, bins[chain_id]) for chain_id in sorted(bins)
    )
    log.debug(
        "Audited %d marks (%d duplicates) across %d chains",
        len(original),
        len(original) - len(deduplicated),
        len(chains),
    )
    return AuditReport(
        original_marks=original,
        deduplicated_marks=tuple(deduplicated),
        chains=chains,
    )


def _chain_report(chain_id: bytes, marks: list[ProvenanceMark]) -> ChainReport:
    ordered = sorted(marks, key=lambda m: m.sequence)
    return ChainReport(
        chain_id=chain_id,
        has_genesis=ordered[0].is_genesis(),
        marks=tuple(ordered),
        segments=_segments(ordered),
    )


def _segments(ordered: list[ProvenanceMark]) -> tuple[SegmentReport, ...]:
    segments: list[SegmentReport] = []
    current: list[FlaggedMark] = [FlaggedMark(ordered[0])]
    for prev, mark in zip(ordered, ordered[1:]):
        result = verify_adjacent(prev, mark)
        if result.is_valid:
            current.append(FlaggedMark(mark))
        else:
            segments.append(SegmentReport(tuple(current)))
            current = [FlaggedMark(mark, (result,))]
    segments.append(SegmentReport(tuple(current)))
    return tuple(segments)
