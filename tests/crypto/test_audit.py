"""Tests for audit_marks over unordered, mixed collections."""
from __future__ import annotations

import json
import random

from provenance_mark.crypto.audit import audit_marks
from provenance_mark.crypto.validator import ValidationKind
from provenance_mark.domain.resolution import Resolution


def test_shuffled_with_duplicates_is_clean(build_chain):
    marks = build_chain(6)
    pile = marks + [marks[2], marks[4]]
    random.Random(7).shuffle(pile)

    report = audit_marks(pile)

    assert report.duplicate_count == 2
    assert len(report.deduplicated_marks) == 6
    assert report.is_clean
    chain = report.chains[0]
    assert chain.has_genesis
    assert chain.is_contiguous
    assert list(chain.marks) == marks


def test_chains_are_separated_and_sorted(build_chain, seed_for):
    a = build_chain(3, seed=seed_for(Resolution.MEDIUM, "chain a"))
    b = build_chain(2, seed=seed_for(Resolution.MEDIUM, "chain b"))

    report = audit_marks(b + a)

    assert len(report.chains) == 2
    ids = [chain.chain_id for chain in report.chains]
    assert ids == sorted(ids)
    assert sorted(len(chain.marks) for chain in report.chains) == [2, 3]
    assert not report.is_clean


def test_missing_mark_splits_segments(build_chain):
    marks = build_chain(6)
    report = audit_marks(marks[:3] + marks[4:])

    chain = report.chains[0]
    assert not chain.is_contiguous
    first, second = chain.segments
    assert (first.start_sequence, first.end_sequence) == (0, 2)
    assert (second.start_sequence, second.end_sequence) == (4, 5)
    flagged = second.marks[0]
    assert flagged.issues[0].kind is ValidationKind.SEQUENCE_GAP
    assert second.marks[1].issues == ()


def test_without_genesis(build_chain):
    marks = build_chain(4)
    report = audit_marks(marks[1:])
    assert not report.chains[0].has_genesis
    assert report.chains[0].is_contiguous
    assert not report.is_clean


def test_empty():
    report = audit_marks([])
    assert report.chains == ()
    assert report.duplicate_count == 0
    assert not report.is_clean


def test_to_dict_is_json_ready(build_chain):
    marks = build_chain(4)
    report = audit_marks([marks[0], marks[1], marks[3], marks[3]])

    summary = report.to_dict()
    json.dumps(summary)

    assert summary["mark_count"] == 4
    assert summary["duplicate_count"] == 1
    assert summary["is_clean"] is False
    (chain,) = summary["chains"]
    assert chain["chain_id"] == marks[0].chain_id.hex()
    assert chain["has_genesis"] is True
    assert [s["start_sequence"] for s in chain["segments"]] == [0, 3]
    gap = chain["segments"][1]["marks"][0]
    assert gap["identifier"] == marks[3].identifier()
    assert gap["issues"][0]["kind"] == "SEQUENCE_GAP"
