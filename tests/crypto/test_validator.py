"""Tests for verify_adjacent, verify_chain and verify_genesis."""
from __future__ import annotations

import dataclasses
from datetime import timedelta

import pytest

from provenance_mark.crypto.validator import (
    ValidationKind,
    verify_adjacent,
    verify_chain,
    verify_genesis,
)
from provenance_mark.domain.resolution import Resolution


class TestVerifyAdjacent:

    def test_valid_pair(self, build_chain):
        m0, m1 = build_chain(2)
        result = verify_adjacent(m0, m1)
        assert result.is_valid
        assert result.marks_verified == 2
        assert result.index is None

    def test_reversed_pair(self, build_chain):
        m0, m1 = build_chain(2)
        result = verify_adjacent(m1, m0)
        assert result.kind is ValidationKind.SEQUENCE_GAP

    def test_date_regression(self, build_chain):
        m0, m1, m2 = build_chain(3)
        late = dataclasses.replace(m1, date=m2.date + timedelta(seconds=1))
        result = verify_adjacent(late, m2)
        assert result.kind is ValidationKind.DATE_REGRESSION
        assert result.expected == late.date
        assert result.actual == m2.date

    def test_mark_methods(self, build_chain):
        m0, m1, m2 = build_chain(3)
        assert m0.precedes(m1)
        assert not m0.precedes(m2)
        assert m1.check_successor(m2).is_valid

    def test_mis_sized_field_reported(self, build_chain):
        """A mark that bypassed construction checks is still caught."""
        m0, m1 = build_chain(2)
        short = dataclasses.replace(m1)
        object.__setattr__(short, "key", m1.key[:5])
        result = verify_adjacent(m0, short)
        assert result.kind is ValidationKind.RESOLUTION_MISMATCH
        assert result.index == 1


class TestVerifyChain:

    @pytest.mark.parametrize("resolution", list(Resolution))
    def test_valid_chain_each_resolution(self, build_chain, resolution):
        marks = build_chain(5, resolution=resolution)
        result = verify_chain(marks)
        assert result.is_valid
        assert result.marks_verified == 5

    def test_gap_reported_at_later_mark(self, build_chain):
        marks = build_chain(4)
        result = verify_chain([marks[0], marks[1], marks[3]])
        assert result.kind is ValidationKind.SEQUENCE_GAP
        assert result.index == 2
        assert result.expected == 2
        assert result.actual == 3
        assert result.marks_verified == 2

    def test_must_start_at_genesis(self, build_chain):
        marks = build_chain(4)
        result = verify_chain(marks[1:])
        assert result.kind is ValidationKind.SEQUENCE_GAP
        assert result.index == 0
        assert result.expected == 0
        assert result.actual == 1

    def test_slice_without_genesis(self, build_chain):
        marks = build_chain(6)
        result = verify_chain(marks[2:], require_genesis=False)
        assert result.is_valid
        assert result.marks_verified == 4

    def test_empty(self):
        result = verify_chain([])
        assert result.is_valid
        assert result.marks_verified == 0

    def test_single_genesis(self, build_chain):
        result = verify_chain(build_chain(1))
        assert result.is_valid
        assert result.marks_verified == 1

    def test_stops_at_first_failure(self, build_chain):
        marks = build_chain(5)
        result = verify_chain([marks[0], marks[2], marks[4]])
        assert result.index == 1
        assert result.marks_verified == 1


class TestIsolation:

    def test_resolutions_do_not_mix(self, build_chain):
        medium = build_chain(2, resolution=Resolution.MEDIUM)
        high = build_chain(2, resolution=Resolution.HIGH)
        result = verify_chain([medium[0], high[1]])
        assert result.kind is ValidationKind.RESOLUTION_MISMATCH
        assert result.index == 1

    def test_chains_do_not_mix(self, build_chain, seed_for):
        a = build_chain(2, seed=seed_for(Resolution.MEDIUM, "chain a"))
        b = build_chain(2, seed=seed_for(Resolution.MEDIUM, "chain b"))
        result = verify_chain([a[0], b[1]])
        assert result.kind is ValidationKind.CHAIN_MISMATCH
        assert result.expected == a[0].chain_id
        assert result.actual == b[1].chain_id


class TestVerifyGenesis:

    def test_traces_to_seed(self, build_chain, seed_for):
        seed = seed_for(Resolution.QUARTILE)
        marks = build_chain(3, resolution=Resolution.QUARTILE, seed=seed)
        result = verify_genesis(marks[0], seed)
        assert result.is_valid
        assert result.marks_verified == 1
        assert marks[0].is_genesis()
        assert not marks[1].is_genesis()

    def test_wrong_seed(self, build_chain, seed_for):
        marks = build_chain(1)
        other = seed_for(Resolution.MEDIUM, "someone else")
        result = verify_genesis(marks[0], other)
        assert result.kind is ValidationKind.GENESIS_MISMATCH
        assert result.index == 0

    def test_not_sequence_zero(self, build_chain, seed_for):
        marks = build_chain(2)
        result = verify_genesis(marks[1], seed_for(Resolution.MEDIUM))
        assert result.kind is ValidationKind.GENESIS_MISMATCH
        assert result.actual == 1

    def test_seed_length(self, build_chain):
        marks = build_chain(1)
        result = verify_genesis(marks[0], b"\x00" * 4)
        assert result.kind is ValidationKind.GENESIS_MISMATCH
        assert result.expected == 8
        assert result.actual == 4

    @pytest.mark.parametrize("seed", ["not bytes", 8, None])
    def test_seed_must_be_bytes(self, build_chain, seed):
        marks = build_chain(1)
        result = verify_genesis(marks[0], seed)
        assert result.kind is ValidationKind.GENESIS_MISMATCH
        assert result.index == 0
        assert "must be bytes" in result.message
