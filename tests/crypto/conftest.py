"""Shared fixtures for key chain, generator and validator tests."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from provenance_mark.crypto.generator import ProvenanceMarkGenerator
from provenance_mark.crypto.keys import seed_from_passphrase
from provenance_mark.domain.mark import ProvenanceMark
from provenance_mark.domain.resolution import Resolution


BASE_DATE = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
STEP = timedelta(hours=1)
PASSPHRASE = "provenance test chain"


@pytest.fixture
def base_date() -> datetime:
    return BASE_DATE


@pytest.fixture
def seed_for():
    """Deterministic seed for a given resolution."""

    def _seed(resolution: Resolution, passphrase: str = PASSPHRASE) -> bytes:
        return seed_from_passphrase(passphrase, resolution)

    return _seed


@pytest.fixture
def build_chain(seed_for):
    """Build n marks from one generator, dated an hour apart."""

    def _build(
        n: int,
        resolution: Resolution = Resolution.MEDIUM,
        seed: bytes | None = None,
    ) -> list[ProvenanceMark]:
        if seed is None:
            seed = seed_for(resolution)
        gen = ProvenanceMarkGenerator(resolution)
        marks = [gen.genesis(seed, info=b"work-0", date=BASE_DATE)]
        for i in range(1, n):
            marks.append(
                gen.next_mark(info=f"work-{i}".encode(), date=BASE_DATE + STEP * i)
            )
        return marks

    return _build
