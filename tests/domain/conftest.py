"""Shared fixtures for domain model tests."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from provenance_mark.domain.mark import ProvenanceMark
from provenance_mark.domain.resolution import Resolution


BASE_DATE = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def base_date() -> datetime:
    return BASE_DATE


@pytest.fixture
def make_mark():
    """Factory for a structurally valid mark with pinned field values.

    The hash is arbitrary: construction never checks it.
    """

    def _make(
        resolution: Resolution = Resolution.MEDIUM,
        sequence: int = 0,
        date: datetime = BASE_DATE,
        info: bytes | None = None,
        fill: int = 0x11,
    ) -> ProvenanceMark:
        n = resolution.link_length
        return ProvenanceMark(
            resolution=resolution,
            chain_id=bytes([fill]) * n,
            sequence=sequence,
            date=date,
            key=bytes([fill + 1]) * n,
            hash=bytes(range(n)),
            info=info,
        )

    return _make
