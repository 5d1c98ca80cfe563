"""Exception taxonomy for mark generation and construction.

Generation-side failures abort a single genesis/issuance call and leave
the generator untouched. Validation failures are never raised: the
validator reports them as ValidationResult values.
"""
from __future__ import annotations

from datetime import datetime


class ProvenanceError(Exception):
    """Base class for every error raised by provenance_mark."""


class InvalidSeedLength(ProvenanceError, ValueError):
    """Seed (or resumed key) length does not match the resolution."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"invalid seed length: expected {expected} bytes, got {actual}"
        )


class DateRegression(ProvenanceError, ValueError):
    """Issuance date is earlier than the chain's last issued date."""

    def __init__(self, last_date: datetime, date: datetime) -> None:
        self.last_date = last_date
        self.date = date
        super().__init__(
            f"date must be equal or later: last issued {last_date.isoformat()}, "
            f"got {date.isoformat()}"
        )


class MalformedField(ProvenanceError, ValueError):
    """A mark field failed a length, type or range check."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"malformed {field}: {reason}")


class InvalidTransition(ProvenanceError):
    """Raised when a generator operation is not allowed in its phase."""


class SequenceExhausted(InvalidTransition):
    """The generator has issued its maximum sequence number."""
