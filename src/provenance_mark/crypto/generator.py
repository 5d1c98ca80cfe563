"""Sequential mark generator -- the only holder of a chain's secret state.

The generator owns the key that will be revealed in the next mark. Each
issuance:
- computes next_key = advance_key(current_key)
- commits this mark's metadata to next_key
- emits the mark carrying current_key
- replaces current_key with next_key and bumps the sequence

Because next_key is fixed before the mark is published, a published mark
commits to exactly one successor. There is no rewind: once a key has
advanced, the old key is overwritten with zeros.

Lifecycle:
    UNINITIALIZED -> ACTIVE -> EXHAUSTED
                   ↘ CLOSED  ↙
    (CLOSED is reachable from every phase and is terminal)

Issuance is serialized by a lock. All values are computed into locals
and committed only once the mark has been built, so a failed call
(DateRegression, MalformedField) leaves the state exactly as it was.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, auto
from types import TracebackType

from provenance_mark.crypto.commitment import commit
from provenance_mark.crypto.keys import advance_key, check_seed, derive_chain_id
from provenance_mark.domain.fields import (
    MAX_SEQUENCE,
    check_info,
    check_link_field,
    check_sequence,
    normalize_date,
)
from provenance_mark.domain.mark import ProvenanceMark
from provenance_mark.domain.resolution import Resolution
from provenance_mark.errors import (
    DateRegression,
    InvalidTransition,
    MalformedField,
    SequenceExhausted,
)

log = logging.getLogger(__name__)


class GeneratorPhase(Enum):
    UNINITIALIZED = auto()
    ACTIVE = auto()
    EXHAUSTED = auto()
    CLOSED = auto()


class DatePolicy(Enum):
    """What to do with an issuance date earlier than the last one.

    STRICT raises DateRegression. CLAMP replaces the date with the last
    issued date (which then stays unchanged) and logs the substitution.
    """

    STRICT = auto()
    CLAMP = auto()

    @classmethod
    def from_value(cls, value: DatePolicy | str) -> DatePolicy:
        """Accept a member or its name in any case; MalformedField otherwise."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise MalformedField(
                    "date_policy", f"unknown date policy {value!r}"
                ) from None
        raise MalformedField(
            "date_policy", f"expected DatePolicy or str, got {type(value).__name__}"
        )


VALID_TRANSITIONS: dict[GeneratorPhase, set[GeneratorPhase]] = {
    GeneratorPhase.UNINITIALIZED: {GeneratorPhase.ACTIVE, GeneratorPhase.CLOSED},
    GeneratorPhase.ACTIVE: {
        GeneratorPhase.ACTIVE,
        GeneratorPhase.EXHAUSTED,
        GeneratorPhase.CLOSED,
    },
    GeneratorPhase.EXHAUSTED: {GeneratorPhase.CLOSED},
    GeneratorPhase.CLOSED: set(),
}


@dataclass(frozen=True, slots=True)
class GeneratorState:
    """Everything a generator needs to survive a restart.

    current_key is secret. Persist it only to storage you would trust
    with the chain itself.
    """

    resolution: Resolution
    chain_id: bytes
    current_key: bytes
    next_sequence: int
    last_date: datetime

    def __repr__(self) -> str:
        return (
            f"GeneratorState(resolution={self.resolution}, "
            f"chain_id={self.chain_id.hex()}, current_key=<redacted>, "
            f"next_sequence={self.next_sequence}, "
            f"last_date={self.last_date.isoformat()})"
        )


class ProvenanceMarkGenerator:
    """Issues the marks of one chain, strictly in order.

    Args:
        resolution: tier for every mark of the chain (default HIGH)
        date_policy: STRICT (default) or CLAMP handling of dates that go
            backwards; a DatePolicy or its name
        max_sequence: last sequence number that may be issued; reaching
            it moves the generator to EXHAUSTED

    Usage:
        gen = ProvenanceMarkGenerator(Resolution.MEDIUM)
        mark0 = gen.genesis(seed, info=b"first release")
        mark1 = gen.next_mark(info=b"second release")
    """

    def __init__(
        self,
        resolution: Resolution = Resolution.HIGH,
        date_policy: DatePolicy | str = DatePolicy.STRICT,
        max_sequence: int = MAX_SEQUENCE,
    ) -> None:
        if not isinstance(resolution, Resolution):
            resolution = Resolution.from_value(resolution)
        check_sequence(max_sequence)
        self._resolution = resolution
        self._date_policy = DatePolicy.from_value(date_policy)
        self._max_sequence = max_sequence
        self._phase = GeneratorPhase.UNINITIALIZED
        self._chain_id: bytes | None = None
        self._current_key: bytearray | None = None
        self._next_sequence = 0
        self._last_date: datetime | None = None
        self._lock = threading.Lock()

    @classmethod
    def resume(
        cls,
        state: GeneratorState,
        date_policy: DatePolicy | str = DatePolicy.STRICT,
        max_sequence: int = MAX_SEQUENCE,
    ) -> ProvenanceMarkGenerator:
        """Rebuild a generator from a snapshot taken by snapshot().

        Raises InvalidSeedLength if the stored key has the wrong width,
        MalformedField for any other bad field.
        """
        gen = cls(state.resolution, date_policy=date_policy, max_sequence=max_sequence)
        key = check_seed(state.current_key, gen.resolution)
        chain_id = check_link_field("chain_id", state.chain_id, gen.resolution)
        next_sequence = state.next_sequence
        if isinstance(next_sequence, bool) or not isinstance(next_sequence, int):
            raise MalformedField("next_sequence", "expected int")
        if not 1 <= next_sequence <= max_sequence + 1:
            raise MalformedField(
                "next_sequence", f"{next_sequence} outside 1..{max_sequence + 1}"
            )
        gen._chain_id = chain_id
        gen._current_key = bytearray(key)
        gen._next_sequence = next_sequence
        gen._last_date = normalize_date(state.last_date)
        gen._transition_to(GeneratorPhase.ACTIVE)
        if next_sequence > max_sequence:
            gen._transition_to(GeneratorPhase.EXHAUSTED)
        log.debug(
            "Resumed chain %s at sequence %d", chain_id.hex(), next_sequence
        )
        return gen

    @property
    def phase(self) -> GeneratorPhase:
        return self._phase

    @property
    def resolution(self) -> Resolution:
        return self._resolution

    @property
    def date_policy(self) -> DatePolicy:
        return self._date_policy

    @property
    def chain_id(self) -> bytes | None:
        """Chain identifier, or None before genesis."""
        return self._chain_id

    @property
    def next_sequence(self) -> int:
        return self._next_sequence

    @property
    def last_date(self) -> datetime | None:
        return self._last_date

    def genesis(
        self,
        seed: bytes,
        info: bytes | None = None,
        date: datetime | None = None,
    ) -> ProvenanceMark:
        """Start the chain from `seed` and return mark 0.

        Raises InvalidSeedLength unless len(seed) == link_length, and
        InvalidTransition if the chain was already started.
        """
        with self._lock:
            self._require(GeneratorPhase.UNINITIALIZED, "genesis")
            res = self._resolution
            key = bytearray(check_seed(seed, res))
            chain_id = derive_chain_id(key, res)
            date = self._resolve_date(date, None)
            mark, next_key = self._build_mark(chain_id, key, 0, date, info)

            self._chain_id = chain_id
            self._install_key(next_key)
            self._next_sequence = 1
            self._last_date = date
            self._transition_to(GeneratorPhase.ACTIVE)
            _wipe(key)
            log.debug("Genesis of chain %s (%s)", chain_id.hex(), res)
            self._exhaust_if_done(0)
            return mark

    def next_mark(
        self,
        info: bytes | None = None,
        date: datetime | None = None,
    ) -> ProvenanceMark:
        """Issue the next mark. `date` defaults to now (UTC).

        Raises DateRegression (STRICT policy) if `date` is earlier than
        the last issued date, SequenceExhausted after max_sequence, and
        InvalidTransition before genesis or after close().
        """
        with self._lock:
            if self._phase is GeneratorPhase.EXHAUSTED:
                raise SequenceExhausted(
                    f"sequence {self._max_sequence} already issued; chain is complete"
                )
            self._require(GeneratorPhase.ACTIVE, "next_mark")
            seq = self._next_sequence
            date = self._resolve_date(date, self._last_date)
            mark, next_key = self._build_mark(
                self._chain_id, self._current_key, seq, date, info
            )

            self._install_key(next_key)
            self._next_sequence = seq + 1
            self._last_date = date
            log.debug("Issued mark %d of chain %s", seq, self._chain_id.hex())
            self._exhaust_if_done(seq)
            return mark

    def snapshot(self) -> GeneratorState:
        """Capture the persistent state. Contains the secret current key."""
        with self._lock:
            if self._phase not in (GeneratorPhase.ACTIVE, GeneratorPhase.EXHAUSTED):
                raise InvalidTransition(
                    f"Cannot snapshot a generator in phase {self._phase.name}"
                )
            return GeneratorState(
                resolution=self._resolution,
                chain_id=self._chain_id,
                current_key=bytes(self._current_key),
                next_sequence=self._next_sequence,
                last_date=self._last_date,
            )

    def close(self) -> None:
        """Zero the key and refuse further use. Idempotent."""
        with self._lock:
            if self._phase is GeneratorPhase.CLOSED:
                return
            if self._current_key is not None:
                _wipe(self._current_key)
                self._current_key = None
            self._transition_to(GeneratorPhase.CLOSED)
            log.debug("Generator closed")

    def __enter__(self) -> ProvenanceMarkGenerator:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        chain = self._chain_id.hex() if self._chain_id is not None else None
        return (
            f"ProvenanceMarkGenerator(resolution={self._resolution}, "
            f"phase={self._phase.name}, chain_id={chain}, "
            f"next_sequence={self._next_sequence})"
        )

    def _build_mark(
        self,
        chain_id: bytes,
        key: bytearray,
        sequence: int,
        date: datetime,
        info: bytes | None,
    ) -> tuple[ProvenanceMark, bytearray]:
        """Compute one mark without touching generator state."""
        res = self._resolution
        info = check_info(info)
        next_key = bytearray(advance_key(key, res))
        mark_hash = commit(res, chain_id, sequence, date, info, next_key)
        mark = ProvenanceMark(
            resolution=res,
            chain_id=chain_id,
            sequence=sequence,
            date=date,
            key=bytes(key),
            hash=mark_hash,
            info=info,
        )
        return mark, next_key

    def _resolve_date(self, date: datetime | None, last: datetime | None) -> datetime:
        if date is None:
            date = datetime.now(timezone.utc)
        date = normalize_date(date)
        if last is None or date >= last:
            return date
        if self._date_policy is DatePolicy.CLAMP:
            log.info(
                "Clamping issuance date %s to last issued date %s",
                date.isoformat(),
                last.isoformat(),
            )
            return last
        raise DateRegression(last, date)

    def _install_key(self, next_key: bytearray) -> None:
        if self._current_key is not None:
            _wipe(self._current_key)
        self._current_key = next_key

    def _exhaust_if_done(self, issued: int) -> None:
        if issued >= self._max_sequence:
            log.debug("Chain %s reached its last sequence %d", self._chain_id.hex(), issued)
            self._transition_to(GeneratorPhase.EXHAUSTED)

    def _require(self, phase: GeneratorPhase, operation: str) -> None:
        if self._phase is not phase:
            raise InvalidTransition(
                f"Cannot {operation} in phase {self._phase.name}"
            )

    def _transition_to(self, new_phase: GeneratorPhase) -> None:
        """Validate and execute a phase transition."""
        allowed = VALID_TRANSITIONS.get(self._phase, set())
        if new_phase not in allowed:
            raise InvalidTransition(
                f"Cannot transition from {self._phase.name} to {new_phase.name}"
            )
        self._phase = new_phase


def _wipe(buffer: bytearray) -> None:
    buffer[:] = bytes(len(buffer))
